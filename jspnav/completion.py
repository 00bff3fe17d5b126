"""Directive, attribute and action-snippet completions for JSP pages."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional

from lsprotocol import types as lsp

logger = logging.getLogger(__name__)

# (uri, text, offset) -> items for the underlying markup.
MarkupCompleter = Callable[[str, str, int], List[lsp.CompletionItem]]


class CompletionTag(str, Enum):
    PAGE_DIRECTIVE = "page_directive"
    INCLUDE_DIRECTIVE = "include_directive"
    TAGLIB_DIRECTIVE = "taglib_directive"
    LANGUAGE_ATTRIBUTE = "language_attribute"
    CONTENT_TYPE_ATTRIBUTE = "content_type_attribute"
    PAGE_ENCODING_ATTRIBUTE = "page_encoding_attribute"
    IMPORT_ATTRIBUTE = "import_attribute"
    SESSION_ATTRIBUTE = "session_attribute"
    PREFIX_ATTRIBUTE = "prefix_attribute"
    URI_ATTRIBUTE = "uri_attribute"
    INCLUDE_ACTION = "include_action"
    PARAM_ACTION = "param_action"
    USE_BEAN_ACTION = "use_bean_action"
    SET_PROPERTY_ACTION = "set_property_action"
    GET_PROPERTY_ACTION = "get_property_action"


@dataclass(frozen=True)
class DirectiveCompletion:
    tag: CompletionTag
    label: str
    kind: lsp.CompletionItemKind
    detail: Optional[str] = None
    documentation: Optional[str] = None
    insert_text: Optional[str] = None

    def to_item(self) -> lsp.CompletionItem:
        item = lsp.CompletionItem(label=self.label, kind=self.kind, data={"tag": self.tag.value})
        if self.insert_text is not None:
            item.insert_text = self.insert_text
            item.insert_text_format = lsp.InsertTextFormat.Snippet
        return item


_KEYWORD = lsp.CompletionItemKind.Keyword
_PROPERTY = lsp.CompletionItemKind.Property
_SNIPPET = lsp.CompletionItemKind.Snippet

DIRECTIVES = [
    DirectiveCompletion(
        CompletionTag.PAGE_DIRECTIVE, "page", _KEYWORD,
        "JSP Page Directive",
        "Defines page-dependent attributes and communicates these to the JSP container",
    ),
    DirectiveCompletion(
        CompletionTag.INCLUDE_DIRECTIVE, "include", _KEYWORD,
        "JSP Include Directive",
        "Includes the text of another file when the page is translated",
    ),
    DirectiveCompletion(
        CompletionTag.TAGLIB_DIRECTIVE, "taglib", _KEYWORD,
        "JSP Taglib Directive",
        "Declares a tag library and the prefix its custom actions use",
    ),
]

PAGE_ATTRIBUTES = [
    DirectiveCompletion(CompletionTag.LANGUAGE_ATTRIBUTE, 'language="java"', _PROPERTY, "Scripting language"),
    DirectiveCompletion(
        CompletionTag.CONTENT_TYPE_ATTRIBUTE, 'contentType="text/html; charset=UTF-8"', _PROPERTY,
        "Response MIME type and character encoding",
    ),
    DirectiveCompletion(CompletionTag.PAGE_ENCODING_ATTRIBUTE, 'pageEncoding="UTF-8"', _PROPERTY, "Page source encoding"),
    DirectiveCompletion(CompletionTag.IMPORT_ATTRIBUTE, 'import=""', _PROPERTY, "Comma-separated Java imports"),
    DirectiveCompletion(CompletionTag.SESSION_ATTRIBUTE, 'session="true"', _PROPERTY, "Whether the page joins an HTTP session"),
]

TAGLIB_ATTRIBUTES = [
    DirectiveCompletion(CompletionTag.PREFIX_ATTRIBUTE, 'prefix=""', _PROPERTY, "Prefix for the library's actions"),
    DirectiveCompletion(CompletionTag.URI_ATTRIBUTE, 'uri=""', _PROPERTY, "URI identifying the tag library"),
]

ACTIONS = [
    DirectiveCompletion(
        CompletionTag.INCLUDE_ACTION, "jsp:include", _SNIPPET,
        "JSP Include Action",
        "Includes the content of another JSP page at runtime",
        '<jsp:include page="${1:page.jsp}">\n\t${0}\n</jsp:include>',
    ),
    DirectiveCompletion(
        CompletionTag.PARAM_ACTION, "jsp:param", _SNIPPET,
        "JSP Parameter",
        "Passes parameters to an included page",
        '<jsp:param name="${1:paramName}" value="${2:paramValue}"/>',
    ),
    DirectiveCompletion(
        CompletionTag.USE_BEAN_ACTION, "jsp:useBean", _SNIPPET,
        "JSP UseBean Action",
        "Declares and instantiates a JavaBean component",
        '<jsp:useBean id="${1:beanName}" class="${2:package.ClassName}" '
        'scope="${3|page,request,session,application|}"/>',
    ),
    DirectiveCompletion(
        CompletionTag.SET_PROPERTY_ACTION, "jsp:setProperty", _SNIPPET,
        "JSP SetProperty Action",
        "Sets the value of a property in a JavaBean component",
        '<jsp:setProperty name="${1:beanName}" property="${2:propertyName}" value="${3:value}"/>',
    ),
    DirectiveCompletion(
        CompletionTag.GET_PROPERTY_ACTION, "jsp:getProperty", _SNIPPET,
        "JSP GetProperty Action",
        "Gets the value of a property in a JavaBean component",
        '<jsp:getProperty name="${1:beanName}" property="${2:propertyName}"/>',
    ),
]

CATALOG: Dict[CompletionTag, DirectiveCompletion] = {
    entry.tag: entry for entry in DIRECTIVES + PAGE_ATTRIBUTES + TAGLIB_ATTRIBUTES + ACTIONS
}


def no_markup_completion(uri: str, text: str, offset: int) -> List[lsp.CompletionItem]:
    return []


class CompletionAugmenter:
    """Appends JSP entries to whatever the markup completer offers."""

    def __init__(self, markup_completer: Optional[MarkupCompleter] = None) -> None:
        self.markup_completer = markup_completer or no_markup_completion

    def jsp_entries(self, text: str, offset: int, line_prefix: str) -> List[DirectiveCompletion]:
        entries: List[DirectiveCompletion] = []
        if "<%@" in line_prefix:
            entries.extend(DIRECTIVES)
        if "<%@ page" in line_prefix:
            entries.extend(PAGE_ATTRIBUTES)
        if "<%@ taglib" in line_prefix:
            entries.extend(TAGLIB_ATTRIBUTES)
        before = text[offset - 1] if 0 < offset <= len(text) else ""
        if before == "<" or line_prefix.strip().endswith("<"):
            entries.extend(ACTIONS)
        return entries

    def complete(self, uri: str, text: str, offset: int, line_prefix: str) -> List[lsp.CompletionItem]:
        items = list(self.markup_completer(uri, text, offset))
        entries = self.jsp_entries(text, offset, line_prefix)
        logger.debug("%d markup items, %d JSP items", len(items), len(entries))
        items.extend(entry.to_item() for entry in entries)
        return items


def completion_tag(item: lsp.CompletionItem) -> Optional[CompletionTag]:
    data = item.data
    if not isinstance(data, dict):
        return None
    try:
        return CompletionTag(data.get("tag"))
    except ValueError:
        return None


def resolve_completion(item: lsp.CompletionItem) -> lsp.CompletionItem:
    """Fill in detail and documentation for items this module produced."""
    tag = completion_tag(item)
    if tag is None:
        return item
    entry = CATALOG[tag]
    if entry.detail is not None:
        item.detail = entry.detail
    if entry.documentation is not None:
        item.documentation = entry.documentation
    return item
