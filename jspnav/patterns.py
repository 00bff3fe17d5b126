"""Named text heuristics over JSP markup and Java sources.

Resolution is scan-based, not grammar-based. Every pattern used by the
resolver lives here behind a small predicate or extractor so each heuristic
can be tested (and replaced) on its own.
"""

from __future__ import annotations

import re
from typing import Iterator, List, Optional, Pattern, Tuple

# ---------------------------------------------------------------------------
# Character classes
# ---------------------------------------------------------------------------

_WORD_CHARS = frozenset("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789_.")
_CALL_CHARS = _WORD_CHARS | {"(", ")"}


def is_word_char(ch: str, include_call_parens: bool = False) -> bool:
    """True for identifier characters and dots (and parentheses on request)."""
    return ch in (_CALL_CHARS if include_call_parens else _WORD_CHARS)


_CAPITALIZED_IDENTIFIER = re.compile(r"^[A-Z][A-Za-z0-9_]*$")
_IDENTIFIER = re.compile(r"^[A-Za-z_$][\w$]*$")


def is_capitalized_identifier(word: str) -> bool:
    return bool(_CAPITALIZED_IDENTIFIER.match(word))


def is_identifier(word: str) -> bool:
    return bool(_IDENTIFIER.match(word))


def starts_uppercase(segment: str) -> bool:
    return bool(segment) and segment[0].isupper()


# ---------------------------------------------------------------------------
# Import fragments preceding the cursor word
# ---------------------------------------------------------------------------

_TRAILING_JAVA_IMPORT = re.compile(r"import\s+([^;]*?)$")
_TRAILING_DIRECTIVE_IMPORT = re.compile(r'<%@\s*page\b[^>]*?\bimport\s*=\s*"([^"]*?)$')


def trailing_import_path(window: str) -> Optional[str]:
    """Partial path of an unterminated ``import a.b.`` ending *window*."""
    match = _TRAILING_JAVA_IMPORT.search(window)
    return match.group(1) if match else None


def trailing_directive_import(window: str) -> Optional[str]:
    """Partial value of an unterminated ``<%@ page import="a.b.`` ending *window*."""
    match = _TRAILING_DIRECTIVE_IMPORT.search(window)
    return match.group(1) if match else None


# ---------------------------------------------------------------------------
# Directives and scripting regions
# ---------------------------------------------------------------------------

_SCRIPTING_REGION = re.compile(r"<%(?![@-])(.*?)(?:%>|\Z)", re.S)
_DECLARATION_REGION = re.compile(r"<%!(.*?)(?:%>|\Z)", re.S)
_PAGE_DIRECTIVE = re.compile(r"<%@\s*page\b(.*?)(?:%>|\Z)", re.S)
_IMPORT_ATTRIBUTE = re.compile(r'\bimport\s*=\s*"([^"]*)"?')
_JAVA_IMPORT_STATEMENT = re.compile(r"^\s*import\s+(?:static\s+)?([\w.]+(?:\.\*)?)\s*;", re.M)


def scripting_regions(text: str) -> Iterator[Tuple[int, str]]:
    """Yield ``(offset, body)`` for every ``<% %>``, ``<%= %>`` and ``<%! %>`` region.

    Directives (``<%@``) and comments (``<%--``) are skipped. An unterminated
    region runs to the end of the text.
    """
    for match in _SCRIPTING_REGION.finditer(text):
        body = match.group(1)
        if body.startswith(("=", "!")):
            yield match.start(1) + 1, body[1:]
        else:
            yield match.start(1), body


def declaration_regions(text: str) -> Iterator[Tuple[int, str]]:
    """Yield ``(offset, body)`` for ``<%! %>`` declaration blocks only."""
    for match in _DECLARATION_REGION.finditer(text):
        yield match.start(1), match.group(1)


def directive_imports(text: str) -> List[str]:
    """Every comma-separated entry of every ``<%@ page import="..." %>``."""
    entries: List[str] = []
    for directive in _PAGE_DIRECTIVE.finditer(text):
        for attribute in _IMPORT_ATTRIBUTE.finditer(directive.group(1)):
            entries.extend(item.strip() for item in attribute.group(1).split(",") if item.strip())
    return entries


def java_imports(body: str) -> List[str]:
    """``import a.b.C;`` statements inside a scripting region."""
    return [match.group(1) for match in _JAVA_IMPORT_STATEMENT.finditer(body)]


def import_directive_entry(text: str, offset: int, window: int = 300) -> Optional[str]:
    """Entry of a page-directive ``import`` list under *offset*.

    Looks for the directive delimiters within *window* characters on either
    side. Returns ``None`` when *offset* is not inside such a directive, the
    stripped comma-separated entry when it is inside the import value, and an
    empty string when it is inside the directive but not on an entry.
    """
    low = max(0, offset - window)
    high = min(len(text), offset + window)
    opening = text.rfind("<%@", low, offset)
    if opening == -1:
        return None
    closing = text.find("%>", opening, high)
    if closing == -1 or offset > closing:
        return None

    block = text[opening:closing]
    if not re.match(r"<%@\s*page\b", block):
        return None
    attribute = _IMPORT_ATTRIBUTE.search(block)
    if attribute is None:
        return None

    value_start = opening + attribute.start(1)
    value_end = opening + attribute.end(1)
    if not value_start <= offset <= value_end:
        return ""

    value = attribute.group(1)
    relative = offset - value_start
    entry_start = value.rfind(",", 0, relative) + 1
    entry_end = value.find(",", relative)
    if entry_end == -1:
        entry_end = len(value)
    return value[entry_start:entry_end].strip()


# ---------------------------------------------------------------------------
# Variable declarations inside scripting regions
# ---------------------------------------------------------------------------

TYPE_NAME = r"(?:[a-z_]\w*\.)*[A-Z]\w*(?:\.[A-Z]\w*)*"
_GENERIC_ARGS = r"(?:\s*<[^;=(){}]*>)?"
_ARRAY_DIMS = r"(?:\s*\[\s*\])*"

_LOCAL_DECLARATION = re.compile(
    rf"(?<![\w.])({TYPE_NAME}){_GENERIC_ARGS}{_ARRAY_DIMS}\s+([a-z_]\w*)\s*(?:=(?!=)|;)"
)
_FOR_EACH = re.compile(
    rf"\bfor\s*\(\s*(?:final\s+)?({TYPE_NAME}){_GENERIC_ARGS}{_ARRAY_DIMS}\s+([a-z_]\w*)\s*:"
)
_PARAMETER = re.compile(
    rf"[(,]\s*(?:final\s+)?({TYPE_NAME}){_GENERIC_ARGS}{_ARRAY_DIMS}\s+([a-z_]\w*)\s*(?=[,)])"
)
_USE_BEAN_TAG = re.compile(r"<jsp:useBean\b([^>]*)>", re.S)
_TAG_ID = re.compile(r'\bid\s*=\s*"([A-Za-z_]\w*)"')
_TAG_CLASS = re.compile(r'\b(?:class|type)\s*=\s*"([\w.]+)"')


def local_declarations(body: str) -> Iterator[Tuple[int, str, str]]:
    """``(offset, name, type)`` for ``Type name =`` and ``Type name;``."""
    for match in _LOCAL_DECLARATION.finditer(body):
        yield match.start(), match.group(2), match.group(1)


def for_each_declarations(body: str) -> Iterator[Tuple[int, str, str]]:
    """``(offset, name, type)`` for ``for (Type name : items)``."""
    for match in _FOR_EACH.finditer(body):
        yield match.start(), match.group(2), match.group(1)


def parameter_declarations(body: str) -> Iterator[Tuple[int, str, str]]:
    """``(offset, name, type)`` for ``(Type name,`` / ``, Type name)`` parameters."""
    for match in _PARAMETER.finditer(body):
        yield match.start(), match.group(2), match.group(1)


def use_bean_declarations(text: str) -> Iterator[Tuple[int, str, str]]:
    """``(offset, id, class)`` for ``<jsp:useBean id="x" class="a.B"/>`` tags."""
    for tag in _USE_BEAN_TAG.finditer(text):
        attributes = tag.group(1)
        bean_id = _TAG_ID.search(attributes)
        bean_class = _TAG_CLASS.search(attributes)
        if bean_id and bean_class:
            yield tag.start(), bean_id.group(1), bean_class.group(1)


# ---------------------------------------------------------------------------
# Java source declarations
# ---------------------------------------------------------------------------

_PACKAGE_DECLARATION = re.compile(r"^\s*package\s+([\w.]+)\s*;", re.M)
_STRING_OR_CHAR = re.compile(r'"(?:\\.|[^"\\])*"|\'(?:\\.|[^\'\\])*\'')
_LINE_COMMENT = re.compile(r"//.*$")
_NON_DECLARING_WORDS = frozenset({"new", "return", "throw", "else", "case", "assert", "yield"})


def declared_package(source: str) -> Optional[str]:
    match = _PACKAGE_DECLARATION.search(source)
    return match.group(1) if match else None


def type_declaration_pattern(simple_name: str) -> Pattern[str]:
    """``class|interface|enum|record|@interface Name``; group 1 is the name."""
    return re.compile(rf"(?:\bclass|\binterface|\benum|\brecord|@interface)\s+({re.escape(simple_name)})\b")


def method_name_pattern(method_name: str) -> Pattern[str]:
    """``name(`` not preceded by a member-access dot; group 1 is the name."""
    return re.compile(rf"(?<![\w.$])({re.escape(method_name)})\s*\(")


def is_declaration_site(line: str, name_start: int) -> bool:
    """True when the word before *name_start* does not make it a call or ``new``."""
    before = line[:name_start].rstrip()
    if not before:
        return True
    previous = re.search(r"([\w$]+)$", before)
    if previous is None:
        # `>` closes a generic return type, `]` an array type, `@` never.
        return before.endswith((">", "]"))
    return previous.group(1) not in _NON_DECLARING_WORDS


def code_only(line: str) -> str:
    """*line* with string/char literals and ``//`` comments blanked out."""
    stripped = _STRING_OR_CHAR.sub(lambda m: " " * len(m.group(0)), line)
    return _LINE_COMMENT.sub("", stripped)


# ---------------------------------------------------------------------------
# Call sites and script-level functions in the template
# ---------------------------------------------------------------------------

def call_site_pattern(receiver: str, method_name: str) -> Pattern[str]:
    """``receiver.method(`` with optional whitespace around the dot."""
    return re.compile(rf"(?<![\w$]){re.escape(receiver)}\s*\.\s*{re.escape(method_name)}\s*\(")


def script_function_patterns(name: str) -> List[Pattern[str]]:
    """Line patterns declaring a script-level function *name*; group 1 is the name."""
    escaped = re.escape(name)
    return [
        re.compile(rf"\bfunction\s+({escaped})\s*\("),
        re.compile(rf"(?<![\w.$])({escaped})\s*[:=]\s*(?:async\s+)?function\b"),
        re.compile(rf"\b(?:var|let|const)\s+({escaped})\s*=\s*(?:async\s+)?(?:\([^)]*\)|[\w$]+)\s*=>"),
    ]


def java_method_declaration_pattern(name: str) -> Pattern[str]:
    """Java-style method declaration (``<%! %>`` blocks); group 1 is the name."""
    return re.compile(
        rf"^\s*(?:(?:public|private|protected|static|final|synchronized|abstract)\s+)*"
        rf"[\w$.]+(?:\s*<[^;=(){{}}]*>)?(?:\s*\[\s*\])*\s+({re.escape(name)})\s*\("
    )
