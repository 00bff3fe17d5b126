"""Turn the word under the cursor into candidate qualified names."""

from __future__ import annotations

import logging
from typing import Iterator, List, Optional, Tuple

from . import patterns
from .lexical import segment_index_at, source_lines, split_class_and_method, word_at
from .models import DocumentFacts, SymbolReference

logger = logging.getLogger(__name__)

IMPLICIT_PACKAGE = "java.lang"

# Variables every JSP page has without declaring them.
IMPLICIT_OBJECTS = {
    "request": "javax.servlet.http.HttpServletRequest",
    "response": "javax.servlet.http.HttpServletResponse",
    "session": "javax.servlet.http.HttpSession",
    "application": "javax.servlet.ServletContext",
    "config": "javax.servlet.ServletConfig",
    "out": "javax.servlet.jsp.JspWriter",
    "pageContext": "javax.servlet.jsp.PageContext",
    "page": "java.lang.Object",
    "exception": "java.lang.Throwable",
}


class NameResolver:
    """Produces :class:`SymbolReference` candidates in precedence order.

    Nothing here touches the filesystem; the orchestrator tries each
    reference against the declaration locator and keeps the first hit.
    """

    def __init__(self, implicit_package: str = IMPLICIT_PACKAGE) -> None:
        self.implicit_package = implicit_package

    # ------------------------------------------------------------------
    # Type names
    # ------------------------------------------------------------------

    def class_candidates(self, name: str, facts: DocumentFacts, implicit: bool = True) -> List[str]:
        """Qualified-name candidates for a type name as written in the document.

        Import alias first, then wildcard-imported packages (simple names
        only), then the name literally, then the implicit ``java.lang``.
        """
        if not name:
            return []
        candidates: List[str] = []

        def add(candidate: str) -> None:
            if candidate not in candidates:
                candidates.append(candidate)

        aliased = facts.imports.get(name)
        if aliased:
            add(aliased)
        simple = "." not in name
        if simple:
            for package in facts.wildcard_packages:
                add(f"{package}.{name}")
        add(name)
        if implicit and simple and patterns.starts_uppercase(name):
            add(f"{self.implicit_package}.{name}")
        return candidates

    def implicit_candidate(self, name: str) -> str:
        return f"{self.implicit_package}.{name}"

    def variable_type(self, name: str, facts: DocumentFacts) -> Optional[str]:
        """Declared type of *name*, falling back to the JSP implicit objects."""
        return facts.variable_type(name) or IMPLICIT_OBJECTS.get(name)

    # ------------------------------------------------------------------
    # Dotted words
    # ------------------------------------------------------------------

    def _receiver_reference(self, receiver: str, method_name: str, facts: DocumentFacts) -> Optional[SymbolReference]:
        if not receiver:
            return None
        member = method_name or None
        if "." not in receiver and not patterns.starts_uppercase(receiver):
            type_name = self.variable_type(receiver, facts)
            if type_name:
                return SymbolReference(self.class_candidates(type_name, facts), member, receiver)
        return SymbolReference(self.class_candidates(receiver, facts), member, receiver)

    def dotted_references(
        self,
        word: str,
        facts: DocumentFacts,
        text: str,
        offset: int,
        word_start: int,
    ) -> Iterator[SymbolReference]:
        """References for a word containing a dot, most specific first."""
        if word.startswith("."):
            full = word_at(text, offset, include_call_parens=True)
            receiver, method_name = split_class_and_method(full)
            logger.debug("Chained call %r -> receiver %r, method %r", full, receiver, method_name)
            reference = self._receiver_reference(receiver, method_name, facts)
            if reference is not None:
                yield reference
            return

        parts = word.split(".")
        first = parts[0]
        segment = segment_index_at(word, word_start, offset)

        if not patterns.starts_uppercase(first):
            type_name = self.variable_type(first, facts)
            if type_name:
                type_candidates = self.class_candidates(type_name, facts)
                member = parts[1] if len(parts) > 1 else ""
                if segment == 0 or not member:
                    yield SymbolReference(type_candidates)
                else:
                    yield SymbolReference(type_candidates, member, first)
                return

        # Class or static reference, or a literal dotted path.
        yield SymbolReference([word.rstrip(".")])
        if patterns.starts_uppercase(first) and segment == 0:
            yield SymbolReference(self.class_candidates(first, facts))
        receiver, method_name = split_class_and_method(word)
        if receiver and method_name:
            reference = self._receiver_reference(receiver, method_name, facts)
            if reference is not None:
                yield reference
        elif receiver:
            yield SymbolReference(self.class_candidates(receiver, facts))


def find_script_function(text: str, name: str) -> Optional[Tuple[int, int, int]]:
    """``(line, start, end)`` of the first script-level function named *name*.

    Covers JavaScript function forms anywhere in the document and Java-style
    method declarations inside ``<%! %>`` blocks.
    """
    if not patterns.is_identifier(name):
        return None

    hits: List[Tuple[int, int, int]] = []
    script_patterns = patterns.script_function_patterns(name)
    for index, line in enumerate(source_lines(text)):
        for pattern in script_patterns:
            match = pattern.search(line)
            if match:
                hits.append((index, match.start(1), match.end(1)))
                break
        if hits:
            break

    java_pattern = patterns.java_method_declaration_pattern(name)
    for region_offset, body in patterns.declaration_regions(text):
        first_line = text.count("\n", 0, region_offset)
        first_column = region_offset - (text.rfind("\n", 0, region_offset) + 1)
        for index, line in enumerate(source_lines(body)):
            match = java_pattern.search(line)
            if match is None:
                continue
            shift = first_column if index == 0 else 0
            hits.append((first_line + index, match.start(1) + shift, match.end(1) + shift))
            break

    return min(hits) if hits else None
