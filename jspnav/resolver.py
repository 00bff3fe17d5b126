"""Go-to-definition orchestration for one cursor position."""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from . import patterns
from .disambiguator import observed_argument_count
from .document_cache import DocumentTextCache
from .lexical import word_at, word_bounds
from .locator import DeclarationLocator
from .models import Location, SymbolReference, path_from_uri
from .name_resolver import NameResolver, find_script_function

logger = logging.getLogger(__name__)


class DefinitionResolver:
    """Resolve the symbol under a cursor to its declaration.

    Steps, first hit wins:

    1. cursor inside a ``<%@ page import="..." %>`` value: the entry under
       the cursor, and nothing else;
    2. dotted word: class/static, ``variable.member`` or chained call;
    3. capitalized bare word: imports, then a workspace-wide file search;
    4. anything else: a script-level function in the same document.
    """

    def __init__(
        self,
        locator: DeclarationLocator,
        documents: DocumentTextCache,
        names: Optional[NameResolver] = None,
    ) -> None:
        self.locator = locator
        self.documents = documents
        self.names = names or NameResolver()

    def resolve(self, uri: str, text: str, offset: int, version: Optional[int] = None) -> Optional[Location]:
        offset = max(0, min(offset, len(text)))

        entry = patterns.import_directive_entry(text, offset)
        if entry is not None:
            logger.debug("Cursor in import directive on %r", entry)
            return self.locator.locate(entry, origin_uri=uri) if entry else None

        word = word_at(text, offset)
        if not word or word == ".":
            return None
        start, _ = word_bounds(text, offset)
        facts = self.documents.facts_for(uri, text, version)
        logger.debug("Word at %d: %r", offset, word)

        if "." in word:
            references = self.names.dotted_references(word, facts, text, offset, start)
            return self._first_location(references, text, offset, uri)

        if patterns.is_capitalized_identifier(word):
            return self._resolve_type_name(word, facts, uri)

        return self._resolve_script_function(uri, text, word)

    # ------------------------------------------------------------------

    def _first_location(
        self,
        references: Iterable[SymbolReference],
        text: str,
        offset: int,
        uri: str,
    ) -> Optional[Location]:
        for reference in references:
            location = self._locate_reference(reference, text, offset, uri)
            if location is not None:
                return location
        return None

    def _locate_reference(self, reference: SymbolReference, text: str, offset: int, uri: str) -> Optional[Location]:
        if reference.method_name:
            param_count = observed_argument_count(text, reference.receiver, reference.method_name, offset)
            for candidate in reference.candidates:
                location = self.locator.locate(candidate, reference.method_name, param_count, origin_uri=uri)
                if location is not None:
                    return location
            return None

        for candidate in reference.candidates:
            location = self.locator.locate(candidate, origin_uri=uri)
            if location is not None:
                return location
        return None

    def _resolve_type_name(self, word: str, facts, uri: str) -> Optional[Location]:
        for candidate in self.names.class_candidates(word, facts, implicit=False):
            location = self.locator.locate(candidate, origin_uri=uri)
            if location is not None:
                return location

        location = self.locator.find_type_by_name(word, origin_uri=uri)
        if location is not None:
            return location
        return self.locator.locate(self.names.implicit_candidate(word), origin_uri=uri)

    def _resolve_script_function(self, uri: str, text: str, name: str) -> Optional[Location]:
        span = find_script_function(text, name)
        if span is None:
            return None
        line, start, end = span
        return Location.on_line(path_from_uri(uri), line, start, end)
