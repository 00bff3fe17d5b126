"""Per-document cache of variable declarations and the import alias table."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Tuple

from . import patterns
from .models import DocumentFacts, VariableDeclaration

logger = logging.getLogger(__name__)


def scan_variables(text: str) -> List[VariableDeclaration]:
    """Collect variable declarations in document order.

    Scans scripting regions for local declarations, for-each variables and
    parameters, plus ``<jsp:useBean>`` tags in the markup. Duplicate names are
    kept; lookups take the first one.
    """
    found: List[Tuple[int, str, str]] = []
    for region_offset, body in patterns.scripting_regions(text):
        for extractor in (
            patterns.local_declarations,
            patterns.for_each_declarations,
            patterns.parameter_declarations,
        ):
            for offset, name, type_name in extractor(body):
                found.append((region_offset + offset, name, type_name))
    found.extend(patterns.use_bean_declarations(text))

    found.sort(key=lambda item: item[0])
    return [VariableDeclaration(name=name, type_name=type_name, offset=offset) for offset, name, type_name in found]


def scan_imports(text: str) -> Tuple[Dict[str, str], List[str]]:
    """Build the simple-name -> qualified-name table and the wildcard packages."""
    entries = patterns.directive_imports(text)
    for _, body in patterns.scripting_regions(text):
        entries.extend(patterns.java_imports(body))

    imports: Dict[str, str] = {}
    wildcards: List[str] = []
    for entry in entries:
        if entry.endswith(".*"):
            package = entry[:-2]
            if package not in wildcards:
                wildcards.append(package)
            continue
        simple_name = entry.rsplit(".", 1)[-1]
        imports.setdefault(simple_name, entry)
    return imports, wildcards


def derive_facts(text: str, version: Optional[int]) -> DocumentFacts:
    imports, wildcards = scan_imports(text)
    return DocumentFacts(
        version=version,
        variables=scan_variables(text),
        imports=imports,
        wildcard_packages=wildcards,
    )


class DocumentTextCache:
    """Facts per open document, valid only for the version they were derived from."""

    def __init__(self) -> None:
        self._entries: Dict[str, DocumentFacts] = {}

    def facts_for(self, uri: str, text: str, version: Optional[int]) -> DocumentFacts:
        """Return cached facts for *uri* at *version*, re-deriving on any mismatch.

        ``version=None`` means the caller has no version to offer; such
        documents are parsed every time and never cached.
        """
        if version is None:
            return derive_facts(text, None)

        cached = self._entries.get(uri)
        if cached is not None and cached.version == version:
            return cached

        facts = derive_facts(text, version)
        self._entries[uri] = facts
        logger.debug(
            "Parsed %s v%s: %d variables, %d imports",
            uri, version, len(facts.variables), len(facts.imports),
        )
        return facts

    def forget(self, uri: str) -> None:
        self._entries.pop(uri, None)

    def __contains__(self, uri: str) -> bool:
        return uri in self._entries

    def __len__(self) -> int:
        return len(self._entries)
