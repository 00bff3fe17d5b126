"""Core data models shared by discovery, resolution and the server layer."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional
from urllib.parse import unquote, urlparse


def path_from_uri(uri: str) -> Path:
    """Filesystem path of a ``file:`` URI; other strings are taken as paths."""
    if uri.startswith("file://"):
        return Path(unquote(urlparse(uri).path))
    return Path(uri)


@dataclass(frozen=True)
class SourceRoot:
    module_path: Path
    source_path: Path


@dataclass(frozen=True)
class DependencyCoordinate:
    group_id: str
    artifact_id: str
    version: str

    def sources_archive(self, cache_root: Path) -> Path:
        """Path of the ``-sources.jar`` inside a Maven-style local repository."""
        return (
            cache_root.joinpath(*self.group_id.split("."))
            / self.artifact_id
            / self.version
            / f"{self.artifact_id}-{self.version}-sources.jar"
        )


@dataclass
class WorkspaceLayout:
    """What discovery hands to a session: roots, dependencies and archive homes."""

    source_roots: List[SourceRoot] = field(default_factory=list)
    dependencies: List[DependencyCoordinate] = field(default_factory=list)
    dependency_cache_root: Optional[Path] = None
    platform_home: Optional[Path] = None


@dataclass(frozen=True)
class VariableDeclaration:
    name: str
    type_name: str
    offset: int = 0


@dataclass
class DocumentFacts:
    """Per-document facts derived from one version of its text."""

    version: Optional[int]
    variables: List[VariableDeclaration] = field(default_factory=list)
    imports: Dict[str, str] = field(default_factory=dict)
    wildcard_packages: List[str] = field(default_factory=list)

    def variable_type(self, name: str) -> Optional[str]:
        for declaration in self.variables:
            if declaration.name == name:
                return declaration.type_name
        return None


@dataclass(frozen=True)
class ArchiveEntryLocation:
    archive_path: Path
    entry_name: str


@dataclass(frozen=True)
class TextPosition:
    line: int
    column: int


@dataclass(frozen=True)
class TextRange:
    start: TextPosition
    end: TextPosition


@dataclass(frozen=True)
class Location:
    """A 0-based, half-open span inside a file."""

    path: Path
    range: TextRange

    @property
    def uri(self) -> str:
        return self.path.resolve().as_uri()

    @classmethod
    def on_line(cls, path: Path, line: int, start: int, end: int) -> "Location":
        return cls(path, TextRange(TextPosition(line, start), TextPosition(line, end)))


@dataclass
class SymbolReference:
    """A resolved reference: candidate type names plus an optional member call.

    ``receiver`` is the text written before ``.method(`` in the document, used
    to find concrete call sites for overload disambiguation.
    """

    candidates: List[str]
    method_name: Optional[str] = None
    receiver: str = ""
