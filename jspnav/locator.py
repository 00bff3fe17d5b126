"""Three-tier declaration search: workspace, dependency sources, platform sources."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from . import config
from .archives import ArchiveAccessLayer
from .declarations import find_declaration, package_matches
from .models import ArchiveEntryLocation, DependencyCoordinate, Location, SourceRoot, path_from_uri

logger = logging.getLogger(__name__)


def relative_source_path(qualified_name: str) -> str:
    """``a.b.C`` -> ``a/b/C.java``."""
    return qualified_name.replace(".", "/") + config.SOURCE_EXTENSION


def _origin_path(uri: Optional[str]) -> Optional[str]:
    if not uri:
        return None
    return os.path.normpath(str(path_from_uri(uri)))


def _is_file(path: Path) -> bool:
    """``Path.is_file`` that reports unreadable locations as absent."""
    try:
        return path.is_file()
    except OSError as exc:
        logger.debug("Cannot stat %s: %s", path, exc)
        return False


def _is_within(path: str, directory: Path) -> bool:
    directory_text = os.path.normpath(str(directory))
    return path == directory_text or path.startswith(directory_text.rstrip(os.sep) + os.sep)


class DeclarationLocator:
    """Find the file and span declaring a qualified type (and optionally a method).

    Tiers are tried in order and the first hit wins. Names under a platform
    prefix consult the platform archive right after the workspace; all other
    names go workspace, then dependency archives, and never the platform.
    """

    def __init__(
        self,
        source_roots: Sequence[SourceRoot],
        archives: ArchiveAccessLayer,
        dependencies: Sequence[DependencyCoordinate] = (),
        dependency_cache_root: Optional[Path] = None,
        platform_home: Optional[Path] = None,
        platform_prefixes: Sequence[str] = tuple(config.PLATFORM_PREFIXES),
        max_depth: int = config.MAX_DISCOVERY_DEPTH,
    ) -> None:
        self.source_roots = list(source_roots)
        self.archives = archives
        self.dependencies = list(dependencies)
        self.dependency_cache_root = dependency_cache_root
        self.platform_home = platform_home
        self.platform_prefixes = list(platform_prefixes)
        self.max_depth = max_depth
        self._dependency_entries: Dict[str, Optional[ArchiveEntryLocation]] = {}
        self._platform_entries: Dict[str, Optional[ArchiveEntryLocation]] = {}

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def locate(
        self,
        qualified_name: str,
        method_name: Optional[str] = None,
        param_count: Optional[int] = None,
        origin_uri: Optional[str] = None,
    ) -> Optional[Location]:
        """Location of *qualified_name* (or its *method_name*), or ``None``."""
        if not qualified_name or qualified_name.startswith(".") or qualified_name.endswith("."):
            return None
        logger.debug("Locating %s%s", qualified_name, f"#{method_name}/{param_count}" if method_name else "")

        location = self.locate_in_workspace(qualified_name, method_name, param_count, origin_uri)
        if location is not None:
            return location

        if self.is_platform_name(qualified_name):
            location = self.locate_in_platform(qualified_name, method_name, param_count)
            if location is not None:
                return location
            return self.locate_in_dependencies(qualified_name, method_name, param_count)

        return self.locate_in_dependencies(qualified_name, method_name, param_count)

    def is_platform_name(self, qualified_name: str) -> bool:
        return any(
            qualified_name == prefix or qualified_name.startswith(prefix + ".")
            for prefix in self.platform_prefixes
        )

    # ------------------------------------------------------------------
    # Tier 1: workspace
    # ------------------------------------------------------------------

    def ordered_roots(self, origin_uri: Optional[str]) -> List[SourceRoot]:
        """Source roots whose module contains the origin document first, longest module first."""
        origin = _origin_path(origin_uri)
        if origin is None:
            return list(self.source_roots)

        def rank(root: SourceRoot):
            if _is_within(origin, root.module_path) or _is_within(origin, root.source_path):
                return (0, -len(str(root.module_path)))
            return (1, 0)

        return sorted(self.source_roots, key=rank)

    def locate_in_workspace(
        self,
        qualified_name: str,
        method_name: Optional[str] = None,
        param_count: Optional[int] = None,
        origin_uri: Optional[str] = None,
    ) -> Optional[Location]:
        relative = relative_source_path(qualified_name)
        expected_package, _, simple_name = qualified_name.rpartition(".")

        for root in self.ordered_roots(origin_uri):
            candidate = root.source_path / relative
            if not _is_file(candidate):
                continue
            location = self._search_file(candidate, simple_name, expected_package, method_name, param_count)
            if location is not None:
                return location
        return None

    def find_type_by_name(self, simple_name: str, origin_uri: Optional[str] = None) -> Optional[Location]:
        """Depth-limited search for ``SimpleName.java`` anywhere under the source roots."""
        file_name = simple_name + config.SOURCE_EXTENSION
        for root in self.ordered_roots(origin_uri):
            found = self._find_file(root.source_path, file_name, 0)
            if found is None:
                continue
            location = self._search_file(found, simple_name, "", None, None)
            if location is not None:
                return location
        return None

    def _find_file(self, directory: Path, file_name: str, depth: int) -> Optional[Path]:
        if depth > self.max_depth:
            return None
        direct = directory / file_name
        if _is_file(direct):
            return direct
        try:
            children = sorted(entry.path for entry in os.scandir(directory) if entry.is_dir(follow_symlinks=False))
        except OSError as exc:
            logger.debug("Cannot list %s: %s", directory, exc)
            return None
        for child in children:
            if os.path.basename(child) in config.SOURCE_SKIP_DIRS:
                continue
            found = self._find_file(Path(child), file_name, depth + 1)
            if found is not None:
                return found
        return None

    # ------------------------------------------------------------------
    # Tier 2: dependency source archives
    # ------------------------------------------------------------------

    def dependency_entry(self, qualified_name: str) -> Optional[ArchiveEntryLocation]:
        """Archive and entry holding *qualified_name*; misses are cached too."""
        if qualified_name in self._dependency_entries:
            return self._dependency_entries[qualified_name]

        entry_name = relative_source_path(qualified_name)
        found: Optional[ArchiveEntryLocation] = None
        if self.dependency_cache_root is not None:
            for dependency in self.dependencies:
                archive_path = dependency.sources_archive(self.dependency_cache_root)
                if self.archives.has_entry(archive_path, entry_name):
                    found = ArchiveEntryLocation(archive_path, entry_name)
                    break

        self._dependency_entries[qualified_name] = found
        return found

    def locate_in_dependencies(
        self,
        qualified_name: str,
        method_name: Optional[str] = None,
        param_count: Optional[int] = None,
    ) -> Optional[Location]:
        entry = self.dependency_entry(qualified_name)
        if entry is None:
            return None
        return self._search_entry(entry, qualified_name, method_name, param_count)

    # ------------------------------------------------------------------
    # Tier 3: platform source archive
    # ------------------------------------------------------------------

    def platform_archive(self) -> Optional[Path]:
        if self.platform_home is None:
            return None
        for candidate in (self.platform_home / "lib" / "src.zip", self.platform_home / "src.zip"):
            if _is_file(candidate):
                return candidate
        return None

    def platform_entry(self, qualified_name: str) -> Optional[ArchiveEntryLocation]:
        """Entry whose path ends with the name's relative path (module prefixes vary)."""
        if qualified_name in self._platform_entries:
            return self._platform_entries[qualified_name]

        found: Optional[ArchiveEntryLocation] = None
        archive_path = self.platform_archive()
        if archive_path is not None:
            entry_name = self.archives.find_entry_by_suffix(archive_path, relative_source_path(qualified_name))
            if entry_name is not None:
                found = ArchiveEntryLocation(archive_path, entry_name)

        self._platform_entries[qualified_name] = found
        return found

    def locate_in_platform(
        self,
        qualified_name: str,
        method_name: Optional[str] = None,
        param_count: Optional[int] = None,
    ) -> Optional[Location]:
        entry = self.platform_entry(qualified_name)
        if entry is None:
            return None
        return self._search_entry(entry, qualified_name, method_name, param_count)

    # ------------------------------------------------------------------
    # Shared
    # ------------------------------------------------------------------

    def _search_entry(
        self,
        entry: ArchiveEntryLocation,
        qualified_name: str,
        method_name: Optional[str],
        param_count: Optional[int],
    ) -> Optional[Location]:
        extracted = self.archives.extract(entry.archive_path, entry.entry_name)
        if extracted is None:
            return None
        expected_package, _, simple_name = qualified_name.rpartition(".")
        return self._search_file(extracted, simple_name, expected_package, method_name, param_count)

    def _search_file(
        self,
        path: Path,
        simple_name: str,
        expected_package: str,
        method_name: Optional[str],
        param_count: Optional[int],
    ) -> Optional[Location]:
        try:
            source = path.read_text(encoding="utf-8", errors="replace")
        except OSError as exc:
            logger.warning("Could not read %s: %s", path, exc)
            return None

        if not package_matches(source, expected_package):
            logger.debug("Package mismatch in %s (expected %s)", path, expected_package)
            return None

        span = find_declaration(source, simple_name, method_name, param_count)
        if span is None:
            logger.debug("No declaration of %s in %s", simple_name, path)
            return None
        return Location.on_line(path, span.line, span.start, span.end)
