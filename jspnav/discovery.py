"""Workspace source-root and dependency discovery from Maven build files.

Two passes per workspace folder:

1. ``collect`` follows the root ``pom.xml`` and its declared ``<modules>``.
2. ``scan_for_poms`` walks the directory tree for build files that no parent
   references (orphan modules, a parent POM living in a subdirectory).

Both passes carry an explicit depth counter so cyclic module references or
pathological trees terminate.
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Set

from . import config
from .config_manager import NavigatorSettings
from .models import DependencyCoordinate, SourceRoot, WorkspaceLayout

logger = logging.getLogger(__name__)

_SOURCE_DIRECTORY = re.compile(r"<sourceDirectory>(.*?)</sourceDirectory>", re.S)
_MODULES_BLOCK = re.compile(r"<modules>(.*?)</modules>", re.S)
_MODULE = re.compile(r"<module>(.*?)</module>", re.S)
_DEPENDENCY_MANAGEMENT = re.compile(r"<dependencyManagement>.*?</dependencyManagement>", re.S)
_DEPENDENCIES_BLOCK = re.compile(r"<dependencies>(.*?)</dependencies>", re.S)
_DEPENDENCY = re.compile(r"<dependency>(.*?)</dependency>", re.S)
_PROPERTIES_BLOCK = re.compile(r"<properties>(.*?)</properties>", re.S)
_PROPERTY = re.compile(r"<([\w.\-]+)>(.*?)</\1>", re.S)
_PLACEHOLDER = re.compile(r"\$\{([^}]+)\}")
_BLOCKS_HIDING_PROJECT_VERSION = re.compile(
    r"<(parent|dependencies|dependencyManagement|build|profiles|plugins|reporting)>.*?</\1>", re.S
)


def _tag(block: str, name: str) -> Optional[str]:
    match = re.search(rf"<{name}>(.*?)</{name}>", block, re.S)
    if match is None:
        return None
    value = match.group(1).strip()
    return value or None


@dataclass
class PomInfo:
    source_directories: List[str] = field(default_factory=list)
    modules: List[str] = field(default_factory=list)
    dependencies: List[DependencyCoordinate] = field(default_factory=list)


def _pom_properties(content: str) -> Dict[str, str]:
    properties: Dict[str, str] = {}
    block = _PROPERTIES_BLOCK.search(content)
    if block:
        for match in _PROPERTY.finditer(block.group(1)):
            properties[match.group(1)] = match.group(2).strip()
    own_version = _tag(_BLOCKS_HIDING_PROJECT_VERSION.sub("", content), "version")
    if own_version:
        properties.setdefault("project.version", own_version)
    return properties


def _substitute(value: str, properties: Dict[str, str]) -> Optional[str]:
    """Expand ``${name}`` placeholders; ``None`` if any stays unresolved."""
    for _ in range(5):
        if "${" not in value:
            return value
        value = _PLACEHOLDER.sub(lambda m: properties.get(m.group(1), m.group(0)), value)
    return None if "${" in value else value


def parse_pom(pom_path: Path) -> PomInfo:
    """Read source directories, modules and dependencies from a ``pom.xml``.

    Missing or unreadable files give an empty result. A POM without
    ``<sourceDirectory>`` uses the Maven default ``src/main/java``.
    """
    try:
        content = pom_path.read_text(encoding="utf-8", errors="ignore")
    except OSError as exc:
        logger.debug("Cannot read %s: %s", pom_path, exc)
        return PomInfo()

    info = PomInfo()
    for match in _SOURCE_DIRECTORY.finditer(content):
        directory = match.group(1).strip()
        if directory:
            info.source_directories.append(directory)

    modules_block = _MODULES_BLOCK.search(content)
    if modules_block:
        for match in _MODULE.finditer(modules_block.group(1)):
            module = match.group(1).strip()
            if module:
                info.modules.append(module)

    properties = _pom_properties(content)
    without_management = _DEPENDENCY_MANAGEMENT.sub("", content)
    for block in _DEPENDENCIES_BLOCK.finditer(without_management):
        for dependency in _DEPENDENCY.finditer(block.group(1)):
            body = dependency.group(1)
            group_id = _tag(body, "groupId")
            artifact_id = _tag(body, "artifactId")
            version = _tag(body, "version")
            if not (group_id and artifact_id and version):
                continue
            version = _substitute(version, properties)
            if version is None:
                logger.debug("Unresolved version for %s:%s in %s", group_id, artifact_id, pom_path)
                continue
            info.dependencies.append(DependencyCoordinate(group_id, artifact_id, version))

    if not info.source_directories:
        info.source_directories.append(config.DEFAULT_POM_SOURCE_DIR)
    return info


class SourceRootDiscovery:
    """Accumulates source roots and dependency coordinates for one workspace."""

    def __init__(
        self,
        config_paths: Optional[Iterable[str]] = None,
        max_depth: int = config.MAX_DISCOVERY_DEPTH,
        skip_dirs: Optional[Set[str]] = None,
    ) -> None:
        self.config_paths = list(config_paths or [])
        self.max_depth = max_depth
        self.skip_dirs = set(skip_dirs) if skip_dirs is not None else set(config.SCAN_SKIP_DIRS)
        self.source_roots: List[SourceRoot] = []
        self.dependencies: List[DependencyCoordinate] = []
        self._visited_modules: Set[Path] = set()

    # ------------------------------------------------------------------
    # Accumulation
    # ------------------------------------------------------------------

    def add_source_root(self, module_path: Path, source_path: Path) -> bool:
        if any(root.source_path == source_path for root in self.source_roots):
            return False
        self.source_roots.append(SourceRoot(module_path=module_path, source_path=source_path))
        logger.debug("Source root: %s (module %s)", source_path, module_path)
        return True

    def add_dependencies(self, dependencies: Iterable[DependencyCoordinate]) -> None:
        for dependency in dependencies:
            if dependency not in self.dependencies:
                self.dependencies.append(dependency)

    # ------------------------------------------------------------------
    # Pass 1: declared modules
    # ------------------------------------------------------------------

    def collect(self, base_path: Path, pom_path: Optional[Path] = None, depth: int = 0) -> None:
        """Add source roots for *base_path*, following declared modules."""
        if depth > self.max_depth:
            logger.warning("Module nesting deeper than %d at %s; stopping", self.max_depth, base_path)
            return
        pom_path = pom_path or base_path / config.BUILD_FILE_NAME

        if not pom_path.is_file():
            candidates = self.config_paths or config.CONVENTIONAL_SOURCE_DIRS
            for relative in candidates:
                source_path = os.path.normpath(base_path / relative)
                if os.path.isdir(source_path):
                    self.add_source_root(base_path, Path(source_path))
            return

        resolved = base_path.resolve()
        if resolved in self._visited_modules:
            return
        self._visited_modules.add(resolved)

        info = parse_pom(pom_path)
        for relative in info.source_directories:
            source_path = Path(os.path.normpath(base_path / relative))
            if source_path.is_dir():
                self.add_source_root(base_path, source_path)
        self.add_dependencies(info.dependencies)

        for module in info.modules:
            module_base = Path(os.path.normpath(base_path / module))
            self.collect(module_base, module_base / config.BUILD_FILE_NAME, depth + 1)

    # ------------------------------------------------------------------
    # Pass 2: unreferenced build files
    # ------------------------------------------------------------------

    def scan_for_poms(self, directory: Path, already_discovered: Set[Path], depth: int = 0) -> None:
        """Walk *directory* for ``pom.xml`` files the module graph did not reach."""
        if depth > self.max_depth:
            return
        try:
            entries = sorted(os.scandir(directory), key=lambda entry: entry.name)
        except OSError as exc:
            logger.debug("Cannot list %s: %s", directory, exc)
            return

        for entry in entries:
            try:
                if not entry.is_dir(follow_symlinks=False):
                    continue
            except OSError:
                continue
            if entry.name in self.skip_dirs:
                continue

            sub_dir = Path(entry.path)
            pom_path = sub_dir / config.BUILD_FILE_NAME
            if pom_path.is_file():
                info = parse_pom(pom_path)
                for relative in info.source_directories:
                    source_path = Path(os.path.normpath(sub_dir / relative))
                    if source_path not in already_discovered and source_path.is_dir():
                        self.add_source_root(sub_dir, source_path)
                        already_discovered.add(source_path)
                self.add_dependencies(info.dependencies)
            self.scan_for_poms(sub_dir, already_discovered, depth + 1)

    def discover(self, workspace_folder: Path) -> None:
        self.collect(workspace_folder)
        discovered = {root.source_path for root in self.source_roots}
        self.scan_for_poms(workspace_folder, discovered)

    def source_paths(self) -> List[Path]:
        return [root.source_path for root in self.source_roots]


def discover_workspace(folders: Iterable[Path], settings: NavigatorSettings) -> WorkspaceLayout:
    """Build the session layout for every workspace folder."""
    discovery = SourceRootDiscovery(config_paths=settings.source_paths, max_depth=settings.max_depth)
    for folder in folders:
        folder = Path(folder)
        if not folder.is_dir():
            logger.warning("Workspace folder does not exist: %s", folder)
            continue
        discovery.discover(folder)

    logger.info(
        "Discovered %d source roots and %d dependencies",
        len(discovery.source_roots), len(discovery.dependencies),
    )
    return WorkspaceLayout(
        source_roots=discovery.source_roots,
        dependencies=discovery.dependencies,
        dependency_cache_root=settings.dependency_cache_root,
        platform_home=settings.platform_home,
    )
