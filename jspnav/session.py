"""One workspace session: layout, caches and the two public operations."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Optional

from lsprotocol import types as lsp

from .archives import ArchiveAccessLayer
from .completion import CompletionAugmenter, MarkupCompleter
from .config_manager import NavigatorSettings, load_settings
from .discovery import discover_workspace
from .document_cache import DocumentTextCache
from .locator import DeclarationLocator
from .models import Location, WorkspaceLayout
from .name_resolver import NameResolver
from .resolver import DefinitionResolver

logger = logging.getLogger(__name__)


class WorkspaceSession:
    """Owns every cache for the life of an editor session.

    Failures inside a request are logged and reported as "nothing found";
    they never escape to the caller.
    """

    def __init__(
        self,
        layout: WorkspaceLayout,
        settings: Optional[NavigatorSettings] = None,
        markup_completer: Optional[MarkupCompleter] = None,
    ) -> None:
        self.layout = layout
        self.settings = settings or NavigatorSettings()
        self.documents = DocumentTextCache()
        self.archives = ArchiveAccessLayer(self.settings.extract_dir)
        self.locator = DeclarationLocator(
            layout.source_roots,
            self.archives,
            dependencies=layout.dependencies,
            dependency_cache_root=layout.dependency_cache_root,
            platform_home=layout.platform_home,
            platform_prefixes=self.settings.platform_prefixes,
            max_depth=self.settings.max_depth,
        )
        self.resolver = DefinitionResolver(self.locator, self.documents, NameResolver())
        self.completer = CompletionAugmenter(markup_completer)

    @classmethod
    def from_workspace(
        cls,
        folders: Iterable[Path],
        settings: Optional[NavigatorSettings] = None,
        markup_completer: Optional[MarkupCompleter] = None,
    ) -> "WorkspaceSession":
        settings = settings or load_settings()
        layout = discover_workspace(folders, settings)
        return cls(layout, settings, markup_completer)

    def resolve_definition(
        self,
        uri: str,
        text: str,
        offset: int,
        version: Optional[int] = None,
    ) -> Optional[Location]:
        try:
            return self.resolver.resolve(uri, text, offset, version)
        except Exception as exc:
            logger.error("Definition lookup failed for %s at %d: %s", uri, offset, exc, exc_info=True)
            return None

    def complete(self, uri: str, text: str, offset: int, line_prefix: str) -> List[lsp.CompletionItem]:
        try:
            return self.completer.complete(uri, text, offset, line_prefix)
        except Exception as exc:
            logger.error("Completion failed for %s at %d: %s", uri, offset, exc, exc_info=True)
            return []

    def forget_document(self, uri: str) -> None:
        self.documents.forget(uri)

    def close(self) -> None:
        self.archives.close()
