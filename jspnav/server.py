"""
jspnav language server.

Wires the workspace session to ``textDocument/definition`` and
``textDocument/completion`` over stdio.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import List, Optional

from lsprotocol import types as lsp
from pygls.lsp.server import LanguageServer

from . import __version__
from .completion import resolve_completion
from .config_manager import load_settings
from .models import path_from_uri
from .session import WorkspaceSession

logger = logging.getLogger(__name__)

TRIGGER_CHARACTERS = ["@", "<", " ", '"', ":", "/", ".", ">"]

server = LanguageServer(
    "jspnav", __version__,
    text_document_sync_kind=lsp.TextDocumentSyncKind.Incremental,
)

_session: Optional[WorkspaceSession] = None


def workspace_folders(params: lsp.InitializeParams) -> List[Path]:
    """Folders from the client, falling back to the root URI or root path."""
    if params.workspace_folders:
        return [path_from_uri(folder.uri) for folder in params.workspace_folders]
    if params.root_uri:
        return [path_from_uri(params.root_uri)]
    if params.root_path:
        return [Path(params.root_path)]
    return []


def current_session() -> WorkspaceSession:
    global _session
    if _session is None:
        _session = WorkspaceSession.from_workspace([], load_settings())
    return _session


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------

@server.feature(lsp.INITIALIZE)
def on_initialize(params: lsp.InitializeParams):
    global _session
    folders = workspace_folders(params)
    logger.info("Initializing for %s", ", ".join(str(folder) for folder in folders) or "no folders")
    if _session is not None:
        _session.close()
    _session = WorkspaceSession.from_workspace(folders, load_settings())


@server.feature(lsp.SHUTDOWN)
def on_shutdown(params):
    if _session is not None:
        _session.close()


@server.feature(lsp.TEXT_DOCUMENT_DID_CLOSE)
def did_close(params: lsp.DidCloseTextDocumentParams):
    current_session().forget_document(params.text_document.uri)


# ---------------------------------------------------------------------------
# Go-to-definition
# ---------------------------------------------------------------------------

@server.feature(lsp.TEXT_DOCUMENT_DEFINITION)
def definition(params: lsp.DefinitionParams) -> Optional[lsp.Location]:
    uri = params.text_document.uri
    document = server.workspace.get_text_document(uri)
    offset = document.offset_at_position(params.position)
    found = current_session().resolve_definition(uri, document.source, offset, document.version)
    if found is None:
        return None
    return lsp.Location(
        uri=found.uri,
        range=lsp.Range(
            start=lsp.Position(line=found.range.start.line, character=found.range.start.column),
            end=lsp.Position(line=found.range.end.line, character=found.range.end.column),
        ),
    )


# ---------------------------------------------------------------------------
# Completion
# ---------------------------------------------------------------------------

@server.feature(
    lsp.TEXT_DOCUMENT_COMPLETION,
    lsp.CompletionOptions(trigger_characters=TRIGGER_CHARACTERS, resolve_provider=True),
)
def completion(params: lsp.CompletionParams) -> lsp.CompletionList:
    uri = params.text_document.uri
    document = server.workspace.get_text_document(uri)
    offset = document.offset_at_position(params.position)
    lines = document.lines
    line = lines[params.position.line] if params.position.line < len(lines) else ""
    line_prefix = line[:params.position.character]
    items = current_session().complete(uri, document.source, offset, line_prefix)
    return lsp.CompletionList(is_incomplete=False, items=items)


@server.feature(lsp.COMPLETION_ITEM_RESOLVE)
def completion_resolve(item: lsp.CompletionItem) -> lsp.CompletionItem:
    return resolve_completion(item)


def start() -> None:
    """Run the server on stdio; stdout carries the protocol, logs go to stderr."""
    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("%(asctime)s %(name)s %(levelname)s %(message)s"))
        root.addHandler(handler)
    if root.level == logging.WARNING:
        root.setLevel(logging.INFO)
    server.start_io()
