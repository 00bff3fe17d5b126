"""Tests for the workspace session and language-server glue."""

from pathlib import Path

from lsprotocol import types as lsp

from jspnav.models import path_from_uri
from jspnav.server import TRIGGER_CHARACTERS, workspace_folders
from jspnav.session import WorkspaceSession


def test_session_resolves_in_sample_workspace(sample_webapp: Path, settings):
    session = WorkspaceSession.from_workspace([sample_webapp], settings)
    jsp = sample_webapp / "src" / "main" / "webapp" / "orders.jsp"
    text = jsp.read_text()
    try:
        location = session.resolve_definition(jsp.as_uri(), text, text.index("OrderService service") + 3, version=1)
    finally:
        session.close()

    assert location.path.name == "OrderService.java"
    assert location.uri.startswith("file://")


def test_failures_are_reported_as_nothing_found(sample_webapp: Path, settings, monkeypatch):
    session = WorkspaceSession.from_workspace([sample_webapp], settings)

    def explode(*args, **kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr(session.resolver, "resolve", explode)
    monkeypatch.setattr(session.completer, "complete", explode)

    assert session.resolve_definition("file:///x.jsp", "Foo", 1) is None
    assert session.complete("file:///x.jsp", "<", 1, "<") == []
    session.close()


def test_forget_document_drops_cached_facts(sample_webapp: Path, settings):
    session = WorkspaceSession.from_workspace([sample_webapp], settings)
    session.resolve_definition("file:///x.jsp", "<% Foo f; %>", 4, version=3)
    assert "file:///x.jsp" in session.documents

    session.forget_document("file:///x.jsp")
    assert "file:///x.jsp" not in session.documents
    session.close()


def test_workspace_folders_from_initialize_params(temp_dir: Path):
    folder = temp_dir / "shop"
    params = lsp.InitializeParams(
        capabilities=lsp.ClientCapabilities(),
        workspace_folders=[lsp.WorkspaceFolder(uri=folder.as_uri(), name="shop")],
    )
    assert workspace_folders(params) == [folder]

    params = lsp.InitializeParams(capabilities=lsp.ClientCapabilities(), root_uri=folder.as_uri())
    assert workspace_folders(params) == [folder]

    assert workspace_folders(lsp.InitializeParams(capabilities=lsp.ClientCapabilities())) == []


def test_completion_triggers():
    assert set(TRIGGER_CHARACTERS) == {"@", "<", " ", '"', ":", "/", ".", ">"}


def test_path_from_uri_decodes_file_uris():
    assert path_from_uri("file:///work/my%20shop/page.jsp") == Path("/work/my shop/page.jsp")
    assert path_from_uri("/work/page.jsp") == Path("/work/page.jsp")
