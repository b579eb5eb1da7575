"""Tests for the LSP server: diagnostic generation."""

from __future__ import annotations

import pytest
from lsprotocol.types import (
    DiagnosticSeverity,
    PublishDiagnosticsParams,
    TextDocumentItem,
    TextDocumentSyncKind,
)
from pygls.lsp.server import LanguageServer
from pygls.workspace import Workspace

from tagtext.lsp import _validate, diagnostics_for


@pytest.fixture
def lsp_env():
    """Create a LanguageServer with an initialized workspace and captured diagnostics."""
    ls = LanguageServer("test", "v0", text_document_sync_kind=TextDocumentSyncKind.Full)
    ws = Workspace(None)
    ls.protocol._workspace = ws

    published: list[PublishDiagnosticsParams] = []
    ls.text_document_publish_diagnostics = lambda params: published.append(params)

    def put(source: str, uri: str = "file:///test.txt") -> None:
        ws.put_text_document(
            TextDocumentItem(uri=uri, language_id="tagtext", version=0, text=source)
        )

    return ls, published, put


# ---------------------------------------------------------------------------
# Structural errors → Error severity
# ---------------------------------------------------------------------------


class TestStructuralErrors:
    def test_unclosed_tag(self, lsp_env) -> None:
        ls, published, put = lsp_env
        put("Hello <bold>world")
        _validate(ls, "file:///test.txt")

        assert len(published) == 1
        diags = published[0].diagnostics
        assert len(diags) == 1
        d = diags[0]
        assert d.severity == DiagnosticSeverity.Error
        assert "unclosed" in d.message
        assert d.source == "tagtext"
        # <bold> is at column 7 (1-based) → character 6 (0-based)
        assert d.range.start.line == 0
        assert d.range.start.character == 6
        assert d.range.end.character == 12

    def test_mismatched_close(self, lsp_env) -> None:
        ls, published, put = lsp_env
        put("<bold>x</italic>")
        _validate(ls, "file:///test.txt")

        d = published[0].diagnostics[0]
        assert d.severity == DiagnosticSeverity.Error
        assert "</italic>" in d.message

    def test_invalid_argument(self) -> None:
        diags = diagnostics_for("<color:nope>x</color>")
        assert len(diags) == 1
        assert diags[0].severity == DiagnosticSeverity.Error


# ---------------------------------------------------------------------------
# Unknown names → Warning severity
# ---------------------------------------------------------------------------


class TestUnknownNames:
    def test_unknown_placeholder(self, lsp_env) -> None:
        ls, published, put = lsp_env
        put("Hi <player>!")
        _validate(ls, "file:///test.txt")

        assert len(published) == 1
        diags = published[0].diagnostics
        assert len(diags) == 1
        d = diags[0]
        assert d.severity == DiagnosticSeverity.Warning
        assert "player" in d.message
        assert d.source == "tagtext"


# ---------------------------------------------------------------------------
# Clean document → empty diagnostics
# ---------------------------------------------------------------------------


class TestCleanDocument:
    def test_valid_document(self, lsp_env) -> None:
        ls, published, put = lsp_env
        put("<bold>Hello</bold> \\<world>")
        _validate(ls, "file:///test.txt")

        assert len(published) == 1
        assert published[0].diagnostics == []


# ---------------------------------------------------------------------------
# Position conversion (1-based → 0-based)
# ---------------------------------------------------------------------------


class TestPositionConversion:
    def test_error_on_second_line(self, lsp_env) -> None:
        ls, published, put = lsp_env
        put("Valid first line\n</bold> oops")
        _validate(ls, "file:///test.txt")

        assert len(published) == 1
        diags = published[0].diagnostics
        assert len(diags) == 1
        d = diags[0]
        # Error is on line 2 (1-based) → LSP line 1 (0-based)
        assert d.range.start.line == 1
        assert d.range.start.character == 0
