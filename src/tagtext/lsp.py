"""Minimal LSP server for tagtext markup: diagnostics only."""

from __future__ import annotations

from lsprotocol.types import (
    TEXT_DOCUMENT_DID_CHANGE,
    TEXT_DOCUMENT_DID_OPEN,
    Diagnostic,
    DiagnosticSeverity,
    DidChangeTextDocumentParams,
    DidOpenTextDocumentParams,
    Position,
    PublishDiagnosticsParams,
    Range,
    TextDocumentSyncKind,
)
from pygls.lsp.server import LanguageServer

from tagtext.errors import MarkupError, UnknownPlaceholderError
from tagtext.facade import TagText

server = LanguageServer("tagtext-lsp", "0.1.0", text_document_sync_kind=TextDocumentSyncKind.Full)

_checker = TagText.builder().strict().build()


def diagnostics_for(source: str, engine: TagText = _checker) -> list[Diagnostic]:
    """Parse source and return the diagnostics for its first error, if any."""
    try:
        engine.parse(source)
    except MarkupError as exc:
        start_line = exc.span.start.line - 1
        start_col = exc.span.start.column - 1
        end_line = exc.span.end.line - 1
        end_col = exc.span.end.column - 1
        # Unknown names may be placeholders bound at runtime
        if isinstance(exc, UnknownPlaceholderError):
            severity = DiagnosticSeverity.Warning
        else:
            severity = DiagnosticSeverity.Error
        return [
            Diagnostic(
                range=Range(
                    start=Position(line=start_line, character=start_col),
                    end=Position(line=end_line, character=end_col),
                ),
                message=exc.message,
                severity=severity,
                source="tagtext",
            )
        ]
    return []


def _validate(ls: LanguageServer, uri: str) -> None:
    """Parse the document strictly and publish diagnostics."""
    doc = ls.workspace.get_text_document(uri)
    ls.text_document_publish_diagnostics(
        PublishDiagnosticsParams(uri=uri, diagnostics=diagnostics_for(doc.source))
    )


@server.feature(TEXT_DOCUMENT_DID_OPEN)
def did_open(ls: LanguageServer, params: DidOpenTextDocumentParams) -> None:
    _validate(ls, params.text_document.uri)


@server.feature(TEXT_DOCUMENT_DID_CHANGE)
def did_change(ls: LanguageServer, params: DidChangeTextDocumentParams) -> None:
    _validate(ls, params.text_document.uri)


def main() -> None:
    server.start_io()
