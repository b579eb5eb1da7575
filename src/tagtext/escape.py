"""Escaping and stripping of tag markup without building a tree."""

from __future__ import annotations

from tagtext.lexer import tokenize
from tagtext.tokens import TokenType


def escape_tokens(text: str, extra: str = "") -> str:
    """Escape every tag opener so the text parses back as itself.

    A backslash is inserted before each '<' and '\\', and before any
    character in ``extra`` (markdown markers, or '{' for positional markers).
    """
    special = "<\\" + extra
    return "".join(f"\\{ch}" if ch in special else ch for ch in text)


def strip_tokens(text: str, extra: str = "", *, positional: bool = False) -> str:
    """Remove every tag, keeping only text.

    Text is re-escaped, so escaped openers survive as escapes and stray
    literal '<' cannot pair up with later text into a tag. This makes
    stripping idempotent.
    """
    tokens = tokenize(text, positional=positional)
    return "".join(
        escape_tokens(tok.value, extra) for tok in tokens if tok.type == TokenType.TEXT
    )
