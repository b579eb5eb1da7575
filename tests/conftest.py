"""Shared test fixtures and helpers."""

from __future__ import annotations

import pytest

from tagtext.component import Component, Style, leaf
from tagtext.facade import TagText
from tagtext.lexer import tokenize
from tagtext.tokens import Token, TokenType


@pytest.fixture
def lex():
    """Return a helper that tokenizes source and returns tokens (excluding EOF)."""

    def _lex(source: str, positional: bool = False) -> list[Token]:
        tokens = tokenize(source, positional=positional)
        # Strip trailing EOF for convenience
        return [t for t in tokens if t.type != TokenType.EOF]

    return _lex


@pytest.fixture
def tagtext() -> TagText:
    """Default lenient instance with the standard tags."""
    return TagText()


@pytest.fixture
def strict() -> TagText:
    """Strict instance with the standard tags."""
    return TagText.builder().strict().build()


def root(*children: Component) -> Component:
    """Build the root node a parse returns."""
    return Component("", Style(), tuple(children))


def styled(style: Style, *children: Component | str) -> Component:
    """Build a tag fragment; str children become plain leaves."""
    return Component(
        "", style, tuple(leaf(c) if isinstance(c, str) else c for c in children)
    )


def assert_types(tokens: list[Token], expected: list[TokenType]) -> None:
    """Assert that the token types match the expected list."""
    actual = [t.type for t in tokens]
    assert actual == expected, f"Expected {expected}, got {actual}"


def assert_values(tokens: list[Token], expected: list[str]) -> None:
    """Assert that the token values match the expected list."""
    actual = [t.value for t in tokens]
    assert actual == expected, f"Expected {expected}, got {actual}"
