"""Token types, data structures, and character classification helpers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


class TokenType(Enum):
    TEXT = auto()  # literal run, escapes resolved
    TAG_OPEN = auto()  # <name>, <name:arg>, <name/>, {0} in positional mode
    TAG_CLOSE = auto()  # </name>
    EOF = auto()


@dataclass(frozen=True, slots=True)
class Position:
    """Source position, 1-based line and column, 0-based character offset."""

    line: int
    column: int
    offset: int


@dataclass(frozen=True, slots=True)
class Span:
    """Source range from start to end position."""

    start: Position
    end: Position


@dataclass(frozen=True, slots=True)
class Token:
    """A single lexer token with resolved value and original source text.

    For tag tokens ``value`` is the tag name and ``args`` the decoded
    argument list. ``raw`` is always the exact source slice, which lets the
    parser fall back to literal text.
    """

    type: TokenType
    value: str
    raw: str
    span: Span
    args: tuple[str, ...] = ()
    self_closing: bool = False


# Tag name special characters: # ! ? . _ -
_NAME_SPECIAL = frozenset("#!?._-")

# Characters an unquoted argument may escape with a backslash
ARG_ESCAPABLE = frozenset(":<>\\'\"/")

QUOTES = frozenset("'\"")


def is_name_char(ch: str) -> bool:
    """Return True if ch may appear in a tag name."""
    return ch.isalpha() or ch.isdigit() or ch in _NAME_SPECIAL


def is_ws(ch: str) -> bool:
    """Return True for whitespace that is insignificant inside tag headers."""
    return ch in " \t\r\n"
