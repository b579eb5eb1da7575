"""tagtext: a bracketed tag markup language for styled text."""

from __future__ import annotations

from tagtext.component import Component, Style
from tagtext.facade import TagText, TagTextBuilder
from tagtext.placeholders import Fragment, Literal, PlaceholderTable, Template

__version__ = "0.1.0"

__all__ = [
    "Component",
    "Fragment",
    "Literal",
    "PlaceholderTable",
    "Style",
    "TagText",
    "TagTextBuilder",
    "Template",
    "escape",
    "parse",
    "serialize",
    "strip",
]

_DEFAULT = TagText()


def parse(source: str, placeholders: object = None) -> Component:
    """Parse markup with the standard tags and default configuration."""
    return _DEFAULT.parse(source, placeholders)


def serialize(component: Component) -> str:
    """Serialize a component tree to canonical markup."""
    return _DEFAULT.serialize(component)


def escape(text: str) -> str:
    """Escape text so it parses back as exactly itself."""
    return _DEFAULT.escape_tokens(text)


def strip(text: str) -> str:
    """Remove all tags, leaving the (escaped) text between them."""
    return _DEFAULT.strip_tokens(text)
