"""Parser configuration: an immutable value fixed when a facade is built."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from tagtext.markdown import MarkdownFlavor

DEFAULT_MAX_DEPTH = 512


class PlaceholderSyntax(Enum):
    TAG = "tag"  # <name>, resolved before tag dispatch
    POSITIONAL = "positional"  # {0}, {1}, or {} for the next index


@dataclass(frozen=True, slots=True)
class Config:
    """Parse and serialization settings.

    ``strict`` turns unclosed and mismatched tags into errors and makes the
    serializer refuse styles it cannot express. ``unresolved_as_text`` keeps
    unknown ``<name>`` tags as literal text instead of raising.
    """

    markdown: bool = False
    markdown_flavor: MarkdownFlavor = MarkdownFlavor.GITHUB
    placeholder_syntax: PlaceholderSyntax = PlaceholderSyntax.TAG
    strict: bool = False
    unresolved_as_text: bool = False
    max_depth: int = DEFAULT_MAX_DEPTH

    def __post_init__(self) -> None:
        if self.max_depth < 1:
            raise ValueError(f"max_depth must be at least 1, got {self.max_depth}")

    @property
    def positional(self) -> bool:
        return self.placeholder_syntax is PlaceholderSyntax.POSITIONAL

    @property
    def escaped_chars(self) -> str:
        """Characters beyond '<' and '\\' that need escaping under this config."""
        extra = self.markdown_flavor.marker_chars if self.markdown else ""
        if self.positional:
            extra += "{"
        return extra
