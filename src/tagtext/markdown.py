"""Markdown preprocessing: rewrites a small markdown dialect into tag markup."""

from __future__ import annotations

from enum import Enum

from tagtext.lexer import tokenize
from tagtext.tokens import TokenType


class MarkdownFlavor(Enum):
    GITHUB = "github"
    DISCORD = "discord"

    @property
    def markers(self) -> tuple[tuple[str, str], ...]:
        """(marker, tag name) pairs, longest marker first."""
        return _MARKERS[self]

    @property
    def marker_chars(self) -> str:
        return "".join(sorted({marker[0] for marker, _ in self.markers}))

    @classmethod
    def default(cls) -> MarkdownFlavor:
        return cls.GITHUB


_MARKERS: dict[MarkdownFlavor, tuple[tuple[str, str], ...]] = {
    MarkdownFlavor.GITHUB: (
        ("**", "bold"),
        ("__", "bold"),
        ("~~", "strikethrough"),
        ("*", "italic"),
        ("_", "italic"),
    ),
    MarkdownFlavor.DISCORD: (
        ("**", "bold"),
        ("__", "underlined"),
        ("~~", "strikethrough"),
        ("||", "obfuscated"),
        ("*", "italic"),
        ("_", "italic"),
    ),
}


class _Rewriter:
    """Pairs markers across the text tokens of one input."""

    def __init__(self, flavor: MarkdownFlavor) -> None:
        self._flavor = flavor
        self._chars = flavor.marker_chars
        self._out: list[str] = []
        # (marker, tag, index of the opener in _out)
        self._open: list[tuple[str, str, int]] = []
        # Whether a tag follows the text run being fed
        self._tag_follows = False

    def feed_tag(self, raw: str) -> None:
        self._out.append(raw)

    def feed_text(self, raw: str, tag_follows: bool = False) -> None:
        self._tag_follows = tag_follows
        i = 0
        while i < len(raw):
            ch = raw[i]
            if ch == "\\" and i + 1 < len(raw):
                nxt = raw[i + 1]
                # \* is a literal marker character; other escapes pass through
                self._out.append(nxt if nxt in self._chars else raw[i : i + 2])
                i += 2
                continue
            candidates = [(m, t) for m, t in self._flavor.markers if raw.startswith(m, i)]
            if not candidates:
                self._out.append(ch)
                i += 1
                continue
            i += self._marker(raw, i, candidates)

    def _marker(self, raw: str, i: int, candidates: list[tuple[str, str]]) -> int:
        top = self._open[-1][0] if self._open else None
        for marker, tag in candidates:
            if marker == top:
                after = raw[i + len(marker) : i + len(marker) + 1]
                before = raw[i - 1 : i] if i > 0 else ""
                if (marker[0] == "_" and after.isalnum()) or before.isspace():
                    break
                _, _, index = self._open.pop()
                self._out[index] = f"<{tag}>"
                self._out.append(f"</{tag}>")
                return len(marker)

        marker, tag = candidates[0]
        before = raw[i - 1 : i] if i > 0 else ""
        after = raw[i + len(marker) : i + len(marker) + 1]
        opens = (
            not any(m == marker for m, _, _ in self._open)
            and (after != "" or self._tag_follows)
            and not after.isspace()
            and not (marker[0] == "_" and before.isalnum())
        )
        if opens:
            self._open.append((marker, tag, len(self._out)))
        self._out.append(marker)
        return len(marker)

    def result(self) -> str:
        # Unmatched openers stay as the literal marker text
        return "".join(self._out)


def preprocess(text: str, flavor: MarkdownFlavor = MarkdownFlavor.GITHUB, *, positional: bool = False) -> str:
    """Rewrite markdown emphasis in ``text`` into equivalent tag markup.

    Tags are passed through untouched, so markers inside tag arguments are
    never rewritten.
    """
    rewriter = _Rewriter(flavor)
    tokens = tokenize(text, positional=positional)
    for tok, nxt in zip(tokens, tokens[1:] + [None]):
        if tok.type == TokenType.TEXT:
            tag_follows = nxt is not None and nxt.type in (TokenType.TAG_OPEN, TokenType.TAG_CLOSE)
            rewriter.feed_text(tok.raw, tag_follows)
        elif tok.type != TokenType.EOF:
            rewriter.feed_tag(tok.raw)
    return rewriter.result()
