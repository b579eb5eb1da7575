"""Error types with formatted source context."""

from __future__ import annotations

from tagtext.tokens import Position, Span


class MarkupError(Exception):
    """Raised on the first markup error, with span and source context.

    ``span`` and ``source`` always refer to the text handed to ``parse``.
    An error found inside substituted placeholder text or a nested tag
    argument is relocated onto the tag that introduced that text, and the
    inner position is appended to the message.
    """

    def __init__(self, message: str, span: Span, source: str) -> None:
        self.message = message
        self.span = span
        self.source = source
        self.inner: Position | None = None
        super().__init__(self.format())

    @property
    def offset(self) -> int:
        """Character (code point) offset of the offending token in ``source``."""
        return self.span.start.offset

    @property
    def byte_offset(self) -> int:
        """UTF-8 byte offset of the offending token in ``source``."""
        return len(self.source[: self.offset].encode("utf-8"))

    def relocate(self, span: Span, source: str, within: str) -> MarkupError:
        """Point the error at ``span`` in an enclosing source text."""
        if self.inner is None:
            self.inner = self.span.start
            self.message = (
                f"{self.message} (at {self.inner.line}:{self.inner.column} of {within})"
            )
        self.span = span
        self.source = source
        self.args = (self.format(),)
        return self

    def format(self, filename: str = "input") -> str:
        lines = self.source.splitlines(keepends=True)
        line_idx = self.span.start.line - 1
        col = self.span.start.column

        if 0 <= line_idx < len(lines):
            source_line = lines[line_idx].rstrip("\n").rstrip("\r")
        else:
            source_line = ""

        # Underline the full span when on one line, otherwise to end of line
        if self.span.end.line == self.span.start.line:
            underline_len = max(1, self.span.end.column - col)
        else:
            underline_len = max(1, len(source_line) - col + 1)

        pad = " " * (col - 1)
        carets = "^" * underline_len

        line_num = str(self.span.start.line)
        gutter_width = len(line_num) + 1

        blank_gutter = " " * gutter_width + "|"
        line_gutter = f"{line_num:>{gutter_width - 1}} |"

        return (
            f"error: {self.message}\n"
            f"{' ' * gutter_width}--> {filename}:{self.span.start.line}:{col}\n"
            f"{blank_gutter}\n"
            f"{line_gutter} {source_line}\n"
            f"{blank_gutter} {pad}{carets}"
        )


class UnknownPlaceholderError(MarkupError):
    """A ``<name>`` resolved to neither a placeholder nor a registered tag."""

    def __init__(self, name: str, span: Span, source: str) -> None:
        self.name = name
        super().__init__(f"unknown placeholder or tag '<{name}>'", span, source)


class UnclosedTagError(MarkupError):
    """A tag was still open at end of input (strict mode only)."""

    def __init__(self, name: str, span: Span, source: str) -> None:
        self.name = name
        super().__init__(f"unclosed tag '<{name}>'", span, source)


class MismatchedCloseTagError(MarkupError):
    """A close tag did not match the innermost open tag (strict mode only)."""

    def __init__(self, name: str, expected: str | None, span: Span, source: str) -> None:
        self.name = name
        self.expected = expected
        if expected is None:
            message = f"close tag '</{name}>' has no matching open tag"
        else:
            message = f"close tag '</{name}>' does not match open tag '<{expected}>'"
        super().__init__(message, span, source)


class InvalidTagArgumentError(MarkupError):
    """A registered tag rejected its arguments."""

    def __init__(self, tag_name: str, reason: str, span: Span, source: str) -> None:
        self.tag_name = tag_name
        self.reason = reason
        super().__init__(f"invalid arguments for '<{tag_name}>': {reason}", span, source)


class MaxNestingExceededError(MarkupError):
    """Tag nesting or placeholder substitution went deeper than the configured limit."""

    def __init__(self, limit: int, span: Span, source: str) -> None:
        self.limit = limit
        super().__init__(f"maximum nesting depth of {limit} exceeded", span, source)


class TransformationError(ValueError):
    """Raised by a transformation factory when its arguments are unusable.

    Carries no position; the parser wraps it in InvalidTagArgumentError.
    """


class ConfigurationError(Exception):
    """Raised on invalid facade or registry configuration."""


class UnserializableStyleError(ConfigurationError):
    """A style aspect has no active transformation able to serialize it."""

    def __init__(self, fields: tuple[str, ...]) -> None:
        self.fields = fields
        super().__init__(f"no active tag can serialize style field(s): {', '.join(fields)}")
