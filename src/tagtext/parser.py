"""Tag markup parser: converts a token stream into a component tree."""

from __future__ import annotations

from dataclasses import dataclass, field

from tagtext.component import Component, ComponentBuilder
from tagtext.config import Config
from tagtext.errors import (
    InvalidTagArgumentError,
    MarkupError,
    MaxNestingExceededError,
    MismatchedCloseTagError,
    TransformationError,
    UnclosedTagError,
    UnknownPlaceholderError,
)
from tagtext.lexer import tokenize
from tagtext.markdown import preprocess
from tagtext.placeholders import EMPTY_TABLE, Fragment, PlaceholderTable, Replacement
from tagtext.registry import TransformationRegistry, standard_registry
from tagtext.tokens import Position, Span, Token, TokenType
from tagtext.transformations import Transformation, TransformationType


# Bound on nested argument parses (hover text), which recurse through
# transformation factories. Applies on top of max_depth.
NESTED_PARSE_LIMIT = 32

_START = Position(1, 1, 0)


class _TokenSource:
    """Tokens of one text: the input itself or a substituted placeholder.

    ``origin`` is the span and text of the tag in the parse input that
    introduced a substituted text; errors inside it are reported there.
    """

    __slots__ = ("tokens", "source", "pos", "origin", "label")

    def __init__(
        self,
        tokens: list[Token],
        source: str,
        origin: tuple[Span, str] | None = None,
        label: str = "",
    ) -> None:
        self.tokens = tokens
        self.source = source
        self.pos = 0
        self.origin = origin
        self.label = label

    def next(self) -> Token:
        tok = self.tokens[self.pos]
        if tok.type != TokenType.EOF:
            self.pos += 1
        return tok

    def locate(self, exc: MarkupError) -> MarkupError:
        if self.origin is not None:
            span, source = self.origin
            exc.relocate(span, source, self.label)
        return exc


class _ParseState:
    """State shared by a parse and the nested parses of its tag arguments."""

    __slots__ = ("next_index", "nested_depth")

    def __init__(self) -> None:
        self.next_index = 0
        self.nested_depth = 0


@dataclass
class _Frame:
    """An open tag collecting its children."""

    name: str
    tag_type: TransformationType | None
    transformation: Transformation | None
    token: Token | None
    source: _TokenSource
    builder: ComponentBuilder = field(default_factory=ComponentBuilder)


class _NestedContext:
    """Handed to transformation factories; parses argument markup such as hover text."""

    __slots__ = ("_parser",)

    def __init__(self, parser: Parser) -> None:
        self._parser = parser

    def parse(self, markup: str) -> Component:
        return self._parser.parse_nested(markup)


class Parser:
    """Single-pass tag parser using an explicit frame stack.

    Nesting depth never turns into Python recursion: open tags live on
    ``_frames`` and substituted placeholder text on ``_sources``, both
    bounded by ``config.max_depth``. Markup inside tag arguments is parsed
    by a nested parser sharing ``_state``, at most ``NESTED_PARSE_LIMIT``
    levels deep.
    """

    def __init__(
        self,
        source: str,
        config: Config,
        registry: TransformationRegistry,
        placeholders: PlaceholderTable = EMPTY_TABLE,
        base_depth: int = 0,
        state: _ParseState | None = None,
    ) -> None:
        self._source = source
        self._config = config
        self._registry = registry
        self._placeholders = placeholders
        self._base_depth = base_depth
        self._state = state or _ParseState()
        self._frames: list[_Frame] = []
        self._sources: list[_TokenSource] = []
        self._context = _NestedContext(self)

    @property
    def _top(self) -> _Frame:
        return self._frames[-1]

    def _tokenize(self, text: str) -> list[Token]:
        return tokenize(text, positional=self._config.positional)

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def parse(self) -> Component:
        text = self._source
        if self._config.markdown:
            text = preprocess(text, self._config.markdown_flavor, positional=self._config.positional)

        main = _TokenSource(self._tokenize(text), text)
        root = _Frame("", None, None, None, main)
        self._frames = [root]
        self._sources = [main]

        while self._sources:
            src = self._sources[-1]
            tok = src.next()
            if tok.type == TokenType.EOF:
                self._sources.pop()
            elif tok.type == TokenType.TEXT:
                self._top.builder.append_text(tok.value)
            elif tok.type == TokenType.TAG_OPEN:
                self._open_tag(tok, src)
            else:
                self._close_tag(tok, src)

        self._close_remaining()
        return root.builder.build()

    def parse_nested(self, markup: str) -> Component:
        """Parse markup found inside a tag argument with the same settings.

        Positional ``{}`` markers keep counting from the enclosing parse.
        Errors carry positions in ``markup``; the caller relocates them.
        """
        state = self._state
        limit = min(self._config.max_depth, NESTED_PARSE_LIMIT)
        if state.nested_depth >= limit:
            raise MaxNestingExceededError(limit, Span(_START, _START), markup)
        depth = self._base_depth + len(self._frames)
        state.nested_depth += 1
        try:
            return Parser(
                markup, self._config, self._registry, self._placeholders, depth, state
            ).parse()
        finally:
            state.nested_depth -= 1

    # ------------------------------------------------------------------
    # Open tags and placeholders
    # ------------------------------------------------------------------

    def _open_tag(self, tok: Token, src: _TokenSource) -> None:
        name = tok.value
        key = name
        if not name:
            # Bare {} marker: next positional index
            key = str(self._state.next_index)
            self._state.next_index += 1

        # Placeholders shadow tags of the same name
        replacement = self._placeholders.resolve(key)
        if replacement is not None:
            self._substitute(key, replacement, tok, src)
            return

        tag_type = self._registry.lookup(name) if name else None
        if tag_type is None:
            if self._config.unresolved_as_text:
                self._top.builder.append_text(tok.raw)
                return
            raise src.locate(UnknownPlaceholderError(key, tok.span, src.source))

        if not self._registry.is_active(tag_type):
            self._top.builder.append_text(tok.raw)
            return

        try:
            transformation = tag_type.factory(name, tok.args, self._context)
        except TransformationError as exc:
            error = InvalidTagArgumentError(name, str(exc), tok.span, src.source)
            raise src.locate(error) from None
        except MarkupError as exc:
            # Raised by a nested parse of the tag's argument markup
            src.locate(exc.relocate(tok.span, src.source, f"'<{name}>' argument"))
            raise

        if tok.self_closing or tag_type.leaf:
            self._top.builder.append_child(transformation.apply(()))
            return

        if self._base_depth + len(self._frames) > self._config.max_depth:
            raise src.locate(MaxNestingExceededError(self._config.max_depth, tok.span, src.source))
        self._frames.append(_Frame(name, tag_type, transformation, tok, src))

    def _substitute(self, key: str, replacement: Replacement, tok: Token, src: _TokenSource) -> None:
        if isinstance(replacement, Fragment):
            self._top.builder.append_child(replacement.component)
            return
        if self._base_depth + len(self._sources) >= self._config.max_depth:
            raise src.locate(MaxNestingExceededError(self._config.max_depth, tok.span, src.source))
        origin = src.origin if src.origin is not None else (tok.span, src.source)
        self._sources.append(
            _TokenSource(
                self._tokenize(replacement.text),
                replacement.text,
                origin,
                f"placeholder '<{key}>'",
            )
        )

    # ------------------------------------------------------------------
    # Close tags
    # ------------------------------------------------------------------

    def _close_tag(self, tok: Token, src: _TokenSource) -> None:
        name = tok.value
        tag_type = self._registry.lookup(name)

        if tag_type is not None and not self._registry.is_active(tag_type):
            self._top.builder.append_text(tok.raw)
            return

        if len(self._frames) > 1 and self._matches(self._top, name, tag_type):
            self._pop_frame()
            return

        if tag_type is None and self._config.unresolved_as_text:
            self._top.builder.append_text(tok.raw)
            return

        if self._config.strict:
            expected = self._top.name if len(self._frames) > 1 else None
            raise src.locate(MismatchedCloseTagError(name, expected, tok.span, src.source))
        self._top.builder.append_text(tok.raw)

    @staticmethod
    def _matches(frame: _Frame, name: str, tag_type: TransformationType | None) -> bool:
        if frame.name.lower() == name.lower():
            return True
        return tag_type is not None and tag_type is frame.tag_type

    def _pop_frame(self) -> None:
        frame = self._frames.pop()
        assert frame.transformation is not None
        fragment = frame.transformation.apply(frame.builder.children)
        self._top.builder.append_child(fragment)

    def _close_remaining(self) -> None:
        if len(self._frames) > 1 and self._config.strict:
            # Report the outermost unclosed tag, the earliest in the source
            frame = self._frames[1]
            assert frame.token is not None
            error = UnclosedTagError(frame.name, frame.token.span, frame.source.source)
            raise frame.source.locate(error)
        while len(self._frames) > 1:
            self._pop_frame()


def parse(
    source: str,
    config: Config | None = None,
    registry: TransformationRegistry | None = None,
    placeholders: PlaceholderTable | None = None,
) -> Component:
    """Convenience function: parse markup with the standard tags and default settings."""
    return Parser(
        source,
        config or Config(),
        registry or standard_registry(),
        placeholders or EMPTY_TABLE,
    ).parse()
