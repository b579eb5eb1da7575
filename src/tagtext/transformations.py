"""Transformation contract and the standard tag vocabulary.

A tag is described by a TransformationType: its names, a factory that turns
the tag's arguments into a Transformation, and optionally a serializer that
claims one style aspect and produces the canonical tag for it.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

from tagtext.component import (
    NAMED_COLORS,
    ClickAction,
    ClickEvent,
    Component,
    ComponentBuilder,
    HoverAction,
    HoverEvent,
    Style,
    TextColor,
    leaf,
)
from tagtext.errors import TransformationError


@dataclass(frozen=True, slots=True)
class SerializedTag:
    """Canonical tag name and arguments for one style aspect."""

    name: str
    args: tuple[str, ...] = ()


class TagContext(Protocol):
    """What a factory may ask of the parse in progress."""

    def parse(self, markup: str) -> Component: ...


class Transformation(ABC):
    """One parsed tag invocation, ready to wrap its children."""

    @abstractmethod
    def apply(self, children: tuple[Component, ...]) -> Component: ...


class StyleTransformation(Transformation):
    """Wraps children in a node carrying a fixed style."""

    def __init__(self, style: Style) -> None:
        self.style = style

    def apply(self, children: tuple[Component, ...]) -> Component:
        return ComponentBuilder(self.style).extend(children).build()

    def __repr__(self) -> str:
        return f"StyleTransformation({self.style!r})"


Factory = Callable[[str, tuple[str, ...], TagContext], Transformation]
StyleSerializer = Callable[[Style, Callable[[Component], str]], SerializedTag | None]


@dataclass(frozen=True, slots=True, eq=False)
class TransformationType:
    """Registry entry: names, factory, and optional serialization capability."""

    name: str
    factory: Factory
    aliases: tuple[str, ...] = ()
    serializer: StyleSerializer | None = None
    claims: tuple[str, ...] = ()
    leaf: bool = False
    accepts: Callable[[str], bool] | None = None

    @property
    def names(self) -> tuple[str, ...]:
        return (self.name, *self.aliases)

    @property
    def serializable(self) -> bool:
        return self.serializer is not None


def _joined(args: tuple[str, ...], tag: str) -> str:
    if not args:
        raise TransformationError(f"<{tag}> requires an argument")
    return ":".join(args)


# ---------------------------------------------------------------------------
# Colour
# ---------------------------------------------------------------------------

_COLOR_NAMES = ("color", "colour", "c")


def _color_factory(name: str, args: tuple[str, ...], ctx: TagContext) -> Transformation:
    if name.lower() in _COLOR_NAMES:
        if len(args) != 1:
            raise TransformationError("expected exactly one colour argument")
        spec = args[0]
    else:
        spec = name
    color = TextColor.parse(spec)
    if color is None:
        raise TransformationError(f"unknown colour '{spec}'")
    return StyleTransformation(Style(color=color))


def _color_serializer(style: Style, nested: Callable[[Component], str]) -> SerializedTag | None:
    if style.color is None:
        return None
    return SerializedTag(style.color.named() or style.color.as_hex_string())


def _is_hex_color(name: str) -> bool:
    return name.startswith("#") and TextColor.parse(name) is not None


def _color_type() -> TransformationType:
    return TransformationType(
        "color",
        _color_factory,
        aliases=(*_COLOR_NAMES[1:], *NAMED_COLORS),
        serializer=_color_serializer,
        claims=("color",),
        accepts=_is_hex_color,
    )


# ---------------------------------------------------------------------------
# Decorations
# ---------------------------------------------------------------------------


def _decoration_type(field_name: str, *aliases: str) -> TransformationType:
    def factory(name: str, args: tuple[str, ...], ctx: TagContext) -> Transformation:
        negated = name.startswith("!")
        value = not negated
        if args:
            flag = args[0].strip().lower()
            if len(args) > 1 or flag not in ("true", "false"):
                raise TransformationError("expected 'true' or 'false'")
            value = (flag == "true") != negated
        return StyleTransformation(Style(**{field_name: value}))

    def serializer(style: Style, nested: Callable[[Component], str]) -> SerializedTag | None:
        value = getattr(style, field_name)
        if value is None:
            return None
        return SerializedTag(field_name if value else f"!{field_name}")

    negated = tuple(f"!{n}" for n in (field_name, *aliases))
    return TransformationType(
        field_name,
        factory,
        aliases=(*aliases, *negated),
        serializer=serializer,
        claims=(field_name,),
    )


# ---------------------------------------------------------------------------
# Font, insertion, click, hover
# ---------------------------------------------------------------------------


def _font_factory(name: str, args: tuple[str, ...], ctx: TagContext) -> Transformation:
    return StyleTransformation(Style(font=_joined(args, "font")))


def _font_serializer(style: Style, nested: Callable[[Component], str]) -> SerializedTag | None:
    if style.font is None:
        return None
    return SerializedTag("font", (style.font,))


def _insertion_factory(name: str, args: tuple[str, ...], ctx: TagContext) -> Transformation:
    return StyleTransformation(Style(insertion=_joined(args, "insert")))


def _insertion_serializer(style: Style, nested: Callable[[Component], str]) -> SerializedTag | None:
    if style.insertion is None:
        return None
    return SerializedTag("insert", (style.insertion,))


def _click_factory(name: str, args: tuple[str, ...], ctx: TagContext) -> Transformation:
    if len(args) < 2:
        raise TransformationError("expected an action and a value")
    try:
        action = ClickAction(args[0].lower())
    except ValueError:
        raise TransformationError(f"unknown click action '{args[0]}'") from None
    # Values such as URLs may contain ':' and arrive split
    return StyleTransformation(Style(click_event=ClickEvent(action, ":".join(args[1:]))))


def _click_serializer(style: Style, nested: Callable[[Component], str]) -> SerializedTag | None:
    event = style.click_event
    if event is None:
        return None
    return SerializedTag("click", (event.action.value, event.value))


def _hover_factory(name: str, args: tuple[str, ...], ctx: TagContext) -> Transformation:
    if len(args) < 2:
        raise TransformationError("expected an action and a value")
    try:
        action = HoverAction(args[0].lower())
    except ValueError:
        raise TransformationError(f"unknown hover action '{args[0]}'") from None
    value = ctx.parse(":".join(args[1:]))
    return StyleTransformation(Style(hover_event=HoverEvent(action, value)))


def _hover_serializer(style: Style, nested: Callable[[Component], str]) -> SerializedTag | None:
    event = style.hover_event
    if event is None:
        return None
    return SerializedTag("hover", (event.action.value, nested(event.value)))


# ---------------------------------------------------------------------------
# Newline and gradient
# ---------------------------------------------------------------------------


class _TextInsertion(Transformation):
    def __init__(self, text: str) -> None:
        self.text = text

    def apply(self, children: tuple[Component, ...]) -> Component:
        return leaf(self.text)


def _newline_factory(name: str, args: tuple[str, ...], ctx: TagContext) -> Transformation:
    if args:
        raise TransformationError("takes no arguments")
    return _TextInsertion("\n")


class GradientTransformation(Transformation):
    """Colours every character of its plain text along a colour gradient."""

    def __init__(self, colors: list[TextColor]) -> None:
        self.colors = colors

    def apply(self, children: tuple[Component, ...]) -> Component:
        total = sum(_plain_length(c) for c in children)
        index = 0
        out = ComponentBuilder()
        # Pending work: a node to recolour into a builder, or a finished
        # builder to append to its parent
        stack: list[tuple[Component | ComponentBuilder, ComponentBuilder]] = [
            (child, out) for child in reversed(children)
        ]
        while stack:
            node, parent = stack.pop()
            if isinstance(node, ComponentBuilder):
                parent.append_child(node.build())
            elif node.is_plain:
                for ch in node.text:
                    color = self._color_at(index, total)
                    index += 1
                    parent.append_child(Component("", Style(color=color), (leaf(ch),)))
            elif node.style.color is not None:
                index += _plain_length(node)
                parent.append_child(node)
            else:
                builder = ComponentBuilder(node.style)
                stack.append((builder, parent))
                stack.extend((child, builder) for child in reversed(node.children))
                if node.text:
                    stack.append((leaf(node.text), builder))
        return out.build()

    def _color_at(self, index: int, total: int) -> TextColor:
        if total <= 1:
            return self.colors[0]
        position = index / (total - 1) * (len(self.colors) - 1)
        segment = min(int(position), len(self.colors) - 2)
        return self.colors[segment].interpolate(self.colors[segment + 1], position - segment)


def _plain_length(node: Component) -> int:
    total = 0
    stack = [node]
    while stack:
        current = stack.pop()
        total += len(current.text)
        stack.extend(current.children)
    return total


def _gradient_factory(name: str, args: tuple[str, ...], ctx: TagContext) -> Transformation:
    specs = args or ("white", "black")
    colors: list[TextColor] = []
    for spec in specs:
        color = TextColor.parse(spec)
        if color is None:
            raise TransformationError(f"unknown colour '{spec}'")
        colors.append(color)
    if len(colors) < 2:
        raise TransformationError("a gradient needs at least two colours")
    return GradientTransformation(colors)


# ---------------------------------------------------------------------------
# Standard vocabulary
# ---------------------------------------------------------------------------

COLOR = _color_type()
BOLD = _decoration_type("bold", "b")
ITALIC = _decoration_type("italic", "i", "em")
UNDERLINED = _decoration_type("underlined", "u")
STRIKETHROUGH = _decoration_type("strikethrough", "st")
OBFUSCATED = _decoration_type("obfuscated", "obf")
FONT = TransformationType("font", _font_factory, serializer=_font_serializer, claims=("font",))
INSERTION = TransformationType(
    "insert",
    _insertion_factory,
    aliases=("insertion",),
    serializer=_insertion_serializer,
    claims=("insertion",),
)
CLICK = TransformationType(
    "click", _click_factory, serializer=_click_serializer, claims=("click_event",)
)
HOVER = TransformationType(
    "hover", _hover_factory, serializer=_hover_serializer, claims=("hover_event",)
)
NEWLINE = TransformationType("newline", _newline_factory, aliases=("br",), leaf=True)
GRADIENT = TransformationType("gradient", _gradient_factory)

# Registration order is also serialization nesting order
STANDARD_TYPES: tuple[TransformationType, ...] = (
    COLOR,
    BOLD,
    ITALIC,
    UNDERLINED,
    STRIKETHROUGH,
    OBFUSCATED,
    FONT,
    INSERTION,
    CLICK,
    HOVER,
    NEWLINE,
    GRADIENT,
)
