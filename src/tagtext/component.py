"""Styled text tree: the component model the parser builds and the serializer walks."""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from enum import Enum


@dataclass(frozen=True, slots=True)
class TextColor:
    """A 24-bit RGB colour."""

    value: int

    def __post_init__(self) -> None:
        if not 0 <= self.value <= 0xFFFFFF:
            raise ValueError(f"colour out of range: {self.value:#x}")

    @classmethod
    def parse(cls, text: str) -> TextColor | None:
        """Parse ``#rrggbb`` or a named colour; return None if unrecognised."""
        text = text.strip().lower()
        if text in NAMED_COLORS:
            return NAMED_COLORS[text]
        if len(text) == 7 and text[0] == "#":
            try:
                return cls(int(text[1:], 16))
            except ValueError:
                return None
        return None

    def as_hex_string(self) -> str:
        return f"#{self.value:06x}"

    def named(self) -> str | None:
        """Return the standard colour name for this value, if it has one."""
        return _NAMES_BY_VALUE.get(self.value)

    def interpolate(self, other: TextColor, t: float) -> TextColor:
        r1, g1, b1 = self.value >> 16, (self.value >> 8) & 0xFF, self.value & 0xFF
        r2, g2, b2 = other.value >> 16, (other.value >> 8) & 0xFF, other.value & 0xFF
        r = round(r1 + (r2 - r1) * t)
        g = round(g1 + (g2 - g1) * t)
        b = round(b1 + (b2 - b1) * t)
        return TextColor((r << 16) | (g << 8) | b)


NAMED_COLORS: dict[str, TextColor] = {
    "black": TextColor(0x000000),
    "dark_blue": TextColor(0x0000AA),
    "dark_green": TextColor(0x00AA00),
    "dark_aqua": TextColor(0x00AAAA),
    "dark_red": TextColor(0xAA0000),
    "dark_purple": TextColor(0xAA00AA),
    "gold": TextColor(0xFFAA00),
    "gray": TextColor(0xAAAAAA),
    "dark_gray": TextColor(0x555555),
    "blue": TextColor(0x5555FF),
    "green": TextColor(0x55FF55),
    "aqua": TextColor(0x55FFFF),
    "red": TextColor(0xFF5555),
    "light_purple": TextColor(0xFF55FF),
    "yellow": TextColor(0xFFFF55),
    "white": TextColor(0xFFFFFF),
}

# Alternate spellings accepted on input only
NAMED_COLORS["grey"] = NAMED_COLORS["gray"]
NAMED_COLORS["dark_grey"] = NAMED_COLORS["dark_gray"]

_NAMES_BY_VALUE: dict[int, str] = {}
for _name, _color in NAMED_COLORS.items():
    _NAMES_BY_VALUE.setdefault(_color.value, _name)


class ClickAction(Enum):
    OPEN_URL = "open_url"
    OPEN_FILE = "open_file"
    RUN_COMMAND = "run_command"
    SUGGEST_COMMAND = "suggest_command"
    CHANGE_PAGE = "change_page"
    COPY_TO_CLIPBOARD = "copy_to_clipboard"


class HoverAction(Enum):
    SHOW_TEXT = "show_text"


@dataclass(frozen=True, slots=True)
class ClickEvent:
    action: ClickAction
    value: str


@dataclass(frozen=True, slots=True)
class HoverEvent:
    action: HoverAction
    value: Component


@dataclass(frozen=True, slots=True)
class Style:
    """Style of a component. ``None`` means the aspect is not set."""

    color: TextColor | None = None
    bold: bool | None = None
    italic: bool | None = None
    underlined: bool | None = None
    strikethrough: bool | None = None
    obfuscated: bool | None = None
    font: str | None = None
    insertion: str | None = None
    click_event: ClickEvent | None = None
    hover_event: HoverEvent | None = None

    def is_empty(self) -> bool:
        return not self.set_fields()

    def set_fields(self) -> tuple[str, ...]:
        """Names of the aspects that are set, in declaration order."""
        return tuple(f.name for f in fields(self) if getattr(self, f.name) is not None)

    def merge(self, other: Style) -> Style:
        """Return a style with every aspect set in ``other`` overriding this one."""
        changes = {name: getattr(other, name) for name in other.set_fields()}
        return replace(self, **changes) if changes else self


EMPTY_STYLE = Style()


@dataclass(frozen=True, slots=True)
class Component:
    """A node of styled text: its own text, its style, and child nodes."""

    text: str = ""
    style: Style = EMPTY_STYLE
    children: tuple[Component, ...] = field(default=())

    @property
    def is_plain(self) -> bool:
        """True for an unstyled leaf carrying only text."""
        return not self.children and self.style.is_empty()

    def append_child(self, child: Component) -> Component:
        return replace(self, children=(*self.children, child))

    def with_style(self, style: Style) -> Component:
        return replace(self, style=self.style.merge(style))


def leaf(text: str) -> Component:
    """Build a plain text leaf."""
    return Component(text)


class ComponentBuilder:
    """Mutable accumulator for one node; coalesces adjacent plain text leaves."""

    def __init__(self, style: Style = EMPTY_STYLE) -> None:
        self._style = style
        self._children: list[Component] = []

    def with_style(self, style: Style) -> ComponentBuilder:
        self._style = self._style.merge(style)
        return self

    def append_child(self, child: Component) -> ComponentBuilder:
        if not child.text and child.style.is_empty():
            # Unstyled wrappers (e.g. a spliced-in root) contribute only their children
            return self.extend(child.children)
        if child.is_plain:
            if self._children and self._children[-1].is_plain:
                self._children[-1] = Component(self._children[-1].text + child.text)
                return self
        self._children.append(child)
        return self

    def append_text(self, text: str) -> ComponentBuilder:
        return self.append_child(Component(text))

    def extend(self, children: tuple[Component, ...] | list[Component]) -> ComponentBuilder:
        for child in children:
            self.append_child(child)
        return self

    @property
    def children(self) -> tuple[Component, ...]:
        return tuple(self._children)

    def build(self) -> Component:
        return Component("", self._style, tuple(self._children))
