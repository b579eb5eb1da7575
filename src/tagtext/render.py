"""Renderers: plain text and JSON-ready views of a component tree."""

from __future__ import annotations

import json
from typing import Any

from tagtext.component import Component, Style


def render_plain(component: Component) -> str:
    """Concatenate all text in document order, dropping style."""
    parts: list[str] = []
    stack = [component]
    while stack:
        node = stack.pop()
        parts.append(node.text)
        stack.extend(reversed(node.children))
    return "".join(parts)


def render_json(component: Component, *, indent: int | None = 2) -> str:
    """Render a component tree as JSON text."""
    return json.dumps(component_to_dict(component), indent=indent, ensure_ascii=False)


# ---------------------------------------------------------------------------
# Dict conversion
# ---------------------------------------------------------------------------


def component_to_dict(component: Component) -> dict[str, Any]:
    """Convert a component to plain dicts and lists.

    Only set style aspects appear; empty ``children`` and ``text`` are
    omitted.
    """
    result: dict[str, Any] = {}
    if component.text:
        result["text"] = component.text
    result.update(style_to_dict(component.style))
    if component.children:
        result["children"] = [component_to_dict(c) for c in component.children]
    return result


def style_to_dict(style: Style) -> dict[str, Any]:
    result: dict[str, Any] = {}
    if style.color is not None:
        result["color"] = style.color.named() or style.color.as_hex_string()
    for name in ("bold", "italic", "underlined", "strikethrough", "obfuscated"):
        value = getattr(style, name)
        if value is not None:
            result[name] = value
    if style.font is not None:
        result["font"] = style.font
    if style.insertion is not None:
        result["insertion"] = style.insertion
    if style.click_event is not None:
        result["click_event"] = {
            "action": style.click_event.action.value,
            "value": style.click_event.value,
        }
    if style.hover_event is not None:
        result["hover_event"] = {
            "action": style.hover_event.action.value,
            "value": component_to_dict(style.hover_event.value),
        }
    return result
