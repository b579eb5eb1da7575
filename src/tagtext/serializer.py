"""Serializer: emits canonical tag markup for a component tree."""

from __future__ import annotations

import logging
from collections.abc import Callable

from tagtext.component import Component, Style
from tagtext.errors import UnserializableStyleError
from tagtext.escape import escape_tokens
from tagtext.registry import TransformationRegistry
from tagtext.transformations import SerializedTag

logger = logging.getLogger(__name__)

# Arguments containing any of these are quoted
_QUOTE_TRIGGERS = frozenset(":<>'\"\\/")


class Serializer:
    """Walks a component tree depth-first and writes tag markup.

    Each active transformation type with a serializer claims one style
    aspect. Aspects nobody claims are dropped with a warning, or raise
    UnserializableStyleError when ``strict`` is set.
    """

    def __init__(
        self,
        registry: TransformationRegistry,
        *,
        escape: Callable[[str], str] = escape_tokens,
        strict: bool = False,
    ) -> None:
        self._types = tuple(t for t in registry.active_types() if t.serializable)
        self._escape = escape
        self._strict = strict

    def serialize(self, component: Component) -> str:
        out: list[str] = []
        # Components still to visit, interleaved with pending close tags
        stack: list[Component | str] = [component]
        while stack:
            item = stack.pop()
            if isinstance(item, str):
                out.append(item)
                continue
            tags = self._tags_for(item.style)
            out.extend(_open_tag(tag) for tag in tags)
            if item.text:
                out.append(self._escape(item.text))
            closing = "".join(_close_tag(tag) for tag in reversed(tags))
            if closing:
                stack.append(closing)
            stack.extend(reversed(item.children))
        return "".join(out)

    def _tags_for(self, style: Style) -> list[SerializedTag]:
        if style.is_empty():
            return []
        tags: list[SerializedTag] = []
        claimed: set[str] = set()
        for tag_type in self._types:
            assert tag_type.serializer is not None
            tag = tag_type.serializer(style, self.serialize)
            if tag is not None:
                tags.append(tag)
                claimed.update(tag_type.claims)
        missing = tuple(f for f in style.set_fields() if f not in claimed)
        if missing:
            if self._strict:
                raise UnserializableStyleError(missing)
            logger.warning("dropping style field(s) no active tag can serialize: %s", ", ".join(missing))
        return tags


def _quote(arg: str) -> str:
    if arg and arg == arg.strip() and not any(ch in _QUOTE_TRIGGERS for ch in arg):
        return arg
    escaped = arg.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


def _open_tag(tag: SerializedTag) -> str:
    args = "".join(f":{_quote(a)}" for a in tag.args)
    return f"<{tag.name}{args}>"


def _close_tag(tag: SerializedTag) -> str:
    return f"</{tag.name.lstrip('!')}>"
