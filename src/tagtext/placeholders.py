"""Placeholder table: named and positional substitution values."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass

from tagtext.component import Component


@dataclass(frozen=True, slots=True)
class Literal:
    """Replacement text, re-tokenized as markup where it is substituted."""

    text: str


@dataclass(frozen=True, slots=True)
class Fragment:
    """A pre-built component, spliced in as-is and never re-parsed."""

    component: Component


Replacement = Literal | Fragment


@dataclass(frozen=True, slots=True)
class Template:
    """A key bound to a string (parsed) or a component (inserted verbatim)."""

    key: str
    value: str | Component

    def replacement(self) -> Replacement:
        if isinstance(self.value, Component):
            return Fragment(self.value)
        return Literal(self.value)


class PlaceholderTable:
    """Key to Replacement bindings for one parse call.

    Keys are case-sensitive. Positional tables use the keys "0", "1", ...
    """

    __slots__ = ("_bindings", "_positional")

    def __init__(self, bindings: Mapping[str, Replacement] | None = None, *, positional: bool = False) -> None:
        self._bindings: dict[str, Replacement] = dict(bindings or {})
        self._positional = positional

    @classmethod
    def of_strings(cls, mapping: Mapping[str, str]) -> PlaceholderTable:
        for key, value in mapping.items():
            if not isinstance(value, str):
                raise TypeError(f"placeholder '{key}' must be a str, got {type(value).__name__}")
        return cls({key: Literal(value) for key, value in mapping.items()})

    @classmethod
    def of_pairs(cls, *pairs: str) -> PlaceholderTable:
        """Bind flat key/value pairs: ``of_pairs("name", "Alex", "rank", "admin")``."""
        if len(pairs) % 2:
            raise ValueError("placeholder pairs must come as key, value")
        return cls.of_strings(dict(zip(pairs[::2], pairs[1::2], strict=True)))

    @classmethod
    def of_objects(cls, mapping: Mapping[str, object]) -> PlaceholderTable:
        """Bind arbitrary values; components are inserted, anything else is stringified."""
        return cls({key: _replacement_for(value) for key, value in mapping.items()})

    @classmethod
    def of_templates(cls, templates: Iterable[Template]) -> PlaceholderTable:
        return cls({t.key: t.replacement() for t in templates})

    @classmethod
    def positional(cls, values: Sequence[object]) -> PlaceholderTable:
        return cls({str(i): _replacement_for(v) for i, v in enumerate(values)}, positional=True)

    @classmethod
    def coerce(cls, placeholders: object) -> PlaceholderTable:
        """Build a table from whatever a caller passed to ``parse``."""
        if placeholders is None:
            return EMPTY_TABLE
        if isinstance(placeholders, PlaceholderTable):
            return placeholders
        if isinstance(placeholders, Mapping):
            return cls.of_objects(placeholders)
        if isinstance(placeholders, (str, bytes)):
            raise TypeError("placeholders must be a table, mapping, or sequence, not a string")
        if isinstance(placeholders, Sequence):
            if placeholders and all(isinstance(p, Template) for p in placeholders):
                return cls.of_templates(placeholders)
            return cls.positional(placeholders)
        raise TypeError(f"unsupported placeholders type: {type(placeholders).__name__}")

    def resolve(self, key: str) -> Replacement | None:
        return self._bindings.get(key)

    @property
    def is_positional(self) -> bool:
        return self._positional

    def __len__(self) -> int:
        return len(self._bindings)

    def __contains__(self, key: object) -> bool:
        return key in self._bindings

    def __repr__(self) -> str:
        return f"PlaceholderTable({self._bindings!r})"


def _replacement_for(value: object) -> Replacement:
    if isinstance(value, (Literal, Fragment)):
        return value
    if isinstance(value, Component):
        return Fragment(value)
    return Literal(str(value))


EMPTY_TABLE = PlaceholderTable()
