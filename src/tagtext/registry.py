"""Transformation registry: tag name resolution and the active tag set."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from tagtext.errors import ConfigurationError
from tagtext.transformations import STANDARD_TYPES, TransformationType

logger = logging.getLogger(__name__)


class TransformationRegistry:
    """Maps tag names to transformation types.

    Names are matched case-insensitively and exactly. Registering a name
    twice keeps the later type. A type may be registered but inactive: the
    parser then recognises its tags and leaves them as literal text.

    Once frozen the registry is read-only and safe to share between threads.
    """

    def __init__(
        self,
        types: Iterable[TransformationType] = (),
        active: Iterable[TransformationType] | None = None,
    ) -> None:
        self._by_name: dict[str, TransformationType] = {}
        self._types: list[TransformationType] = []
        self._active: set[TransformationType] = set()
        self._frozen = False
        active_set = None if active is None else set(active)
        for tag_type in types:
            self.register(tag_type, active=active_set is None or tag_type in active_set)

    def register(self, tag_type: TransformationType, active: bool = True) -> None:
        self._check_mutable()
        for name in tag_type.names:
            key = name.lower()
            previous = self._by_name.get(key)
            if previous is not None and previous is not tag_type:
                logger.warning(
                    "tag name '%s' of '%s' overwrites existing type '%s'",
                    key,
                    tag_type.name,
                    previous.name,
                )
            self._by_name[key] = tag_type
        if tag_type not in self._types:
            self._types.append(tag_type)
        if active:
            self._active.add(tag_type)
        else:
            self._active.discard(tag_type)

    def activate(self, tag_type: TransformationType) -> None:
        self._check_mutable()
        if tag_type not in self._types:
            self.register(tag_type)
        self._active.add(tag_type)

    def deactivate(self, tag_type: TransformationType) -> None:
        self._check_mutable()
        self._active.discard(tag_type)

    def lookup(self, name: str) -> TransformationType | None:
        """Resolve a tag name to its type, or None if no type claims it."""
        key = name.lower()
        tag_type = self._by_name.get(key)
        if tag_type is not None:
            return tag_type
        # Dynamic names such as <#ff0000>; the latest registration wins
        for candidate in reversed(self._types):
            if candidate.accepts is not None and candidate.accepts(key):
                return candidate
        return None

    def is_active(self, tag_type: TransformationType) -> bool:
        return tag_type in self._active

    def types(self) -> tuple[TransformationType, ...]:
        """Registered types still reachable by name, in registration order."""
        return tuple(t for t in self._types if self._owns(t))

    def active_types(self) -> tuple[TransformationType, ...]:
        return tuple(t for t in self.types() if t in self._active)

    def freeze(self) -> TransformationRegistry:
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def copy(self) -> TransformationRegistry:
        """Return an unfrozen copy with the same types and active set."""
        clone = TransformationRegistry()
        clone._by_name = dict(self._by_name)
        clone._types = list(self._types)
        clone._active = set(self._active)
        return clone

    def _owns(self, tag_type: TransformationType) -> bool:
        # A type whose every name was taken over by a later registration is gone
        return any(self._by_name.get(n.lower()) is tag_type for n in tag_type.names) or (
            tag_type.accepts is not None
        )

    def _check_mutable(self) -> None:
        if self._frozen:
            raise ConfigurationError("registry is frozen; tags can only be registered before build")


def standard_registry(active: Iterable[TransformationType] | None = None) -> TransformationRegistry:
    """Registry with the full standard vocabulary, all active unless ``active`` narrows it."""
    return TransformationRegistry(STANDARD_TYPES, active)
