"""TagText facade: one immutable parse/serialize instance per configuration."""

from __future__ import annotations

from dataclasses import replace

from tagtext.component import Component
from tagtext.config import Config, PlaceholderSyntax
from tagtext.errors import ConfigurationError
from tagtext.escape import escape_tokens, strip_tokens
from tagtext.markdown import MarkdownFlavor, preprocess
from tagtext.parser import Parser
from tagtext.placeholders import PlaceholderTable
from tagtext.registry import TransformationRegistry, standard_registry
from tagtext.serializer import Serializer
from tagtext.transformations import STANDARD_TYPES, TransformationType


class TagText:
    """Parses tag markup into components and serializes components back.

    Instances are immutable: the configuration is frozen and the registry
    is frozen on construction, so one instance can serve any number of
    threads.
    """

    __slots__ = ("_config", "_registry", "_serializer")

    def __init__(
        self,
        config: Config | None = None,
        registry: TransformationRegistry | None = None,
    ) -> None:
        if registry is None:
            registry = standard_registry()
        elif not registry.frozen:
            # Never freeze a registry the caller may still be configuring
            registry = registry.copy()
        self._config = config or Config()
        self._registry = registry.freeze()
        self._serializer = Serializer(
            self._registry,
            escape=self.escape_tokens,
            strict=self._config.strict,
        )

    @classmethod
    def builder(cls) -> TagTextBuilder:
        return TagTextBuilder()

    @classmethod
    def with_transformations(cls, *types: TransformationType) -> TagText:
        """Instance where only ``types`` are active; other standard tags stay literal."""
        return cls.builder().remove_default_transformations().transformations(*types).build()

    @classmethod
    def with_markdown(cls, flavor: MarkdownFlavor = MarkdownFlavor.GITHUB) -> TagText:
        return cls.builder().markdown(flavor).build()

    def to_builder(self) -> TagTextBuilder:
        return TagTextBuilder(self._config, self._registry.copy())

    @property
    def config(self) -> Config:
        return self._config

    @property
    def registry(self) -> TransformationRegistry:
        return self._registry

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def parse(self, source: str, placeholders: object = None) -> Component:
        """Parse markup into a component tree.

        ``placeholders`` may be a PlaceholderTable, a mapping of key to str,
        Component or any object, a list of Templates, or (for positional
        syntax) a plain sequence of values.
        """
        table = PlaceholderTable.coerce(placeholders)
        return Parser(source, self._config, self._registry, table).parse()

    def serialize(self, component: Component) -> str:
        return self._serializer.serialize(component)

    def escape_tokens(self, text: str) -> str:
        return escape_tokens(text, self._config.escaped_chars)

    def strip_tokens(self, text: str) -> str:
        if self._config.markdown:
            text = preprocess(text, self._config.markdown_flavor, positional=self._config.positional)
        return strip_tokens(text, self._config.escaped_chars, positional=self._config.positional)

    def __repr__(self) -> str:
        names = ", ".join(t.name for t in self._registry.active_types())
        return f"TagText({self._config!r}, active=[{names}])"


class TagTextBuilder:
    """Configures a TagText. Registration is only possible here, before build()."""

    def __init__(
        self,
        config: Config | None = None,
        registry: TransformationRegistry | None = None,
    ) -> None:
        self._config = config or Config()
        self._registry = registry if registry is not None else standard_registry()

    def markdown(self, flavor: MarkdownFlavor | None = None) -> TagTextBuilder:
        self._config = replace(self._config, markdown=True)
        if flavor is not None:
            self.markdown_flavor(flavor)
        return self

    def markdown_flavor(self, flavor: MarkdownFlavor) -> TagTextBuilder:
        self._config = replace(self._config, markdown_flavor=flavor)
        return self

    def strict(self, flag: bool = True) -> TagTextBuilder:
        self._config = replace(self._config, strict=flag)
        return self

    def unresolved_as_text(self, flag: bool = True) -> TagTextBuilder:
        self._config = replace(self._config, unresolved_as_text=flag)
        return self

    def placeholder_syntax(self, syntax: PlaceholderSyntax) -> TagTextBuilder:
        self._config = replace(self._config, placeholder_syntax=syntax)
        return self

    def max_depth(self, depth: int) -> TagTextBuilder:
        try:
            self._config = replace(self._config, max_depth=depth)
        except ValueError as exc:
            raise ConfigurationError(str(exc)) from None
        return self

    def remove_default_transformations(self) -> TagTextBuilder:
        """Deactivate the standard tags; they are still recognised and kept as text."""
        for tag_type in STANDARD_TYPES:
            self._registry.deactivate(tag_type)
        return self

    def transformation(self, tag_type: TransformationType) -> TagTextBuilder:
        self._registry.activate(tag_type)
        return self

    def transformations(self, *types: TransformationType) -> TagTextBuilder:
        for tag_type in types:
            self.transformation(tag_type)
        return self

    def build(self) -> TagText:
        return TagText(self._config, self._registry.copy())
