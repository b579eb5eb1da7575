"""Command-line interface for tagtext."""

from __future__ import annotations

import argparse
import sys
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from tagtext.config import PlaceholderSyntax
from tagtext.errors import ConfigurationError, MarkupError
from tagtext.facade import TagText
from tagtext.markdown import MarkdownFlavor
from tagtext.placeholders import PlaceholderTable
from tagtext.registry import standard_registry

CONFIG_FILENAME = "tagtext.toml"
FORMATS = ("markup", "plain", "json")


@dataclass(frozen=True, slots=True)
class CliOptions:
    """Parsed CLI options."""

    input_file: Path | None
    output_file: Path | None
    placeholders: dict[str, str]
    markdown: bool
    flavor: MarkdownFlavor
    strict: bool
    unresolved_as_text: bool
    positional: bool
    max_depth: int | None
    tags: list[str] | None
    mode: str
    output_format: str
    debug: bool


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser (separate function for testability)."""
    p = argparse.ArgumentParser(
        prog="tagtext",
        description="Parse, strip, escape, or normalise tag markup",
    )
    p.add_argument("input", nargs="?", default="-", help="Input file (default: stdin)")
    p.add_argument("-o", "--output", help="Output file (default: stdout)")
    p.add_argument(
        "-p",
        "--placeholder",
        action="append",
        default=[],
        metavar="NAME=VALUE",
        help="Bind a placeholder (repeatable)",
    )
    p.add_argument(
        "--markdown",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Rewrite markdown emphasis into tags before parsing",
    )
    p.add_argument(
        "--flavor",
        choices=[f.value for f in MarkdownFlavor],
        default=None,
        help="Markdown flavor (default: github)",
    )
    p.add_argument(
        "--strict",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Fail on unclosed or mismatched tags",
    )
    p.add_argument(
        "--unresolved-as-text",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Keep unknown tags as literal text instead of failing",
    )
    p.add_argument(
        "--positional",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Use {0}-style positional placeholder markers",
    )
    p.add_argument("--max-depth", type=int, default=None, metavar="N", help="Nesting limit")
    p.add_argument(
        "--tags",
        default=None,
        metavar="NAME,...",
        help="Comma-separated tags to enable (default: all standard tags)",
    )
    p.add_argument(
        "--config",
        metavar="FILE",
        help=f"Config file (default: auto-discover {CONFIG_FILENAME})",
    )
    mode = p.add_mutually_exclusive_group()
    mode.add_argument("--strip", action="store_true", help="Remove all tags, keep text")
    mode.add_argument("--escape", action="store_true", help="Escape all tags")
    p.add_argument(
        "--format",
        choices=FORMATS,
        default=None,
        help="Output format when parsing (default: markup)",
    )
    p.add_argument("--debug", action="store_true", help="Dump the component tree to stderr")
    return p


def parse_placeholder_arg(s: str) -> tuple[str, str]:
    """Parse a NAME=VALUE string into (name, value)."""
    if "=" not in s:
        raise argparse.ArgumentTypeError(f"invalid placeholder format (expected NAME=VALUE): {s}")
    name, _, value = s.partition("=")
    return name, value


def load_config(config_path: Path | None, input_dir: Path) -> dict[str, Any]:
    """Load a TOML config file, returning an empty dict on missing/absent file."""
    path = config_path if config_path is not None else input_dir / CONFIG_FILENAME

    if not path.is_file():
        return {}

    with open(path, "rb") as f:
        return tomllib.load(f)


def _cfg_bool(section: dict[str, Any], key: str, cli_value: bool | None) -> bool:
    if cli_value is not None:
        return cli_value
    value = section.get(key, False)
    if not isinstance(value, bool):
        raise argparse.ArgumentTypeError(f"config: parser.{key} must be true or false")
    return value


def resolve_options(args: argparse.Namespace) -> CliOptions:
    """Merge config file and CLI args into CliOptions.

    Precedence: config file < CLI flags.
    """
    input_file = None if args.input == "-" else Path(args.input)
    input_dir = input_file.parent if input_file is not None else Path(".")
    if not input_dir.parts:
        input_dir = Path(".")

    config_path = Path(args.config) if args.config else None
    config = load_config(config_path, input_dir)

    parser_cfg = config.get("parser")
    if not isinstance(parser_cfg, dict):
        parser_cfg = {}

    # Placeholders: config < CLI
    placeholders: dict[str, str] = {}
    cfg_placeholders = config.get("placeholders")
    if isinstance(cfg_placeholders, dict):
        for k, v in cfg_placeholders.items():
            placeholders[str(k)] = str(v)
    for raw in args.placeholder:
        name, value = parse_placeholder_arg(raw)
        placeholders[name] = value

    flavor_name = args.flavor or parser_cfg.get("flavor", MarkdownFlavor.GITHUB.value)
    try:
        flavor = MarkdownFlavor(str(flavor_name).lower())
    except ValueError:
        raise argparse.ArgumentTypeError(f"unknown markdown flavor: {flavor_name}") from None

    max_depth = args.max_depth
    if max_depth is None:
        cfg_depth = parser_cfg.get("max_depth")
        if isinstance(cfg_depth, int) and not isinstance(cfg_depth, bool):
            max_depth = cfg_depth

    # Tags: config < CLI
    tags: list[str] | None = None
    cfg_tags = parser_cfg.get("tags")
    if isinstance(cfg_tags, list):
        tags = [str(t) for t in cfg_tags]
    if args.tags is not None:
        tags = [t.strip() for t in args.tags.split(",") if t.strip()]

    if args.strip:
        mode = "strip"
    elif args.escape:
        mode = "escape"
    else:
        mode = "parse"

    return CliOptions(
        input_file=input_file,
        output_file=Path(args.output) if args.output else None,
        placeholders=placeholders,
        markdown=_cfg_bool(parser_cfg, "markdown", args.markdown),
        flavor=flavor,
        strict=_cfg_bool(parser_cfg, "strict", args.strict),
        unresolved_as_text=_cfg_bool(parser_cfg, "unresolved_as_text", args.unresolved_as_text),
        positional=_cfg_bool(parser_cfg, "positional", args.positional),
        max_depth=max_depth,
        tags=tags,
        mode=mode,
        output_format=args.format or "markup",
        debug=args.debug,
    )


def build_engine(options: CliOptions) -> TagText:
    """Build the TagText instance described by the options."""
    builder = TagText.builder()
    if options.markdown:
        builder.markdown(options.flavor)
    builder.strict(options.strict).unresolved_as_text(options.unresolved_as_text)
    if options.positional:
        builder.placeholder_syntax(PlaceholderSyntax.POSITIONAL)
    if options.max_depth is not None:
        builder.max_depth(options.max_depth)
    if options.tags is not None:
        known = standard_registry()
        builder.remove_default_transformations()
        for name in options.tags:
            tag_type = known.lookup(name)
            if tag_type is None:
                raise ConfigurationError(f"unknown tag: {name}")
            builder.transformation(tag_type)
    return builder.build()


def process(options: CliOptions, source: str) -> str:
    """Run the selected mode over source text and return the output."""
    from tagtext.debug import dump_tree
    from tagtext.render import render_json, render_plain

    engine = build_engine(options)

    if options.mode == "strip":
        return engine.strip_tokens(source)
    if options.mode == "escape":
        return engine.escape_tokens(source)

    tree = engine.parse(source, PlaceholderTable.of_strings(options.placeholders))

    if options.debug:
        dump_tree(tree, file=sys.stderr)

    if options.output_format == "plain":
        return render_plain(tree)
    if options.output_format == "json":
        return render_json(tree) + "\n"
    return engine.serialize(tree)


def _read_input(options: CliOptions) -> str:
    if options.input_file is None:
        return sys.stdin.read()
    return options.input_file.read_text(encoding="utf-8")


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns exit code (0/1/2). Does not call sys.exit()."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        options = resolve_options(args)
    except (argparse.ArgumentTypeError, tomllib.TOMLDecodeError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    try:
        source = _read_input(options)
        output = process(options, source)
    except MarkupError as exc:
        filename = str(options.input_file) if options.input_file else "<stdin>"
        print(exc.format(filename), file=sys.stderr)
        return 1
    except (ConfigurationError, OSError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    if options.output_file:
        options.output_file.write_text(output, encoding="utf-8")
    else:
        sys.stdout.write(output)

    return 0

