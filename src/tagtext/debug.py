"""--debug component tree dump to stderr."""

from __future__ import annotations

import sys
from typing import TextIO

from tagtext.component import Component
from tagtext.render import style_to_dict


def dump_tree(component: Component, *, file: TextIO = sys.stderr) -> None:
    """Print a human-readable component tree to *file*."""
    stack: list[tuple[Component, int]] = [(component, 0)]
    while stack:
        node, depth = stack.pop()
        _dump_node(node, depth, file)
        stack.extend((child, depth + 1) for child in reversed(node.children))


def _indent(depth: int) -> str:
    return "  " * depth


def _dump_node(node: Component, depth: int, f: TextIO) -> None:
    if node.is_plain:
        f.write(f"{_indent(depth)}Text({node.text!r})\n")
        return
    style = ", ".join(f"{k}={v!r}" for k, v in style_to_dict(node.style).items())
    f.write(f"{_indent(depth)}Component({style})")
    if node.text:
        f.write(f" text={node.text!r}")
    f.write("\n")
