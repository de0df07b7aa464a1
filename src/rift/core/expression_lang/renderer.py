"""
Canonical renderer for the expression AST.

The LISP-style form is the one used for output and for comparing trees:

    (BinOp +
      (Identifier x)
      (Number 2)
    )
"""

from __future__ import annotations

import json
import logging

from rift.core.errors import ConfigInvalid
from rift.core.governance import OUTPUT_FORMATS, Governance, Stage, parse_flag
from rift.core.ir.expressions import BinaryOp, Identifier, Node, Number

logger = logging.getLogger(__name__)

INDENT = "  "
LISP_STYLE_AST = "LISP_STYLE_AST"
SUPPORTED_FORMATS = frozenset({LISP_STYLE_AST})


def render(ast: Node, indent: int = 0) -> str:
    """Render ``ast`` in canonical form, starting ``indent`` levels deep."""
    lines: list[str] = []
    # Plain strings are closing lines queued behind a node's children
    pending: list[tuple[Node, int] | str] = [(ast, indent)]
    while pending:
        item = pending.pop()
        if isinstance(item, str):
            lines.append(item)
            continue
        node, depth = item
        pad = INDENT * depth
        if isinstance(node, Identifier):
            lines.append(f"{pad}(Identifier {node.text})")
        elif isinstance(node, Number):
            lines.append(f"{pad}(Number {node.text})")
        elif isinstance(node, BinaryOp):
            lines.append(f"{pad}(BinOp {node.op.value}")
            pending.append(f"{pad})")
            pending.append((node.right, depth + 1))
            pending.append((node.left, depth + 1))
        else:
            raise TypeError(f"Cannot render node of type {type(node).__name__}")
    return "\n".join(lines)


def render_document(ast: Node) -> str:
    """Wrap the canonical form in an ``(AST ...)`` document."""
    return f"(AST\n{render(ast, indent=1)}\n)"


def _json_str(value: str) -> str:
    return json.dumps(value, ensure_ascii=False)


def render_json(ast: Node) -> str:
    """
    JSON export of ``ast``, laid out like ``model_dump_json(indent=2)``.

    Written line by line so chains of any length serialize; pydantic's
    serializer gives up on deeply nested trees.
    """
    lines: list[str] = []
    # (node, depth, key prefix, trailing comma) or a queued closing line
    pending: list[tuple[Node, int, str, str] | str] = [(ast, 0, "", "")]
    while pending:
        item = pending.pop()
        if isinstance(item, str):
            lines.append(item)
            continue
        node, depth, prefix, suffix = item
        pad = INDENT * depth
        inner = INDENT * (depth + 1)
        lines.append(f"{pad}{prefix}{{")
        lines.append(f'{inner}"kind": {_json_str(node.kind)},')
        if isinstance(node, BinaryOp):
            lines.append(f'{inner}"op": {_json_str(node.op.value)},')
            pending.append(f"{pad}}}{suffix}")
            pending.append((node.right, depth + 1, '"right": ', ""))
            pending.append((node.left, depth + 1, '"left": ', ","))
        else:
            lines.append(f'{inner}"text": {_json_str(node.text)}')
            lines.append(f"{pad}}}{suffix}")
    return "\n".join(lines)


class Renderer:
    """Output stage configured by OUTPUT_FORMATS."""

    def __init__(self, primary_format: str = LISP_STYLE_AST, json_export: bool = False) -> None:
        if primary_format not in SUPPORTED_FORMATS:
            raise ConfigInvalid(f"Unsupported primary output format: {primary_format!r}")
        self.primary_format = primary_format
        self.json_export = json_export

    @classmethod
    def from_governance(cls, governance: Governance) -> Renderer:
        formats = governance.get_section(Stage.RENDERER, OUTPUT_FORMATS)
        primary = governance.get_value(Stage.RENDERER, OUTPUT_FORMATS, "primary_format")
        json_export = parse_flag(formats.get("json_export", "disabled"), "json_export")
        return cls(primary, json_export)

    def render(self, ast: Node) -> str:
        logger.debug("Rendering AST as %s", self.primary_format)
        return render(ast)
