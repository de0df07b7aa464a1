"""
Optimization passes over the expression AST.

A pass is a named, pure function from tree to tree. Passes are kept in a
``PassRegistry`` whose registration order is the order they run in.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Iterator
from dataclasses import dataclass

from rift.core.ir.expressions import BinaryOp, Node, Number, Operator

CONSTANT_FOLDING = "constant_folding"
DEAD_CODE_ELIMINATION = "dead_code_elimination"
COMMON_SUBEXPRESSION_ELIMINATION = "common_subexpression_elimination"


@dataclass(frozen=True)
class OptimizationPass:
    name: str
    transform: Callable[[Node], Node]

    def __call__(self, node: Node) -> Node:
        return self.transform(node)


class PassRegistry:
    """Ordered collection of optimization passes, keyed by name."""

    def __init__(self) -> None:
        self._passes: dict[str, OptimizationPass] = {}

    def register(self, name: str, transform: Callable[[Node], Node]) -> OptimizationPass:
        if name in self._passes:
            raise ValueError(f"Optimization pass {name!r} is already registered")
        opt_pass = OptimizationPass(name=name, transform=transform)
        self._passes[name] = opt_pass
        return opt_pass

    def get(self, name: str) -> OptimizationPass | None:
        return self._passes.get(name)

    def names(self) -> list[str]:
        return list(self._passes)

    def __contains__(self, name: object) -> bool:
        return name in self._passes

    def __iter__(self) -> Iterator[OptimizationPass]:
        return iter(self._passes.values())

    def __len__(self) -> int:
        return len(self._passes)


# ---------------------------------------------------------------------------
# Constant folding
# ---------------------------------------------------------------------------


def _to_number(text: str) -> int | float | None:
    try:
        return int(text)
    except ValueError:
        pass
    try:
        value = float(text)
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def _format_number(value: int | float) -> str:
    if isinstance(value, int):
        return str(value)
    return repr(value)


def _compute(op: Operator, left: int | float, right: int | float) -> int | float | None:
    """Apply ``op``; None when the result cannot be folded."""
    if op == Operator.ADD:
        result = left + right
    elif op == Operator.SUB:
        result = left - right
    elif op == Operator.MUL:
        result = left * right
    elif op == Operator.DIV:
        if right == 0:
            return None
        if isinstance(left, int) and isinstance(right, int) and left % right == 0:
            result = left // right
        else:
            result = left / right
    else:
        return None

    if isinstance(result, float) and not math.isfinite(result):
        return None
    return result


def fold_constants(node: Node) -> Node:
    """Collapse every BinaryOp whose operands are both numbers, bottom-up."""
    # (node, children_done); folded subtrees wait on ``folded`` in visit order
    pending: list[tuple[Node, bool]] = [(node, False)]
    folded: list[Node] = []
    while pending:
        current, children_done = pending.pop()
        if not isinstance(current, BinaryOp):
            folded.append(current)
        elif not children_done:
            pending.append((current, True))
            pending.append((current.right, False))
            pending.append((current.left, False))
        else:
            right = folded.pop()
            left = folded.pop()
            folded.append(_fold_binary(current, left, right))
    return folded[0]


def _fold_binary(node: BinaryOp, left: Node, right: Node) -> Node:
    """Fold ``node`` given its already-folded children."""
    if isinstance(left, Number) and isinstance(right, Number):
        lhs = _to_number(left.text)
        rhs = _to_number(right.text)
        if lhs is not None and rhs is not None:
            try:
                result = _compute(node.op, lhs, rhs)
                text = _format_number(result) if result is not None else None
            except (OverflowError, ValueError):
                # ValueError: int too large for str()
                text = None
            if text is not None:
                return Number(text=text)

    if left is node.left and right is node.right:
        return node
    return BinaryOp(op=node.op, left=left, right=right)


def identity(node: Node) -> Node:
    return node


def default_registry() -> PassRegistry:
    """Registry with the built-in passes in their standard order."""
    registry = PassRegistry()
    registry.register(CONSTANT_FOLDING, fold_constants)
    # No rewrite semantics defined yet for these two; they keep the tree as-is.
    registry.register(DEAD_CODE_ELIMINATION, identity)
    registry.register(COMMON_SUBEXPRESSION_ELIMINATION, identity)
    return registry
