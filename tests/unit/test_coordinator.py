"""Tests for the AST coordinator: node counting and optimization passes."""

from __future__ import annotations

import logging

import pytest

from rift.core.expression_lang.coordinator import AstCoordinator, coordinate, node_count
from rift.core.expression_lang.parser import parse
from rift.core.expression_lang.passes import (
    COMMON_SUBEXPRESSION_ELIMINATION,
    CONSTANT_FOLDING,
    DEAD_CODE_ELIMINATION,
    PassRegistry,
    default_registry,
    fold_constants,
)
from rift.core.governance import Governance
from rift.core.ir.expressions import BinaryOp, Identifier, Node, Number, Operator


def num(text: str) -> Number:
    return Number(text=text)


def binop(op: str, left: Node, right: Node) -> BinaryOp:
    return BinaryOp(op=Operator(op), left=left, right=right)


def chain(op: str, leaves: list[Node]) -> Node:
    """Left-deep chain ((l0 op l1) op l2) ... of ``leaves``."""
    tree = leaves[0]
    for leaf in leaves[1:]:
        tree = binop(op, tree, leaf)
    return tree


DEEP = 5000


# ============================================================================
# node_count
# ============================================================================


class TestNodeCount:
    """count(None) = 0 and count(n) = 1 + count(left) + count(right)."""

    def test_none(self) -> None:
        assert node_count(None) == 0

    def test_leaf(self) -> None:
        assert node_count(Identifier(text="x")) == 1

    @pytest.mark.parametrize(
        "source,expected",
        [
            ("x", 1),
            ("x + 2 * y", 5),
            ("a - b - c", 5),
            ("a * b + c / d - e", 9),
        ],
    )
    def test_parsed_trees(self, lex, source: str, expected: int) -> None:
        assert node_count(parse(lex(source))) == expected

    def test_recurrence(self, lex) -> None:
        ast = parse(lex("a + b * c - 4 / d"))
        assert isinstance(ast, BinaryOp)
        assert node_count(ast) == 1 + node_count(ast.left) + node_count(ast.right)

    def test_deep_chain(self) -> None:
        ast = chain("+", [Identifier(text="x")] * DEEP)
        assert node_count(ast) == 2 * DEEP - 1


# ============================================================================
# Constant folding
# ============================================================================


class TestConstantFolding:
    """Number-only subtrees collapse into a single Number."""

    def test_simple_add(self) -> None:
        assert fold_constants(binop("+", num("2"), num("3"))) == num("5")

    def test_idempotent(self, lex) -> None:
        for source in ("2 + 3", "x + 2 * 3", "4 / 0 + 1", "a - b - c", "1.5 * 2 - x"):
            once = fold_constants(parse(lex(source)))
            assert fold_constants(once) == once

    def test_division_by_zero_left_unfolded(self) -> None:
        node = binop("/", num("4"), num("0"))
        assert fold_constants(node) == node

    def test_division_by_float_zero_left_unfolded(self) -> None:
        node = binop("/", num("4"), num("0.0"))
        assert fold_constants(node) == node

    @pytest.mark.parametrize(
        "op,left,right,expected",
        [
            ("+", "2", "3", "5"),
            ("-", "2", "5", "-3"),
            ("*", "6", "7", "42"),
            ("/", "6", "3", "2"),
            ("/", "7", "2", "3.5"),
            ("+", "1.5", "1", "2.5"),
            ("*", "0.5", "4", "2.0"),
        ],
    )
    def test_arithmetic(self, op: str, left: str, right: str, expected: str) -> None:
        assert fold_constants(binop(op, num(left), num(right))) == num(expected)

    def test_nested_folds_bottom_up(self, lex) -> None:
        assert fold_constants(parse(lex("2 * 3 + 4"))) == num("10")

    def test_partial_fold(self, lex) -> None:
        ast = fold_constants(parse(lex("x + 2 * 3")))
        assert ast == binop("+", Identifier(text="x"), num("6"))

    def test_identifier_blocks_fold(self, lex) -> None:
        ast = parse(lex("x * 2"))
        assert fold_constants(ast) == ast

    def test_unfolded_division_blocks_parent(self, lex) -> None:
        ast = fold_constants(parse(lex("4 / 0 + 1")))
        assert ast == binop("+", binop("/", num("4"), num("0")), num("1"))

    def test_unchanged_tree_is_returned_as_is(self, lex) -> None:
        ast = parse(lex("a + b"))
        assert fold_constants(ast) is ast

    def test_non_numeric_number_text(self) -> None:
        node = binop("+", num("two"), num("3"))
        assert fold_constants(node) == node

    def test_deep_number_chain(self) -> None:
        ast = chain("+", [num(str(i)) for i in range(DEEP)])
        assert fold_constants(ast) == num(str(sum(range(DEEP))))

    def test_deep_chain_keeps_unfoldable_spine(self) -> None:
        # Only the innermost "0 + 1" folds; the identifier stops the rest.
        leaves: list[Node] = [num("0"), num("1"), Identifier(text="x")]
        leaves += [num("2")] * (DEEP - 3)
        folded = fold_constants(chain("+", leaves))
        assert node_count(folded) == 2 * DEEP - 3

        spine = folded
        while isinstance(spine, BinaryOp):
            assert spine.right == num("2") or spine.right == Identifier(text="x")
            spine = spine.left
        assert spine == num("1")


# ============================================================================
# Pass registry
# ============================================================================


class TestPassRegistry:
    """Named passes, run in registration order."""

    def test_default_order(self) -> None:
        assert default_registry().names() == [
            CONSTANT_FOLDING,
            DEAD_CODE_ELIMINATION,
            COMMON_SUBEXPRESSION_ELIMINATION,
        ]

    def test_identity_passes(self, lex) -> None:
        registry = default_registry()
        ast = parse(lex("x + 0 * y"))
        for name in (DEAD_CODE_ELIMINATION, COMMON_SUBEXPRESSION_ELIMINATION):
            opt_pass = registry.get(name)
            assert opt_pass is not None
            assert opt_pass(ast) is ast

    def test_duplicate_registration(self) -> None:
        registry = PassRegistry()
        registry.register("p", lambda n: n)
        with pytest.raises(ValueError):
            registry.register("p", lambda n: n)

    def test_custom_pass_runs_in_order(self, lex) -> None:
        seen: list[str] = []

        def record(name: str):
            def _pass(node: Node) -> Node:
                seen.append(name)
                return node

            return _pass

        registry = PassRegistry()
        registry.register("first", record("first"))
        registry.register("second", record("second"))
        result = AstCoordinator({"second": True, "first": True}, registry).coordinate(
            parse(lex("x"))
        )
        assert seen == ["first", "second"]
        assert result.passes_applied == ["first", "second"]


# ============================================================================
# Coordinator
# ============================================================================


class TestCoordinator:
    """coordinate() counts the input tree and applies enabled passes."""

    def test_counts_and_folds(self, lex) -> None:
        result = coordinate(parse(lex("2 + 3 * 4")), {CONSTANT_FOLDING: True})
        assert result.ast == num("14")
        assert result.node_count == 5
        assert result.optimized_node_count == 1
        assert result.passes_applied == [CONSTANT_FOLDING]

    def test_disabled_pass_does_not_run(self, lex) -> None:
        ast = parse(lex("2 + 3"))
        result = coordinate(ast, {CONSTANT_FOLDING: False})
        assert result.ast is ast
        assert result.passes_applied == []

    def test_missing_flag_means_disabled(self, lex) -> None:
        ast = parse(lex("2 + 3"))
        assert coordinate(ast, {}).ast is ast

    def test_from_governance(self, governance: Governance, lex) -> None:
        coordinator = AstCoordinator.from_governance(governance)
        result = coordinator.coordinate(parse(lex("x + 1 + 2")))
        assert result.passes_applied == [CONSTANT_FOLDING, DEAD_CODE_ELIMINATION]
        # Left-associative: (x + 1) + 2 has no Number-only subtree
        assert result.optimized_node_count == 5

    def test_flags_override(self, governance: Governance, lex) -> None:
        coordinator = AstCoordinator.from_governance(governance)
        result = coordinator.coordinate(parse(lex("1 + 2")), {CONSTANT_FOLDING: False})
        assert result.ast == binop("+", num("1"), num("2"))

    def test_unregistered_flag_warns(self, lex, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="rift.core.expression_lang.coordinator"):
            result = coordinate(parse(lex("x")), {"loop_unrolling": True})
        assert "loop_unrolling" in caplog.text
        assert result.passes_applied == []
