"""
AST coordinator stage: node counting and the optimization pipeline.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, Field

from rift.core.expression_lang.passes import PassRegistry, default_registry
from rift.core.governance import Governance, Stage
from rift.core.ir.expressions import BinaryOp, Node

logger = logging.getLogger(__name__)


def node_count(node: Node | None) -> int:
    """Number of nodes in the tree rooted at ``node``; 0 for None."""
    count = 0
    pending: list[Node] = [] if node is None else [node]
    while pending:
        current = pending.pop()
        count += 1
        if isinstance(current, BinaryOp):
            pending.append(current.right)
            pending.append(current.left)
    return count


class CoordinationResult(BaseModel):
    """Outcome of running the coordinator over one AST."""

    ast: Node
    node_count: int = Field(description="Nodes in the tree before optimization")
    optimized_node_count: int
    passes_applied: list[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class AstCoordinator:
    """
    Runs the enabled optimization passes over an AST.

    Passes run in registry order; a pass runs only when ``flags`` maps
    its name to True.
    """

    def __init__(
        self,
        flags: Mapping[str, bool] | None = None,
        registry: PassRegistry | None = None,
    ) -> None:
        self.flags: dict[str, bool] = dict(flags or {})
        self.registry = registry if registry is not None else default_registry()

    @classmethod
    def from_governance(
        cls, governance: Governance, registry: PassRegistry | None = None
    ) -> AstCoordinator:
        return cls(governance.get_optimization_flags(Stage.COORDINATOR), registry)

    def coordinate(self, ast: Node, flags: Mapping[str, bool] | None = None) -> CoordinationResult:
        """Count and optimize ``ast``; ``flags`` overrides the configured flags."""
        flags = self.flags if flags is None else dict(flags)

        for name in flags:
            if name not in self.registry:
                logger.warning("Ignoring flag for unregistered optimization pass %r", name)

        count = node_count(ast)
        logger.debug("AST contains %d nodes", count)

        applied: list[str] = []
        for opt_pass in self.registry:
            if not flags.get(opt_pass.name, False):
                continue
            ast = opt_pass(ast)
            applied.append(opt_pass.name)
        logger.debug("Applied %d optimization passes: %s", len(applied), ", ".join(applied))

        return CoordinationResult(
            ast=ast,
            node_count=count,
            optimized_node_count=node_count(ast),
            passes_applied=applied,
        )


def coordinate(ast: Node, flags: Mapping[str, bool]) -> CoordinationResult:
    """Run the built-in passes enabled in ``flags`` over ``ast``."""
    return AstCoordinator(flags).coordinate(ast)
