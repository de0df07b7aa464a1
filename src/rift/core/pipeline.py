"""
End-to-end RIFT pipeline.

Runs tokenizer → parser → coordinator → renderer in order, each stage
configured from governance and consuming only the previous stage's
output. Any stage failure aborts the run and is re-raised as a
``PipelineError`` naming the stage.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import ExitStack, contextmanager

from pydantic import BaseModel, ConfigDict, Field

from rift.core.errors import AllocationFailure, PipelineError, RiftError
from rift.core.expression_lang.coordinator import AstCoordinator
from rift.core.expression_lang.parser import Parser
from rift.core.expression_lang.renderer import Renderer, render_json
from rift.core.expression_lang.tokenizer import Tokenizer
from rift.core.governance import Governance, Stage
from rift.core.ir.expressions import Node

logger = logging.getLogger(__name__)


class RenderedOutput(BaseModel):
    """Result of a successful pipeline run."""

    ast: Node = Field(description="Optimized AST")
    text: str
    format: str
    token_count: int
    node_count: int
    optimized_node_count: int
    passes_applied: list[str]
    json_export: str | None = None

    model_config = ConfigDict(frozen=True)


@contextmanager
def _stage(stage: Stage) -> Iterator[None]:
    """Translate failures inside ``stage`` into ``PipelineError``."""
    logger.debug("[RIFT-%d] %s stage starting", stage, stage.name.lower())
    try:
        yield
    except RiftError as e:
        raise PipelineError(stage, e) from e
    except (MemoryError, RecursionError) as e:
        failure = AllocationFailure(f"Resource exhaustion: {type(e).__name__}")
        raise PipelineError(stage, failure) from e


def run_pipeline(source_text: str, governance: Governance | None = None) -> RenderedOutput:
    """
    Compile ``source_text`` through all four stages.

    Args:
        source_text: Expression source, e.g. "x + 2 * y"
        governance: Stage configuration; built-in defaults when omitted

    Returns:
        RenderedOutput with the canonical rendering and stage statistics.

    Raises:
        PipelineError: If any stage fails; ``stage`` names it and the
            stage error is chained as ``__cause__``.
    """
    if governance is None:
        governance = Governance.default()

    with ExitStack() as resources:
        with _stage(Stage.TOKENIZER):
            tokens = Tokenizer.from_governance(governance).tokenize(source_text)
        resources.callback(tokens.release)
        token_count = len(tokens)

        with _stage(Stage.PARSER):
            ast = Parser.from_governance(governance).parse(tokens)

        with _stage(Stage.COORDINATOR):
            result = AstCoordinator.from_governance(governance).coordinate(ast)

        with _stage(Stage.RENDERER):
            renderer = Renderer.from_governance(governance)
            text = renderer.render(result.ast)
            json_export = render_json(result.ast) if renderer.json_export else None

    logger.debug("Pipeline complete: %d tokens, %d nodes", token_count, result.node_count)
    return RenderedOutput(
        ast=result.ast,
        text=text,
        format=renderer.primary_format,
        token_count=token_count,
        node_count=result.node_count,
        optimized_node_count=result.optimized_node_count,
        passes_applied=result.passes_applied,
        json_export=json_export,
    )
