"""
RIFT CLI - Entry point.

Commands:
- run: Compile an expression through all four stages
- tokens: Show how the tokenizer classifies an expression
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import typer

from rift._version import get_version
from rift.core.errors import ConfigError, PipelineError
from rift.core.expression_lang.renderer import render_document, render_json
from rift.core.expression_lang.tokenizer import Tokenizer
from rift.core.governance import Governance
from rift.core.pipeline import run_pipeline
from rift.core.riftrc import load_governance

app = typer.Typer(
    help="RIFT – staged, governance-driven expression compiler",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    if value:
        typer.echo(f"rift {get_version()}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def _governance(config_dir: Path | None) -> Governance:
    if config_dir is None:
        return Governance.default()
    try:
        return load_governance(config_dir)
    except ConfigError as e:
        typer.echo(f"Configuration error: {e}", err=True)
        raise typer.Exit(code=1)


@app.callback()
def main_callback(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Trace every stage"),
) -> None:
    """RIFT CLI main callback for global options."""
    _configure_logging(verbose)


@app.command("run")
def run_command(
    source: str = typer.Argument(..., help='Expression to compile, e.g. "x + 2 * y"'),
    config_dir: Path | None = typer.Option(
        None,
        "--config-dir",
        "-c",
        help="Directory holding .riftrc.0 ... .riftrc.3 (built-in defaults if omitted)",
    ),
    format: str = typer.Option(
        "lisp",
        "--format",
        "-f",
        help="Output format: lisp (default) or json",
    ),
) -> None:
    """Compile SOURCE and print the resulting AST.

    Examples:
        rift run "x + 2 * y"
        rift run "2 + 3 * 4" --format json
        rift run "a - b - c" --config-dir examples/governance
    """
    if format not in ("lisp", "json"):
        typer.echo(f"Unknown format: {format}", err=True)
        raise typer.Exit(code=2)

    governance = _governance(config_dir)
    try:
        output = run_pipeline(source, governance)
    except PipelineError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    if format == "json":
        typer.echo(output.json_export or render_json(output.ast))
        return

    typer.echo(render_document(output.ast))
    typer.secho(
        f"{output.token_count} tokens, {output.node_count} nodes"
        f" ({output.optimized_node_count} after {', '.join(output.passes_applied) or 'no passes'})",
        fg=typer.colors.BRIGHT_BLACK,
        err=True,
    )


@app.command("tokens")
def tokens_command(
    source: str = typer.Argument(..., help="Expression to tokenize"),
    config_dir: Path | None = typer.Option(None, "--config-dir", "-c"),
) -> None:
    """Print each token with its category and priority."""
    governance = _governance(config_dir)
    try:
        tokenizer = Tokenizer.from_governance(governance)
    except ConfigError as e:
        typer.echo(f"Configuration error: {e}", err=True)
        raise typer.Exit(code=1)

    for error in tokenizer.classifier.errors:
        typer.secho(f"warning: {error}", fg=typer.colors.YELLOW, err=True)

    stream = tokenizer.tokenize(source)
    for token in stream:
        typer.echo(
            f"{token.line}:{token.column:<4} {token.category:<11} {token.priority:>4}  {token.text}"
        )


def main(argv: list[str] | None = None) -> None:
    app(args=argv, standalone_mode=True)


if __name__ == "__main__":
    main(sys.argv[1:])
