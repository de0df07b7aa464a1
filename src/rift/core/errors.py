"""
Error types for the RIFT pipeline: configuration, classification, parsing,
and resource failures.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from rift.core.governance import Stage
    from rift.core.ir.tokens import Token


class RiftError(Exception):
    """Base exception for all RIFT errors."""

    def __init__(self, message: str, context: Optional["ErrorContext"] = None):
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with context if available."""
        if self.context:
            return f"{self.context.format()}: {self.message}"
        return self.message


class ConfigError(RiftError):
    """Base for governance configuration problems."""


class ConfigMissing(ConfigError):
    """
    Raised when a required governance stage, section, or key is absent.

    Fatal to the stage that asked for it.
    """


class ConfigInvalid(ConfigError):
    """
    Raised when governance data is present but unusable.

    Examples:
    - Priority or precedence that is not an integer
    - Unknown token category prefix in TOKEN_PATTERNS
    - Flag value other than enabled/disabled
    - Malformed .riftrc file
    """


class PatternCompileError(RiftError):
    """
    Raised when a rule's pattern cannot be compiled.

    The classifier records these and treats the rule as never matching.
    """

    def __init__(self, message: str, pattern: str, rule_index: int | None = None):
        self.pattern = pattern
        self.rule_index = rule_index
        super().__init__(message)


class ParseError(RiftError):
    """
    Raised when the token stream does not form a valid expression.

    ``position`` is the cursor index (0-based) where parsing stopped.
    """

    def __init__(
        self,
        message: str,
        position: int,
        context: Optional["ErrorContext"] = None,
    ):
        self.position = position
        super().__init__(message, context)


class UnexpectedToken(ParseError):
    """A token appeared where the grammar does not allow it."""

    def __init__(self, token: "Token", position: int, expected: str):
        self.token = token
        self.expected = expected
        context = ErrorContext(line=token.line, column=token.column, text=token.text)
        super().__init__(
            f"Expected {expected}, got {token.category} ({token.text!r})",
            position,
            context,
        )


class UnexpectedEnd(ParseError):
    """The token stream ended while the grammar still required input."""

    def __init__(self, position: int, expected: str):
        self.expected = expected
        super().__init__(f"Unexpected end of input, expected {expected}", position)


class AllocationFailure(RiftError):
    """Raised when a stage runs out of memory or recursion depth."""


class PipelineError(RiftError):
    """
    Raised by ``run_pipeline`` when any stage fails.

    Attributes:
        stage: The stage that failed
        error: The underlying stage error (also chained as ``__cause__``)
    """

    def __init__(self, stage: "Stage", error: RiftError):
        self.stage = stage
        self.error = error
        super().__init__(f"{stage.name.lower()} stage failed: {error}")


@dataclass
class ErrorContext:
    """
    Source location for an error.

    Attributes:
        line: Line number (1-indexed)
        column: Token column (1-indexed position within the stream)
        text: Optional lexeme at the error location
    """

    line: int
    column: int
    text: str | None = None

    def format(self) -> str:
        """
        Format error context as a human-readable string.

        Returns:
            Formatted string like: "1:3 near '+'"
        """
        location = f"{self.line}:{self.column}"
        if self.text is not None:
            location += f" near {self.text!r}"
        return location
