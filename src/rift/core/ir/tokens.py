"""
Token types for the RIFT tokenizer stage.

Pattern rules drive classification; tokens are collected into a
``TokenStream`` that grows by doubling its capacity and never shrinks
while it is being built.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class TokenCategory(StrEnum):
    """Categories a lexeme can be classified into."""

    IDENTIFIER = "identifier"
    NUMBER = "number"
    OPERATOR = "operator"
    WHITESPACE = "whitespace"
    UNKNOWN = "unknown"


class PatternRule(BaseModel):
    """
    A single classification rule.

    Rules are declared in a fixed order per stage; on equal priority the
    earlier-declared rule wins.
    """

    pattern: str = Field(description="Regular expression, matched against the whole lexeme")
    category: TokenCategory
    priority: int = Field(description="Higher priority wins; below zero never wins")

    model_config = ConfigDict(frozen=True)


@dataclass(frozen=True)
class Token:
    """A classified lexeme."""

    category: TokenCategory
    text: str
    line: int
    column: int
    priority: int


class TokenStream:
    """
    Ordered, append-only sequence of tokens.

    Column numbers are handed out by the stream itself, so two streams
    never share a counter.
    """

    INITIAL_CAPACITY = 10

    def __init__(self, capacity: int = INITIAL_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError("capacity must be positive")
        self._tokens: list[Token] = []
        self._capacity = capacity
        self._released = False

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def next_column(self) -> int:
        """1-based column the next appended token will receive."""
        return len(self._tokens) + 1

    def append(
        self,
        category: TokenCategory,
        text: str,
        priority: int,
        line: int = 1,
    ) -> Token:
        """Create a token at the next column and store it."""
        if self._released:
            raise RuntimeError("token stream has been released")
        if len(self._tokens) >= self._capacity:
            self._capacity *= 2
        token = Token(
            category=category,
            text=text,
            line=line,
            column=self.next_column,
            priority=priority,
        )
        self._tokens.append(token)
        return token

    def release(self) -> None:
        """Drop stored tokens once the owning pipeline run is finished."""
        self._tokens = []
        self._released = True

    @property
    def released(self) -> bool:
        return self._released

    def __len__(self) -> int:
        return len(self._tokens)

    def __getitem__(self, index: int) -> Token:
        try:
            return self._tokens[index]
        except IndexError:
            raise IndexError("token index out of range") from None

    def __iter__(self) -> Iterator[Token]:
        return iter(self._tokens)

    def __repr__(self) -> str:
        return f"TokenStream(count={len(self._tokens)}, capacity={self._capacity})"
