"""
Expression AST for RIFT.

Three node kinds: identifiers and numbers as leaves, and binary
operations with exactly two owned children. Nodes are frozen; passes
that simplify a tree build a new one.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class Operator(StrEnum):
    """Binary arithmetic operators."""

    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"


class Identifier(BaseModel):
    """A named value: x, total, _tmp."""

    kind: Literal["identifier"] = "identifier"
    text: str

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return self.text


class Number(BaseModel):
    """A numeric literal, kept as its source text."""

    kind: Literal["number"] = "number"
    text: str

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return self.text


class BinaryOp(BaseModel):
    """Binary operation: left op right."""

    kind: Literal["binary_op"] = "binary_op"
    op: Operator
    left: Node
    right: Node

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return f"({self.left} {self.op.value} {self.right})"


Node = Annotated[Union[Identifier, Number, BinaryOp], Field(discriminator="kind")]

BinaryOp.model_rebuild()
