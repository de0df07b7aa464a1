"""
Recursive descent parser for RIFT arithmetic expressions.

Grammar (precedence low to high, with the default precedence table):
    expression → term (("+" | "-") term)*
    term       → factor (("*" | "/") factor)*
    factor     → IDENTIFIER | NUMBER

Each binary tier is left-associative. The tiers themselves come from the
parser stage's PRECEDENCE_TABLE: operators sharing a precedence value form
one tier, and lower values bind more loosely.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from rift.core.errors import ConfigInvalid, UnexpectedEnd, UnexpectedToken
from rift.core.governance import PRECEDENCE_TABLE, Governance, Stage, parse_int
from rift.core.ir.expressions import BinaryOp, Identifier, Node, Number, Operator
from rift.core.ir.tokens import Token, TokenCategory, TokenStream

logger = logging.getLogger(__name__)

# PRECEDENCE_TABLE key prefix -> operator
_OPERATOR_NAMES: dict[str, Operator] = {
    "PLUS": Operator.ADD,
    "MINUS": Operator.SUB,
    "MULTIPLY": Operator.MUL,
    "DIVIDE": Operator.DIV,
}

_PRECEDENCE_SUFFIX = "_PRECEDENCE"

DEFAULT_TIERS: tuple[frozenset[Operator], ...] = (
    frozenset({Operator.ADD, Operator.SUB}),
    frozenset({Operator.MUL, Operator.DIV}),
)


def tiers_from_precedence(table: dict[str, str]) -> tuple[frozenset[Operator], ...]:
    """Group operators by precedence value, loosest-binding tier first."""
    by_level: dict[int, set[Operator]] = {}
    for key, value in table.items():
        if not key.endswith(_PRECEDENCE_SUFFIX):
            continue
        name = key[: -len(_PRECEDENCE_SUFFIX)]
        op = _OPERATOR_NAMES.get(name)
        if op is None:
            raise ConfigInvalid(f"Unknown operator in precedence table: {key!r}")
        by_level.setdefault(parse_int(value, key), set()).add(op)
    return tuple(frozenset(by_level[level]) for level in sorted(by_level))


class _Parser:
    """Cursor over a token stream plus the grammar rules."""

    def __init__(self, tokens: TokenStream, tiers: Sequence[frozenset[Operator]]) -> None:
        self.tokens = tokens
        self.tiers = tiers
        self.pos = 0

    def current(self) -> Token | None:
        if self.pos < len(self.tokens):
            return self.tokens[self.pos]
        return None

    def advance(self) -> None:
        if self.pos < len(self.tokens):
            self.pos += 1

    def _match_operator(self, tier: frozenset[Operator]) -> Operator | None:
        tok = self.current()
        if tok is None or tok.category != TokenCategory.OPERATOR:
            return None
        if tok.text not in tier:
            return None
        self.advance()
        return Operator(tok.text)

    # -- Grammar rules --

    def parse_expression(self) -> Node:
        return self._parse_tier(0)

    def _parse_tier(self, level: int) -> Node:
        """operand (op operand)* for the operators of ``tiers[level]``."""
        if level >= len(self.tiers):
            return self.parse_factor()
        tier = self.tiers[level]
        left = self._parse_tier(level + 1)
        while (op := self._match_operator(tier)) is not None:
            right = self._parse_tier(level + 1)
            left = BinaryOp(op=op, left=left, right=right)
        return left

    def parse_factor(self) -> Node:
        """IDENTIFIER | NUMBER"""
        tok = self.current()
        if tok is None:
            raise UnexpectedEnd(self.pos, "identifier or number")
        if tok.category == TokenCategory.IDENTIFIER:
            self.advance()
            return Identifier(text=tok.text)
        if tok.category == TokenCategory.NUMBER:
            self.advance()
            return Number(text=tok.text)
        raise UnexpectedToken(tok, self.pos, "identifier or number")


class Parser:
    """Parser stage: token stream in, AST out."""

    def __init__(self, tiers: Sequence[frozenset[Operator]] = DEFAULT_TIERS) -> None:
        self.tiers = tuple(tiers)

    @classmethod
    def from_governance(cls, governance: Governance) -> Parser:
        table = governance.get_section(Stage.PARSER, PRECEDENCE_TABLE)
        return cls(tiers_from_precedence(table))

    def parse(self, tokens: TokenStream) -> Node:
        """
        Parse a complete token stream into an AST.

        Raises:
            UnexpectedEnd: If the stream is empty or ends mid-expression.
            UnexpectedToken: If a token does not fit the grammar, including
                any token left over after a complete expression.
        """
        parser = _Parser(tokens, self.tiers)
        ast = parser.parse_expression()

        leftover = parser.current()
        if leftover is not None:
            raise UnexpectedToken(leftover, parser.pos, "operator or end of input")

        logger.debug("Parsing complete: consumed %d tokens", parser.pos)
        return ast


def parse(tokens: TokenStream) -> Node:
    """Parse ``tokens`` with the default operator precedence."""
    return Parser().parse(tokens)
