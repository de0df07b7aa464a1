"""
RIFT intermediate representation: tokens, pattern rules, and the
expression AST.
"""

from rift.core.ir.expressions import BinaryOp, Identifier, Node, Number, Operator
from rift.core.ir.tokens import PatternRule, Token, TokenCategory, TokenStream

__all__ = [
    "BinaryOp",
    "Identifier",
    "Node",
    "Number",
    "Operator",
    "PatternRule",
    "Token",
    "TokenCategory",
    "TokenStream",
]
