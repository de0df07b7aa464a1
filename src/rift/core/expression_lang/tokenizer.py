"""
Tokenizer for RIFT source text.

Splits the input on runs of whitespace and classifies each lexeme with
the configured pattern rules. Because lexemes never contain whitespace,
a Whitespace rule can be declared but never classifies anything.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from rift.core.expression_lang.classifier import PatternClassifier
from rift.core.governance import Governance, Stage
from rift.core.ir.tokens import PatternRule, TokenStream

logger = logging.getLogger(__name__)


class Tokenizer:
    """Turns source text into a ``TokenStream`` using a fixed rule set."""

    def __init__(self, rules: Iterable[PatternRule]) -> None:
        self.classifier = PatternClassifier(rules)

    @classmethod
    def from_governance(cls, governance: Governance) -> Tokenizer:
        """Build a tokenizer from the tokenizer stage's TOKEN_PATTERNS."""
        return cls(governance.get_pattern_rules(Stage.TOKENIZER))

    def tokenize(self, source: str) -> TokenStream:
        stream = TokenStream()
        for lexeme in source.split():
            category, priority = self.classifier.classify(lexeme)
            token = stream.append(category, lexeme, priority)
            logger.debug(
                "Token %r classified as %s (priority: %d)", lexeme, token.category, priority
            )
        logger.debug("Tokenization complete: %d tokens", len(stream))
        return stream


def tokenize(rules: Iterable[PatternRule], source: str) -> TokenStream:
    """Tokenize ``source`` with ``rules``."""
    return Tokenizer(rules).tokenize(source)
