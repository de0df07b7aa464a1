"""
Priority-based lexeme classifier.

Every rule whose pattern matches the lexeme is a candidate; the one with
the strictly greatest priority decides the category, and on equal
priority the earlier-declared rule keeps its place.
"""

from __future__ import annotations

import itertools
import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass
from typing import NamedTuple, Protocol

from rift.core.errors import PatternCompileError
from rift.core.ir.tokens import PatternRule, TokenCategory

logger = logging.getLogger(__name__)


class PatternMatcher(Protocol):
    """Anything that can decide whether a whole lexeme matches."""

    def matches(self, text: str) -> bool: ...


class RegexMatcher:
    """Full-string matcher backed by Python's ``re`` module."""

    __slots__ = ("pattern", "_regex")

    def __init__(self, pattern: str) -> None:
        self.pattern = pattern
        try:
            self._regex = re.compile(pattern)
        except re.error as e:
            raise PatternCompileError(f"Cannot compile pattern {pattern!r}: {e}", pattern) from e

    def matches(self, text: str) -> bool:
        return self._regex.fullmatch(text) is not None

    def __repr__(self) -> str:
        return f"RegexMatcher({self.pattern!r})"


class Classification(NamedTuple):
    category: TokenCategory
    priority: int


UNCLASSIFIED = Classification(TokenCategory.UNKNOWN, 0)


@dataclass(frozen=True)
class CompiledRule:
    """A rule paired with its matcher; ``matcher`` is None when it failed to compile."""

    rule_id: int
    rule: PatternRule
    matcher: PatternMatcher | None


class PatternClassifier:
    """
    Classifies lexemes against an ordered list of pattern rules.

    Rules are compiled once. A rule whose pattern does not compile is kept
    in place but never matches; its ``PatternCompileError`` is available
    in ``errors``.
    """

    def __init__(self, rules: Iterable[PatternRule]) -> None:
        ids = itertools.count(1)
        self.errors: list[PatternCompileError] = []
        self.rules: list[CompiledRule] = []
        for index, rule in enumerate(rules):
            matcher: PatternMatcher | None
            try:
                matcher = RegexMatcher(rule.pattern)
            except PatternCompileError as e:
                e.rule_index = index
                self.errors.append(e)
                logger.warning("Rule %d (%s) excluded: %s", index, rule.category, e)
                matcher = None
            self.rules.append(CompiledRule(rule_id=next(ids), rule=rule, matcher=matcher))

    def classify(self, text: str) -> Classification:
        best_category = TokenCategory.UNKNOWN
        best_priority = -1
        for compiled in self.rules:
            if compiled.matcher is None or not compiled.matcher.matches(text):
                continue
            if compiled.rule.priority > best_priority:
                best_category = compiled.rule.category
                best_priority = compiled.rule.priority
        if best_priority < 0:
            return UNCLASSIFIED
        return Classification(best_category, best_priority)


def classify(rules: Iterable[PatternRule], text: str) -> Classification:
    """Classify a single lexeme against ``rules``."""
    return PatternClassifier(rules).classify(text)
