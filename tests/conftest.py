"""Shared pytest fixtures for RIFT tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from rift.core.expression_lang.tokenizer import tokenize
from rift.core.governance import Governance, Stage
from rift.core.ir.tokens import PatternRule, TokenStream


@pytest.fixture
def examples_dir() -> Path:
    """Return path to the example governance directory."""
    return Path(__file__).resolve().parent.parent / "examples" / "governance"


@pytest.fixture
def governance() -> Governance:
    """Governance backed by the built-in stage defaults."""
    return Governance.default()


@pytest.fixture
def default_rules(governance: Governance) -> list[PatternRule]:
    return governance.get_pattern_rules(Stage.TOKENIZER)


@pytest.fixture
def lex(default_rules: list[PatternRule]):
    """Tokenize source text with the default rules."""

    def _lex(source: str) -> TokenStream:
        return tokenize(default_rules, source)

    return _lex
