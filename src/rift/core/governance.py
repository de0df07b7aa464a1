"""
Stage-bound governance for the RIFT pipeline.

Each pipeline stage reads its configuration from a ``StageConfig`` held by
a ``Governance`` store. Stage configs are loaded on first access and
cached; the store is never modified by the stages that read it.

Usage:
    from rift.core.governance import Governance, Stage

    governance = Governance.default()
    rules = governance.get_pattern_rules(Stage.TOKENIZER)
    flags = governance.get_optimization_flags(Stage.COORDINATOR)
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from enum import IntEnum

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from rift.core.errors import ConfigInvalid, ConfigMissing
from rift.core.ir.tokens import PatternRule, TokenCategory

logger = logging.getLogger(__name__)


class Stage(IntEnum):
    """The four ordered pipeline stages."""

    TOKENIZER = 0
    PARSER = 1
    COORDINATOR = 2
    RENDERER = 3


# Section names read by the stages
TOKEN_PATTERNS = "TOKEN_PATTERNS"
PRECEDENCE_TABLE = "PRECEDENCE_TABLE"
OPTIMIZATION_PASSES = "OPTIMIZATION_PASSES"
OUTPUT_FORMATS = "OUTPUT_FORMATS"

_PATTERN_SUFFIX = "_PATTERN"
_PRIORITY_SUFFIX = "_PRIORITY"

_FLAG_VALUES: dict[str, bool] = {
    "enabled": True,
    "true": True,
    "on": True,
    "disabled": False,
    "false": False,
    "off": False,
}


class StageConfig(BaseModel):
    """Configuration for one stage, as loaded from a .riftrc file."""

    stage: Stage
    stage_name: str
    sp_alignment: str
    governance_version: str = "1.0.0"
    sections: dict[str, dict[str, str]] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)


StageLoader = Callable[[Stage], StageConfig]


def to_stage(stage: Stage | int) -> Stage:
    """Convert a raw stage id to ``Stage``; unknown ids are missing config."""
    try:
        return Stage(stage)
    except ValueError:
        raise ConfigMissing(f"No governance stage with id {stage!r}") from None


def parse_flag(value: str, key: str) -> bool:
    """Interpret an enabled/disabled style flag value."""
    normalized = value.strip().lower()
    if normalized not in _FLAG_VALUES:
        raise ConfigInvalid(f"Flag {key!r} has unrecognised value {value!r}")
    return _FLAG_VALUES[normalized]


def parse_int(value: str, key: str) -> int:
    try:
        return int(value)
    except ValueError:
        raise ConfigInvalid(f"Value of {key!r} is not an integer: {value!r}") from None


class Governance:
    """
    Read-only store of per-stage configuration.

    Stage configs come from ``loader`` the first time a stage is asked for
    and are cached afterwards. Any stage in ``configs`` counts as already
    loaded.
    """

    def __init__(
        self,
        configs: Mapping[Stage, StageConfig] | None = None,
        loader: StageLoader | None = None,
    ) -> None:
        self._configs: dict[Stage, StageConfig] = dict(configs or {})
        self._loader = loader

    @classmethod
    def default(cls) -> Governance:
        """Governance backed by the built-in stage defaults."""
        return cls(loader=default_stage_config)

    def is_loaded(self, stage: Stage | int) -> bool:
        return to_stage(stage) in self._configs

    def load_stage(self, stage: Stage | int) -> StageConfig:
        """Return the config for ``stage``, loading it on first access."""
        stage = to_stage(stage)
        config = self._configs.get(stage)
        if config is not None:
            logger.debug("Stage %d configuration already loaded", stage)
            return config
        if self._loader is None:
            raise ConfigMissing(f"No configuration for stage {stage.name}")

        logger.debug("Loading .riftrc.%d configuration", stage)
        config = self._loader(stage)
        self._configs[stage] = config
        logger.debug(
            "Stage %s loaded with SP alignment %s (%d sections)",
            config.stage_name,
            config.sp_alignment,
            len(config.sections),
        )
        return config

    def get_section(self, stage: Stage | int, name: str) -> dict[str, str]:
        config = self.load_stage(stage)
        section = config.sections.get(name)
        if section is None:
            raise ConfigMissing(f"Stage {config.stage.name} has no section {name!r}")
        return dict(section)

    def get_value(self, stage: Stage | int, section: str, key: str) -> str:
        values = self.get_section(stage, section)
        if key not in values:
            raise ConfigMissing(f"Section {section!r} has no key {key!r}")
        return values[key]

    def get_pattern_rules(self, stage: Stage | int = Stage.TOKENIZER) -> list[PatternRule]:
        """
        Build pattern rules from the stage's TOKEN_PATTERNS section.

        Every ``<CATEGORY>_PATTERN`` key declares a rule; its priority comes
        from the matching ``<CATEGORY>_PRIORITY`` key. Rules keep the order
        in which their pattern keys were declared.
        """
        section = self.get_section(stage, TOKEN_PATTERNS)
        rules: list[PatternRule] = []
        for key, pattern in section.items():
            if not key.endswith(_PATTERN_SUFFIX):
                continue
            prefix = key[: -len(_PATTERN_SUFFIX)]
            try:
                category = TokenCategory(prefix.lower())
            except ValueError:
                raise ConfigInvalid(f"Unknown token category in {key!r}") from None

            priority_key = prefix + _PRIORITY_SUFFIX
            if priority_key not in section:
                raise ConfigMissing(f"Section {TOKEN_PATTERNS!r} has no key {priority_key!r}")
            priority = parse_int(section[priority_key], priority_key)
            try:
                rules.append(PatternRule(pattern=pattern, category=category, priority=priority))
            except ValidationError as e:
                raise ConfigInvalid(f"Invalid rule {key!r}: {e}") from e
        return rules

    def get_optimization_flags(self, stage: Stage | int = Stage.COORDINATOR) -> dict[str, bool]:
        section = self.get_section(stage, OPTIMIZATION_PASSES)
        return {name: parse_flag(value, name) for name, value in section.items()}


# =============================================================================
# Built-in defaults
# =============================================================================

_DEFAULT_CONFIGS: dict[Stage, dict] = {
    Stage.TOKENIZER: {
        "stage_name": "TOKENIZER",
        "sp_alignment": "LEXICAL_ANALYSIS",
        "sections": {
            TOKEN_PATTERNS: {
                "IDENTIFIER_PATTERN": r"^[a-zA-Z_]\w*$",
                "IDENTIFIER_PRIORITY": "100",
                "NUMBER_PATTERN": r"^\d+(\.\d+)?$",
                "NUMBER_PRIORITY": "90",
                "OPERATOR_PATTERN": r"^[+\-*/=<>!&|]$",
                "OPERATOR_PRIORITY": "80",
                "WHITESPACE_PATTERN": r"^\s+$",
                "WHITESPACE_PRIORITY": "10",
            },
            "DFA_CONFIGURATION": {
                "initial_state": "START",
                "final_states": "IDENTIFIER,NUMBER,OPERATOR",
                "error_recovery": "true",
            },
        },
    },
    Stage.PARSER: {
        "stage_name": "PARSER_BRIDGE",
        "sp_alignment": "SYNTACTIC_ANALYSIS",
        "sections": {
            "GRAMMAR_RULES": {
                "EXPRESSION_RULE": "expression -> term ((PLUS | MINUS) term)*",
                "TERM_RULE": "term -> factor ((MULTIPLY | DIVIDE) factor)*",
                "FACTOR_RULE": "factor -> IDENTIFIER | NUMBER",
            },
            PRECEDENCE_TABLE: {
                "MULTIPLY_PRECEDENCE": "20",
                "DIVIDE_PRECEDENCE": "20",
                "PLUS_PRECEDENCE": "10",
                "MINUS_PRECEDENCE": "10",
            },
        },
    },
    Stage.COORDINATOR: {
        "stage_name": "AST_COORDINATOR",
        "sp_alignment": "SEMANTIC_ANALYSIS",
        "sections": {
            OPTIMIZATION_PASSES: {
                "constant_folding": "enabled",
                "dead_code_elimination": "enabled",
                "common_subexpression_elimination": "disabled",
            },
        },
    },
    Stage.RENDERER: {
        "stage_name": "OUTPUT_GENERATOR",
        "sp_alignment": "CODE_GENERATION",
        "sections": {
            OUTPUT_FORMATS: {
                "primary_format": "LISP_STYLE_AST",
                "secondary_format": "C_CODE",
                "debug_format": "DOT_GRAPH",
                "json_export": "enabled",
            },
        },
    },
}


def default_stage_config(stage: Stage) -> StageConfig:
    """Built-in configuration for ``stage``."""
    return StageConfig(stage=stage, **_DEFAULT_CONFIGS[stage])
