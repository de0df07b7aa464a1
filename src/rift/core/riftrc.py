"""
Loader for ``.riftrc.N`` stage configuration files.

Each file is TOML. The ``[stage]`` table carries stage metadata; every
other table is a configuration section whose scalar values are kept as
strings in declaration order:

    [stage]
    name = "TOKENIZER"
    sp_alignment = "LEXICAL_ANALYSIS"
    governance_version = "1.0.0"

    [TOKEN_PATTERNS]
    IDENTIFIER_PATTERN = '^[a-zA-Z_]\\w*$'
    IDENTIFIER_PRIORITY = 100
"""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path

from pydantic import ValidationError

from rift.core.errors import ConfigInvalid, ConfigMissing
from rift.core.governance import Governance, Stage, StageConfig

logger = logging.getLogger(__name__)

RIFTRC_PREFIX = ".riftrc."


def riftrc_path(config_dir: Path, stage: Stage) -> Path:
    return config_dir / f"{RIFTRC_PREFIX}{int(stage)}"


def _scalar_to_str(value: object, key: str) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return str(value)
    raise ConfigInvalid(f"Key {key!r} must be a scalar, got {type(value).__name__}")


def parse_riftrc(text: str, stage: Stage, source: str = "<string>") -> StageConfig:
    """Parse the contents of a .riftrc file into a ``StageConfig``."""
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as e:
        raise ConfigInvalid(f"{source}: {e}") from e

    meta = data.pop("stage", None)
    if not isinstance(meta, dict):
        raise ConfigMissing(f"{source}: missing [stage] table")

    declared = meta.get("id")
    if declared is not None and declared != int(stage):
        raise ConfigInvalid(f"{source}: declares stage {declared}, expected {int(stage)}")

    sections: dict[str, dict[str, str]] = {}
    for name, table in data.items():
        if not isinstance(table, dict):
            raise ConfigInvalid(f"{source}: top-level key {name!r} must be a table")
        sections[name] = {key: _scalar_to_str(value, key) for key, value in table.items()}

    try:
        return StageConfig(
            stage=stage,
            stage_name=meta.get("name", stage.name),
            sp_alignment=meta.get("sp_alignment", ""),
            governance_version=meta.get("governance_version", "1.0.0"),
            sections=sections,
        )
    except ValidationError as e:
        raise ConfigInvalid(f"{source}: {e}") from e


def load_riftrc(path: Path, stage: Stage) -> StageConfig:
    """Read one .riftrc file from disk."""
    if not path.is_file():
        raise ConfigMissing(f"Configuration file not found: {path}")
    logger.debug("Reading %s", path)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigInvalid(f"Cannot read {path}: {e}") from e
    return parse_riftrc(text, stage, source=str(path))


def load_governance(config_dir: Path) -> Governance:
    """
    Governance backed by ``.riftrc.0`` ... ``.riftrc.3`` in ``config_dir``.

    Files are read lazily, the first time their stage is requested.
    """
    config_dir = Path(config_dir)
    if not config_dir.is_dir():
        raise ConfigMissing(f"Configuration directory not found: {config_dir}")

    def _load(stage: Stage) -> StageConfig:
        return load_riftrc(riftrc_path(config_dir, stage), stage)

    return Governance(loader=_load)
