"""Tests for version lookup."""

from __future__ import annotations

import tomllib
from importlib.metadata import PackageNotFoundError
from pathlib import Path

import pytest

import rift
from rift import _version
from rift._version import DISTRIBUTION, get_version

PYPROJECT = Path(__file__).resolve().parents[2] / "pyproject.toml"


def _not_installed(name: str) -> str:
    raise PackageNotFoundError(name)


class TestGetVersion:
    def test_checkout_version(self) -> None:
        with PYPROJECT.open("rb") as f:
            declared = tomllib.load(f)["project"]["version"]
        assert get_version() == declared
        assert rift.__version__ == declared

    def test_installed_version_without_checkout(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(_version, "_PYPROJECT", tmp_path / "pyproject.toml")
        monkeypatch.setattr(_version, "version", lambda name: "9.9.9")
        assert get_version() == "9.9.9"

    def test_foreign_pyproject_is_ignored(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text('[project]\nname = "something-else"\nversion = "4.0.0"\n')
        monkeypatch.setattr(_version, "_PYPROJECT", pyproject)
        monkeypatch.setattr(_version, "version", _not_installed)
        assert get_version() == "0.0.0"

    def test_not_installed(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(_version, "_PYPROJECT", tmp_path / "missing.toml")
        monkeypatch.setattr(_version, "version", _not_installed)
        assert get_version() == "0.0.0"
        assert DISTRIBUTION == "rift-pipeline"
