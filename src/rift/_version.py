"""Version lookup for ``rift --version`` and ``rift.__version__``."""

import tomllib
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

DISTRIBUTION = "rift-pipeline"

_PYPROJECT = Path(__file__).resolve().parents[2] / "pyproject.toml"


def _checkout_version(pyproject: Path) -> str | None:
    """Version declared by a source checkout's pyproject, if it is ours."""
    if not pyproject.is_file():
        return None
    with pyproject.open("rb") as f:
        project = tomllib.load(f).get("project", {})
    if project.get("name") != DISTRIBUTION:
        return None
    return project.get("version")


def get_version() -> str:
    """Checkout version when running from source, else the installed one."""
    checkout = _checkout_version(_PYPROJECT)
    if checkout is not None:
        return checkout
    try:
        return version(DISTRIBUTION)
    except PackageNotFoundError:
        return "0.0.0"
