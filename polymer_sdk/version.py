"""
Version information for the Polymer SDK.
"""
import importlib.metadata
import pathlib
from typing import Optional

import tomli

DISTRIBUTION_NAME = "polymer-sdk"
FALLBACK_VERSION = "0.1.0"
PYPROJECT_PATH = pathlib.Path(__file__).parent.parent / "pyproject.toml"


def _installed_version() -> Optional[str]:
    try:
        return importlib.metadata.version(DISTRIBUTION_NAME)
    except importlib.metadata.PackageNotFoundError:
        return None


def _source_tree_version(path: pathlib.Path = PYPROJECT_PATH) -> Optional[str]:
    """Version from a source checkout's pyproject.toml, or None if unreadable."""
    try:
        with path.open("rb") as f:
            project = tomli.load(f).get("project", {})
    except (FileNotFoundError, tomli.TOMLDecodeError):
        return None
    return project.get("version")


def get_version() -> str:
    return _installed_version() or _source_tree_version() or FALLBACK_VERSION


__version__ = get_version()
