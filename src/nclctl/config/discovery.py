"""Locating and reading nclctl configuration.

A project is configured either by ``nclctl.toml`` or by a ``[tool.nclctl]``
table in ``pyproject.toml``. Discovery walks up from the starting directory
and stops at the first directory holding either one; when both are present
``nclctl.toml`` wins. A ``pyproject.toml`` without the table does not count.
``NCLCTL_CONFIG`` names a file directly and disables the walk.
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "nclctl.toml"
PYPROJECT_FILENAME = "pyproject.toml"
CONFIG_ENV_VAR = "NCLCTL_CONFIG"


def read_config_table(path: Path) -> dict[str, Any]:
    """The nclctl settings stored in *path*.

    For ``pyproject.toml`` this is the ``[tool.nclctl]`` table (empty when
    absent); any other file is read whole.

    Raises:
        OSError: the file cannot be read.
        tomllib.TOMLDecodeError: the file is not valid TOML.
    """
    data = tomllib.loads(path.read_text(encoding="utf-8"))
    if path.name != PYPROJECT_FILENAME:
        return data
    table = data.get("tool", {}).get("nclctl", {})
    return dict(table) if isinstance(table, dict) else {}


def _declares_nclctl(pyproject: Path) -> bool:
    try:
        data = tomllib.loads(pyproject.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        logger.warning("Ignoring unparsable %s during config discovery: %s", pyproject, exc)
        return False
    return "nclctl" in data.get("tool", {})


def _config_in(directory: Path) -> Path | None:
    dedicated = directory / CONFIG_FILENAME
    if dedicated.is_file():
        return dedicated
    pyproject = directory / PYPROJECT_FILENAME
    if pyproject.is_file() and _declares_nclctl(pyproject):
        return pyproject
    return None


def find_config(start: Path | None = None) -> Path | None:
    """The config file governing *start* (default: the working directory).

    Returns None when nothing is found, or when ``NCLCTL_CONFIG`` names a
    file that does not exist.
    """
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        path = Path(override)
        return path if path.is_file() else None

    directory = (start or Path.cwd()).resolve()
    for candidate_dir in (directory, *directory.parents):
        found = _config_in(candidate_dir)
        if found is not None:
            return found
    return None
