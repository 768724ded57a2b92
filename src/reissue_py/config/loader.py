"""Loading [tool.reissue] configuration from pyproject.toml."""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from reissue_py.config.models import ReissueConfig
from reissue_py.exceptions import ConfigNotFoundError, ConfigValidationError

logger = logging.getLogger(__name__)

PYPROJECT = "pyproject.toml"
TOOL_KEY = "reissue"


def find_pyproject_toml(start: Path | None = None) -> Path:
    """Find pyproject.toml in start or any parent directory.

    Args:
        start: Directory to search from (defaults to the working directory)

    Returns:
        Path to pyproject.toml

    Raises:
        ConfigNotFoundError: If no pyproject.toml is found
    """
    current = (start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        candidate = directory / PYPROJECT
        if candidate.is_file():
            return candidate
    raise ConfigNotFoundError(f"No {PYPROJECT} found in {current} or its parents")


def load_pyproject_toml(path: Path) -> dict[str, Any]:
    """Read and parse a pyproject.toml file.

    Raises:
        ConfigNotFoundError: If the file does not exist
        ConfigValidationError: If the file is not valid TOML
    """
    if not path.is_file():
        raise ConfigNotFoundError(f"{path} does not exist")
    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except tomllib.TOMLDecodeError as e:
        raise ConfigValidationError(f"Invalid TOML in {path}: {e}") from e


def extract_reissue_config(pyproject: dict[str, Any]) -> dict[str, Any]:
    """Return the [tool.reissue] table, or an empty dict."""
    return pyproject.get("tool", {}).get(TOOL_KEY, {})


def load_config(path: Path | None = None) -> ReissueConfig:
    """Load configuration for the project at path.

    Relative paths in the configuration are resolved against the directory
    holding pyproject.toml. A missing [tool.reissue] table gives defaults.

    Args:
        path: Project directory or pyproject.toml file

    Returns:
        Validated configuration

    Raises:
        ConfigNotFoundError: If no pyproject.toml is found
        ConfigValidationError: If the configuration is invalid
    """
    if path is not None and path.is_file():
        pyproject_path = path
    else:
        pyproject_path = find_pyproject_toml(path)

    data = extract_reissue_config(load_pyproject_toml(pyproject_path))
    if not data:
        logger.debug("No [tool.%s] table in %s, using defaults", TOOL_KEY, pyproject_path)

    try:
        config = ReissueConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigValidationError(f"Invalid [tool.{TOOL_KEY}] configuration:\n{e}") from e

    return config.resolve(pyproject_path.parent)
