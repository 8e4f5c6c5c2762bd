"""
Configuration loader — reads ``.stampede.yml`` into a typed config.

The file is optional. It holds defaults for the ``new`` command and the
external tool executables, so a team can pin its database dialect or
point at a specific ``dep`` binary without repeating flags.

Example::

    new:
      db_type: sqlite3
      vcs: none
    tools:
      dep: /opt/go/bin/dep
    command_timeout: 300
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError

from stampede.adapters.shell.command import DEFAULT_TIMEOUT
from stampede.core.errors import ConfigFileError

logger = logging.getLogger(__name__)

# Default config filename
CONFIG_FILE = ".stampede.yml"

ENV_COMMAND_TIMEOUT = "STAMPEDE_COMMAND_TIMEOUT"


class NewDefaults(BaseModel):
    """Defaults for ``new`` flags that take a value."""

    db_type: str = "postgres"
    vcs: str = "git"


class ToolsConfig(BaseModel):
    """External executables, by name or path."""

    dep: str = "dep"
    git: str = "git"
    bzr: str = "bzr"
    npm: str = "npm"


class StampedeConfig(BaseModel):
    """Top-level stampede configuration."""

    new: NewDefaults = Field(default_factory=NewDefaults)
    tools: ToolsConfig = Field(default_factory=ToolsConfig)
    command_timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0)
    source: Path | None = None  # file the config came from, None = built-in defaults


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Search for ``.stampede.yml`` from ``start_dir`` upward, then in $HOME.

    Args:
        start_dir: Directory to start searching from (default: cwd).

    Returns:
        Path to the config file, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / CONFIG_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break  # filesystem root
        current = parent

    home = Path.home() / CONFIG_FILE
    if home.is_file():
        return home
    return None


def load_config(path: Path | None = None, search: bool = True) -> StampedeConfig:
    """Load and validate configuration.

    Args:
        path: Explicit config file. Must exist when given.
        search: If no path is given, look for one with ``find_config_file``.

    Returns:
        Validated StampedeConfig (built-in defaults when no file is found).

    Raises:
        ConfigFileError: If the file is missing, unreadable or invalid.
    """
    if path is None and search:
        path = find_config_file()

    data: dict = {}
    if path is not None:
        if not path.is_file():
            raise ConfigFileError(f"Config file not found: {path}")

        logger.debug("Loading stampede config from %s", path)
        try:
            raw = path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigFileError(f"Cannot read {path}: {e}") from e

        try:
            loaded = yaml.safe_load(raw)
        except yaml.YAMLError as e:
            raise ConfigFileError(f"Invalid YAML in {path}: {e}") from e

        if loaded is None:
            loaded = {}
        if not isinstance(loaded, dict):
            raise ConfigFileError(
                f"Expected a YAML mapping in {path}, got {type(loaded).__name__}"
            )
        data = loaded

    timeout = os.environ.get(ENV_COMMAND_TIMEOUT)
    if timeout:
        data = {**data, "command_timeout": timeout}

    try:
        config = StampedeConfig.model_validate({**data, "source": path})
    except ValidationError as e:
        origin = path or "environment"
        raise ConfigFileError(f"Invalid stampede configuration in {origin}: {e}") from e

    return config
