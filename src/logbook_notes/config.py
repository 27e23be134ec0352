"""Configuration loading for the logbook.

The configuration holds a single setting, the logbook directory. It lives in
the user's config directory as ``config.toml`` or ``config.json``; new
configs are saved as JSON.

Loading never prompts. ``load_config`` returns ``Loaded`` or ``NotFound`` and
the caller decides what to do about a missing config.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Union

import portalocker
from platformdirs import user_config_dir

from .errors import ConfigError
from .locking import locked_atomic_write

# Python 3.11+ has tomllib in stdlib; fall back to tomli for older versions
try:
    import tomllib  # Python 3.11+
except ImportError:
    import tomli as tomllib  # Python <3.11

APP_NAME = "logbook"
CONFIG_ENV_VAR = "LOGBOOK_CONFIG"
DEFAULT_LOGBOOK_DIRNAME = "Logbook"

# Search order inside the config directory
CONFIG_FILENAMES = ("config.toml", "config.json")
DEFAULT_CONFIG_FILENAME = "config.json"


@dataclass
class LogbookConfig:
    """Resolved logbook settings."""
    logbook_dir: Path

    def to_dict(self) -> dict[str, Any]:
        return {"logbook_dir": str(self.logbook_dir)}


@dataclass(frozen=True)
class Loaded:
    """A config was found and parsed."""
    config: LogbookConfig
    path: Path


@dataclass(frozen=True)
class NotFound:
    """No config exists yet; ``path`` is where one should be saved."""
    path: Path


ConfigResult = Union[Loaded, NotFound]


def get_config_dir() -> Path:
    return Path(user_config_dir(APP_NAME))


def default_logbook_dir() -> Path:
    """Home directory (or the working directory without one) plus ``Logbook``."""
    try:
        base = Path.home()
    except RuntimeError:
        base = Path.cwd()
    return base / DEFAULT_LOGBOOK_DIRNAME


def find_config_file(config_dir: Path) -> Optional[Path]:
    """Find configuration file in the config directory.

    Search order:
    1. config.toml
    2. config.json
    """
    for name in CONFIG_FILENAMES:
        path = config_dir / name
        if path.exists():
            return path

    return None


def load_toml_config(path: Path) -> dict[str, Any]:
    """Load configuration from TOML file."""
    with open(path, "rb") as f:
        return tomllib.load(f)


def load_json_config(path: Path) -> dict[str, Any]:
    """Load configuration from JSON file."""
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def resolve_logbook_dir(value: Union[str, Path]) -> Path:
    return Path(value).expanduser().resolve()


def dict_to_config(data: Any) -> LogbookConfig:
    """Convert dictionary to LogbookConfig.

    Raises:
        ConfigError: If ``logbook_dir`` is missing or not a string.
    """
    if not isinstance(data, dict):
        raise ConfigError("Config must be a table/object with a logbook_dir key")

    logbook_dir = data.get("logbook_dir")
    if not isinstance(logbook_dir, str) or not logbook_dir.strip():
        raise ConfigError("Config is missing a logbook_dir setting")

    return LogbookConfig(logbook_dir=resolve_logbook_dir(logbook_dir))


def read_config_file(path: Path) -> LogbookConfig:
    """Parse a config file by suffix.

    Raises:
        ConfigError: If the file cannot be read or parsed.
    """
    suffix = path.suffix.lower()

    try:
        if suffix == ".toml":
            data = load_toml_config(path)
        elif suffix == ".json":
            data = load_json_config(path)
        else:
            raise ConfigError(f"Unsupported config file type: {suffix}")
    except (OSError, ValueError) as e:
        # JSONDecodeError and TOMLDecodeError are ValueErrors
        raise ConfigError(f"Could not read config {path}: {e}") from e

    return dict_to_config(data)


def load_config(config_path: Optional[Path] = None) -> ConfigResult:
    """Load the logbook configuration.

    Args:
        config_path: Explicit config file. Defaults to ``$LOGBOOK_CONFIG``,
            then a search of the user config directory.

    Returns:
        ``Loaded`` with the parsed config, or ``NotFound`` naming where a new
        config should be written.

    Raises:
        ConfigError: If a config file exists but is unreadable or invalid.
    """
    config_path = config_file_path(config_path)
    if not config_path.exists():
        return NotFound(path=config_path)

    return Loaded(config=read_config_file(config_path), path=config_path)


def config_file_path(config_path: Optional[Path] = None) -> Path:
    """Where the config is read from, whether or not it exists yet."""
    if config_path is None and os.environ.get(CONFIG_ENV_VAR):
        config_path = Path(os.environ[CONFIG_ENV_VAR])

    if config_path is None:
        config_dir = get_config_dir()
        return find_config_file(config_dir) or config_dir / DEFAULT_CONFIG_FILENAME

    return config_path.expanduser()


def check_save_path(path: Path) -> None:
    """Raise ``ConfigError`` unless ``save_config`` can write to ``path``."""
    if path.suffix.lower() != ".json":
        raise ConfigError(
            f"Configs can only be saved as JSON, not {path.suffix or 'no suffix'}. "
            f"Edit {path} by hand, or pass --config with a .json path."
        )


def save_config(config: LogbookConfig, path: Path) -> Path:
    """Persist ``config`` as JSON at ``path``.

    Raises:
        ConfigError: If the file cannot be written.
    """
    check_save_path(path)

    try:
        with locked_atomic_write(path) as f:
            json.dump(config.to_dict(), f, indent=2)
            f.write("\n")
    except (OSError, portalocker.LockException) as e:
        raise ConfigError(f"Could not write config {path}: {e}") from e

    return path
