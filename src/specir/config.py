"""Configuration loading with XDG paths and precedence resolution.

specir reads its settings into a :class:`~specir.models.ProcessorConfig`
from several layers, highest precedence first:

1. CLI flags (``--config``, ``--base-module``, ``--policy``, ``--ignore``)
2. Environment variables (``SPECIR_BASE_MODULE``, ``SPECIR_POLICY``)
3. The file named by ``SPECIR_CONFIG``
4. Project config (``./specir.json``)
5. User config (``$XDG_CONFIG_HOME/specir/config.json`` on Linux/BSD,
   ``~/.specir/config.json`` elsewhere)
6. Defaults

Each file layer is a JSON object whose keys are ``ProcessorConfig`` fields.
Later layers replace whole keys; lists are not merged.
"""

from __future__ import annotations

import json
import os
import platform
from pathlib import Path
from typing import Any, Optional

from specir.exceptions import ConfigError
from specir.models import ProcessorConfig

_APP_NAME = "specir"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "specir.json"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform follows the XDG Base Directory layout (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def get_config_dir() -> Path:
    """Return the user configuration directory (not created).

    On Linux/BSD: ``$XDG_CONFIG_HOME/specir/`` (default ``~/.config/specir/``).
    On macOS/Windows: ``~/.specir/``.
    """
    if not _is_xdg_platform():
        return Path.home() / f".{_APP_NAME}"
    env_value = os.environ.get("XDG_CONFIG_HOME", "")
    base = Path(env_value) if env_value else Path.home() / ".config"
    return base / _APP_NAME


# --- File layers ---


def _read_json(path: Path, label: str) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Invalid {label} at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid {label} at {path}: expected a JSON object")
    return data


def load_user_config() -> dict[str, Any]:
    """Load the user config file, or ``{}`` when it does not exist.

    Raises:
        ConfigError: If the file exists but is not a JSON object.
    """
    path = get_config_dir() / _CONFIG_FILENAME
    if not path.is_file():
        return {}
    return _read_json(path, "user config")


def load_project_config() -> Optional[dict[str, Any]]:
    """Load ``./specir.json``, or ``None`` when it does not exist.

    Raises:
        ConfigError: If the file exists but is not a JSON object.
    """
    path = Path.cwd() / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    return _read_json(path, "project config")


def load_config_file(path: str) -> dict[str, Any]:
    """Load an explicitly named config file, which must exist.

    Raises:
        ConfigError: If the file is missing or is not a JSON object.
    """
    file_path = Path(path)
    if not file_path.is_file():
        raise ConfigError(f"Config file not found: {path}")
    return _read_json(file_path, "config file")


# --- Precedence resolution ---


def resolve_config(
    cli_config: Optional[str] = None,
    cli_base_module: Optional[str] = None,
    cli_policy: Optional[str] = None,
    cli_ignore: Optional[list[str]] = None,
) -> ProcessorConfig:
    """Resolve the effective :class:`~specir.models.ProcessorConfig`.

    See the module docstring for the precedence chain. ``cli_ignore``
    patterns are appended to whatever the lower layers configured.

    Raises:
        ConfigError: If a config file is invalid or the merged settings fail
            validation.
    """
    data: dict[str, Any] = {}

    # 5. User config
    data.update(load_user_config())
    # 4. Project-local config
    project = load_project_config()
    if project is not None:
        data.update(project)
    # 3. File named by the environment
    env_config = os.environ.get("SPECIR_CONFIG")
    if env_config:
        data.update(load_config_file(env_config))
    # 2. Environment variables
    env_base_module = os.environ.get("SPECIR_BASE_MODULE")
    if env_base_module:
        data["base_module"] = env_base_module
    env_policy = os.environ.get("SPECIR_POLICY")
    if env_policy:
        data["policy"] = env_policy
    # 1. CLI flags (highest precedence)
    if cli_config is not None:
        data.update(load_config_file(cli_config))
    if cli_base_module is not None:
        data["base_module"] = cli_base_module
    if cli_policy is not None:
        data["policy"] = cli_policy
    if cli_ignore:
        data["ignore"] = list(data.get("ignore") or []) + list(cli_ignore)

    try:
        return ProcessorConfig.model_validate(data)
    except ValueError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
