"""Configuration management with XDG paths, atomic writes, and precedence resolution.

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.specview/`` on macOS and Windows. See :func:`get_config_dir` and
  :func:`get_data_dir`.
* **Global config** -- a single :class:`~specview.models.GlobalConfig`
  JSON file with synthesizer, summary, viewer and output defaults.
* **Precedence resolution** -- :func:`resolve_config` layers the
  project-local ``specview.json``, environment variables and CLI flags on
  top of the global config.
* **Editing** -- :func:`set_config_value` and :func:`reset_config_value`
  change one dotted key (``synthesis.label_prefix``) with validation.

File writes go through :func:`_atomic_write` (temp file + ``os.replace``).
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ValidationError

from specview.exceptions import ConfigError
from specview.models import GlobalConfig

_APP_NAME = "specview"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "specview.json"

ENV_FORMAT = "SPECVIEW_FORMAT"
ENV_DEBOUNCE = "SPECVIEW_DEBOUNCE"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True on platforms that follow the XDG Base Directory spec (Linux/BSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from *env_var*, else ``$HOME/<segments>``."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/specview/`` (default ``~/.config/specview/``).
    On macOS/Windows: ``~/.specview/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/specview/`` (default ``~/.local/share/specview/``).
    On macOS/Windows: ``~/.specview/logs/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write *data* to *path* atomically using a temp file in the same directory."""
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Global config ---


def global_config_path() -> Path:
    """Path of the user-wide config file (which may not exist yet)."""
    return get_config_dir() / _CONFIG_FILENAME


def load_global_config() -> GlobalConfig:
    """Load the user-wide configuration.

    Returns:
        The stored :class:`~specview.models.GlobalConfig`, or defaults when
        no file exists.

    Raises:
        ConfigError: If the file is not valid JSON or fails validation.
    """
    path = global_config_path()
    if not path.is_file():
        return GlobalConfig()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return GlobalConfig.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    """Persist *config* atomically."""
    data = config.model_dump(mode="json")
    _atomic_write(global_config_path(), json.dumps(data, indent=2) + "\n")


# --- Project-local config ---


def load_project_config() -> Optional[dict[str, Any]]:
    """Load ``./specview.json``, a partial config with the same sections as the global one.

    Returns:
        The parsed JSON object, or ``None`` if the file does not exist.

    Raises:
        ConfigError: If the file is not a JSON object.
    """
    path = Path.cwd() / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid project config at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid project config at {path}: expected a JSON object")
    return data


# --- Precedence resolution ---


def resolve_config(
    cli_format: Optional[str] = None,
    cli_debounce: Optional[float] = None,
) -> GlobalConfig:
    """Resolve the effective configuration.

    Precedence (high to low):
        1. CLI flags (``cli_format``, ``cli_debounce``)
        2. Environment variables (``SPECVIEW_FORMAT``, ``SPECVIEW_DEBOUNCE``)
        3. Project config (``./specview.json``)
        4. User config (``~/.config/specview/config.json``)
        5. Defaults

    Raises:
        ConfigError: If any layer holds an invalid value.
    """
    data = load_global_config().model_dump(mode="json")

    project = load_project_config()
    if project is not None:
        data = _deep_merge(data, project)

    env_format = os.environ.get(ENV_FORMAT)
    if env_format:
        data["output"]["format"] = env_format
    env_debounce = os.environ.get(ENV_DEBOUNCE)
    if env_debounce:
        data["viewer"]["debounce_seconds"] = _parse_float(ENV_DEBOUNCE, env_debounce)

    if cli_format is not None:
        data["output"]["format"] = cli_format
    if cli_debounce is not None:
        data["viewer"]["debounce_seconds"] = cli_debounce

    try:
        return GlobalConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _parse_float(name: str, raw: str) -> float:
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be a number, got '{raw}'") from exc


# --- Editing ---


def _split_key(key: str) -> tuple[str, str]:
    section, _, field = key.partition(".")
    sections = GlobalConfig.model_fields
    if section not in sections or not field:
        raise ConfigError(
            f"Unknown config key '{key}'. Keys look like 'section.field' with "
            f"section one of: {', '.join(sections)}"
        )
    section_model = getattr(GlobalConfig(), section)
    assert isinstance(section_model, BaseModel)
    if field not in type(section_model).model_fields:
        raise ConfigError(
            f"Unknown config key '{key}'. Fields of '{section}': "
            f"{', '.join(type(section_model).model_fields)}"
        )
    return section, field


def set_config_value(config: GlobalConfig, key: str, raw_value: str) -> GlobalConfig:
    """Return a copy of *config* with the dotted *key* set to *raw_value*.

    *raw_value* is decoded as JSON when possible (``3``, ``true``), otherwise
    used as a plain string, and then validated by the section's model.

    Raises:
        ConfigError: For unknown keys or values the model rejects.
    """
    section, field = _split_key(key)
    try:
        value: Any = json.loads(raw_value)
    except json.JSONDecodeError:
        value = raw_value

    data = config.model_dump(mode="json")
    data[section][field] = value
    try:
        return GlobalConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid value for '{key}': {exc.errors()[0]['msg']}") from exc


def reset_config_value(config: GlobalConfig, key: Optional[str] = None) -> GlobalConfig:
    """Return *config* with *key* (or everything, when ``None``) back at its default."""
    if key is None:
        return GlobalConfig()
    section, field = _split_key(key)
    data = config.model_dump(mode="json")
    data[section][field] = getattr(getattr(GlobalConfig(), section), field)
    return GlobalConfig.model_validate(data)
