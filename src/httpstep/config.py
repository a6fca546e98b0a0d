"""Configuration management with XDG paths, atomic writes, and env overrides.

This module handles all persistent state of the ``httpstep`` command:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.httpstep/`` on macOS and Windows. See :func:`get_config_dir`,
  :func:`get_data_dir`, :func:`get_steps_dir`.
* **Global config** -- a single :class:`~httpstep.models.GlobalConfig` JSON
  file storing defaults (spec URL, request timeout, output format).
* **Saved steps** -- one JSON file per named
  :class:`~httpstep.models.SavedStep`, managed via :func:`load_step`,
  :func:`save_step`, :func:`delete_step`.
* **Environment overrides** -- :func:`resolve_config` layers
  ``HTTPSTEP_SPEC_URL`` and ``HTTPSTEP_TIMEOUT`` over the global config.

All file writes go through :func:`_atomic_write` (temp file + rename).
Parsed specs are never persisted here; only step configurations are.
"""

from __future__ import annotations

import json
import os
import platform
import re
import tempfile
from pathlib import Path
from typing import Optional

from httpstep.exceptions import ConfigError
from httpstep.models import GlobalConfig, SavedStep

_APP_NAME = "httpstep"
_CONFIG_FILENAME = "config.json"
_STEP_NAME_RE = re.compile(r"[A-Za-z0-9][A-Za-z0-9._-]*")


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    """Fallback base directory for non-XDG platforms (macOS, Windows)."""
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/httpstep/`` (default ``~/.config/httpstep/``).
    On macOS/Windows: ``~/.httpstep/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/httpstep/`` (default ``~/.local/share/httpstep/``).
    On macOS/Windows: ``~/.httpstep/logs/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_steps_dir() -> Path:
    """Return the saved-steps directory (``<config_dir>/steps/``), creating it if necessary."""
    path = get_config_dir() / "steps"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file lives in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems. On failure the temp
    file is removed.
    """
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


def _global_config_path() -> Path:
    return get_config_dir() / _CONFIG_FILENAME


def load_global_config() -> GlobalConfig:
    """Load the global configuration from the config directory.

    Returns:
        The deserialised :class:`~httpstep.models.GlobalConfig`, or a
        default instance when the file does not exist.

    Raises:
        ConfigError: If the file contains invalid JSON or fails validation.
    """
    path = _global_config_path()
    if not path.is_file():
        return GlobalConfig()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return GlobalConfig.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    """Persist the global configuration atomically to disk."""
    data = config.model_dump(mode="json")
    _atomic_write(_global_config_path(), json.dumps(data, indent=2) + "\n")


def resolve_config() -> GlobalConfig:
    """Load the global config and apply environment overrides.

    Precedence (high to low):
        1. ``HTTPSTEP_SPEC_URL`` / ``HTTPSTEP_TIMEOUT``
        2. User config (``~/.config/httpstep/config.json``)
        3. Defaults

    Raises:
        ConfigError: If the config file is invalid or ``HTTPSTEP_TIMEOUT``
            is not a number.
    """
    config = load_global_config()

    env_spec_url = os.environ.get("HTTPSTEP_SPEC_URL")
    if env_spec_url:
        config.default_spec_url = env_spec_url

    env_timeout = os.environ.get("HTTPSTEP_TIMEOUT")
    if env_timeout:
        try:
            config.request.timeout = float(env_timeout)
        except ValueError:
            raise ConfigError(
                f"HTTPSTEP_TIMEOUT must be a number of seconds, got: {env_timeout}"
            ) from None

    return config


# --- Saved steps ---


def validate_step_name(name: str) -> None:
    """Reject step names that are not a single safe file name.

    Names start with a letter or digit and may contain letters, digits, dots,
    dashes and underscores, so a step file never lands outside
    :func:`get_steps_dir`.

    Raises:
        ConfigError: If *name* is not a valid step name.
    """
    if not _STEP_NAME_RE.fullmatch(name):
        raise ConfigError(
            f"Invalid step name '{name}': use letters, digits, '.', '-' or '_', "
            "starting with a letter or digit"
        )


def _step_path(name: str) -> Path:
    validate_step_name(name)
    return get_steps_dir() / f"{name}.json"


def list_steps() -> list[str]:
    """Return all saved step names, sorted alphabetically."""
    return sorted(p.stem for p in get_steps_dir().glob("*.json") if p.is_file())


def load_step(name: str) -> SavedStep:
    """Load a saved step by name.

    Raises:
        ConfigError: If the step does not exist, contains invalid JSON, or
            fails validation.
    """
    path = _step_path(name)
    if not path.is_file():
        raise ConfigError(f"Step '{name}' not found at {path}")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return SavedStep.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid step '{name}' at {path}: {exc}") from exc


def save_step(step: SavedStep) -> Path:
    """Persist *step* atomically and return the file it was written to.

    The step configuration is written with its wire aliases
    (``contentType``) so the file can be handed to a workflow editor as is.
    """
    path = _step_path(step.name)
    data = step.model_dump(mode="json", by_alias=True)
    _atomic_write(path, json.dumps(data, indent=2) + "\n")
    return path


def delete_step(name: str) -> None:
    """Delete a saved step.

    Raises:
        ConfigError: If the step does not exist.
    """
    path = _step_path(name)
    if not path.is_file():
        raise ConfigError(f"Step '{name}' not found at {path}")
    path.unlink()


def step_exists(name: str) -> bool:
    """Return True if a step named *name* is saved."""
    return _step_path(name).is_file()
