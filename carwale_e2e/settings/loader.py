"""Settings loader for the CarWale suite.

Builds SuiteSettings from defaults, an optional YAML file, an optional
``.env`` file and the process environment (later sources win).
"""

import logging
import os
from pathlib import Path
from typing import Any, Mapping, Optional, Union

import yaml

from .schema import SuiteSettings, Viewport

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS_FILE = "carwale.yaml"
DEFAULT_ENV_FILE = ".env"

_INT_FIELDS = {
    "retries",
    "workers",
    "expect_timeout_ms",
    "action_timeout_ms",
    "navigation_timeout_ms",
}
_BOOL_FIELDS = {"ignore_https_errors", "headless"}
_FALSE_STRINGS = {"", "0", "false", "no", "off"}


def load_settings(
    path: Optional[Union[str, Path]] = None,
    environ: Optional[Mapping[str, str]] = None,
    env_file: Optional[Union[str, Path]] = None,
) -> SuiteSettings:
    """Load suite settings.

    Args:
        path: YAML settings file. None = use ``carwale.yaml`` if present.
        environ: Environment mapping. None = ``os.environ``.
        env_file: ``.env`` file. None = use ``.env`` if present.

    Returns:
        Resolved SuiteSettings.

    Raises:
        FileNotFoundError: If an explicitly given settings file doesn't exist.
        ValueError: If the YAML is malformed or a value has the wrong type.
    """
    env = dict(read_env_file(env_file))
    env.update(os.environ if environ is None else environ)

    settings = SuiteSettings()
    if _truthy(env.get("CI")):
        settings.retries = 2
        settings.workers = 1

    if path is not None:
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Settings file not found: {path}")
    elif Path(DEFAULT_SETTINGS_FILE).exists():
        path = Path(DEFAULT_SETTINGS_FILE)

    if path is not None:
        apply_settings_data(settings, _read_yaml(path), source=str(path))

    if env.get("BASE_URL"):
        settings.base_url = env["BASE_URL"].strip()
    if "HEADLESS" in env:
        settings.headless = _truthy(env["HEADLESS"])

    return settings


def read_env_file(env_file: Optional[Union[str, Path]] = None) -> dict[str, str]:
    """Read ``KEY=value`` lines from an env file. Missing file = empty."""
    env_path = Path(env_file) if env_file is not None else Path(DEFAULT_ENV_FILE)
    if not env_path.exists():
        return {}

    values: dict[str, str] = {}
    with open(env_path, "r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if line.startswith("#") or "=" not in line:
                continue
            key, value = line.split("=", 1)
            values[key.strip()] = value.strip().strip("'\"")
    return values


def apply_settings_data(
    settings: SuiteSettings, data: Any, source: str = "<inline>"
) -> SuiteSettings:
    """Apply a mapping of overrides (already loaded YAML) to settings."""
    if data is None:
        return settings
    if not isinstance(data, dict):
        raise ValueError(f"Settings must be a YAML mapping, got {type(data).__name__} ({source})")

    for key, value in data.items():
        if key not in SuiteSettings.__dataclass_fields__:
            logger.debug("Ignoring unknown setting %r in %s", key, source)
            continue

        if key == "viewport":
            value = _parse_viewport(value, source)
        elif key == "browsers":
            if isinstance(value, str):
                value = [value]
            if not isinstance(value, list):
                raise ValueError(f"'browsers' must be a list in {source}")
            value = [str(b).lower() for b in value]
        elif key in _INT_FIELDS:
            value = _as_int(key, value, source)
        elif key in _BOOL_FIELDS:
            value = value if isinstance(value, bool) else _truthy(str(value))
        elif value is not None:
            value = str(value)

        setattr(settings, key, value)

    return settings


def _read_yaml(path: Path) -> Any:
    with open(path, "r", encoding="utf-8") as f:
        try:
            return yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Malformed settings file {path}: {e}") from e


def _parse_viewport(value: Any, source: str) -> Viewport:
    if isinstance(value, Viewport):
        return value
    if isinstance(value, dict):
        return Viewport(
            width=_as_int("viewport.width", value.get("width", 1920), source),
            height=_as_int("viewport.height", value.get("height", 1080), source),
        )
    if isinstance(value, str):
        parts = value.lower().split("x")
        if len(parts) == 2:
            return Viewport(
                width=_as_int("viewport.width", parts[0], source),
                height=_as_int("viewport.height", parts[1], source),
            )
    raise ValueError(
        f"Invalid viewport {value!r} in {source}. Expected 'WIDTHxHEIGHT' or a mapping."
    )


def _as_int(key: str, value: Any, source: str) -> Optional[int]:
    if value is None and key == "workers":
        return None
    if isinstance(value, bool):
        raise ValueError(f"'{key}' must be an integer in {source}, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValueError(f"'{key}' must be an integer in {source}, got {value!r}") from None


def _truthy(value: Optional[str]) -> bool:
    if value is None:
        return False
    return value.strip().lower() not in _FALSE_STRINGS
