"""Load TabbyConfig from tabby.toml / tabby.yaml and the environment.

Precedence, lowest first: dataclass defaults, config file, environment
variables, explicit overrides (CLI flags). ``None`` overrides are ignored so
unset CLI flags fall through to the layers below.
"""

from __future__ import annotations

import os
import tomllib
from collections.abc import Mapping
from pathlib import Path

import yaml

from tabby._errors import ConfigError
from tabby.config import TabbyConfig

# Environment variable -> config field
ENV_VARS: dict[str, str] = {
    "SRC_DIR": "source",
    "DEST_DIR": "destination",
    "HOST": "host",
    "PORT": "port",
    "DEBUG": "debug",
}

_KNOWN_KEYS = frozenset({"source", "destination", "host", "port", "debug"})
_TRUE = frozenset({"1", "true", "yes", "on"})
_FALSE = frozenset({"0", "false", "no", "off", ""})


def load_config(
    root: Path | None = None,
    *,
    environ: Mapping[str, str] | None = None,
    **overrides: object,
) -> TabbyConfig:
    """Load TabbyConfig for *root*, merging file, environment and overrides.

    Raises:
        ConfigError: If a config file cannot be parsed or a value has the
            wrong type.

    """
    root = Path.cwd() if root is None else Path(root)
    env = os.environ if environ is None else environ

    merged: dict[str, object] = {}
    merged.update(_read_config_file(root))
    merged.update(_read_environ(env))
    merged.update({k: v for k, v in overrides.items() if v is not None})

    return TabbyConfig(root=root, **_coerce(merged))


def _read_config_file(root: Path) -> dict[str, object]:
    """Read tabby config from yaml/toml if present. Returns empty dict otherwise."""
    for name in ("tabby.yaml", "tabby.yml"):
        path = root / name
        if path.is_file():
            return _parse_yaml(path)
    toml_path = root / "tabby.toml"
    if toml_path.is_file():
        return _parse_toml(toml_path)
    return {}


def _parse_yaml(path: Path) -> dict[str, object]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        msg = f"Invalid YAML in {path}: {exc}"
        raise ConfigError(msg) from exc
    if not isinstance(data, dict):
        msg = f"{path} must contain a mapping at the top level"
        raise ConfigError(msg)
    return _flatten_tabby_section(data)


def _parse_toml(path: Path) -> dict[str, object]:
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        msg = f"Invalid TOML in {path}: {exc}"
        raise ConfigError(msg) from exc
    return _flatten_tabby_section(data)


def _flatten_tabby_section(data: dict[str, object]) -> dict[str, object]:
    """Extract tabby.* keys and known top-level keys into one mapping."""
    result: dict[str, object] = {}
    for k, v in data.items():
        if k in _KNOWN_KEYS:
            result[k] = v
    section = data.get("tabby")
    if isinstance(section, dict):
        for k, v in section.items():
            if k not in _KNOWN_KEYS:
                msg = f"Unknown tabby config key: {k!r}"
                raise ConfigError(msg)
            result[k] = v
    return result


def _read_environ(environ: Mapping[str, str]) -> dict[str, object]:
    return {field: environ[var] for var, field in ENV_VARS.items() if var in environ}


def _coerce(values: dict[str, object]) -> dict[str, object]:
    """Convert raw file/env values to the types TabbyConfig expects."""
    result: dict[str, object] = {}
    for key, value in values.items():
        if key in ("source", "destination"):
            result[key] = value if isinstance(value, Path) else Path(str(value))
        elif key == "port":
            result[key] = _parse_port(value)
        elif key == "debug":
            result[key] = _parse_bool(value)
        elif key == "host":
            result[key] = str(value)
    return result


def _parse_port(value: object) -> int:
    if isinstance(value, bool):
        msg = f"Invalid port: {value!r}"
        raise ConfigError(msg)
    try:
        port = int(value)  # type: ignore[call-overload]
    except (TypeError, ValueError) as exc:
        msg = f"Invalid port: {value!r}"
        raise ConfigError(msg) from exc
    if not 0 <= port <= 65535:
        msg = f"Port out of range: {port}"
        raise ConfigError(msg)
    return port


def _parse_bool(value: object) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    msg = f"Invalid boolean: {value!r}"
    raise ConfigError(msg)
