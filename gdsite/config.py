from __future__ import annotations

import json
import sys
from pathlib import Path

import yaml

try:
    import tomllib as toml
except ImportError:
    import tomli as toml

from .references import DEFAULT_BASE_URL

DEFAULTS = {
    "class_reference_url": DEFAULT_BASE_URL,
    "pygments_style": "default",
    "line_numbers": True,
    "site_name": "GDScript Notes",
    "site_url": "",
}


def config_error(message: str) -> None:
    print(message, file=sys.stderr)
    sys.exit(1)


def parse_config_text(text: str, suffix: str, path: Path) -> object:
    if suffix == ".toml":
        try:
            return toml.loads(text)
        except toml.TOMLDecodeError as exc:
            config_error(f"Invalid TOML in config file {path}: {exc}")
    if suffix in {".yml", ".yaml"}:
        try:
            return yaml.safe_load(text)
        except yaml.YAMLError as exc:
            config_error(f"Invalid YAML in config file {path}: {exc}")
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        config_error(f"Invalid JSON in config file {path}: {exc}")


def load_config(path: Path) -> dict:
    """Read a TOML, YAML or JSON site config; a missing file is an empty config."""
    if not path.exists():
        return {}
    data = parse_config_text(path.read_text(encoding="utf-8"), path.suffix.lower(), path)
    if data is None:
        return {}
    if not isinstance(data, dict):
        config_error(f"Config file must be a mapping: {path}")
    return data


def site_settings(config: dict) -> dict:
    settings = dict(DEFAULTS)
    for key, value in config.items():
        if key in DEFAULTS and value is not None:
            settings[key] = value
    return settings
