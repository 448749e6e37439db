"""Load PichuConfig from pichu.yaml / pichu.toml if present.

Merges file config with keyword overrides. Overrides take precedence.
"""

from __future__ import annotations

import tomllib
from pathlib import Path

import yaml

from pichu._errors import ConfigError
from pichu.config import PichuConfig

_CONFIG_KEYS = frozenset({
    "output", "workers", "debounce_ms", "encoding", "highlight_style",
})


def load_config(root: Path, **overrides: object) -> PichuConfig:
    """Load PichuConfig from root, optionally merging a config file.

    Looks for pichu.yaml, pichu.yml, or pichu.toml in root. If found, loads
    and merges with overrides. Overrides take precedence.

    Raises:
        ConfigError: If a config file exists but cannot be parsed, or
            contains unknown keys.

    """
    file_config = _read_pichu_config(root)
    merged = {**file_config, **overrides}
    unknown = sorted(set(merged) - _CONFIG_KEYS)
    if unknown:
        msg = f"Unknown config keys: {', '.join(unknown)}"
        raise ConfigError(msg)
    if "output" in merged and not isinstance(merged["output"], Path):
        merged["output"] = Path(str(merged["output"]))
    try:
        return PichuConfig(root=root, **merged)
    except TypeError as exc:
        raise ConfigError(str(exc)) from exc


def _read_pichu_config(root: Path) -> dict[str, object]:
    """Read pichu config from yaml/toml if present. Returns empty dict otherwise."""
    for name in ("pichu.yaml", "pichu.yml"):
        path = root / name
        if path.is_file():
            return _parse_yaml(path)
    toml_path = root / "pichu.toml"
    if toml_path.is_file():
        return _parse_toml(toml_path)
    return {}


def _parse_yaml(path: Path) -> dict[str, object]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        msg = f"Failed to parse {path}: {exc}"
        raise ConfigError(msg) from exc
    if not isinstance(data, dict):
        msg = f"{path} must contain a mapping, got {type(data).__name__}"
        raise ConfigError(msg)
    return _flatten_pichu_section(data)


def _parse_toml(path: Path) -> dict[str, object]:
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        msg = f"Failed to parse {path}: {exc}"
        raise ConfigError(msg) from exc
    return _flatten_pichu_section(data)


def _flatten_pichu_section(data: dict[str, object]) -> dict[str, object]:
    """Extract pichu.* keys into top-level config."""
    result: dict[str, object] = {}
    section = data.get("pichu")
    if isinstance(section, dict):
        result.update(section)
    for k, v in data.items():
        if k != "pichu" and k in _CONFIG_KEYS:
            result[k] = v
    return result
