"""Configuration loading for knowledge extraction (.knowledge-extractor.yml)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from .git.clone import DEFAULT_CLONE_DIR

CONFIG_FILENAME = ".knowledge-extractor.yml"
OUTPUT_FORMATS = ("json", "yaml")

_ENV_KEYS: Dict[str, str] = {
    "max_docs_depth": "MAX_DOCS_DEPTH",
    "docs_dir": "DOCS_DIR",
    "output_dir": "OUTPUT_DIR",
    "output_format": "OUTPUT_FORMAT",
    "workers": "EXTRACT_WORKERS",
    "clone_dir": "CLONE_DIR",
}


class ConfigError(RuntimeError):
    """Raised when the configuration file or environment cannot be parsed."""


@dataclass
class ExtractorConfig:
    """Effective settings for an extraction run."""

    max_docs_depth: int = 3
    docs_dir: str = "docs"
    output_dir: Path = field(default_factory=lambda: Path("output"))
    output_format: str = "json"
    workers: int = 1
    clone_dir: Path = field(default_factory=lambda: DEFAULT_CLONE_DIR)


def load_config(
    config_path: Path | None = None,
    *,
    environ: Mapping[str, str] | None = None,
) -> ExtractorConfig:
    """Load settings from YAML (when present) and apply environment overrides."""
    values: Dict[str, Any] = {}
    config_file = _resolve_config_path(config_path)
    if config_file is not None and config_file.exists():
        values.update(_read_config(config_file))
    elif config_path is not None and config_path.suffix in {".yml", ".yaml"}:
        raise ConfigError(f"Config file not found: {config_path}")

    env = os.environ if environ is None else environ
    for key, env_key in _ENV_KEYS.items():
        raw = env.get(env_key)
        if raw is not None and raw.strip():
            values[key] = raw.strip()

    config = ExtractorConfig()
    if "max_docs_depth" in values:
        config.max_docs_depth = _as_int(values["max_docs_depth"], "max_docs_depth", minimum=0)
    if "workers" in values:
        config.workers = _as_int(values["workers"], "workers", minimum=1)
    if "docs_dir" in values:
        config.docs_dir = _as_str(values["docs_dir"], "docs_dir")
    if "output_dir" in values:
        config.output_dir = Path(_as_str(values["output_dir"], "output_dir")).expanduser()
    if "clone_dir" in values:
        config.clone_dir = Path(_as_str(values["clone_dir"], "clone_dir")).expanduser()
    if "output_format" in values:
        fmt = _as_str(values["output_format"], "output_format").lower()
        if fmt not in OUTPUT_FORMATS:
            raise ConfigError(f"output_format must be one of {', '.join(OUTPUT_FORMATS)}, got {fmt!r}")
        config.output_format = fmt
    return config


def _resolve_config_path(config_path: Path | None) -> Optional[Path]:
    if config_path is None:
        return (Path.cwd() / CONFIG_FILENAME).resolve()
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigError(f"{path.name} must contain a mapping at the root")
    return loaded


def _as_int(value: Any, key: str, *, minimum: int) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"{key} must be an integer")
    try:
        number = int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{key} must be an integer, got {value!r}") from exc
    if number < minimum:
        raise ConfigError(f"{key} must be >= {minimum}, got {number}")
    return number


def _as_str(value: Any, key: str) -> str:
    if isinstance(value, (str, int, float)) and not isinstance(value, bool):
        text = str(value).strip()
        if text:
            return text
    raise ConfigError(f"{key} must be a non-empty string")


__all__ = ["CONFIG_FILENAME", "ConfigError", "ExtractorConfig", "OUTPUT_FORMATS", "load_config"]
