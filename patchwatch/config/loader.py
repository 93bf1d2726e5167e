"""Configuration loading helpers for patchwatch."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

import yaml

from .models import AppConfig

CONFIG_EXTENSIONS = (".yaml", ".yml", ".json")
CONFIG_FILENAME = "patchwatch.yaml"

# environment variable -> (section, key)
ENV_OVERRIDES: dict[str, tuple[str, str]] = {
    "PORT": ("server", "port"),
    "PATCHWATCH_SECRET": ("notifier", "secret"),
    "PATCHWATCH_SOURCE_URL": ("source", "url"),
}


def _read_file(path: Path) -> dict:
    text = path.read_text(encoding="utf-8")
    if path.suffix in (".yaml", ".yml"):
        data = yaml.safe_load(text) or {}
    else:
        data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError(f"Configuration file must contain a mapping: {path}")
    return data


def _write_file(path: Path, payload: dict) -> None:
    with path.open("w", encoding="utf-8") as stream:
        if path.suffix in (".yaml", ".yml"):
            yaml.safe_dump(payload, stream, allow_unicode=True, sort_keys=False)
        else:
            json.dump(payload, stream, indent=2, ensure_ascii=False)


def apply_env_overrides(payload: dict, environ: Mapping[str, str] | None = None) -> dict:
    """Return a copy of ``payload`` with values taken from the environment."""

    environ = os.environ if environ is None else environ
    merged = {key: dict(value) if isinstance(value, dict) else value for key, value in payload.items()}
    for variable, (section, key) in ENV_OVERRIDES.items():
        value = environ.get(variable)
        if not value:
            continue
        block = merged.setdefault(section, {})
        if not isinstance(block, dict):
            raise ValueError(f"Configuration section '{section}' must be a mapping")
        block[key] = value
    return merged


@dataclass(slots=True)
class ConfigLocator:
    """Resolve important paths from project root."""

    project_root: Path | None = None
    data_dir: Path | None = None
    logs_dir: Path | None = None

    def __post_init__(self) -> None:
        env_root = os.environ.get("PATCHWATCH_HOME")
        if env_root:
            root = Path(env_root).expanduser().resolve()
        else:
            root = (self.project_root or Path(__file__).resolve().parents[2]).resolve()
        self.project_root = root
        self.data_dir = (root / "data").resolve()
        self.logs_dir = (root / "logs").resolve()
        self.ensure_directories()

    def ensure_directories(self) -> None:
        for directory in (self.data_dir, self.logs_dir):
            directory.mkdir(parents=True, exist_ok=True)

    def config_path(self) -> Path:
        return self.data_dir / CONFIG_FILENAME


class ConfigRepository:
    """Repository encapsulating config IO, env overrides and schema validation."""

    def __init__(
        self,
        locator: ConfigLocator | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self.locator = locator or ConfigLocator()
        self.environ = environ
        self._cache: AppConfig | None = None

    def load(self, path: Path | None = None) -> AppConfig:
        if self._cache is not None and path is None:
            return self._cache
        path = path or self.locator.config_path()
        if path.exists():
            if path.suffix not in CONFIG_EXTENSIONS:
                raise ValueError(f"Unsupported configuration format: {path.suffix}")
            payload = _read_file(path)
        else:
            payload = {}
            self.save(AppConfig(), path)
        config = AppConfig.model_validate(apply_env_overrides(payload, self.environ))
        self._cache = config
        return config

    def save(self, config: AppConfig, path: Path | None = None) -> Path:
        path = path or self.locator.config_path()
        path.parent.mkdir(parents=True, exist_ok=True)
        _write_file(path, config.model_dump(mode="json"))
        self._cache = None
        return path

    def database_path(self, config: AppConfig) -> Path:
        return config.store.resolved_path(self.locator.project_root)


__all__ = [
    "CONFIG_EXTENSIONS",
    "ConfigLocator",
    "ConfigRepository",
    "ENV_OVERRIDES",
    "apply_env_overrides",
]
