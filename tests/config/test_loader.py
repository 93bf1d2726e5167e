from __future__ import annotations

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from patchwatch.config import AppConfig, ConfigLocator, ConfigRepository
from patchwatch.config.loader import apply_env_overrides


def test_locator_uses_env_and_creates_directories(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PATCHWATCH_HOME", str(tmp_path))
    locator = ConfigLocator()
    assert locator.project_root == tmp_path.resolve()
    assert locator.data_dir.exists()
    assert locator.logs_dir.exists()
    assert locator.config_path() == locator.data_dir / "patchwatch.yaml"


def test_missing_file_is_created_from_defaults(temp_config_repository: ConfigRepository) -> None:
    config = temp_config_repository.load()
    assert config == AppConfig()
    path = temp_config_repository.locator.config_path()
    assert path.exists()
    stored = yaml.safe_load(path.read_text(encoding="utf-8"))
    assert stored["schedule"]["interval_seconds"] == 600


def test_yaml_values_are_loaded(temp_config_repository: ConfigRepository) -> None:
    path = temp_config_repository.locator.config_path()
    path.write_text(
        yaml.safe_dump(
            {
                "source": {"url": "https://example.com/tags.atom", "mode": "feed"},
                "store": {"default_limit": 5},
            }
        ),
        encoding="utf-8",
    )
    config = temp_config_repository.load()
    assert config.source.url == "https://example.com/tags.atom"
    assert config.store.default_limit == 5
    assert temp_config_repository.load() is config


def test_json_config_path(tmp_path: Path, temp_config_repository: ConfigRepository) -> None:
    path = tmp_path / "custom.json"
    path.write_text('{"server": {"port": 9000}}', encoding="utf-8")
    assert temp_config_repository.load(path).server.port == 9000


def test_non_mapping_file_is_rejected(temp_config_repository: ConfigRepository) -> None:
    temp_config_repository.locator.config_path().write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ValueError):
        temp_config_repository.load()


def test_env_overrides_apply_before_validation(tmp_path: Path) -> None:
    locator = ConfigLocator(project_root=tmp_path)
    locator.config_path().write_text(
        yaml.safe_dump({"notifier": {"enabled": True}}), encoding="utf-8"
    )
    with pytest.raises(ValidationError):
        ConfigRepository(locator, environ={}).load()
    repository = ConfigRepository(locator, environ={"PATCHWATCH_SECRET": "abc", "PORT": "5000"})
    config = repository.load()
    assert config.notifier.secret == "abc"
    assert config.server.port == 5000


def test_apply_env_overrides_does_not_mutate_payload() -> None:
    payload = {"server": {"host": "127.0.0.1"}}
    merged = apply_env_overrides(payload, {"PORT": "8081"})
    assert merged == {"server": {"host": "127.0.0.1", "port": "8081"}}
    assert payload == {"server": {"host": "127.0.0.1"}}


def test_database_path_is_relative_to_project_root(temp_config_repository: ConfigRepository) -> None:
    config = temp_config_repository.load()
    expected = (temp_config_repository.locator.project_root / "data" / "patches.db").resolve()
    assert temp_config_repository.database_path(config) == expected
