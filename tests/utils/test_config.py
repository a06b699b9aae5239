"""Tests for the YAML config loader and runtime settings."""

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from swbrowser.config import Settings, load_settings
from swbrowser.utils.config_loader import ConfigLoader


REPO_SETTINGS = Path(__file__).resolve().parents[2] / "config" / "settings.yaml"


def write_yaml(path: Path, data) -> Path:
    path.write_text(yaml.safe_dump(data), encoding="utf-8")
    return path


def test_config_loader_dot_notation(tmp_path):
    config = ConfigLoader(write_yaml(tmp_path / "c.yaml", {"swapi": {"timeout": 3}}))

    assert config.get("swapi.timeout") == 3
    assert config.get("swapi.missing", "fallback") == "fallback"
    assert config.get("swapi") == {"timeout": 3}


def test_config_loader_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        ConfigLoader(tmp_path / "absent.yaml")


def test_config_loader_optional_missing_file(tmp_path):
    config = ConfigLoader(tmp_path / "absent.yaml", required=False)

    assert config.as_dict() == {}


def test_config_loader_set_creates_sections(tmp_path):
    config = ConfigLoader(write_yaml(tmp_path / "c.yaml", {"swapi": {"timeout": 3}}))

    config.set("swapi.base_url", "http://swapi.local/api")
    config.set("availability.check_interval", "5")

    assert config.get("swapi.timeout") == 3
    assert config.get("swapi.base_url") == "http://swapi.local/api"
    assert config.get("availability") == {"check_interval": "5"}


def test_config_loader_rejects_non_mapping(tmp_path):
    with pytest.raises(ValueError):
        ConfigLoader(write_yaml(tmp_path / "list.yaml", [1, 2, 3]))


def test_config_loader_empty_file(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")

    assert ConfigLoader(path).as_dict() == {}


def test_defaults_without_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    settings = load_settings(environ={})

    assert settings == Settings()
    assert settings.swapi.timeout == 5.0
    assert settings.availability.check_interval == 60.0
    assert settings.databank.default_limit == 9
    assert settings.matching.fallback_for("characters") is True


def test_explicit_missing_file_is_an_error(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_settings(tmp_path / "absent.yaml", environ={})

    with pytest.raises(FileNotFoundError):
        load_settings(environ={"SWBROWSER_CONFIG": str(tmp_path / "absent.yaml")})


def test_env_overrides_without_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    settings = load_settings(environ={"DATABANK_TIMEOUT": "2", "SWAPI_TIMEOUT": "1.5"})

    assert settings.databank.timeout == 2.0
    assert settings.swapi.timeout == 1.5


def test_repository_settings_file_loads():
    settings = load_settings(REPO_SETTINGS, environ={})

    assert settings.swapi.base_url == "https://swapi.dev/api"
    assert settings.matching.fallback_for("creatures") is False
    assert settings.matching.fallback_for("species") is True
    assert settings.logging.json_files is False


def test_env_overrides_win_over_file(tmp_path):
    path = write_yaml(tmp_path / "s.yaml", {"swapi": {"timeout": 3, "base_url": "http://file"}})
    environ = {
        "SWAPI_TIMEOUT": "7.5",
        "SWAPI_BASE_URL": "http://swapi.local/api",
        "AVAILABILITY_CHECK_INTERVAL": "10",
        "LOG_LEVEL": "DEBUG",
    }

    settings = load_settings(path, environ=environ)

    assert settings.swapi.timeout == 7.5
    assert settings.swapi.base_url == "http://swapi.local/api"
    assert settings.availability.check_interval == 10.0
    assert settings.logging.level == "DEBUG"


def test_config_path_from_environment(tmp_path):
    path = write_yaml(tmp_path / "s.yaml", {"databank": {"default_limit": 20}})

    settings = load_settings(environ={"SWBROWSER_CONFIG": str(path)})

    assert settings.databank.default_limit == 20


def test_invalid_timeout_rejected(tmp_path):
    path = write_yaml(tmp_path / "s.yaml", {"swapi": {"timeout": 0}})

    with pytest.raises(ValidationError):
        load_settings(path, environ={})


def test_unknown_section_key_rejected(tmp_path):
    path = write_yaml(tmp_path / "s.yaml", {"swapi": {"tiemout": 5}})

    with pytest.raises(ValidationError):
        load_settings(path, environ={})
