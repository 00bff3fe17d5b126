"""Tests for TOML-backed navigator settings."""

from pathlib import Path

import pytest
import toml

from jspnav import config
from jspnav.config_manager import load_full_config, load_settings, save_setting


def test_defaults_without_config_file():
    settings = load_settings()
    assert settings.source_paths == []
    assert settings.max_depth == config.MAX_DISCOVERY_DEPTH
    assert settings.platform_prefixes == config.PLATFORM_PREFIXES


def test_save_and_load_round_trip_keeps_other_sections():
    config.CONFIG_FILE.write_text('[editor]\ntheme = "dark"\n')

    assert save_setting("source_paths", "WEB-INF/src, src/java")
    assert save_setting("max_depth", "4")
    assert save_setting("extract_dir", "/tmp/jspnav-test-extract")

    data = load_full_config()
    assert data["editor"] == {"theme": "dark"}

    settings = load_settings()
    assert settings.source_paths == ["WEB-INF/src", "src/java"]
    assert settings.max_depth == 4
    assert settings.extract_dir == Path("/tmp/jspnav-test-extract")


def test_unknown_key_is_rejected_on_save():
    with pytest.raises(ValueError):
        save_setting("colour", "blue")


def test_invalid_values_fall_back_to_defaults():
    config.CONFIG_FILE.write_text(
        toml.dumps({"navigator": {"max_depth": "deep", "colour": "blue", "platform_home": "/opt/jdk"}})
    )
    settings = load_settings()
    assert settings.max_depth == config.MAX_DISCOVERY_DEPTH
    assert settings.platform_home == Path("/opt/jdk")


def test_malformed_file_is_ignored():
    config.CONFIG_FILE.write_text("this is [not toml")
    assert load_full_config() == {}
    assert load_settings().source_paths == []


def test_explicit_config_file(temp_dir: Path):
    path = temp_dir / "other.toml"
    save_setting("platform_prefixes", "java,javax", config_file=path)
    assert load_settings(path).platform_prefixes == ["java", "javax"]
