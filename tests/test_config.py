"""Tests for ConfigManager and load_config."""

import pytest

from soundscope.utils.config import (
    CONFIG_SCHEMA,
    ConfigManager,
    get_default_config,
    load_config,
)
from soundscope.utils.errors import ConfigurationError


class TestConfigManager:
    def test_dot_notation(self):
        config = ConfigManager({"recognition": {"readiness_timeout": 5.0}})
        assert config.get("recognition.readiness_timeout") == 5.0
        assert config.get("recognition.missing", default=1) == 1

    def test_required_key_missing(self):
        with pytest.raises(ConfigurationError) as exc_info:
            ConfigManager({}).get("speech.enabled", required=True)
        assert exc_info.value.config_key == "speech.enabled"

    def test_set_creates_sections(self):
        config = ConfigManager()
        config.set("fusion.confidence_boost", True)
        assert config.get_section("fusion") == {"confidence_boost": True}

    def test_to_dict_is_a_copy(self):
        config = ConfigManager({"a": {"b": 1}})
        config.to_dict()["a"]["b"] = 2
        assert config.get("a.b") == 1

    def test_env_interpolation(self, tmp_path, monkeypatch):
        monkeypatch.setenv("SOUNDSCOPE_MODEL", "small")
        path = tmp_path / "config.yaml"
        path.write_text("speech:\n  model_size: ${SOUNDSCOPE_MODEL}\n  device: ${UNSET_VAR_XYZ}\n")
        config = ConfigManager.from_file(path)
        assert config.get("speech.model_size") == "small"
        assert config.get("speech.device") == "${UNSET_VAR_XYZ}"

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            ConfigManager.from_file(tmp_path / "nope.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("recognition: [unclosed\n")
        with pytest.raises(ConfigurationError):
            ConfigManager.from_file(path)

    def test_validate_type(self):
        config = ConfigManager(get_default_config())
        config.set("recognition.max_workers", "four")
        with pytest.raises(ConfigurationError) as exc_info:
            config.validate(CONFIG_SCHEMA)
        assert exc_info.value.config_key == "recognition.max_workers"

    def test_defaults_validate(self):
        ConfigManager(get_default_config()).validate(CONFIG_SCHEMA)


class TestLoadConfig:
    def test_merges_over_defaults(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("recognition:\n  readiness_timeout: 2.5\nspeech:\n  enabled: true\n")
        config = load_config(str(path))
        assert config["recognition"]["readiness_timeout"] == 2.5
        assert config["recognition"]["classifier_timeout"] == 5.0
        assert config["speech"]["enabled"] is True
        assert config["speech"]["model_size"] == "base"

    def test_defaults_without_file(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert load_config() == get_default_config()

    def test_invalid_value_rejected(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("features:\n  fft_size: big\n")
        with pytest.raises(ConfigurationError):
            load_config(str(path))
