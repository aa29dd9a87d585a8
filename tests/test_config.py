"""Tests for YAML settings loading with environment substitution."""

import pytest

from eclss_guard.config import ConfigLoader, DEFAULT_CONFIG_PATH, load_settings
from eclss_guard.core import ConfigurationError

ENV_VARS = (
    "ECLSS_GUARD_CONFIG",
    "ECLSS_TELEMETRY_INTERVAL_MS",
    "ECLSS_SCORE_THRESHOLD",
    "ECLSS_SPEECH_ENABLED",
    "ECLSS_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestLoadSettings:
    def test_packaged_defaults(self):
        settings = load_settings()
        assert settings.telemetry.interval_ms == 1000
        assert settings.telemetry.history_length == 240
        assert settings.telemetry.seed is None
        assert settings.detection.score_threshold == 50.0
        assert settings.detection.cooldown_ms == 5000
        assert settings.speech.enabled is True
        assert settings.speech.rate_wpm == 180
        assert settings.logging.level == "INFO"

    def test_environment_overrides(self, monkeypatch):
        """${VAR:default} placeholders pick up the environment."""
        monkeypatch.setenv("ECLSS_SCORE_THRESHOLD", "72.5")
        monkeypatch.setenv("ECLSS_SPEECH_ENABLED", "false")
        monkeypatch.setenv("ECLSS_LOG_LEVEL", "debug")
        settings = load_settings(DEFAULT_CONFIG_PATH)
        assert settings.detection.score_threshold == 72.5
        assert settings.speech.enabled is False
        assert settings.logging.level == "DEBUG"

    def test_config_env_var_selects_file(self, monkeypatch, tmp_path):
        path = tmp_path / "cabin.yaml"
        path.write_text("telemetry:\n  interval_ms: 200\n  seed: 9\n")
        monkeypatch.setenv("ECLSS_GUARD_CONFIG", str(path))
        settings = load_settings()
        assert settings.telemetry.interval_ms == 200
        assert settings.telemetry.seed == 9
        assert settings.detection.score_threshold == 50.0

    @pytest.mark.parametrize("content", [
        "",
        "- just\n- a list\n",
        "telemetry:\n  interval_ms: 0\n",
        "logging:\n  level: LOUD\n",
        "telemetry: [unclosed\n",
        "detection:\n  score_threshold: ${ECLSS_MISSING_THRESHOLD}\n",
    ])
    def test_invalid_files_raise_configuration_error(self, tmp_path, content):
        path = tmp_path / "bad.yaml"
        path.write_text(content)
        with pytest.raises(ConfigurationError) as exc_info:
            load_settings(path)
        assert exc_info.value.context["config_path"] == str(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_settings(tmp_path / "nope.yaml")


class TestConfigLoader:
    def test_embedded_placeholder_stays_string(self, monkeypatch, tmp_path):
        monkeypatch.setenv("CABIN", "7")
        path = tmp_path / "c.yaml"
        path.write_text("name: cabin-${CABIN}\nnumber: ${CABIN}\nitems:\n  - ${UNSET_ITEM:x}\n")
        data = ConfigLoader.load_yaml(path)
        assert data == {"name": "cabin-7", "number": 7, "items": ["x"]}

    def test_required_variable(self, tmp_path):
        path = tmp_path / "c.yaml"
        path.write_text("value: ${ECLSS_DEFINITELY_UNSET}\n")
        with pytest.raises(ValueError, match="ECLSS_DEFINITELY_UNSET"):
            ConfigLoader.load_yaml(path)
