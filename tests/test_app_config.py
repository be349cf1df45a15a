"""Tests for environment-driven settings."""

from app_config import Settings

KEYS = ("HOST", "PORT", "DEBUG", "LOG_LEVEL", "MAX_COMMAND_LENGTH")


def clear_env(monkeypatch):
    # setenv + delenv: monkeypatch restores whatever load_dotenv writes
    for key in KEYS:
        monkeypatch.setenv("CURL_APP_" + key, "")
        monkeypatch.delenv("CURL_APP_" + key)


def test_defaults(monkeypatch, tmp_path):
    clear_env(monkeypatch)
    settings = Settings.from_env(tmp_path / "missing.env")
    assert settings == Settings()
    assert settings.port == 7700


def test_from_environment(monkeypatch, tmp_path):
    clear_env(monkeypatch)
    monkeypatch.setenv("CURL_APP_PORT", "8080")
    monkeypatch.setenv("CURL_APP_DEBUG", "true")
    monkeypatch.setenv("CURL_APP_LOG_LEVEL", "debug")
    settings = Settings.from_env(tmp_path / "missing.env")
    assert settings.port == 8080
    assert settings.debug is True
    assert settings.log_level == "DEBUG"


def test_invalid_int_falls_back(monkeypatch, tmp_path):
    clear_env(monkeypatch)
    monkeypatch.setenv("CURL_APP_PORT", "abc")
    assert Settings.from_env(tmp_path / "missing.env").port == 7700


def test_dotenv_file(monkeypatch, tmp_path):
    clear_env(monkeypatch)
    env_file = tmp_path / ".env"
    env_file.write_text("CURL_APP_MAX_COMMAND_LENGTH=50\n")
    assert Settings.from_env(env_file).max_command_length == 50
