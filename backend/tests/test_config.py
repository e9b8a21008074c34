"""
Unit tests for settings loading.
"""
import pydantic
import pytest

from siska.core.config import Settings

ENV_VARS = (
    "FOURSQUARE_KEY",
    "OPENWEATHER_KEY",
    "AQI_TOKEN",
    "RAJAONGKIR_SHIPPING_KEY",
    "FRONTEND_URL",
    "PROVIDER_TIMEOUT_SECONDS",
    "LOG_LEVEL",
    "LOG_JSON",
    "PORT",
)


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    # a path that does not exist, so no .env is loaded
    return tmp_path / "missing.env"


def test_defaults_without_environment(clean_env):
    settings = Settings.from_env(env_path=clean_env)

    assert settings.foursquare_key == ""
    assert settings.frontend_url == "*"
    assert settings.provider_timeout_seconds == 8.0
    assert settings.log_json is True
    assert settings.port == 8000
    assert not any(settings.credential_status().values())


def test_reads_environment(clean_env, monkeypatch):
    monkeypatch.setenv("FOURSQUARE_KEY", "fsq")
    monkeypatch.setenv("RAJAONGKIR_SHIPPING_KEY", "ro")
    monkeypatch.setenv("FRONTEND_URL", "https://siska.example")
    monkeypatch.setenv("PROVIDER_TIMEOUT_SECONDS", "3.5")
    monkeypatch.setenv("LOG_JSON", "false")
    monkeypatch.setenv("PORT", "9090")

    settings = Settings.from_env(env_path=clean_env)

    assert settings.foursquare_key == "fsq"
    assert settings.provider_timeout_seconds == 3.5
    assert settings.log_json is False
    assert settings.port == 9090
    assert settings.credential_status() == {
        "foursquare": True,
        "openweather": False,
        "aqi": False,
        "rajaongkir": True,
        "frontend_url": True,
    }


def test_dotenv_file_is_loaded(clean_env, monkeypatch, tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("OPENWEATHER_KEY=from-file\n")

    settings = Settings.from_env(env_path=env_file)
    monkeypatch.delenv("OPENWEATHER_KEY", raising=False)

    assert settings.openweather_key == "from-file"


def test_process_environment_wins_over_dotenv(clean_env, monkeypatch, tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("AQI_TOKEN=from-file\n")
    monkeypatch.setenv("AQI_TOKEN", "from-env")

    assert Settings.from_env(env_path=env_file).aqi_token == "from-env"


def test_settings_are_frozen():
    settings = Settings()

    with pytest.raises(pydantic.ValidationError):
        settings.foursquare_key = "changed"


def test_credential_status_never_exposes_values():
    status = Settings(foursquare_key="secret").credential_status()

    assert "secret" not in str(status)
