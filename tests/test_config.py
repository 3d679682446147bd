"""Settings read from the environment."""

import pytest
from pydantic import ValidationError

from config import DEFAULT_ORIGINS, Settings

ENV_NAMES = ("MONGO_URI", "MONGODB_URI", "PORT", "CORS_ORIGINS", "TRUST_CLIENT_SCORE",
             "MONGO_DB_NAME", "LOG_FORMAT")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_NAMES:
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    settings = Settings(_env_file=None)

    assert settings.mongo_uri is None
    assert settings.mongo_db_name == "quizapp"
    assert settings.port == 5000
    assert settings.cors_origins == DEFAULT_ORIGINS
    assert settings.trust_client_score is True
    assert settings.log_format == "text"


def test_mongodb_uri_fallback(monkeypatch):
    monkeypatch.setenv("MONGODB_URI", "mongodb://db:27017")

    assert Settings(_env_file=None).mongo_uri == "mongodb://db:27017"


def test_blank_uri_counts_as_unset(monkeypatch):
    monkeypatch.setenv("MONGO_URI", "  ")

    assert Settings(_env_file=None).mongo_uri is None


def test_overrides(monkeypatch):
    monkeypatch.setenv("MONGO_URI", "mongodb://primary:27017")
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.setenv("CORS_ORIGINS", "https://a.example, https://b.example ,")
    monkeypatch.setenv("TRUST_CLIENT_SCORE", "false")

    settings = Settings(_env_file=None)

    assert settings.mongo_uri == "mongodb://primary:27017"
    assert settings.port == 8080
    assert settings.cors_origins == ["https://a.example", "https://b.example"]
    assert settings.trust_client_score is False


def test_bad_port_is_a_validation_error(monkeypatch):
    monkeypatch.setenv("PORT", "not-a-port")

    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_env_file_is_read(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("MONGO_DB_NAME=practice\nUNRELATED_KEY=1\n")

    assert Settings(_env_file=env_file).mongo_db_name == "practice"
