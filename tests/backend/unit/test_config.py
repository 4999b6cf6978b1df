from tarkovtracker.backend.config import load_settings


def test_load_settings_reads_expected_env(monkeypatch) -> None:
    monkeypatch.setenv("TARKOVTRACKER_DATABASE_URL", "postgresql://local")
    monkeypatch.setenv("TARKOVTRACKER_FIRESTORE_PROJECT", "tarkovtracker-dev")
    monkeypatch.setenv("TARKOVTRACKER_HOST", "localhost")
    monkeypatch.setenv("TARKOVTRACKER_PORT", "9000")
    monkeypatch.setenv("TARKOVTRACKER_LOG_LEVEL", "debug")

    settings = load_settings()

    assert settings.database_url == "postgresql://local"
    assert settings.firestore_project == "tarkovtracker-dev"
    assert settings.host == "localhost"
    assert settings.port == 9000
    assert settings.log_level == "DEBUG"


def test_load_settings_applies_defaults(monkeypatch) -> None:
    monkeypatch.delenv("TARKOVTRACKER_DATABASE_URL", raising=False)
    monkeypatch.delenv("TARKOVTRACKER_FIRESTORE_PROJECT", raising=False)
    monkeypatch.delenv("TARKOVTRACKER_HOST", raising=False)
    monkeypatch.delenv("TARKOVTRACKER_PORT", raising=False)
    monkeypatch.delenv("TARKOVTRACKER_LOG_LEVEL", raising=False)

    settings = load_settings()

    assert settings.database_url is None
    assert settings.firestore_project is None
    assert settings.host == "127.0.0.1"
    assert settings.port == 8000
    assert settings.log_level == "INFO"
