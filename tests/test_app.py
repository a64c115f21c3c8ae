from codepractice.config import DEFAULT_LANGUAGES, Settings


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("CODEPRACTICE_SECRET_KEY", "from-env")
    monkeypatch.setenv("CODEPRACTICE_TOKEN_EXPIRE_MINUTES", "15")
    monkeypatch.setenv("CODEPRACTICE_LANGUAGES", "Python, go")
    monkeypatch.setenv("CODEPRACTICE_LOG_LEVEL", "debug")
    settings = Settings.from_env()
    assert settings.secret_key == "from-env"
    assert settings.access_token_expire_minutes == 15
    assert settings.languages == ("python", "go")
    assert settings.log_level == "DEBUG"


def test_settings_defaults(monkeypatch):
    for name in ("CODEPRACTICE_SECRET_KEY", "SECRET_KEY", "CODEPRACTICE_LANGUAGES"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("SECRET_KEY", "legacy")
    settings = Settings.from_env()
    assert settings.secret_key == "legacy"
    assert settings.languages == DEFAULT_LANGUAGES


def test_app_uses_injected_secret(app, settings):
    assert app.state.auth_gate.secret_key == settings.secret_key
