from app.core.config import Settings, parse_cors_origins, parse_csv


def test_parse_cors_origins_csv():
    value = "http://localhost:5173, http://localhost:3000"
    assert parse_cors_origins(value) == [
        "http://localhost:5173",
        "http://localhost:3000",
    ]


def test_parse_cors_origins_json_list():
    value = '["http://localhost:5173", "https://play.example.com"]'
    assert parse_cors_origins(value) == [
        "http://localhost:5173",
        "https://play.example.com",
    ]


def test_parse_cors_origins_deduplicates():
    value = "http://localhost:5173,http://localhost:5173"
    assert parse_cors_origins(value) == ["http://localhost:5173"]


def test_parse_cors_origins_empty():
    assert parse_cors_origins("") == []


def test_parse_csv_normalizes_usernames():
    assert parse_csv(" Admin, ops ,,") == ["admin", "ops"]
    assert parse_csv("") == []


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("SECRET_KEY", "s3cret")
    monkeypatch.setenv("DATABASE_URL", "sqlite://")
    monkeypatch.setenv("SESSION_IDLE_MINUTES", "10")
    monkeypatch.setenv("API_KEY_DEFAULT_RATE_LIMIT", "120")

    settings = Settings(_env_file=None)
    assert settings.secret_key == "s3cret"
    assert settings.session_idle_minutes == 10
    assert settings.api_key_default_rate_limit == 120
    assert settings.auth_rate_limit == "10/minute"
