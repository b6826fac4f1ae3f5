import pytest

from todo_api.settings import get_settings, parse_duration

ENV_VARS = [
    "PERSISTENCE_BACKEND",
    "MONGO_URL",
    "PORT",
    "JWT_SECRET",
    "JWT_EXPIRES_IN",
    "APP_ENV",
    "NODE_ENV",
    "CORS_ALLOW_ORIGINS",
    "LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestParseDuration:
    @pytest.mark.parametrize(
        "value,expected",
        [("3600", 3600), ("45s", 45), ("30m", 1800), ("1h", 3600), ("7d", 604800), (" 2H ", 7200)],
    )
    def test_valid(self, value, expected):
        assert parse_duration(value) == expected

    @pytest.mark.parametrize("value", ["", "abc", "1w", "-5m", "0"])
    def test_invalid(self, value):
        with pytest.raises(ValueError):
            parse_duration(value)


class TestGetSettings:
    def test_defaults(self):
        settings = get_settings()
        assert settings.persistence_backend == "mongo"
        assert settings.mongo_url == "mongodb://127.0.0.1:27017/todo-api"
        assert settings.port == 5000
        assert settings.jwt_expires_in == 3600
        assert settings.environment == "development"
        assert settings.is_production is False
        assert settings.cors_allow_origins == ["*"]

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("PERSISTENCE_BACKEND", "Memory")
        monkeypatch.setenv("PORT", "8080")
        monkeypatch.setenv("JWT_SECRET", "s3cret")
        monkeypatch.setenv("JWT_EXPIRES_IN", "15m")
        monkeypatch.setenv("CORS_ALLOW_ORIGINS", "http://a.test, http://b.test")
        monkeypatch.setenv("LOG_LEVEL", "debug")
        settings = get_settings()
        assert settings.persistence_backend == "memory"
        assert settings.port == 8080
        assert settings.jwt_secret == "s3cret"
        assert settings.jwt_expires_in == 900
        assert settings.cors_allow_origins == ["http://a.test", "http://b.test"]
        assert settings.log_level == "DEBUG"

    def test_unknown_backend_falls_back_to_mongo(self, monkeypatch):
        monkeypatch.setenv("PERSISTENCE_BACKEND", "sqlite")
        assert get_settings().persistence_backend == "mongo"

    def test_node_env_is_honoured(self, monkeypatch):
        monkeypatch.setenv("NODE_ENV", "production")
        monkeypatch.setenv("JWT_SECRET", "s3cret")
        assert get_settings().is_production is True

    def test_production_requires_secret(self, monkeypatch):
        monkeypatch.setenv("APP_ENV", "production")
        with pytest.raises(ValueError):
            get_settings()

    def test_bad_port(self, monkeypatch):
        monkeypatch.setenv("PORT", "http")
        with pytest.raises(ValueError):
            get_settings()

    def test_settings_are_immutable(self):
        settings = get_settings()
        with pytest.raises(AttributeError):
            settings.port = 1  # type: ignore[misc]
