from task_api.settings import get_settings

ENV_VARS = [
    "PERSISTENCE_BACKEND",
    "MONGODB_URI",
    "MONGODB_DATABASE",
    "MONGODB_COLLECTION",
    "MONGODB_TIMEOUT_MS",
    "CORS_ALLOW_ORIGINS",
    "LOG_LEVEL",
    "HOST",
    "PORT",
]


def clear_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults(monkeypatch):
    clear_env(monkeypatch)
    s = get_settings()
    assert s.persistence_backend == "mongodb"
    assert s.mongodb_uri == "mongodb://127.0.0.1:27017"
    assert s.mongodb_database == "tasks-app"
    assert s.mongodb_collection == "tasks"
    assert s.mongodb_timeout_ms == 5000
    assert s.cors_allow_origins == ["*"]
    assert s.log_level == "INFO"
    assert s.port == 9988


def test_overrides(monkeypatch):
    clear_env(monkeypatch)
    monkeypatch.setenv("PERSISTENCE_BACKEND", " Memory ")
    monkeypatch.setenv("MONGODB_DATABASE", "other")
    monkeypatch.setenv("CORS_ALLOW_ORIGINS", "http://a.test, http://b.test,")
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    s = get_settings()
    assert s.persistence_backend == "memory"
    assert s.mongodb_database == "other"
    assert s.cors_allow_origins == ["http://a.test", "http://b.test"]
    assert s.port == 8080
    assert s.log_level == "DEBUG"


def test_invalid_values_fall_back(monkeypatch):
    clear_env(monkeypatch)
    monkeypatch.setenv("PERSISTENCE_BACKEND", "sqlite")
    monkeypatch.setenv("PORT", "eighty")
    s = get_settings()
    assert s.persistence_backend == "mongodb"
    assert s.port == 9988
