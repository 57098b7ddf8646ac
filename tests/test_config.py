from leaderboard.config import DatabaseConfig, ServiceConfig
from leaderboard.logger import LoggingConfig


def test_service_settings_use_prefixed_names(monkeypatch):
    monkeypatch.setenv('LEADERBOARD_PORT', '9100')
    monkeypatch.setenv('LEADERBOARD_STORE_BACKEND', 'memory')
    settings = ServiceConfig()
    assert settings.port == 9100
    assert settings.store_backend == 'memory'


def test_service_settings_ignore_bare_environment(monkeypatch):
    monkeypatch.delenv('LEADERBOARD_PORT', raising=False)
    monkeypatch.delenv('LEADERBOARD_HOST', raising=False)
    monkeypatch.setenv('PORT', '1234')
    monkeypatch.setenv('HOST', 'shell-host')
    settings = ServiceConfig()
    assert settings.port == 8000
    assert settings.host == '0.0.0.0'


def test_database_settings_ignore_bare_user(monkeypatch):
    monkeypatch.delenv('POSTGRES_USER', raising=False)
    monkeypatch.setenv('USER', 'root')
    assert DatabaseConfig().USER == 'postgres'


def test_log_level_uses_prefixed_name(monkeypatch):
    monkeypatch.setenv('LOG_LEVEL', 'ERROR')
    monkeypatch.delenv('LEADERBOARD_LOG_LEVEL', raising=False)
    assert LoggingConfig().log_level == 'INFO'
    monkeypatch.setenv('LEADERBOARD_LOG_LEVEL', 'DEBUG')
    assert LoggingConfig().log_level == 'DEBUG'
