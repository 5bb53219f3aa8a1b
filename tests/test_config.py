import logging
from pathlib import Path

import pytest

from graphcache import configure_logging
from graphcache.config import CacheSettings, ConfigError, get_settings


@pytest.fixture(autouse=True)
def clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_defaults():
    settings = CacheSettings()
    assert settings.debug is False
    assert settings.logging.level == "INFO"
    assert settings.introspection.path is None
    assert settings.introspection.warn_on_mismatch is True


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("GRAPHCACHE_LOGGING__LEVEL", "DEBUG")
    monkeypatch.setenv("GRAPHCACHE_INTROSPECTION__WARN_ON_MISMATCH", "false")

    settings = CacheSettings()
    assert settings.logging.level == "DEBUG"
    assert settings.introspection.warn_on_mismatch is False


def test_init_kwargs_take_precedence(monkeypatch):
    monkeypatch.setenv("GRAPHCACHE_LOGGING__LEVEL", "DEBUG")
    settings = CacheSettings(logging={"level": "ERROR"})
    assert settings.logging.level == "ERROR"


def test_invalid_level_is_rejected():
    with pytest.raises(ValueError):
        CacheSettings(logging={"level": "LOUD"})


def test_get_settings_is_cached():
    assert get_settings() is get_settings()


def test_get_settings_checks_introspection_path(tmp_path, monkeypatch):
    monkeypatch.setenv("GRAPHCACHE_INTROSPECTION__PATH", str(tmp_path / "missing.json"))
    with pytest.raises(ConfigError):
        get_settings()

    path = tmp_path / "schema.json"
    path.write_text("{}", encoding="utf-8")
    monkeypatch.setenv("GRAPHCACHE_INTROSPECTION__PATH", str(path))
    get_settings.cache_clear()
    assert get_settings().introspection.path == Path(path)


def test_get_settings_accepts_overrides():
    assert get_settings(debug=True).debug is True


def test_configure_logging_installs_one_handler():
    logger = logging.getLogger("graphcache")
    before = list(logger.handlers)
    try:
        configure_logging(CacheSettings(logging={"level": "WARNING"}))
        configure_logging(CacheSettings(logging={"level": "DEBUG"}))

        added = [h for h in logger.handlers if h not in before]
        assert len(added) == 1
        assert logger.level == logging.DEBUG
    finally:
        for handler in list(logger.handlers):
            if handler not in before:
                logger.removeHandler(handler)
        logger.setLevel(logging.NOTSET)


def test_debug_flag_forces_debug_level(monkeypatch):
    monkeypatch.setenv("GRAPHCACHE_DEBUG", "true")
    logger = logging.getLogger("graphcache")
    before = list(logger.handlers)
    try:
        configure_logging(CacheSettings(logging={"level": "ERROR"}))
        assert logger.level == logging.DEBUG

        configure_logging(CacheSettings(debug=False, logging={"level": "ERROR"}))
        assert logger.level == logging.ERROR
    finally:
        for handler in list(logger.handlers):
            if handler not in before:
                logger.removeHandler(handler)
        logger.setLevel(logging.NOTSET)
