"""Tests for environment-driven settings."""

from newstrack import config


def test_configure_logging_accepts_no_level():
    config.configure_logging()
    config.configure_logging(None)
    config.configure_logging("WARNING")


def test_env_helpers(monkeypatch):
    monkeypatch.setenv("NEWSTRACK_TEST_FLAG", "yes")
    monkeypatch.setenv("NEWSTRACK_TEST_LIST", "a, b,,c")
    assert config._env_bool("NEWSTRACK_TEST_FLAG", False) is True
    assert config._env_list("NEWSTRACK_TEST_LIST", []) == ["a", "b", "c"]
