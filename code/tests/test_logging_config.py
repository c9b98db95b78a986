import logging

from rich.logging import RichHandler

import logging_config


def _capture(monkeypatch):
    seen = {}
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: seen.update(kwargs))
    return seen


def test_configure_without_level_reads_env(monkeypatch):
    seen = _capture(monkeypatch)
    monkeypatch.setenv("LOG_LEVEL", "debug")
    logging_config.configure()

    assert seen["level"] == "DEBUG"
    assert isinstance(seen["handlers"][0], RichHandler)


def test_configure_explicit_level_wins(monkeypatch):
    seen = _capture(monkeypatch)
    monkeypatch.setenv("LOG_LEVEL", "debug")
    logging_config.configure("warning")

    assert seen["level"] == "WARNING"
