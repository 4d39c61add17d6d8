"""Shared pytest fixtures."""

import logging
import logging.handlers

import pytest

from slipstats.core.config import ENV_MAPPINGS, reset_config


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path):
    """Keep user config files and SLIPSTATS_* variables out of every test."""
    for env_var in ENV_MAPPINGS:
        monkeypatch.delenv(env_var, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "home" / ".config"))
    monkeypatch.chdir(tmp_path)

    root = logging.getLogger()
    level = root.level

    reset_config()
    yield
    reset_config()

    # Drop handlers installed by configure_logging
    for handler in list(root.handlers):
        if type(handler) in (logging.StreamHandler, logging.handlers.RotatingFileHandler):
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)
