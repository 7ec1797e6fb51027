"""Tests for configuration, logging setup and owner resolution."""

import logging
import os

import pytest
from textual.logging import TextualHandler

from procinspect import owners
from procinspect.config import InspectorConfig, validate_procfs_root
from procinspect.errors import OpenError
from procinspect.logging_config import setup_logging
from procinspect.models import ViewOptions


def test_config_defaults():
    """Test InspectorConfig default values."""
    config = InspectorConfig()
    assert str(config.procfs_root) == "/proc"
    assert config.options == ViewOptions.all_on()
    assert config.sample_interval == 1.0
    assert config.poll_rate == 2.0
    assert not config.resolve_owners
    assert config.log_level == "WARNING"


def test_validate_procfs_root(procfs):
    """Test a populated root is accepted and returned as a Path."""
    assert validate_procfs_root(str(procfs)) == procfs


def test_validate_rejects_missing_root(tmp_path):
    """Test a missing root raises OpenError."""
    with pytest.raises(OpenError):
        validate_procfs_root(tmp_path / "missing")


def test_validate_rejects_file(tmp_path):
    """Test a regular file is not accepted as the root."""
    (tmp_path / "file").write_text("x")
    with pytest.raises(OpenError):
        validate_procfs_root(tmp_path / "file")


def test_setup_logging_level():
    """Test level names map to logging levels, unknown ones to WARNING."""
    setup_logging("debug")
    assert logging.getLogger().level == logging.DEBUG
    setup_logging("nonsense")
    assert logging.getLogger().level == logging.WARNING


def test_setup_logging_writes_to_stderr(capsys):
    """Test records are formatted onto stderr."""
    setup_logging("INFO")
    logging.getLogger("procinspect.test").info("hello")
    assert "[INFO] procinspect.test: hello" in capsys.readouterr().err


def test_setup_logging_textual_handler():
    """The viewer routes records to Textual instead of the terminal."""
    setup_logging("WARNING", textual=True)
    handlers = logging.getLogger().handlers
    assert any(isinstance(handler, TextualHandler) for handler in handlers)
    assert not any(type(handler) is logging.StreamHandler for handler in handlers)
    setup_logging()


def test_resolve_owner_name_current_user():
    """Test resolving the current uid returns a name or None."""
    name = owners.resolve_owner_name(os.getuid())
    assert name is None or isinstance(name, str)


def test_resolve_owner_name_unknown(monkeypatch):
    """Test an unknown uid resolves to None."""
    def missing(uid):
        raise KeyError(uid)

    monkeypatch.setattr(owners.pwd, "getpwuid", missing)
    assert owners.resolve_owner_name(123456) is None
