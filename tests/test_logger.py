#!/usr/bin/env python3
"""
Logging setup tests.
"""

import logging

import pytest

from patient_sim.utils.logger import setup_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def test_file_and_error_logs(tmp_path, restore_root_logger):
    setup_logging("DEBUG", str(tmp_path), console=False)

    logging.getLogger("patient_sim.test").info("session started")
    logging.getLogger("patient_sim.test").error("speech failed")
    for handler in logging.getLogger().handlers:
        handler.flush()

    session_log = (tmp_path / "patient_sim.log").read_text()
    error_log = (tmp_path / "errors.log").read_text()
    assert "session started" in session_log
    assert "speech failed" in session_log
    assert "speech failed" in error_log
    assert "session started" not in error_log


def test_repeated_setup_does_not_duplicate_handlers(tmp_path, restore_root_logger):
    setup_logging("INFO", str(tmp_path))
    setup_logging("INFO", str(tmp_path))
    assert len(logging.getLogger().handlers) == 3
