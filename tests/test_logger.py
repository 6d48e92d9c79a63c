"""Tests for the rich logging setup."""

import logging

import pytest
from rich.logging import RichHandler

from afs_backup_ng import __logger__


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


class TestCreateLogger:
    """Tests for create_logger."""

    def test_installs_rich_handler_on_root(self, restore_root_logger):
        __logger__.create_logger("DEBUG")
        root = restore_root_logger
        assert root.level == logging.DEBUG
        assert root.handlers == [__logger__.rich_handler]
        assert isinstance(__logger__.rich_handler, RichHandler)

    def test_module_loggers_reach_rich_handler(self, restore_root_logger):
        __logger__.create_logger("WARNING")
        records = []
        __logger__.rich_handler.emit = records.append
        logging.getLogger("afs_backup_ng.modes.tsm").warning("dsmc failed")
        logging.getLogger("afs_backup_ng.modes.tsm").info("not shown")
        assert [r.getMessage() for r in records] == ["dsmc failed"]
