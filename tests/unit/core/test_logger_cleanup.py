"""Tests for logger cleanup cascade via BaseCloseable."""

import pytest

from backporter.core.base import BaseCloseable
from backporter.core.log import ConsoleSink, FileSink, Logger


def make_logger(tmp_path):
    logger = Logger(
        console=ConsoleSink(enabled=False),
        file=FileSink(enabled=True, path=str(tmp_path / "test.log")),
    )
    logger.setup(log_root=tmp_path, run_name="test")
    return logger


def test_logger_closes_file_via_context_manager(tmp_path):
    logger = make_logger(tmp_path)
    assert not logger.file._file.closed

    with logger:
        logger.info("test message")

    assert logger.file._file.closed
    assert "test message" in (tmp_path / "test.log").read_text()


def test_logger_closes_on_exception(tmp_path):
    logger = make_logger(tmp_path)

    with pytest.raises(ValueError), logger:
        raise ValueError("test exception")

    assert logger.file._file.closed


def test_close_is_idempotent(tmp_path):
    logger = make_logger(tmp_path)
    logger.close()
    logger.close()
    assert logger.file._file.closed


def test_close_continues_after_child_failure(capsys):
    class Broken(BaseCloseable):
        def close(self):
            raise RuntimeError("boom")

    class Fine(BaseCloseable):
        closed: bool = False

        def close(self):
            self.closed = True

    class Parent(BaseCloseable):
        first: Broken
        second: Fine

    parent = Parent(first=Broken(), second=Fine())
    parent.close()

    assert parent.second.closed is True
    assert "Error closing first" in capsys.readouterr().err
