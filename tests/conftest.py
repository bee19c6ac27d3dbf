"""Pytest configuration and fixtures for backporter tests."""

import tempfile
from pathlib import Path

import pytest

from backporter.core.errors import GitCommandError
from backporter.core.log import ConsoleSink, setup_logger


@pytest.fixture(autouse=True, scope="session")
def configure_logging():
    """Console-only debug logging for the whole test session."""
    setup_logger(
        log_root=Path(tempfile.gettempdir()) / "backporter-tests",
        run_name="test",
        level="debug",
        console=ConsoleSink(level="debug"),
    )


class FakeRepository:
    """Stand-in for GitRepository that records every git call.

    handlers maps a subcommand to a callable taking (*args, stdin=)
    and returning stdout; unhandled subcommands return "".
    """

    def __init__(self, workdir=".", gpg_sign=False, handlers=None):
        self.workdir = Path(workdir)
        self.gpg_sign = gpg_sign
        self.handlers = dict(handlers or {})
        self.calls = []

    @property
    def gpg_sign_args(self):
        return ["-S"] if self.gpg_sign else []

    def run(self, subcommand, *args, stdin=None):
        self.calls.append((subcommand, *args))
        handler = self.handlers.get(subcommand)
        if handler is None:
            return ""
        return handler(*args, stdin=stdin)

    def config_value(self, key):
        return self.run("config", key).strip()

    def subcommands(self):
        return [call[0] for call in self.calls]


def fail(*args, stdin=None):
    """Handler that behaves like a failing git command."""
    raise GitCommandError("git " + " ".join(args), 1, "error: patch failed")


@pytest.fixture
def fake_repo():
    """Factory for FakeRepository instances."""
    return FakeRepository


@pytest.fixture
def failing_handler():
    return fail
