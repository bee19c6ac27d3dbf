"""Exceptions raised by backport runs."""

from __future__ import annotations


class BackportError(RuntimeError):
    """Base class for fatal backport failures."""


class GitCommandError(BackportError):
    """A git invocation exited with a nonzero status."""

    def __init__(self, command: str, exit_code: int, stderr: str = ""):
        self.command = command
        self.exit_code = exit_code
        self.stderr = stderr
        message = f"'{command}' failed with exit code {exit_code}"
        if stderr.strip():
            message += f": {stderr.strip()}"
        super().__init__(message)


class ResolutionError(BackportError):
    """An upstream commit reference could not be resolved."""

    def __init__(self, ref: str, reason: str = ""):
        self.ref = ref
        message = f"Cannot resolve upstream reference '{ref}'"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class MalformedVersionError(BackportError):
    """A version file does not contain the expected pattern."""

    def __init__(self, path, pattern: str):
        self.path = path
        self.pattern = pattern
        super().__init__(
            f"Pattern {pattern!r} not found in {path}"
        )


__all__ = [
    "BackportError",
    "GitCommandError",
    "ResolutionError",
    "MalformedVersionError",
]
