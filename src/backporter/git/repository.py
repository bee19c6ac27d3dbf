"""Thin wrapper for running git in one repository."""

from __future__ import annotations

import shlex
from pathlib import Path

from backporter.core.errors import GitCommandError
from backporter.core.log import logger
from backporter.core.runner import Runner


class GitRepository:
    """Run git subcommands inside a fixed working directory.

    Two instances exist per run: the upstream V8 clone the patches
    come from and the downstream Node.js tree they are applied to.
    """

    def __init__(
        self,
        workdir: Path,
        runner: Runner | None = None,
        gpg_sign: bool = False,
        name: str = "git",
    ):
        self.workdir = Path(workdir).expanduser().resolve()
        self.runner = runner or Runner()
        self.gpg_sign = gpg_sign
        self.name = name

    @property
    def gpg_sign_args(self) -> list[str]:
        """Arguments spliced into commit and am invocations."""
        return ["-S"] if self.gpg_sign else []

    def run(self, subcommand: str, *args: str, stdin: str | None = None) -> str:
        """Run `git <subcommand> <args>` and return its stdout.

        Raises:
            GitCommandError: If git exits with a nonzero status
        """
        command = shlex.join(["git", subcommand, *args])
        logger.debug(f"[{self.name}] {command}")
        result = self.runner.execute(
            command,
            cwd=self.workdir,
            stdin=stdin,
            check=False,
        )
        if result.exited != 0:
            raise GitCommandError(command, result.exited, result.stderr)
        return result.stdout

    def config_value(self, key: str) -> str:
        """Return a git config entry, stripped."""
        return self.run("config", key).strip()

    def __repr__(self):
        return f"GitRepository({self.name!r}, {str(self.workdir)!r})"
