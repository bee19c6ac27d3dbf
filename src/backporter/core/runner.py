"""Command execution using the invoke library."""

import io
from pathlib import Path

from invoke import Context, Result

from backporter.core.log import logger


class Runner(Context):
    """invoke.Context with a single keyword-driven execute() entry point.

    execute() may be called from several threads at once, so it never
    touches this context's own cd stack.
    """

    def execute(
        self,
        command: str,
        cwd: Path | None = None,
        stdin: str | None = None,
        check: bool = True,
    ) -> Result:
        """Execute a command and capture its output.

        Args:
            command: Shell command string to execute
            cwd: Working directory for command execution
            stdin: Text fed to the command's standard input
            check: If True, raise on non-zero exit code

        Returns:
            invoke.Result with stdout, stderr, exited (return code)

        Raises:
            invoke.UnexpectedExit: If check=True and command
                returns non-zero
        """
        kwargs = {
            "hide": True,
            "warn": not check,
            # An empty stream keeps invoke away from our own stdin,
            # which the operator needs for prompts
            "in_stream": io.StringIO(stdin or ""),
        }

        logger.spew("Executing command", command=command, cwd=str(cwd))
        if cwd:
            # Per-call context; cd() pushes onto a list shared by
            # every caller of this one
            context = Context(config=self.config)
            with context.cd(str(Path(cwd).resolve())):
                result = context.run(command, **kwargs)
        else:
            result = self.run(command, **kwargs)

        logger.spew(
            "Command finished",
            command=command,
            exited=result.exited,
        )
        return result
