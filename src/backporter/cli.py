#!/usr/bin/env python3
"""Backporter CLI - backport upstream V8 commits into Node.js."""

import asyncio
import sys

from pydantic_settings import CliApp, CliSubCommand, get_subcommand

from backporter.command.backport import BackportCommand
from backporter.core.config import State
from backporter.core.log import logger


class CliState(State):
    """Backport upstream V8 commits into a Node.js checkout.

    Configuration sources (in priority order):
    1. Command-line arguments (--config.git.v8-dir value)
    2. backporter.yaml in the current directory and --include files
    3. backporter.yaml in the user config directory
    4. .env file
    5. Environment variables (BACKPORTER_CONFIG__GIT__V8_DIR=value)
    """

    backport: CliSubCommand[BackportCommand]

    def cli_cmd(self):
        """Dispatch to the active subcommand, or show help."""
        subcommand = get_subcommand(self, is_required=False)

        if subcommand is None:
            CliApp.run(CliState, cli_args=['--help'])
            sys.exit(1)

        with logger:
            exit_code = asyncio.run(subcommand.run_workflow(self))
            raise SystemExit(exit_code)


def main():
    """Main entry point for CLI."""
    CliApp.run(CliState)


if __name__ == "__main__":
    main()
