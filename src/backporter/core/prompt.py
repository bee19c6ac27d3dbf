"""Interactive terminal prompts."""

from __future__ import annotations

from collections.abc import Callable

from rich.console import Console
from rich.prompt import Confirm, Prompt

console = Console()


def confirm(message: str, default: bool = False) -> bool:
    """Ask a yes/no question."""
    return Confirm.ask(message, default=default, console=console)


def prompt(message: str, validator: Callable[[str], bool]) -> str:
    """Ask until the answer satisfies validator, then return it.

    An unrecognized answer is not an error; the question is simply
    asked again.
    """
    while True:
        answer = Prompt.ask(message, console=console)
        if validator(answer):
            return answer
        console.print(f"[yellow]Unrecognized answer {answer!r}[/]")
