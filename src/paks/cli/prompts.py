"""Terminal prompts for the publish pipeline."""

from __future__ import annotations

from collections.abc import Sequence

from rich.console import Console
from rich.prompt import Confirm, IntPrompt, Prompt


class RichPrompter:
    """``Prompter`` that asks on the terminal with ``rich.prompt``."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def notify(self, message: str) -> None:
        self.console.print(message, markup=False, highlight=False)

    def confirm(self, message: str, *, default: bool = False) -> bool:
        return Confirm.ask(message, default=default, console=self.console)

    def select(self, message: str, choices: Sequence[str], *, default: int = 0) -> int:
        self.console.print(message)
        for number, label in enumerate(choices, start=1):
            self.console.print(f"  {number}. {label}", markup=False, highlight=False)
        numbers = [str(n) for n in range(1, len(choices) + 1)]
        answer = IntPrompt.ask(
            "Choice",
            choices=numbers,
            default=default + 1,
            show_choices=False,
            console=self.console,
        )
        return answer - 1

    def text(self, message: str) -> str:
        return Prompt.ask(message, console=self.console).strip()

    def secret(self, message: str) -> str:
        return Prompt.ask(message, password=True, console=self.console).strip()
