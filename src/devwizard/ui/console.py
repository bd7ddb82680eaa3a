"""Console prompt surface rendered with Rich.

Rules:
- This module contains only rendering and input collection.
- It must not contain identity resolution logic.
"""

from __future__ import annotations

import sys
from collections.abc import Callable, Sequence

from rich.console import Console
from rich.markup import escape
from rich.prompt import Prompt

from devwizard.ui.surface import CANCELLED, Cancelled, SelectOption

_QUIT_WORDS = frozenset({"q", "quit", "exit"})


def is_interactive_terminal() -> bool:
    """True when both stdin and stdout are attached to a terminal."""
    return bool(sys.stdin.isatty() and sys.stdout.isatty())


class ConsoleUI:
    """Rich-backed implementation of PromptSurface."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def print(self, text: str = "") -> None:
        self.console.print(text)

    async def text(
        self,
        message: str,
        *,
        initial_value: str | None = None,
        placeholder: str | None = None,
        validate: Callable[[str], str | None] | None = None,
    ) -> str | Cancelled:
        prompt = f"[bold]{escape(message)}[/bold]"
        if placeholder and not initial_value:
            prompt += f" [dim]({escape(placeholder)})[/dim]"

        while True:
            try:
                raw = Prompt.ask(
                    prompt,
                    console=self.console,
                    default=initial_value or "",
                    show_default=bool(initial_value),
                )
            except (KeyboardInterrupt, EOFError):
                return CANCELLED

            if validate is not None:
                problem = validate(raw)
                if problem:
                    self.console.print(f"[red]{escape(problem)}[/red]")
                    continue
            return raw

    async def select(
        self,
        message: str,
        options: Sequence[SelectOption],
        *,
        initial_value: str | None = None,
    ) -> str | Cancelled:
        if not options:
            return CANCELLED

        default_index = 1
        for n, option in enumerate(options, 1):
            if option.value == initial_value:
                default_index = n
                break

        while True:
            self.console.print()
            self.console.print(f"[bold cyan]{escape(message)}[/bold cyan]")
            for n, option in enumerate(options, 1):
                line = f"  {n}. {escape(option.display)}"
                if option.hint:
                    line += f" [dim]- {escape(option.hint)}[/dim]"
                self.console.print(line)

            try:
                raw = Prompt.ask(
                    f"Select (default {default_index}; q to quit)",
                    console=self.console,
                    default="",
                    show_default=False,
                ).strip()
            except (KeyboardInterrupt, EOFError):
                return CANCELLED

            if raw.lower() in _QUIT_WORDS:
                return CANCELLED
            if not raw:
                return options[default_index - 1].value
            if raw.isdigit() and 1 <= int(raw) <= len(options):
                return options[int(raw) - 1].value

            self.console.print("[red]Invalid selection[/red]")
