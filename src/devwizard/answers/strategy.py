"""How to treat an answers file that already exists."""

from __future__ import annotations

from pathlib import Path
from typing import Literal, cast

from devwizard.ui.surface import Cancelled, PromptSurface, SelectOption, is_cancel

AnswersStrategy = Literal["reuse", "review", "reset"]

STRATEGY_CHOICES = (
    SelectOption(
        value="reuse",
        label="Reuse saved answers",
        hint="Skip prompts and keep the existing values for this run.",
    ),
    SelectOption(
        value="review",
        label="Review and update answers",
        hint="Use saved answers as defaults, but run every prompt again.",
    ),
    SelectOption(
        value="reset",
        label="Start from scratch",
        hint="Clear saved answers before prompting and capture new values.",
    ),
)

_VALID = frozenset(choice.value for choice in STRATEGY_CHOICES)


def strategy_message(file_path: Path) -> str:
    return f"Saved answers file {file_path} already exists. How should Dev Wizard proceed?"


async def prompt_for_persisted_answers_strategy(
    ui: PromptSurface,
    file_path: Path,
) -> AnswersStrategy | Cancelled:
    while True:
        response = await ui.select(strategy_message(file_path), STRATEGY_CHOICES)
        if is_cancel(response):
            return response
        if response in _VALID:
            return cast(AnswersStrategy, response)
