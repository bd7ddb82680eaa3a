"""Prompt surface contract consumed by the answers subsystem.

Implementations only render and collect input. Cancellation is a value,
not an exception: every prompt returns either the answer or CANCELLED.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any, Final, Protocol, TypeGuard


class Cancelled:
    """Operator aborted a prompt (Ctrl-C, EOF, quit)."""

    _instance: Cancelled | None = None

    def __new__(cls) -> Cancelled:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "CANCELLED"

    def __bool__(self) -> bool:
        return False


CANCELLED: Final = Cancelled()


def is_cancel(value: Any) -> TypeGuard[Cancelled]:
    return value is CANCELLED


@dataclass(frozen=True)
class SelectOption:
    value: str
    label: str | None = None
    hint: str | None = None

    @property
    def display(self) -> str:
        return self.label or self.value


class PromptSurface(Protocol):
    """Terminal (or scripted) prompt capability."""

    async def text(
        self,
        message: str,
        *,
        initial_value: str | None = None,
        placeholder: str | None = None,
        validate: Callable[[str], str | None] | None = None,
    ) -> str | Cancelled:
        """Ask for free text; ``validate`` returns an error message or None."""
        ...

    async def select(
        self,
        message: str,
        options: Sequence[SelectOption],
        *,
        initial_value: str | None = None,
    ) -> str | Cancelled:
        """Ask for one of ``options``; returns the chosen option value."""
        ...

    def print(self, text: str = "") -> None: ...
