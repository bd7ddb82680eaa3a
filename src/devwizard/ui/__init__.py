"""Prompt surface and its terminal implementation."""

from devwizard.ui.console import ConsoleUI, is_interactive_terminal
from devwizard.ui.surface import CANCELLED, Cancelled, PromptSurface, SelectOption, is_cancel

__all__ = [
    "CANCELLED",
    "Cancelled",
    "ConsoleUI",
    "PromptSurface",
    "SelectOption",
    "is_cancel",
    "is_interactive_terminal",
]
