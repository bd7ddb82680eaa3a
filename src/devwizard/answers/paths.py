"""Answers file addressing.

Path derivation is a pure function of (answers dir, scenario id, identity or
alias); the same inputs always produce the same path.
"""

from __future__ import annotations

from pathlib import Path

from devwizard.core.config import DEFAULT_ANSWERS_DIR
from devwizard.core.logging import get_logger
from devwizard.ui.surface import Cancelled, PromptSurface, is_cancel

from .sanitize import FALLBACK_SEGMENT, sanitize_persistence_segment
from .types import IdentitySelection

_logger = get_logger(__name__)

ALIAS_PROMPT_MESSAGE = "Name for the answers file (stored under .dev-wizard/answers/<name>.json):"


def default_answers_dir(repo_root: Path) -> Path:
    return repo_root / DEFAULT_ANSWERS_DIR


def build_identity_answers_path(
    answers_dir: Path,
    scenario_id: str,
    selection: IdentitySelection,
) -> Path:
    """``<answers>/<scenario>/<seg1>/.../<segN>.json``; the last segment is the file name."""
    values = [sanitize_persistence_segment(segment.value) for segment in selection.segments]
    directories = [sanitize_persistence_segment(scenario_id), *values[:-1]]
    file_name = values[-1] if values else FALLBACK_SEGMENT
    return answers_dir.joinpath(*directories, f"{file_name}.json")


def build_alias_answers_path(answers_dir: Path, alias: str) -> Path:
    """``<answers>/<alias>.json``; ``/`` inside the alias nests directories."""
    parts = split_alias(alias) or [FALLBACK_SEGMENT]
    safe = [sanitize_persistence_segment(part) for part in parts]
    return answers_dir.joinpath(*safe[:-1], f"{safe[-1]}.json")


def identity_alias(scenario_id: str, selection: IdentitySelection) -> str:
    return f"{scenario_id}/{selection.slug}"


def alias_from_answers_path(path: Path) -> str | None:
    """Alias for an explicit ``--answers <path>``: the file name without extension."""
    stem = path.stem.strip()
    return stem or None


def split_alias(alias: str) -> list[str]:
    return [part.strip() for part in alias.split("/") if part.strip()]


def answers_file_base(alias: str) -> str:
    """Last alias segment, used for display."""
    parts = split_alias(alias)
    return parts[-1] if parts else alias


async def prompt_for_answers_alias(
    ui: PromptSurface,
    scenario_id: str,
    interactive: bool,
) -> str | Cancelled:
    """Ask once for a free-text alias; non-interactive runs use the scenario id."""
    if not interactive:
        _logger.info(
            f"Using default answers file name {scenario_id} (interactive prompt disabled)."
        )
        return scenario_id

    response = await ui.text(
        ALIAS_PROMPT_MESSAGE,
        initial_value=scenario_id,
        placeholder=scenario_id,
    )
    if is_cancel(response):
        return response
    return response.strip() or scenario_id
