"""Recover identity snapshots from previously written answers files.

Answers files are untrusted input: anything that does not carry a
well-formed ``meta.identity`` block is skipped silently.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from devwizard.core.logging import get_logger

from .sanitize import sanitize_persistence_segment
from .types import IdentitySegmentSelection, IdentitySegmentSpec, IdentitySelection

_logger = get_logger(__name__)


def collect_identity_answer_files(root: Path) -> list[Path]:
    """List ``*.json`` files below ``root``, depth-first, in name order.

    Uses an explicit work-list; a missing or non-directory root yields [].
    Symlinks are not followed.
    """
    files: list[Path] = []
    pending: list[Path] = [root]
    while pending:
        current = pending.pop()
        try:
            entries = sorted(current.iterdir(), key=lambda p: p.name)
        except (FileNotFoundError, NotADirectoryError):
            continue

        subdirs: list[Path] = []
        for entry in entries:
            if entry.is_symlink():
                continue
            if entry.is_dir():
                subdirs.append(entry)
            elif entry.is_file() and entry.name.endswith(".json"):
                files.append(entry)
        # Reversed so the first subdirectory is visited next.
        pending.extend(reversed(subdirs))
    return files


def parse_identity_snapshot(
    payload: Any,
    expected_segments: Sequence[IdentitySegmentSpec],
) -> IdentitySelection | None:
    """Validate a decoded answers document field by field.

    Returns None for anything malformed; never raises.
    """
    if not isinstance(payload, dict):
        return None
    meta = payload.get("meta")
    if not isinstance(meta, dict):
        return None
    return parse_identity_block(meta.get("identity"), expected_segments)


def parse_identity_block(
    identity: Any,
    expected_segments: Sequence[IdentitySegmentSpec],
    *,
    derive_slug: bool = False,
) -> IdentitySelection | None:
    """Validate a ``meta.identity`` block.

    With ``derive_slug`` a missing or blank slug is rebuilt from the segment
    values instead of rejecting the block.
    """
    if not isinstance(identity, dict):
        return None

    slug = identity.get("slug")
    stored_segments = identity.get("segments")
    slug = slug.strip() if isinstance(slug, str) else ""
    if not slug and not derive_slug:
        return None
    if not isinstance(stored_segments, list) or len(stored_segments) != len(expected_segments):
        return None

    selections: list[IdentitySegmentSelection] = []
    for index, (stored, expected) in enumerate(zip(stored_segments, expected_segments)):
        if not isinstance(stored, dict) or not isinstance(stored.get("value"), str):
            return None
        value = stored["value"]
        segment_id = stored.get("id")
        if not isinstance(segment_id, str):
            segment_id = expected.id or f"segment-{index + 1}"
        label = stored.get("label")
        details = stored.get("details")
        selections.append(
            IdentitySegmentSelection(
                id=segment_id,
                value=value,
                label=label if isinstance(label, str) else value,
                # Provenance is not persisted.
                source="cli",
                details=dict(details) if isinstance(details, dict) else None,
            )
        )

    if not slug:
        return IdentitySelection.from_segments(selections)
    return IdentitySelection(slug=slug, segments=tuple(selections))


def read_identity_snapshot(
    path: Path,
    expected_segments: Sequence[IdentitySegmentSpec],
) -> IdentitySelection | None:
    try:
        raw = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return None
    try:
        payload = json.loads(raw)
    except ValueError:
        return None
    return parse_identity_snapshot(payload, expected_segments)


def scenario_answers_dir(answers_dir: Path, scenario_id: str) -> Path:
    return answers_dir / sanitize_persistence_segment(scenario_id)


async def collect_persisted_identity_selections(
    answers_dir: Path,
    scenario_id: str,
    segments: Sequence[IdentitySegmentSpec],
) -> list[IdentitySelection]:
    """Scan a scenario's answers tree for distinct identity snapshots.

    At most one entry per slug; the first file in traversal order wins.
    """
    if not segments:
        return []

    root = scenario_answers_dir(answers_dir, scenario_id)
    files = await asyncio.to_thread(collect_identity_answer_files, root)

    by_slug: dict[str, IdentitySelection] = {}
    for path in files:
        selection = await asyncio.to_thread(read_identity_snapshot, path, segments)
        if selection is None:
            continue
        by_slug.setdefault(selection.slug, selection)

    _logger.debug(
        f"Found {len(by_slug)} identity snapshot(s) in {len(files)} answers file(s) under {root}"
    )
    return list(by_slug.values())
