"""Resolve which answers identity applies to a wizard run.

Precedence, highest first: explicit slug, explicit per-segment overrides,
a single persisted snapshot, interactive prompts. Outcomes are a complete
IdentitySelection, None (scenario has no identity, or an external answers
file will supply it), CANCELLED, or an IdentityError.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from devwizard.core.errors import IdentityConfigMismatchError, MissingRequiredSegmentsError
from devwizard.core.logging import get_logger
from devwizard.ui.surface import Cancelled, PromptSurface

from .prompter import IdentityPrompter
from .selection import (
    build_selection_from_sources,
    normalize_segment_metadata,
    normalize_segment_overrides,
    parse_identity_slug,
    to_segment_defaults,
)
from .snapshots import collect_persisted_identity_selections
from .types import IdentitySegmentSpec, IdentitySelection

_logger = get_logger(__name__)


@dataclass(frozen=True)
class IdentityRequest:
    """Inputs for one identity resolution."""

    answers_dir: Path
    scenario_id: str
    segments: Sequence[IdentitySegmentSpec] = ()
    provided_slug: str | None = None
    provided_segments: Mapping[str, str] | None = None
    provided_metadata: Mapping[str, Any] | None = None
    using_external_answers: bool = False
    interactive: bool = False


async def resolve_identity_selection(
    request: IdentityRequest,
    ui: PromptSurface,
) -> IdentitySelection | None | Cancelled:
    provided = normalize_segment_overrides(request.provided_segments)
    metadata = normalize_segment_metadata(request.provided_metadata)
    slug = request.provided_slug
    segments = list(request.segments)

    if not segments:
        if slug is not None or provided or metadata:
            raise IdentityConfigMismatchError(request.scenario_id)
        return None

    if slug is not None:
        # Trusted input: never touches disk or the terminal.
        return parse_identity_slug(slug, segments, metadata)

    prompter = IdentityPrompter(ui)
    may_prompt = request.interactive and not request.using_external_answers

    persisted: list[IdentitySelection] = []
    if not request.using_external_answers:
        persisted = await collect_persisted_identity_selections(
            request.answers_dir, request.scenario_id, segments
        )
    fallback = persisted[0] if len(persisted) == 1 else None

    if len(persisted) > 1 and not provided and may_prompt:
        _logger.verbose(f"{len(persisted)} stored identities found for {request.scenario_id}")
        return await prompter.prompt_for_existing_selection(persisted, segments, metadata)

    result = build_selection_from_sources(segments, provided, metadata, fallback)
    if result.selection is not None:
        if fallback is not None and not provided and may_prompt:
            # Completed only by the stored snapshot: let the operator confirm each segment.
            return await prompter.prompt_for_segments(
                segments, metadata=metadata, defaults=to_segment_defaults(fallback)
            )
        return result.selection

    if request.using_external_answers:
        return None

    if not request.interactive:
        raise MissingRequiredSegmentsError(request.scenario_id, list(result.missing_segment_ids))

    return await prompter.prompt_for_segments(
        segments,
        provided=provided,
        metadata=metadata,
        defaults=to_segment_defaults(fallback) if fallback is not None else None,
    )
