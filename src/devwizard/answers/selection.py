"""Pure identity selection building.

Nothing here touches the terminal or the filesystem.
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from dataclasses import replace
from typing import Any

from devwizard.core.errors import InvalidCustomValueError, SegmentCountMismatchError

from .types import (
    IdentitySegmentMetadata,
    IdentitySegmentSelection,
    IdentitySegmentSpec,
    IdentitySelection,
    SelectionBuildResult,
    SelectionSource,
)

_TEMPLATE_PLACEHOLDER = re.compile(r"{{\s*([\w-]+)\s*}}")


def build_segment_selection(
    segment: IdentitySegmentSpec,
    value: str,
    source: SelectionSource,
    metadata: IdentitySegmentMetadata | None = None,
    *,
    accept_unlisted_values: bool = False,
) -> IdentitySegmentSelection:
    """Build a selection for one concrete segment value.

    A declared option contributes its label. Unlisted values require
    ``allow_custom`` on the segment or ``accept_unlisted_values`` (trusted
    input such as an explicit identity slug).

    Raises:
        InvalidCustomValueError: value is unlisted and custom values are not allowed.
    """
    option = segment.find_option(value)
    if option is not None:
        selection = IdentitySegmentSelection(
            id=segment.id,
            value=option.value,
            label=option.label or option.value,
            source=source,
        )
    elif segment.allow_custom or accept_unlisted_values:
        selection = IdentitySegmentSelection(id=segment.id, value=value, label=value, source=source)
    else:
        raise InvalidCustomValueError(segment.id, segment.option_values())

    return apply_segment_metadata(selection, metadata)


def apply_segment_metadata(
    selection: IdentitySegmentSelection,
    metadata: IdentitySegmentMetadata | None,
) -> IdentitySegmentSelection:
    """Out-of-band label/details always win over the value's own."""
    if metadata is None:
        return selection
    if metadata.label is not None:
        selection = replace(selection, label=metadata.label)
    if metadata.details is not None:
        selection = replace(selection, details=dict(metadata.details))
    return selection


def build_selection_from_sources(
    segments: Sequence[IdentitySegmentSpec],
    provided: Mapping[str, str] | None = None,
    provided_metadata: Mapping[str, IdentitySegmentMetadata] | None = None,
    fallback: IdentitySelection | None = None,
) -> SelectionBuildResult:
    """Combine explicit overrides with a single fallback snapshot.

    Per declared segment: explicit override (source ``cli``), else the
    fallback's value copied verbatim, else missing.
    """
    provided = provided or {}
    provided_metadata = provided_metadata or {}
    fallback_by_id = {entry.id: entry for entry in fallback.segments} if fallback else {}

    selections: list[IdentitySegmentSelection] = []
    missing: list[str] = []
    for segment in segments:
        override = provided.get(segment.id)
        if override:
            selections.append(
                build_segment_selection(segment, override, "cli", provided_metadata.get(segment.id))
            )
            continue
        stored = fallback_by_id.get(segment.id)
        if stored is not None:
            selections.append(apply_segment_metadata(stored, provided_metadata.get(segment.id)))
            continue
        missing.append(segment.id)

    if missing:
        return SelectionBuildResult(selection=None, missing_segment_ids=tuple(missing))
    return SelectionBuildResult(selection=IdentitySelection.from_segments(selections))


def parse_identity_slug(
    slug: str,
    segments: Sequence[IdentitySegmentSpec],
    metadata: Mapping[str, IdentitySegmentMetadata] | None = None,
) -> IdentitySelection:
    """Split an explicit ``a/b/c`` slug into one trusted value per segment.

    Raises:
        SegmentCountMismatchError: slug arity differs from the declared segments.
    """
    parts = [part.strip() for part in slug.split("/")]
    parts = [part for part in parts if part]
    if len(parts) != len(segments):
        raise SegmentCountMismatchError(len(segments), len(parts))

    metadata = metadata or {}
    return IdentitySelection.from_segments(
        [
            build_segment_selection(
                segment, value, "cli", metadata.get(segment.id), accept_unlisted_values=True
            )
            for segment, value in zip(segments, parts)
        ]
    )


def normalize_segment_overrides(overrides: Mapping[str, str] | None) -> dict[str, str]:
    """Trim keys/values and drop blank entries."""
    normalized: dict[str, str] = {}
    for key, value in (overrides or {}).items():
        key = str(key).strip()
        value = str(value).strip() if value is not None else ""
        if key and value:
            normalized[key] = value
    return normalized


def normalize_segment_metadata(
    metadata: Mapping[str, Any] | None,
) -> dict[str, IdentitySegmentMetadata]:
    """Keep entries carrying a non-blank label and/or non-empty details.

    Accepts IdentitySegmentMetadata instances or plain ``{"label", "details"}``
    mappings (as read from YAML/JSON).
    """
    normalized: dict[str, IdentitySegmentMetadata] = {}
    for key, value in (metadata or {}).items():
        key = str(key).strip()
        if not key or value is None:
            continue
        if isinstance(value, IdentitySegmentMetadata):
            raw_label, raw_details = value.label, value.details
        elif isinstance(value, Mapping):
            raw_label, raw_details = value.get("label"), value.get("details")
        else:
            continue

        label = raw_label.strip() if isinstance(raw_label, str) else None
        details = dict(raw_details) if isinstance(raw_details, Mapping) else None
        entry = IdentitySegmentMetadata(label=label or None, details=details or None)
        if entry.label is None and entry.details is None:
            continue
        normalized[key] = entry
    return normalized


def render_default_template(
    template: str | None,
    resolved: Sequence[tuple[str, IdentitySegmentSelection]],
) -> str | None:
    """Substitute ``{{id}}`` with values of siblings resolved earlier in this run.

    Unknown placeholders render as an empty string; a blank result is None.
    """
    if not template:
        return None
    values = {segment_id: selection.value for segment_id, selection in resolved}
    rendered = _TEMPLATE_PLACEHOLDER.sub(lambda m: values.get(m.group(1), ""), template)
    rendered = rendered.strip()
    return rendered or None


def to_segment_defaults(selection: IdentitySelection) -> dict[str, str]:
    return {segment.id: segment.value for segment in selection.segments if segment.id and segment.value}
