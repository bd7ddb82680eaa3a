"""Answers identity models.

A scenario declares an ordered list of identity segments; a run resolves one
value per segment. The resulting selection addresses a reusable answers file.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Literal

SelectionSource = Literal["option", "custom", "cli"]


@dataclass(frozen=True)
class IdentityOption:
    value: str
    label: str | None = None
    hint: str | None = None


@dataclass(frozen=True)
class IdentitySegmentSpec:
    """One declared identity segment of a scenario.

    ``default_value`` is a template and may reference earlier segments as
    ``{{segmentId}}``.
    """

    id: str
    prompt: str
    options: tuple[IdentityOption, ...] = ()
    allow_custom: bool = False
    default_value: str | None = None
    placeholder: str | None = None

    def find_option(self, value: str) -> IdentityOption | None:
        for option in self.options:
            if option.value == value:
                return option
        return None

    def option_values(self) -> list[str]:
        return [option.value for option in self.options]


@dataclass(frozen=True)
class IdentitySegmentMetadata:
    """Out-of-band label/details supplied for a segment (CLI metadata overrides)."""

    label: str | None = None
    details: dict[str, Any] | None = None


@dataclass(frozen=True)
class IdentitySegmentSelection:
    id: str
    value: str
    label: str
    source: SelectionSource
    details: dict[str, Any] | None = None

    def to_snapshot(self) -> dict[str, Any]:
        """Answers-file shape (``meta.identity.segments[]``); provenance is not stored."""
        out: dict[str, Any] = {"id": self.id, "value": self.value, "label": self.label}
        if self.details:
            out["details"] = dict(self.details)
        return out


@dataclass(frozen=True)
class IdentitySelection:
    slug: str
    segments: tuple[IdentitySegmentSelection, ...] = field(default_factory=tuple)

    @classmethod
    def from_segments(cls, segments: Sequence[IdentitySegmentSelection]) -> IdentitySelection:
        return cls(slug=join_slug(segments), segments=tuple(segments))

    def to_snapshot(self) -> dict[str, Any]:
        return {
            "slug": self.slug,
            "segments": [segment.to_snapshot() for segment in self.segments],
        }


@dataclass(frozen=True)
class SelectionBuildResult:
    """Outcome of combining overrides and a fallback snapshot.

    Exactly one of ``selection`` / ``missing_segment_ids`` is meaningful:
    a complete selection has no missing ids.
    """

    selection: IdentitySelection | None
    missing_segment_ids: tuple[str, ...] = ()

    @property
    def complete(self) -> bool:
        return self.selection is not None


def join_slug(segments: Sequence[IdentitySegmentSelection]) -> str:
    return "/".join(segment.value for segment in segments)
