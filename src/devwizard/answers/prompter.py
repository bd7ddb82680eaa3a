"""Interactive identity prompts.

Segments are always resolved in declared order because default templates
may reference earlier segments. Resolved siblings travel as an ordered
tuple of ``(segment_id, selection)`` pairs; each step gets only what was
resolved before it.

Every prompt may come back CANCELLED; that outcome is returned unchanged
up to the caller.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from devwizard.core.errors import EmptyCustomValueError, IdentitySegmentConfigError
from devwizard.ui.surface import Cancelled, PromptSurface, SelectOption, is_cancel

from .selection import build_segment_selection, render_default_template, to_segment_defaults
from .types import (
    IdentitySegmentMetadata,
    IdentitySegmentSelection,
    IdentitySegmentSpec,
    IdentitySelection,
)

CUSTOM_CHOICE = "__custom__"
SAVED_CHOICE = "__saved__"
NEW_IDENTITY_CHOICE = "__new__"

EXISTING_IDENTITY_MESSAGE = "Select an existing answers identity (or create a new one):"

Resolved = tuple[tuple[str, IdentitySegmentSelection], ...]


class IdentityPrompter:
    """Fallback ladder asking the operator for identity segments."""

    def __init__(self, ui: PromptSurface) -> None:
        self.ui = ui

    async def prompt_for_segments(
        self,
        segments: Sequence[IdentitySegmentSpec],
        *,
        provided: Mapping[str, str] | None = None,
        metadata: Mapping[str, IdentitySegmentMetadata] | None = None,
        defaults: Mapping[str, str] | None = None,
    ) -> IdentitySelection | Cancelled:
        provided = provided or {}
        metadata = metadata or {}
        defaults = defaults or {}

        resolved: Resolved = ()
        for segment in segments:
            override = provided.get(segment.id)
            if override:
                selection: IdentitySegmentSelection | Cancelled = build_segment_selection(
                    segment, override, "cli", metadata.get(segment.id)
                )
            else:
                selection = await self.prompt_for_segment(
                    segment,
                    resolved,
                    metadata.get(segment.id),
                    defaults.get(segment.id),
                )
            if is_cancel(selection):
                return selection
            resolved = resolved + ((segment.id, selection),)

        return IdentitySelection.from_segments([selection for _id, selection in resolved])

    async def prompt_for_segment(
        self,
        segment: IdentitySegmentSpec,
        resolved: Resolved,
        metadata: IdentitySegmentMetadata | None = None,
        default_value: str | None = None,
    ) -> IdentitySegmentSelection | Cancelled:
        if not segment.options:
            if not segment.allow_custom:
                raise IdentitySegmentConfigError(segment.id)
            value = await self.prompt_for_custom_value(segment, resolved, default_value)
            if is_cancel(value):
                return value
            return build_segment_selection(segment, value, "custom", metadata)

        choices = [
            SelectOption(value=option.value, label=option.label or option.value, hint=option.hint)
            for option in segment.options
        ]
        if segment.allow_custom:
            choices.append(
                SelectOption(value=CUSTOM_CHOICE, label="Custom value", hint="Enter a custom value")
            )
        if default_value:
            listed = next((c for c in choices if c.value == default_value), None)
            if listed is not None:
                choices.remove(listed)
                choices.insert(0, listed)
            elif segment.allow_custom:
                choices.insert(
                    0, SelectOption(value=SAVED_CHOICE, label=default_value, hint="Saved value")
                )

        choice = await self.ui.select(segment.prompt, choices)
        if is_cancel(choice):
            return choice

        if choice == SAVED_CHOICE:
            return build_segment_selection(
                segment, default_value or "", "cli", metadata, accept_unlisted_values=True
            )
        if choice == CUSTOM_CHOICE:
            value = await self.prompt_for_custom_value(segment, resolved, default_value)
            if is_cancel(value):
                return value
            return build_segment_selection(segment, value, "custom", metadata)

        source = "option" if segment.find_option(choice) is not None else "cli"
        return build_segment_selection(segment, choice, source, metadata)

    async def prompt_for_custom_value(
        self,
        segment: IdentitySegmentSpec,
        resolved: Resolved,
        initial_value: str | None = None,
    ) -> str | Cancelled:
        """Free-text entry, pre-filled from the saved value or the default template.

        Raises:
            EmptyCustomValueError: the trimmed response is empty.
        """
        prefill = initial_value or render_default_template(segment.default_value, resolved)
        response = await self.ui.text(
            segment.prompt,
            initial_value=prefill,
            placeholder=segment.placeholder,
        )
        if is_cancel(response):
            return response
        trimmed = response.strip()
        if not trimmed:
            raise EmptyCustomValueError(segment.id)
        return trimmed

    async def prompt_for_existing_selection(
        self,
        existing: Sequence[IdentitySelection],
        segments: Sequence[IdentitySegmentSpec],
        metadata: Mapping[str, IdentitySegmentMetadata] | None = None,
    ) -> IdentitySelection | Cancelled:
        """Pick one stored identity (or a new one), then confirm every segment."""
        choices = [
            SelectOption(
                value=selection.slug,
                label=selection.slug,
                hint=", ".join(f"{s.id}={s.value}" for s in selection.segments),
            )
            for selection in existing
        ]
        choices.append(
            SelectOption(
                value=NEW_IDENTITY_CHOICE,
                label="Create a new identity",
                hint="Answer the identity prompts before continuing.",
            )
        )

        while True:
            response = await self.ui.select(EXISTING_IDENTITY_MESSAGE, choices)
            if is_cancel(response):
                return response
            if response == NEW_IDENTITY_CHOICE:
                return await self.prompt_for_segments(segments, metadata=metadata)
            chosen = next((s for s in existing if s.slug == response), None)
            if chosen is not None:
                return await self.prompt_for_segments(
                    segments, metadata=metadata, defaults=to_segment_defaults(chosen)
                )
