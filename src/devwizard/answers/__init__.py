"""Answers identity resolution and persisted prompt answers."""

from .paths import build_alias_answers_path, build_identity_answers_path
from .persistence import PromptPersistence, build_persistence_metadata
from .resolver import IdentityRequest, resolve_identity_selection
from .sanitize import sanitize_persistence_segment
from .selection import build_segment_selection, build_selection_from_sources, parse_identity_slug
from .session import (
    AnswersSession,
    AnswersSessionRequest,
    collect_scenario_answers,
    prepare_answers_session,
)
from .snapshots import collect_persisted_identity_selections
from .strategy import prompt_for_persisted_answers_strategy
from .types import (
    IdentityOption,
    IdentitySegmentMetadata,
    IdentitySegmentSelection,
    IdentitySegmentSpec,
    IdentitySelection,
    SelectionBuildResult,
)

__all__ = [
    "AnswersSession",
    "AnswersSessionRequest",
    "IdentityOption",
    "IdentityRequest",
    "IdentitySegmentMetadata",
    "IdentitySegmentSelection",
    "IdentitySegmentSpec",
    "IdentitySelection",
    "PromptPersistence",
    "SelectionBuildResult",
    "build_alias_answers_path",
    "build_identity_answers_path",
    "build_persistence_metadata",
    "build_segment_selection",
    "build_selection_from_sources",
    "collect_persisted_identity_selections",
    "collect_scenario_answers",
    "parse_identity_slug",
    "prepare_answers_session",
    "prompt_for_persisted_answers_strategy",
    "resolve_identity_selection",
    "sanitize_persistence_segment",
]
