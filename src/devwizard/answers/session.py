"""Answers session: identity -> answers file -> reuse strategy.

This is the hand-off point to the step executor. A prepared session knows
which identity applies, where the answers file lives, and whether stored
answers may bypass prompts.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

from devwizard.core.config import ExecutionSettings
from devwizard.core.logging import get_logger
from devwizard.ui.surface import Cancelled, PromptSurface, is_cancel

from .paths import (
    alias_from_answers_path,
    answers_file_base,
    build_alias_answers_path,
    build_identity_answers_path,
    default_answers_dir,
    identity_alias,
    prompt_for_answers_alias,
)
from .persistence import PromptPersistence, build_persistence_metadata
from .resolver import IdentityRequest, resolve_identity_selection
from .strategy import AnswersStrategy, prompt_for_persisted_answers_strategy
from .types import IdentitySelection

if TYPE_CHECKING:
    from devwizard.scenario import Scenario, ScenarioPrompt

_logger = get_logger(__name__)


@dataclass(frozen=True)
class AnswersSessionRequest:
    repo_root: Path
    scenario: Scenario
    answers_dir: Path | None = None
    answers_path: Path | None = None
    answers_identity: str | None = None
    answers_segments: Mapping[str, str] | None = None
    answers_segment_metadata: Mapping[str, Any] | None = None
    interactive: bool = False
    execution: ExecutionSettings | None = None

    @property
    def using_external_answers(self) -> bool:
        return self.answers_path is not None

    def resolved_answers_dir(self) -> Path:
        return self.answers_dir or default_answers_dir(self.repo_root)

    def resolved_answers_path(self) -> Path | None:
        if self.answers_path is None:
            return None
        if self.answers_path.is_absolute():
            return self.answers_path
        return self.repo_root / self.answers_path


@dataclass
class AnswersSession:
    scenario_id: str
    identity: IdentitySelection | None
    alias: str
    persistence: PromptPersistence
    strategy: AnswersStrategy = "reuse"
    use_persisted_answers: bool = True

    @property
    def file_path(self) -> Path:
        return self.persistence.get_file_path()

    @property
    def answers_file_base(self) -> str:
        return answers_file_base(self.alias)

    def stored_answer(self, key: str) -> Any | None:
        """Stored value that may bypass its prompt (reuse strategy only)."""
        if not self.use_persisted_answers or not self.persistence.has(key):
            return None
        return self.persistence.get(key)

    def prompt_default(self, key: str, fallback: str | None = None) -> str | None:
        """Pre-fill for a prompt: the stored value when present, else ``fallback``."""
        if self.persistence.has(key):
            value = self.persistence.get(key)
            if value is not None:
                return str(value)
        return fallback


async def prepare_answers_session(
    request: AnswersSessionRequest,
    ui: PromptSurface,
) -> AnswersSession | Cancelled:
    """Resolve identity, answers file location and reuse strategy for one run.

    Raises:
        IdentityError: identity cannot be resolved.
        AnswersFileError: an existing answers file is unreadable.
    """
    scenario = request.scenario
    answers_dir = request.resolved_answers_dir()
    external_path = request.resolved_answers_path()

    identity = await resolve_identity_selection(
        IdentityRequest(
            answers_dir=answers_dir,
            scenario_id=scenario.id,
            segments=scenario.identity_segments,
            provided_slug=request.answers_identity,
            provided_segments=request.answers_segments,
            provided_metadata=request.answers_segment_metadata,
            using_external_answers=request.using_external_answers,
            interactive=request.interactive,
        ),
        ui,
    )
    if is_cancel(identity):
        ui.print("Execution cancelled before selecting an answers identity.")
        return identity
    if identity is not None:
        _logger.info(f"Using answers identity {identity.slug} for this run.")

    execution = request.execution.to_metadata() if request.execution else None
    metadata = build_persistence_metadata(scenario.id, identity, execution)

    if external_path is not None:
        alias = alias_from_answers_path(external_path) or scenario.id
        file_path = external_path
    elif identity is not None:
        alias = identity_alias(scenario.id, identity)
        file_path = build_identity_answers_path(answers_dir, scenario.id, identity)
    else:
        chosen = await prompt_for_answers_alias(ui, scenario.id, request.interactive)
        if is_cancel(chosen):
            ui.print("Execution cancelled before collecting answers.")
            return chosen
        alias = chosen
        file_path = build_alias_answers_path(answers_dir, alias)

    persistence = PromptPersistence.load(file_path, metadata, strict=external_path is not None)

    if identity is None and scenario.identity_segments:
        identity = persistence.stored_identity(scenario.identity_segments)
        if identity is not None:
            _logger.verbose(f"Recovered answers identity {identity.slug} from {file_path}")

    session = AnswersSession(
        scenario_id=scenario.id,
        identity=identity,
        alias=alias,
        persistence=persistence,
    )

    if (
        persistence.did_load_existing_snapshot()
        and request.interactive
        and not request.using_external_answers
    ):
        strategy = await prompt_for_persisted_answers_strategy(ui, file_path)
        if is_cancel(strategy):
            ui.print("Execution cancelled before confirming how to use the saved answers file.")
            return strategy
        session.strategy = strategy
        if strategy == "review":
            session.use_persisted_answers = False
            _logger.info(
                "Persisted answers will be used as defaults; "
                "prompts will run before overwriting the file."
            )
        elif strategy == "reset":
            persistence.reset_all_answers()
            session.use_persisted_answers = False
            _logger.info("Persisted answers cleared; prompts will run and the file will be replaced.")

    if external_path is not None:
        _logger.info(f"Loaded prompt overrides from {external_path}.")
    if persistence.did_load_existing_snapshot():
        _logger.warning(
            f"Answers file {file_path} already exists and will be overwritten after this run."
        )
    else:
        _logger.info(
            f"Capturing prompt answers to {file_path}. "
            "Edit this file or pass --answers <path> to reuse the values later."
        )

    return session


async def collect_scenario_answers(
    session: AnswersSession,
    prompts: Sequence[ScenarioPrompt],
    ui: PromptSurface,
    *,
    interactive: bool,
) -> dict[str, Any] | Cancelled:
    """Answer each declared prompt, honoring the session's reuse strategy.

    Results are recorded on the session's persistence; nothing is written
    to disk here.
    """
    collected: dict[str, Any] = {}
    for prompt in prompts:
        stored = session.stored_answer(prompt.key)
        if stored is not None:
            _logger.verbose(f"Reusing stored answer for {prompt.key}")
            value: Any = stored
        elif not interactive:
            value = session.prompt_default(prompt.key, prompt.default)
            if value is None:
                _logger.verbose(f"No answer for {prompt.key} (non-interactive)")
                continue
        else:
            response = await ui.text(
                prompt.message,
                initial_value=session.prompt_default(prompt.key, prompt.default),
                placeholder=prompt.placeholder,
            )
            if is_cancel(response):
                return response
            value = response.strip()

        session.persistence.set(prompt.key, value)
        collected[prompt.key] = value
    return collected
