"""Tests for answers session preparation and prompt collection."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from devwizard.answers.paths import ALIAS_PROMPT_MESSAGE
from devwizard.answers.session import (
    AnswersSessionRequest,
    collect_scenario_answers,
    prepare_answers_session,
)
from devwizard.answers.strategy import STRATEGY_CHOICES, strategy_message
from devwizard.core.config import ExecutionSettings
from devwizard.core.errors import AnswersFileError
from devwizard.core.log_bus import get_log_bus
from devwizard.scenario import Scenario, ScenarioPrompt
from devwizard.ui.surface import CANCELLED, is_cancel

from fakes import FakeUI, keep_initial, read_json, write_identity_snapshot, write_json

FAVORITE_TOOL = ScenarioPrompt(key="favoriteTool", message="Favorite tool?", default="pytest")
EDITOR = ScenarioPrompt(key="editor", message="Editor?")


@pytest.fixture
def repo_root(answers_dir):
    return answers_dir.parent.parent


@pytest.fixture
def plain_scenario():
    return Scenario(id="maintenance", label="Maintenance", prompts=(FAVORITE_TOOL, EDITOR))


@pytest.fixture
def identity_scenario(two_segments):
    return Scenario(
        id="maintenance",
        label="Maintenance",
        identity_segments=tuple(two_segments),
        prompts=(FAVORITE_TOOL,),
    )


def prepare(repo_root, scenario, ui, **kwargs):
    request = AnswersSessionRequest(repo_root=repo_root, scenario=scenario, **kwargs)
    return asyncio.run(prepare_answers_session(request, ui))


def collect(session, scenario, ui, interactive):
    return asyncio.run(
        collect_scenario_answers(session, scenario.prompts, ui, interactive=interactive)
    )


def seed_plain_answers(answers_dir):
    return write_json(
        answers_dir / "maintenance.json",
        {"meta": {"scenarioId": "maintenance"}, "scenario": {"favoriteTool": "ruff", "editor": "vim"}},
    )


def test_reset_strategy_discards_stored_answers(repo_root, answers_dir, plain_scenario) -> None:
    path = seed_plain_answers(answers_dir)
    ui = FakeUI(selects=["reset"], texts=[keep_initial, "black", "emacs"])

    session = prepare(repo_root, plain_scenario, ui, interactive=True)
    answers = collect(session, plain_scenario, ui, interactive=True)
    session.persistence.save()

    assert ui.calls[0] == ("text", ALIAS_PROMPT_MESSAGE, "maintenance")
    assert ui.calls[1] == ("select", strategy_message(path), list(STRATEGY_CHOICES))
    assert ui.calls[2] == ("text", "Favorite tool?", "pytest")
    assert ui.calls[3] == ("text", "Editor?", None)
    assert session.strategy == "reset"
    assert answers == {"favoriteTool": "black", "editor": "emacs"}
    assert read_json(path)["scenario"] == {"favoriteTool": "black", "editor": "emacs"}


def test_review_strategy_prefills_stored_answers(repo_root, answers_dir, plain_scenario) -> None:
    path = seed_plain_answers(answers_dir)
    ui = FakeUI(selects=["review"], texts=[keep_initial, keep_initial, "nano"])

    session = prepare(repo_root, plain_scenario, ui, interactive=True)
    answers = collect(session, plain_scenario, ui, interactive=True)

    assert not session.use_persisted_answers
    assert ui.calls[2] == ("text", "Favorite tool?", "ruff")
    assert ui.calls[3] == ("text", "Editor?", "vim")
    assert answers == {"favoriteTool": "ruff", "editor": "nano"}
    assert session.file_path == path


def test_reuse_strategy_skips_stored_prompts(repo_root, answers_dir, plain_scenario) -> None:
    seed_plain_answers(answers_dir)
    ui = FakeUI(selects=["reuse"], texts=[keep_initial])

    session = prepare(repo_root, plain_scenario, ui, interactive=True)
    answers = collect(session, plain_scenario, ui, interactive=True)

    assert session.use_persisted_answers
    assert ui.messages == [ALIAS_PROMPT_MESSAGE, strategy_message(session.file_path)]
    assert answers == {"favoriteTool": "ruff", "editor": "vim"}


def test_identity_session_records_metadata(repo_root, answers_dir, identity_scenario) -> None:
    ui = FakeUI()

    with get_log_bus().capture() as records:
        session = prepare(
            repo_root,
            identity_scenario,
            ui,
            answers_segments={"category": "maintenance", "cadence": "daily"},
            answers_segment_metadata={"cadence": {"label": "Every day"}},
            execution=ExecutionSettings(sandbox=True, sandbox_slug="sbx"),
        )
    answers = collect(session, identity_scenario, ui, interactive=False)
    path = session.persistence.save()

    expected = answers_dir / "maintenance" / "maintenance" / "daily.json"
    assert path == expected
    assert session.alias == "maintenance/maintenance/daily"
    assert session.answers_file_base == "daily"
    assert answers == {"favoriteTool": "pytest"}
    assert ui.calls == []

    meta = read_json(expected)["meta"]
    assert meta["scenarioId"] == "maintenance"
    assert meta["identity"]["slug"] == "maintenance/daily"
    assert meta["identity"]["segments"][1]["label"] == "Every day"
    assert meta["execution"] == {"sandbox": True, "sandboxSlug": "sbx"}

    messages = [r.plain for r in records]
    assert "[info] Using answers identity maintenance/daily for this run." in messages
    assert any(m.startswith(f"[info] Capturing prompt answers to {expected}") for m in messages)


def test_existing_identity_file_warns_about_overwrite(repo_root, answers_dir, identity_scenario) -> None:
    path = write_identity_snapshot(
        answers_dir,
        "maintenance",
        [("category", "maintenance"), ("cadence", "daily")],
        answers={"favoriteTool": "ruff"},
    )

    with get_log_bus().capture() as records:
        session = prepare(repo_root, identity_scenario, FakeUI(), interactive=False)

    assert session.file_path == path
    assert session.stored_answer("favoriteTool") == "ruff"
    assert f"[warning] Answers file {path} already exists and will be overwritten after this run." in [
        r.plain for r in records
    ]


def test_external_answers_hydrate_identity(repo_root, tmp_path, identity_scenario) -> None:
    external = write_identity_snapshot(
        tmp_path / "saved",
        "maintenance",
        [("category", "maintenance"), ("cadence", "weekly")],
        answers={"favoriteTool": "ruff"},
    )
    ui = FakeUI()

    session = prepare(repo_root, identity_scenario, ui, answers_path=external, interactive=True)
    answers = collect(session, identity_scenario, ui, interactive=True)

    assert session.file_path == external
    assert session.alias == "weekly"
    assert session.identity.slug == "maintenance/weekly"
    assert answers == {"favoriteTool": "ruff"}
    assert ui.calls == []


def test_relative_external_path_is_anchored_at_repo_root(repo_root, plain_scenario) -> None:
    session = prepare(repo_root, plain_scenario, FakeUI(), answers_path=Path("x.json"))

    assert session.file_path == repo_root / "x.json"
    assert not session.persistence.did_load_existing_snapshot()


def test_non_interactive_collect_skips_prompts_without_default(repo_root, plain_scenario) -> None:
    session = prepare(repo_root, plain_scenario, FakeUI())

    answers = collect(session, plain_scenario, FakeUI(), interactive=False)

    assert answers == {"favoriteTool": "pytest"}
    assert not session.persistence.has("editor")


def test_cancel_while_selecting_identity(repo_root, identity_scenario) -> None:
    ui = FakeUI(selects=[CANCELLED])

    result = prepare(repo_root, identity_scenario, ui, interactive=True)

    assert is_cancel(result)
    assert ui.printed == ["Execution cancelled before selecting an answers identity."]


def test_cancel_while_choosing_strategy(repo_root, answers_dir, plain_scenario) -> None:
    seed_plain_answers(answers_dir)
    ui = FakeUI(selects=[CANCELLED], texts=[keep_initial])

    result = prepare(repo_root, plain_scenario, ui, interactive=True)

    assert result is CANCELLED
    assert ui.printed == [
        "Execution cancelled before confirming how to use the saved answers file."
    ]


def test_cancel_while_collecting(repo_root, plain_scenario) -> None:
    ui = FakeUI(texts=[keep_initial, CANCELLED])
    session = prepare(repo_root, plain_scenario, ui, interactive=True)

    assert collect(session, plain_scenario, ui, interactive=True) is CANCELLED
    assert not session.file_path.exists()


def test_truncated_identity_file_is_replaced(repo_root, answers_dir, identity_scenario) -> None:
    path = answers_dir / "maintenance" / "maintenance" / "daily.json"
    path.parent.mkdir(parents=True)
    path.write_text('{"meta": {"scenarioId": "maint', encoding="utf-8")
    ui = FakeUI()

    session = prepare(
        repo_root, identity_scenario, ui, answers_identity="maintenance/daily", interactive=True
    )
    collect(session, identity_scenario, FakeUI(texts=["ruff"]), interactive=True)
    session.persistence.save()

    assert not session.persistence.did_load_existing_snapshot()
    assert ui.calls == []
    saved = read_json(path)
    assert saved["meta"]["identity"]["slug"] == "maintenance/daily"
    assert saved["scenario"] == {"favoriteTool": "ruff"}


def test_unreadable_external_answers_file_fails(repo_root, tmp_path, plain_scenario) -> None:
    external = tmp_path / "saved.json"
    external.write_text("{broken", encoding="utf-8")

    with pytest.raises(AnswersFileError):
        prepare(repo_root, plain_scenario, FakeUI(), answers_path=external)
