"""Command line entry point: resolve answers identity and capture prompt answers."""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Any

from devwizard.answers.session import (
    AnswersSessionRequest,
    collect_scenario_answers,
    prepare_answers_session,
)
from devwizard.core.config import ConfigResolver
from devwizard.core.errors import DevWizardError
from devwizard.core.logging import apply_logging_policy, get_logger, set_colors
from devwizard.scenario import find_scenario, load_scenarios
from devwizard.ui.console import ConsoleUI, is_interactive_terminal
from devwizard.ui.surface import PromptSurface, is_cancel

_logger = get_logger(__name__)


def _key_value(raw: str) -> tuple[str, str]:
    key, sep, value = raw.partition("=")
    if not sep or not key.strip():
        raise argparse.ArgumentTypeError(f"expected ID=VALUE, got {raw!r}")
    return key.strip(), value.strip()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dev-wizard-answers",
        description="Resolve the answers identity for a wizard scenario and capture its answers.",
    )
    parser.add_argument("--config", type=Path, required=True, help="Scenario YAML file")
    parser.add_argument("--scenario", required=True, help="Scenario id")
    parser.add_argument("--repo-root", type=Path, help="Repository root (default: cwd)")
    parser.add_argument("--settings", type=Path, help="User settings YAML file")

    # Answers identity
    parser.add_argument("--answers", type=Path, help="Load answers from an explicit file")
    parser.add_argument("--answers-identity", help="Full identity slug, e.g. maintenance/daily")
    parser.add_argument(
        "--answers-segment",
        action="append",
        type=_key_value,
        default=[],
        metavar="ID=VALUE",
        help="Identity segment value (repeatable)",
    )
    parser.add_argument(
        "--answers-segment-label",
        action="append",
        type=_key_value,
        default=[],
        metavar="ID=LABEL",
        help="Display label for an identity segment (repeatable)",
    )
    parser.add_argument(
        "--answers-segment-detail",
        action="append",
        type=_key_value,
        default=[],
        metavar="ID.KEY=VALUE",
        help="Extra metadata stored with an identity segment (repeatable)",
    )

    # Execution metadata
    sandbox = parser.add_mutually_exclusive_group()
    sandbox.add_argument("--sandbox", dest="sandbox", action="store_true", default=None)
    sandbox.add_argument("--no-sandbox", dest="sandbox", action="store_false")
    parser.add_argument("--sandbox-slug", help="Sandbox slug recorded with the answers")

    # Verbosity
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("--quiet", action="store_true", help="Warnings and errors only")
    verbosity.add_argument("--verbose", action="store_true", help="Verbose output")
    verbosity.add_argument("--debug", action="store_true", help="Debug output (everything)")

    parser.add_argument(
        "--non-interactive",
        action="store_true",
        help="Never prompt, even when attached to a terminal",
    )
    return parser


def _segment_metadata(args: argparse.Namespace) -> dict[str, dict[str, Any]]:
    metadata: dict[str, dict[str, Any]] = {}
    for segment_id, label in args.answers_segment_label:
        metadata.setdefault(segment_id, {})["label"] = label
    for target, value in args.answers_segment_detail:
        segment_id, sep, detail_key = target.partition(".")
        if not sep or not segment_id or not detail_key:
            raise DevWizardError(
                f"Invalid --answers-segment-detail {target!r}",
                "Use --answers-segment-detail <id>.<key>=<value>",
            )
        metadata.setdefault(segment_id, {}).setdefault("details", {})[detail_key] = value
    return metadata


def _cli_config(args: argparse.Namespace) -> dict[str, Any]:
    cli_args: dict[str, Any] = {}
    if args.quiet:
        cli_args["logging"] = {"level": "quiet"}
    elif args.verbose:
        cli_args["logging"] = {"level": "verbose"}
    elif args.debug:
        cli_args["logging"] = {"level": "debug"}
    if args.sandbox is not None:
        cli_args["sandbox"] = args.sandbox
    if args.sandbox_slug:
        cli_args["sandbox_slug"] = args.sandbox_slug
    return cli_args


async def run(
    args: argparse.Namespace,
    ui: PromptSurface | None = None,
    *,
    interactive: bool | None = None,
) -> int:
    """Run one wizard answers session; returns the process exit code."""
    ui = ui or ConsoleUI()
    if interactive is None:
        interactive = is_interactive_terminal() and not args.non_interactive
    repo_root = (args.repo_root or Path.cwd()).resolve()

    try:
        resolver = ConfigResolver(cli_args=_cli_config(args), user_config_path=args.settings)
        apply_logging_policy(resolver.resolve_logging_policy())
        set_colors(resolver.resolve_flag("logging.color", default=True))

        scenario = find_scenario(load_scenarios(args.config), args.scenario)
        _logger.info(f"Running scenario {scenario.label} ({scenario.id}).")

        session = await prepare_answers_session(
            AnswersSessionRequest(
                repo_root=repo_root,
                scenario=scenario,
                answers_dir=resolver.resolve_answers_dir(repo_root),
                answers_path=args.answers,
                answers_identity=args.answers_identity,
                answers_segments=dict(args.answers_segment),
                answers_segment_metadata=_segment_metadata(args),
                interactive=interactive,
                execution=resolver.resolve_execution_settings(),
            ),
            ui,
        )
        if is_cancel(session):
            return 0

        collected = await collect_scenario_answers(
            session, scenario.prompts, ui, interactive=interactive
        )
        if is_cancel(collected):
            ui.print("Execution cancelled while collecting answers.")
            return 0

        path = session.persistence.save()
        _logger.info(f"Saved {len(collected)} answer(s) to {path}.")
        return 0
    except DevWizardError as e:
        _logger.error(str(e))
        return 1


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
