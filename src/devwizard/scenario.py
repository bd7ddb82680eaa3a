"""Scenario definitions loaded from YAML.

Example:

    scenarios:
      - id: maintenance
        label: Maintenance
        identity:
          segments:
            - id: category
              prompt: Select category
              options:
                - value: maintenance
            - id: window
              prompt: Name this window
              allowCustom: true
              defaultValue: "{{category}}-window"
        prompts:
          - key: favoriteTool
            message: What is your favorite tool?
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from devwizard.answers.types import IdentityOption, IdentitySegmentSpec
from devwizard.core.errors import ConfigError


@dataclass(frozen=True)
class ScenarioPrompt:
    key: str
    message: str
    default: str | None = None
    placeholder: str | None = None


@dataclass(frozen=True)
class Scenario:
    id: str
    label: str
    identity_segments: tuple[IdentitySegmentSpec, ...] = ()
    prompts: tuple[ScenarioPrompt, ...] = ()


def load_scenarios(path: Path) -> list[Scenario]:
    """Load and validate every scenario in a YAML file.

    Raises:
        ConfigError: If the file is missing, not valid YAML or malformed.
    """
    if not path.exists():
        raise ConfigError(f"Scenario file not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(data, dict) or not isinstance(data.get("scenarios"), list):
        raise ConfigError(f"{path}: missing 'scenarios' list")

    scenarios = [_parse_scenario(raw, index) for index, raw in enumerate(data["scenarios"])]
    _require_unique([s.id for s in scenarios], "scenario id", str(path))
    return scenarios


def find_scenario(scenarios: Sequence[Scenario], scenario_id: str) -> Scenario:
    for scenario in scenarios:
        if scenario.id == scenario_id:
            return scenario
    available = ", ".join(s.id for s in scenarios) or "none"
    raise ConfigError(
        f"Scenario '{scenario_id}' not found",
        f"Available scenarios: {available}",
    )


def _parse_scenario(raw: Any, index: int) -> Scenario:
    where = f"scenarios[{index}]"
    if not isinstance(raw, dict):
        raise ConfigError(f"{where} must be a mapping")

    scenario_id = _required_str(raw, "id", where)
    label = raw.get("label")

    identity = raw.get("identity") or {}
    if not isinstance(identity, dict):
        raise ConfigError(f"{where}.identity must be a mapping")
    raw_segments = identity.get("segments") or []
    if not isinstance(raw_segments, list):
        raise ConfigError(f"{where}.identity.segments must be a list")
    segments = tuple(
        _parse_segment(seg, f"{where}.identity.segments[{i}]") for i, seg in enumerate(raw_segments)
    )
    _require_unique([s.id for s in segments], "identity segment id", where)

    raw_prompts = raw.get("prompts") or []
    if not isinstance(raw_prompts, list):
        raise ConfigError(f"{where}.prompts must be a list")
    prompts = tuple(
        _parse_prompt(p, f"{where}.prompts[{i}]") for i, p in enumerate(raw_prompts)
    )
    _require_unique([p.key for p in prompts], "prompt key", where)

    return Scenario(
        id=scenario_id,
        label=label if isinstance(label, str) and label.strip() else scenario_id,
        identity_segments=segments,
        prompts=prompts,
    )


def _parse_segment(raw: Any, where: str) -> IdentitySegmentSpec:
    if not isinstance(raw, dict):
        raise ConfigError(f"{where} must be a mapping")

    segment_id = _required_str(raw, "id", where)
    raw_options = raw.get("options") or []
    if not isinstance(raw_options, list):
        raise ConfigError(f"{where}.options must be a list")

    options: list[IdentityOption] = []
    for i, opt in enumerate(raw_options):
        if not isinstance(opt, dict) or not isinstance(opt.get("value"), str):
            raise ConfigError(f"{where}.options[{i}] must have a string 'value'")
        options.append(
            IdentityOption(
                value=opt["value"],
                label=_optional_str(opt, "label"),
                hint=_optional_str(opt, "hint"),
            )
        )
    _require_unique([o.value for o in options], "option value", where)

    return IdentitySegmentSpec(
        id=segment_id,
        prompt=_optional_str(raw, "prompt") or segment_id,
        options=tuple(options),
        allow_custom=bool(raw.get("allowCustom", False)),
        default_value=_optional_str(raw, "defaultValue"),
        placeholder=_optional_str(raw, "placeholder"),
    )


def _parse_prompt(raw: Any, where: str) -> ScenarioPrompt:
    if not isinstance(raw, dict):
        raise ConfigError(f"{where} must be a mapping")
    key = _required_str(raw, "key", where)
    default = raw.get("default")
    return ScenarioPrompt(
        key=key,
        message=_optional_str(raw, "message") or key,
        default=None if default is None else str(default),
        placeholder=_optional_str(raw, "placeholder"),
    )


def _required_str(raw: dict[str, Any], key: str, where: str) -> str:
    value = raw.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"{where}.{key} must be a non-empty string")
    return value.strip()


def _optional_str(raw: dict[str, Any], key: str) -> str | None:
    value = raw.get(key)
    return value if isinstance(value, str) else None


def _require_unique(values: list[str], what: str, where: str) -> None:
    seen: set[str] = set()
    for value in values:
        if value in seen:
            raise ConfigError(f"{where}: duplicate {what} '{value}'")
        seen.add(value)
