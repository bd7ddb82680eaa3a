"""Tests for scenario YAML loading."""

from __future__ import annotations

from textwrap import dedent

import pytest

from devwizard.core.errors import ConfigError
from devwizard.scenario import find_scenario, load_scenarios

SCENARIOS = dedent(
    """
    scenarios:
      - id: maintenance
        label: Maintenance
        identity:
          segments:
            - id: category
              prompt: Select category
              options:
                - value: maintenance
                  label: Maintenance
                  hint: Routine upkeep
            - id: window
              prompt: Name this window
              allowCustom: true
              defaultValue: "{{category}}-window"
              placeholder: window-a
        prompts:
          - key: favoriteTool
            message: What is your favorite tool?
            default: pytest
          - key: retries
            default: 3
      - id: release
    """
)


def write(tmp_path, text):
    path = tmp_path / "scenarios.yaml"
    path.write_text(text, encoding="utf-8")
    return path


def test_load_full_scenario(tmp_path) -> None:
    maintenance, release = load_scenarios(write(tmp_path, SCENARIOS))

    assert maintenance.label == "Maintenance"
    category, window = maintenance.identity_segments
    assert category.options[0].hint == "Routine upkeep"
    assert not category.allow_custom
    assert window.allow_custom
    assert window.default_value == "{{category}}-window"
    assert window.placeholder == "window-a"
    assert [p.key for p in maintenance.prompts] == ["favoriteTool", "retries"]
    assert maintenance.prompts[1].message == "retries"
    assert maintenance.prompts[1].default == "3"

    assert release.label == "release"
    assert release.identity_segments == ()
    assert release.prompts == ()


def test_find_scenario(tmp_path) -> None:
    scenarios = load_scenarios(write(tmp_path, SCENARIOS))

    assert find_scenario(scenarios, "release").id == "release"
    with pytest.raises(ConfigError) as excinfo:
        find_scenario(scenarios, "deploy")
    assert "Available scenarios: maintenance, release" in str(excinfo.value)


def test_missing_file(tmp_path) -> None:
    with pytest.raises(ConfigError, match="not found"):
        load_scenarios(tmp_path / "absent.yaml")


@pytest.mark.parametrize(
    ("text", "fragment"),
    [
        ("scenarios: [", "Invalid YAML"),
        ("other: 1", "missing 'scenarios' list"),
        ("scenarios:\n  - label: no id", "scenarios[0].id must be a non-empty string"),
        ("scenarios:\n  - id: a\n  - id: a", "duplicate scenario id 'a'"),
        (
            "scenarios:\n  - id: a\n    identity:\n      segments:\n        - id: s\n        - id: s",
            "duplicate identity segment id 's'",
        ),
        (
            "scenarios:\n  - id: a\n    identity:\n      segments:\n"
            "        - id: s\n          options: [{value: x}, {value: x}]",
            "duplicate option value 'x'",
        ),
        (
            "scenarios:\n  - id: a\n    identity:\n      segments:\n"
            "        - id: s\n          options: [{label: nope}]",
            "options[0] must have a string 'value'",
        ),
        ("scenarios:\n  - id: a\n    prompts: [{key: k}, {key: k}]", "duplicate prompt key 'k'"),
    ],
)
def test_malformed_files_are_rejected(tmp_path, text, fragment) -> None:
    with pytest.raises(ConfigError) as excinfo:
        load_scenarios(write(tmp_path, text))

    assert fragment in str(excinfo.value)
