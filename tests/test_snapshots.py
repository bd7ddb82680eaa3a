"""Tests for recovering identity snapshots from answers files."""

from __future__ import annotations

import asyncio

from devwizard.answers.snapshots import (
    collect_identity_answer_files,
    collect_persisted_identity_selections,
    parse_identity_snapshot,
    read_identity_snapshot,
)
from devwizard.core.log_bus import get_log_bus
from devwizard.core.logging import VerbosityLevel, set_verbosity

from fakes import identity_of, write_identity_snapshot, write_json


def _collect(answers_dir, segments, scenario_id="maintenance"):
    return asyncio.run(collect_persisted_identity_selections(answers_dir, scenario_id, segments))


def test_collect_files_depth_first_in_name_order(tmp_path) -> None:
    for rel in ("b.json", "a.json", "notes.txt", "z/inner.json", "m/x/deep.json", "m/top.json"):
        path = tmp_path / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("{}", encoding="utf-8")

    files = collect_identity_answer_files(tmp_path)

    assert [p.relative_to(tmp_path).as_posix() for p in files] == [
        "a.json",
        "b.json",
        "m/top.json",
        "m/x/deep.json",
        "z/inner.json",
    ]


def test_collect_files_missing_root_is_empty(tmp_path) -> None:
    assert collect_identity_answer_files(tmp_path / "nope") == []


def test_missing_scenario_directory_yields_nothing(answers_dir, two_segments) -> None:
    assert _collect(answers_dir, two_segments) == []


def test_scenario_without_segments_skips_scan(answers_dir) -> None:
    write_identity_snapshot(answers_dir, "maintenance", [("category", "maintenance")])
    assert _collect(answers_dir, []) == []


def test_round_trip_through_written_file(answers_dir, two_segments) -> None:
    write_identity_snapshot(
        answers_dir, "maintenance", [("category", "maintenance"), ("cadence", "daily")]
    )

    found = _collect(answers_dir, two_segments)

    assert found == [identity_of([("category", "maintenance"), ("cadence", "daily")])]


def test_malformed_files_are_skipped(answers_dir, two_segments) -> None:
    scenario_dir = answers_dir / "maintenance"
    (scenario_dir / "broken.json").parent.mkdir(parents=True)
    (scenario_dir / "broken.json").write_text("{not json", encoding="utf-8")
    write_json(scenario_dir / "list.json", [1, 2, 3])
    write_json(scenario_dir / "no-meta.json", {"scenario": {"a": 1}})
    write_json(
        scenario_dir / "blank-slug.json",
        {"meta": {"identity": {"slug": "  ", "segments": []}}},
    )
    write_json(
        scenario_dir / "short.json",
        {"meta": {"identity": {"slug": "maintenance", "segments": [{"value": "maintenance"}]}}},
    )
    write_json(
        scenario_dir / "bad-value.json",
        {"meta": {"identity": {"slug": "a/b", "segments": [{"value": "a"}, {"value": 7}]}}},
    )
    good = write_identity_snapshot(
        answers_dir, "maintenance", [("category", "maintenance"), ("cadence", "weekly")]
    )

    found = _collect(answers_dir, two_segments)

    assert [s.slug for s in found] == ["maintenance/weekly"]
    assert read_identity_snapshot(good, two_segments) == found[0]


def test_duplicate_slugs_keep_first_file(answers_dir, two_segments) -> None:
    write_identity_snapshot(
        answers_dir, "maintenance", [("category", "maintenance"), ("cadence", "daily")]
    )
    copy = identity_of(
        [("category", "maintenance"), ("cadence", "daily")],
        labels={"cadence": "Copied"},
    )
    write_json(
        answers_dir / "maintenance" / "zz" / "copy.json",
        {"meta": {"identity": copy.to_snapshot()}},
    )

    found = _collect(answers_dir, two_segments)

    assert len(found) == 1
    assert found[0].segments[1].label == "daily"


def test_parse_fills_missing_fields(two_segments) -> None:
    payload = {
        "meta": {
            "identity": {
                "slug": " maintenance/daily ",
                "segments": [
                    {"value": "maintenance"},
                    {"id": "cadence", "value": "daily", "label": "Daily", "details": {"k": "v"}},
                ],
            }
        }
    }

    selection = parse_identity_snapshot(payload, two_segments)

    assert selection.slug == "maintenance/daily"
    category, cadence = selection.segments
    assert (category.id, category.label, category.source) == ("category", "maintenance", "cli")
    assert cadence.details == {"k": "v"}


def test_scan_reports_through_log_bus(answers_dir, two_segments) -> None:
    set_verbosity(VerbosityLevel.DEBUG)
    write_identity_snapshot(
        answers_dir, "maintenance", [("category", "maintenance"), ("cadence", "daily")]
    )

    with get_log_bus().capture() as records:
        _collect(answers_dir, two_segments)

    assert any("1 identity snapshot(s)" in r.message for r in records)


def test_collect_files_does_not_follow_symlinks(tmp_path) -> None:
    nested = tmp_path / "a" / "b"
    nested.mkdir(parents=True)
    (nested / "real.json").write_text("{}", encoding="utf-8")
    (nested / "loop").symlink_to(tmp_path / "a", target_is_directory=True)
    (tmp_path / "link.json").symlink_to(nested / "real.json")

    files = collect_identity_answer_files(tmp_path)

    assert [p.relative_to(tmp_path).as_posix() for p in files] == ["a/b/real.json"]
