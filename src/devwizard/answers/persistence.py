"""Answers file persistence for a single wizard run.

File shape (JSON, UTF-8, trailing newline):

    {"meta": {"scenarioId", "identity"?, "execution"?}, "scenario": {<key>: <answer>}}

The file is loaded once when the run starts and written once, at the end,
by ``save()``. Unknown top-level keys survive a load/save cycle.
"""

from __future__ import annotations

import copy
import json
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from devwizard.core.errors import AnswersFileError
from devwizard.core.logging import get_logger

from .snapshots import parse_identity_block
from .types import IdentitySegmentSpec, IdentitySelection

_logger = get_logger(__name__)

_META_KEY = "meta"
_SCENARIO_KEY = "scenario"


def build_persistence_metadata(
    scenario_id: str,
    identity: IdentitySelection | None = None,
    execution: dict[str, Any] | None = None,
) -> dict[str, Any]:
    meta: dict[str, Any] = {"scenarioId": scenario_id}
    if identity is not None:
        meta["identity"] = identity.to_snapshot()
    if execution:
        meta["execution"] = dict(execution)
    return meta


class PromptPersistence:
    """Stored answers for one answers file.

    Use ``PromptPersistence.load`` to construct; it reads an existing file
    (if any) so ``did_load_existing_snapshot`` reflects disk state at start.
    """

    def __init__(
        self,
        file_path: Path,
        metadata: dict[str, Any],
        answers: dict[str, Any] | None = None,
        extra: dict[str, Any] | None = None,
        loaded_existing: bool = False,
    ) -> None:
        self._file_path = file_path
        self._meta = dict(metadata)
        self._answers: dict[str, Any] = dict(answers or {})
        self._extra: dict[str, Any] = dict(extra or {})
        self._loaded_existing = loaded_existing

    @classmethod
    def load(
        cls,
        file_path: Path,
        metadata: dict[str, Any],
        *,
        strict: bool = False,
    ) -> PromptPersistence:
        """Open ``file_path``, merging this run's ``metadata`` over stored meta.

        A file that is not a JSON object (e.g. left truncated by an interrupted
        write) is treated as absent and replaced by ``save()``, unless
        ``strict`` is set.

        Raises:
            AnswersFileError: ``strict`` and the file exists but is not a JSON object.
        """
        if not file_path.exists():
            return cls(file_path, metadata)

        try:
            payload = json.loads(file_path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, ValueError) as e:
            return cls._unusable(file_path, metadata, str(e), strict)
        if not isinstance(payload, dict):
            return cls._unusable(
                file_path, metadata, "top-level value must be an object", strict
            )

        stored_meta = payload.pop(_META_KEY, None)
        stored_answers = payload.pop(_SCENARIO_KEY, None)
        meta = dict(stored_meta) if isinstance(stored_meta, dict) else {}
        meta.update(metadata)

        _logger.debug(f"Loaded answers file {file_path}")
        return cls(
            file_path,
            meta,
            answers=stored_answers if isinstance(stored_answers, dict) else {},
            extra=payload,
            loaded_existing=True,
        )

    @classmethod
    def _unusable(
        cls,
        file_path: Path,
        metadata: dict[str, Any],
        reason: str,
        strict: bool,
    ) -> PromptPersistence:
        if strict:
            raise AnswersFileError(str(file_path), reason)
        _logger.warning(
            f"Ignoring unreadable answers file {file_path} ({reason}); it will be replaced."
        )
        return cls(file_path, metadata)

    def get_file_path(self) -> Path:
        return self._file_path

    def did_load_existing_snapshot(self) -> bool:
        return self._loaded_existing

    def get_metadata(self) -> dict[str, Any]:
        return copy.deepcopy(self._meta)

    def has(self, key: str) -> bool:
        return key in self._answers

    def get(self, key: str, default: Any = None) -> Any:
        return copy.deepcopy(self._answers.get(key, default))

    def set(self, key: str, value: Any) -> None:
        self._answers[key] = copy.deepcopy(value)

    def answers(self) -> dict[str, Any]:
        return copy.deepcopy(self._answers)

    def reset_all_answers(self) -> None:
        """Forget stored scenario answers; identity/execution metadata stays."""
        self._answers.clear()

    def stored_identity(self, segments: Sequence[IdentitySegmentSpec]) -> IdentitySelection | None:
        """Identity recorded in this file's own metadata, if it fits ``segments``."""
        if not segments:
            return None
        return parse_identity_block(self._meta.get("identity"), segments, derive_slug=True)

    def to_payload(self) -> dict[str, Any]:
        payload = copy.deepcopy(self._extra)
        payload[_META_KEY] = copy.deepcopy(self._meta)
        payload[_SCENARIO_KEY] = copy.deepcopy(self._answers)
        return payload

    def save(self) -> Path:
        """Write the whole file, creating parent directories.

        Raises:
            AnswersFileError: The file could not be written.
        """
        text = json.dumps(self.to_payload(), indent=2, ensure_ascii=False) + "\n"
        try:
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text(text, encoding="utf-8")
        except OSError as e:
            raise AnswersFileError(str(self._file_path), str(e)) from e
        _logger.debug(f"Saved answers file {self._file_path}")
        return self._file_path
