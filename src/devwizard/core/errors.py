"""Error handling with friendly messages."""

from __future__ import annotations

from collections.abc import Iterable


class DevWizardError(Exception):
    """Base exception for all dev wizard errors."""

    def __init__(self, message: str, suggestion: str | None = None) -> None:
        self.message = message
        self.suggestion = suggestion
        super().__init__(message)

    def __str__(self) -> str:
        if self.suggestion:
            return f"{self.message}\nSuggestion: {self.suggestion}"
        return self.message


class ConfigError(DevWizardError):
    """Configuration error."""

    pass


class AnswersFileError(DevWizardError):
    """Answers file could not be read or written."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(
            f"Answers file '{path}' is unusable: {reason}",
            "Fix or delete the file, or pass --answers <path> to use another one",
        )
        self.path = path


class IdentityError(DevWizardError):
    """Answers identity could not be resolved."""

    pass


class IdentityConfigMismatchError(IdentityError):
    """Identity overrides were given for a scenario without identity segments."""

    def __init__(self, scenario_id: str) -> None:
        super().__init__(
            f"Scenario {scenario_id} does not define identity metadata, "
            "but identity overrides were provided.",
            "Drop --answers-identity / --answers-segment for this scenario",
        )
        self.scenario_id = scenario_id


class SegmentCountMismatchError(IdentityError):
    """Explicit identity slug has the wrong number of segments."""

    def __init__(self, expected: int, received: int) -> None:
        super().__init__(
            f"--answers-identity requires {expected} segment(s) but received {received}."
        )
        self.expected = expected
        self.received = received


class InvalidCustomValueError(IdentityError):
    """Value is not a declared option and the segment does not allow custom values."""

    def __init__(self, segment_id: str, valid_values: Iterable[str] | None) -> None:
        values = list(valid_values or [])
        valid = ", ".join(values) if values else "n/a"
        super().__init__(
            f'Identity segment "{segment_id}" does not allow custom values. '
            f"Valid options: {valid}."
        )
        self.segment_id = segment_id
        self.valid_values = values


class EmptyCustomValueError(IdentityError):
    """Free-text identity entry was blank."""

    def __init__(self, segment_id: str) -> None:
        super().__init__(f'Identity segment "{segment_id}" requires a value.')
        self.segment_id = segment_id


class IdentitySegmentConfigError(IdentityError):
    """Segment declares neither options nor custom values."""

    def __init__(self, segment_id: str) -> None:
        super().__init__(
            f'Identity segment "{segment_id}" must define options or allow custom values.',
            "Add options or set allowCustom: true in the scenario file",
        )
        self.segment_id = segment_id


class MissingRequiredSegmentsError(IdentityError):
    """Non-interactive run could not complete the identity."""

    def __init__(self, scenario_id: str, missing: list[str]) -> None:
        suffix = f" ({', '.join(missing)})" if missing else ""
        super().__init__(
            f"Scenario {scenario_id} requires an answers identity{suffix}.",
            "Re-run with --answers-identity <segment/...> or supply every segment "
            "via --answers-segment <id>=<value>",
        )
        self.scenario_id = scenario_id
        self.missing = list(missing)
