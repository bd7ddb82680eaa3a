"""Dev wizard core: errors, logging and configuration."""

from devwizard.core.config import ConfigResolver, ExecutionSettings, LoggingPolicy
from devwizard.core.errors import (
    AnswersFileError,
    ConfigError,
    DevWizardError,
    EmptyCustomValueError,
    IdentityConfigMismatchError,
    IdentityError,
    IdentitySegmentConfigError,
    InvalidCustomValueError,
    MissingRequiredSegmentsError,
    SegmentCountMismatchError,
)
from devwizard.core.log_bus import LogBus, LogRecord, get_log_bus
from devwizard.core.logging import (
    VerbosityLevel,
    apply_logging_policy,
    get_logger,
    get_verbosity,
    set_colors,
    set_verbosity,
)

__all__ = [
    # Config
    "ConfigResolver",
    "ExecutionSettings",
    "LoggingPolicy",
    # Errors
    "DevWizardError",
    "ConfigError",
    "AnswersFileError",
    "IdentityError",
    "IdentityConfigMismatchError",
    "SegmentCountMismatchError",
    "InvalidCustomValueError",
    "EmptyCustomValueError",
    "IdentitySegmentConfigError",
    "MissingRequiredSegmentsError",
    # Logging
    "LogBus",
    "LogRecord",
    "get_log_bus",
    "VerbosityLevel",
    "apply_logging_policy",
    "get_logger",
    "get_verbosity",
    "set_colors",
    "set_verbosity",
]
