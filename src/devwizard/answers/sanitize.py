"""Filesystem-safe path components for answers files.

The same function is used when writing answers files and when scanning for
existing ones, so its output for a given input must never change.
"""

from __future__ import annotations

import re

FALLBACK_SEGMENT = "answers"

_UNSAFE = re.compile(r"[^A-Za-z0-9._-]+")
_EDGE = re.compile(r"^[-.]+|[-.]+$")


def sanitize_persistence_segment(value: str) -> str:
    """Return ``value`` as a single safe path component.

    Runs of characters outside ``[A-Za-z0-9._-]`` (path separators included)
    become one ``-``; leading/trailing dots and dashes are stripped so the
    result can never be ``.``/``..`` or a hidden file. Empty results fall back
    to ``answers``.
    """
    cleaned = _UNSAFE.sub("-", str(value).strip())
    cleaned = _EDGE.sub("", cleaned)
    return cleaned or FALLBACK_SEGMENT
