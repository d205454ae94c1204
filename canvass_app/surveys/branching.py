"""
Branching rules attached to survey questions and options.

A branching target tells the SMS flow where to go after a question (or an
option's follow-up) has been answered. Targets arrive from the builder in
several shapes:

- nothing at all (``None``)
- a single scalar target, e.g. ``2`` or ``"-1"``
- a structured value, e.g. ``[1, -1]`` with one target per option

Scalar targets use a zero-based index into the survey's questions, or
``END_SURVEY`` to finish the conversation. The builder also renders
disabled placeholder entries ("-- No more options --") with other negative
values; those are never stored as real targets.
"""

from __future__ import annotations

import re
from typing import Any

END_SURVEY = -1
NEXT_QUESTION_KEY = "next_question"

_TARGET_RE = re.compile(r"-?[0-9]+")


def is_numeric_target(value: str) -> bool:
    """True for strings such as ``"3"`` or ``"-1"`` (ASCII digits only)."""
    return _TARGET_RE.fullmatch(value.strip()) is not None


def normalize_branching(raw: Any) -> dict | list | None:
    """Return the canonical stored form of a branching value.

    Structured values pass through untouched, so normalizing an already
    canonical value is a no-op.
    """
    if raw is None:
        return None
    if isinstance(raw, (dict, list)):
        return raw
    return {NEXT_QUESTION_KEY: raw}


def clean_target(value: Any) -> Any:
    """Coerce a single submitted target.

    UI placeholders and strings that are not plain integers become ``None``.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        if not is_numeric_target(value):
            return None
        value = int(value)
    if isinstance(value, int) and value < END_SURVEY:
        return None
    return value


def clean_branching(raw: Any) -> Any:
    if isinstance(raw, list):
        return [
            item if isinstance(item, (dict, list)) else clean_target(item)
            for item in raw
        ]
    if isinstance(raw, dict):
        return {
            key: value if isinstance(value, (dict, list)) else clean_target(value)
            for key, value in raw.items()
        }
    return clean_target(raw)


def option_targets(raw: Any) -> dict[int, Any]:
    """Map each submitted option position to its branching entry.

    Positions refer to the options list as submitted, before blank options
    are dropped, so the mapping stays sparse rather than being compacted.
    """
    if isinstance(raw, list):
        return dict(enumerate(raw))
    if isinstance(raw, dict):
        targets: dict[int, Any] = {}
        for key, value in raw.items():
            try:
                targets[int(key)] = value
            except (TypeError, ValueError):
                continue
        return targets
    return {}
