"""Normalization of untrusted client input.

Every helper returns ``None`` when the value cannot be normalized, so callers
can decide how to report the failure.
"""

import math
from typing import Any

from .constants import (
    DEFAULT_LIMIT,
    MAX_LIMIT,
    MIN_LIMIT,
    NUMBER_PATTERN,
    PLAYER_MAX_LENGTH,
    RUN_ID_PATTERN,
    RUN_TOKEN_PATTERN,
    SCORE_MAX,
    SCORE_MIN,
)


def clamp(value: int, lower: int, upper: int) -> int:
    return min(upper, max(lower, value))


def _parse_number(value: Any) -> float | None:
    """Parse a plain decimal number, rejecting Python-only forms such as 1_000."""
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not NUMBER_PATTERN.match(value):
            return None
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if not math.isfinite(number):
        return None
    return number


def normalize_player(value: Any) -> str | None:
    """Trim, collapse internal whitespace and cap the length of a player name."""
    if not isinstance(value, str):
        return None
    cleaned = " ".join(value.split())[:PLAYER_MAX_LENGTH]
    return cleaned or None


def normalize_score(value: Any) -> int | None:
    """Coerce a claimed score to an integer within the accepted range."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return clamp(value, SCORE_MIN, SCORE_MAX)
    number = _parse_number(value)
    if number is None:
        return None
    return clamp(math.floor(number), SCORE_MIN, SCORE_MAX)


def normalize_identifier(value: Any) -> str | None:
    if not isinstance(value, str):
        return None
    value = value.strip()
    if not RUN_ID_PATTERN.match(value):
        return None
    return value


def normalize_run_token(value: Any) -> str | None:
    if not isinstance(value, str):
        return None
    value = value.strip()
    if not RUN_TOKEN_PATTERN.match(value):
        return None
    return value


def clamp_limit(value: Any, default: int = DEFAULT_LIMIT) -> int:
    """Clamp a requested leaderboard size to [1, 100].

    Missing or non-numeric values fall back to ``default``.
    """
    number = _parse_number(value)
    if number is None:
        return default
    return clamp(math.floor(number), MIN_LIMIT, MAX_LIMIT)
