from __future__ import annotations

import math
import re
from typing import Iterable

from treino.config import get_settings
from treino.models.plan import Exercise

_NUMBER = re.compile(r"\d+")


def parse_rest_seconds(rest: str | None) -> int:
    """'90-120s' -> 90, '2 min' -> 120; unparsable strings use the default rest."""
    text = (rest or "").lower()
    match = _NUMBER.search(text)
    if match is None:
        return get_settings().DEFAULT_REST_SECONDS
    value = int(match.group())
    if "min" in text:
        value *= 60
    return value


def exercise_seconds(exercise: Exercise) -> int:
    per_set = get_settings().SET_EXECUTION_SECONDS + parse_rest_seconds(exercise.rest)
    return exercise.sets * per_set


def day_seconds(exercises: Iterable[Exercise]) -> int:
    return sum(exercise_seconds(e) for e in exercises)


def day_minutes(exercises: Iterable[Exercise]) -> int:
    return math.ceil(day_seconds(exercises) / 60)


def fits_in(exercises: Iterable[Exercise], available_time_minutes: int | None) -> bool:
    if not available_time_minutes:
        return True
    return day_minutes(exercises) <= available_time_minutes
