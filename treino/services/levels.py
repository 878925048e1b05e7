from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from treino.models.contract import ContractTier
from .classification import ActivityLevel, to_activity_level


@dataclass(frozen=True)
class LevelRules:
    key: ActivityLevel
    label: str
    tier: ContractTier
    max_exercises_per_day: int
    max_exercises_per_muscle: int
    # generation volume per day: primary group, secondary group, small groups
    large_count: int
    medium_count: int
    small_count: int
    day_total: int
    min_session_minutes: Optional[int] = None
    downgrade_to: Optional[ActivityLevel] = None


LEVEL_RULES: Dict[ActivityLevel, LevelRules] = {
    "sedentario": LevelRules("sedentario", "Sedentário", "sedentary", 6, 2, 2, 2, 1, 5),
    "idoso": LevelRules("idoso", "Idoso", "sedentary", 5, 2, 2, 2, 1, 5),
    "limitado": LevelRules("limitado", "Limitado", "sedentary", 5, 2, 2, 2, 1, 5),
    "iniciante": LevelRules("iniciante", "Iniciante", "moderate", 6, 3, 3, 2, 1, 6),
    "moderado": LevelRules("moderado", "Moderado", "moderate", 8, 3, 3, 2, 1, 7),
    "intermediario": LevelRules(
        "intermediario", "Intermediário", "moderate", 8, 3, 3, 2, 2, 7,
        min_session_minutes=45, downgrade_to="iniciante",
    ),
    "avancado": LevelRules(
        "avancado", "Avançado", "athlete", 10, 4, 4, 2, 2, 9,
        min_session_minutes=60, downgrade_to="intermediario",
    ),
    "atleta": LevelRules(
        "atleta", "Atleta", "athlete", 12, 4, 4, 3, 2, 9,
        min_session_minutes=75, downgrade_to="avancado",
    ),
    "atleta_alto_rendimento": LevelRules(
        "atleta_alto_rendimento", "Atleta Alto Rendimento", "advanced", 12, 5, 5, 3, 2, 10,
        min_session_minutes=75, downgrade_to="avancado",
    ),
}


def get_level_rules(activity_level: str | None) -> LevelRules:
    """Rules for a free-text level; unknown levels get the Moderado rules."""
    return LEVEL_RULES[to_activity_level(activity_level)]


def resolve_operational_level(activity_level: str | None, available_time_minutes: int | None) -> Tuple[LevelRules, bool]:
    """Return the level that actually fits the session and whether it was downgraded.

    A declared level whose minimum session length is not met drops exactly one
    step (atleta -> avancado -> intermediario -> iniciante).
    """
    rules = get_level_rules(activity_level)
    if not available_time_minutes or rules.min_session_minutes is None:
        return rules, False
    if available_time_minutes >= rules.min_session_minutes or rules.downgrade_to is None:
        return rules, False
    return LEVEL_RULES[rules.downgrade_to], True
