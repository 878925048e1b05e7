"""Canonical lookups for free-text muscle, level, day-type and objective strings.

Every lookup goes through `normalize_text` and a closed alias table. Unknown
input never raises: activity levels fall back to ``moderado``, contract tiers
to ``moderate``, objectives to ``saude`` and muscles/day types to ``None``.
"""
from __future__ import annotations

import re
import unicodedata
from typing import Dict, FrozenSet, Literal, Optional

from treino.models.contract import ContractTier
from treino.models.exercise import MuscleGroup


ActivityLevel = Literal[
    "sedentario",
    "idoso",
    "limitado",
    "iniciante",
    "moderado",
    "intermediario",
    "avancado",
    "atleta",
    "atleta_alto_rendimento",
]

DayType = Literal["push", "pull", "lower", "upper", "full_body"]

DivisionKey = Literal["ppl", "upper_lower", "full_body"]

Objective = Literal["emagrecimento", "ganho_de_massa", "forca", "saude"]

DEFAULT_ACTIVITY_LEVEL: ActivityLevel = "moderado"
DEFAULT_CONTRACT_TIER: ContractTier = "moderate"
DEFAULT_OBJECTIVE: Objective = "saude"

LEG_GROUPS: FrozenSet[MuscleGroup] = frozenset({"quadriceps", "hamstrings", "glutes", "calves"})
ARM_GROUPS: FrozenSet[MuscleGroup] = frozenset({"biceps", "triceps"})

_SEPARATORS = re.compile(r"[_\-/]+")
_SPACES = re.compile(r"\s+")


def normalize_text(value: str | None) -> str:
    if not value:
        return ""
    decomposed = unicodedata.normalize("NFD", str(value))
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    stripped = _SEPARATORS.sub(" ", stripped.lower())
    return _SPACES.sub(" ", stripped).strip()


_ACTIVITY_LEVELS: Dict[str, ActivityLevel] = {
    "sedentario": "sedentario",
    "sedentary": "sedentario",
    "idoso": "idoso",
    "idosa": "idoso",
    "elderly": "idoso",
    "limitado": "limitado",
    "limitada": "limitado",
    "limited": "limitado",
    "iniciante": "iniciante",
    "beginner": "iniciante",
    "leve": "iniciante",
    "moderado": "moderado",
    "moderada": "moderado",
    "moderate": "moderado",
    "intermediario": "intermediario",
    "intermediaria": "intermediario",
    "intermediate": "intermediario",
    "avancado": "avancado",
    "avancada": "avancado",
    "advanced": "avancado",
    "atleta": "atleta",
    "athlete": "atleta",
    "atleta alto rendimento": "atleta_alto_rendimento",
    "atleta de alto rendimento": "atleta_alto_rendimento",
    "atleta altorendimento": "atleta_alto_rendimento",
    "alto rendimento": "atleta_alto_rendimento",
    "altorendimento": "atleta_alto_rendimento",
    "high performance": "atleta_alto_rendimento",
}

_CONTRACT_TIERS: Dict[ActivityLevel, ContractTier] = {
    "sedentario": "sedentary",
    "idoso": "sedentary",
    "limitado": "sedentary",
    "iniciante": "moderate",
    "moderado": "moderate",
    "intermediario": "moderate",
    "avancado": "athlete",
    "atleta": "athlete",
    "atleta_alto_rendimento": "advanced",
}

_MUSCLE_GROUPS: Dict[str, MuscleGroup] = {
    "peitoral": "chest",
    "peitorais": "chest",
    "peito": "chest",
    "chest": "chest",
    "costas": "back",
    "dorsal": "back",
    "dorsais": "back",
    "back": "back",
    "lats": "back",
    "quadriceps": "quadriceps",
    "quadricep": "quadriceps",
    "quads": "quadriceps",
    "posterior de coxa": "hamstrings",
    "posteriores de coxa": "hamstrings",
    "posterior": "hamstrings",
    "isquiotibiais": "hamstrings",
    "hamstrings": "hamstrings",
    "gluteos": "glutes",
    "gluteo": "glutes",
    "glutes": "glutes",
    "ombros": "shoulders",
    "ombro": "shoulders",
    "deltoides": "shoulders",
    "deltoide": "shoulders",
    "deltoide posterior": "shoulders",
    "shoulders": "shoulders",
    "biceps": "biceps",
    "triceps": "triceps",
    "panturrilhas": "calves",
    "panturrilha": "calves",
    "calves": "calves",
    "trapezio": "traps",
    "traps": "traps",
}

_DAY_TYPES: Dict[str, DayType] = {
    "push": "push",
    "empurrar": "push",
    "pull": "pull",
    "puxar": "pull",
    "legs": "lower",
    "pernas": "lower",
    "lower": "lower",
    "lower body": "lower",
    "inferiores": "lower",
    "inferior": "lower",
    "upper": "upper",
    "upper body": "upper",
    "superiores": "upper",
    "superior": "upper",
    "full body": "full_body",
    "fullbody": "full_body",
    "full": "full_body",
    "corpo inteiro": "full_body",
}

_DIVISIONS: Dict[str, DivisionKey] = {
    "ppl": "ppl",
    "push pull legs": "ppl",
    "upper lower": "upper_lower",
    "upper lower split": "upper_lower",
    "superiores inferiores": "upper_lower",
    "full body": "full_body",
    "fullbody": "full_body",
    "corpo inteiro": "full_body",
}

_OBJECTIVES: Dict[str, Objective] = {
    "emagrecimento": "emagrecimento",
    "emagrecer": "emagrecimento",
    "perder peso": "emagrecimento",
    "perda de peso": "emagrecimento",
    "perder gordura": "emagrecimento",
    "weight loss": "emagrecimento",
    "ganhar massa": "ganho_de_massa",
    "ganhar massa muscular": "ganho_de_massa",
    "ganho de massa": "ganho_de_massa",
    "ganho de massa muscular": "ganho_de_massa",
    "hipertrofia": "ganho_de_massa",
    "hypertrophy": "ganho_de_massa",
    "forca": "forca",
    "forca maxima": "forca",
    "ganhar forca": "forca",
    "strength": "forca",
    "saude": "saude",
    "manutencao": "saude",
    "condicionamento": "saude",
    "qualidade de vida": "saude",
}


def to_activity_level(value: str | None) -> ActivityLevel:
    return _ACTIVITY_LEVELS.get(normalize_text(value), DEFAULT_ACTIVITY_LEVEL)


def to_contract_tier(value: str | None) -> ContractTier:
    key = normalize_text(value)
    if key not in _ACTIVITY_LEVELS:
        return DEFAULT_CONTRACT_TIER
    return _CONTRACT_TIERS[_ACTIVITY_LEVELS[key]]


def to_muscle_group(value: str | None) -> Optional[MuscleGroup]:
    return _MUSCLE_GROUPS.get(normalize_text(value))


def to_day_type(value: str | None) -> Optional[DayType]:
    return _DAY_TYPES.get(normalize_text(value))


def to_division(value: str | None) -> Optional[DivisionKey]:
    return _DIVISIONS.get(normalize_text(value))


def to_objective(value: str | None) -> Objective:
    return _OBJECTIVES.get(normalize_text(value), DEFAULT_OBJECTIVE)
