"""Movement-pattern detection shared by the generator, validator and auditor.

Catalog metadata is the source of truth. Names that are not in the catalog
(hand-edited or externally produced plans) fall back to substring rules.
"""
from __future__ import annotations

from typing import List, Optional, Tuple

from treino.models.exercise import MovementPattern
from .catalog import find_template
from .classification import normalize_text

# Checked in order: hinge before squat, unilateral before squat.
_NAME_PATTERNS: List[Tuple[MovementPattern, Tuple[str, ...]]] = [
    ("hip_dominant", ("stiff", "rdl", "romanian", "good morning", "hip thrust", "glute bridge", "ponte de gluteo", "levantamento terra", "deadlift")),
    ("unilateral", ("bulgaro", "bulgarian", "afundo", "lunge", "passada")),
    ("knee_dominant", ("agachamento", "squat", "leg press", "hack")),
    ("horizontal_push", ("supino", "bench", "crucifixo", "crossover", "flexao de bracos", "push up")),
    ("vertical_push", ("desenvolvimento", "military", "overhead press", "shoulder press")),
    ("horizontal_pull", ("remada", "row", "t bar")),
    ("vertical_pull", ("puxada", "pulldown", "pull up", "chin up", "barra fixa")),
]

_BASE_MOVEMENTS = (
    "supino",
    "remada",
    "puxada",
    "agachamento",
    "leg press",
    "desenvolvimento",
    "rosca",
    "triceps",
    "crucifixo",
    "stiff",
    "rdl",
    "good morning",
    "elevacao de panturrilha",
    "elevacao",
    "flexao",
    "encolhimento",
)


def detect_movement_pattern(name: str | None) -> Optional[MovementPattern]:
    template = find_template(name)
    if template is not None:
        return template.pattern
    key = normalize_text(name)
    if not key:
        return None
    for pattern, needles in _NAME_PATTERNS:
        if any(n in key for n in needles):
            return pattern
    return None


def is_structural(name: str | None) -> bool:
    template = find_template(name)
    if template is not None:
        return template.role == "structural"
    return detect_movement_pattern(name) is not None


def base_movement(name: str) -> str:
    """'Supino inclinado com halteres' -> 'supino'; unknown names use the first word."""
    key = normalize_text(name)
    for base in _BASE_MOVEMENTS:
        if base in key:
            return base
    return key.split(" ")[0] if key else key
