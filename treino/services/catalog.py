from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from treino.models.exercise import ExerciseTemplate, MuscleGroup
from treino.models.profile import TrainingLocation
from .classification import normalize_text, to_muscle_group

CATALOG_PATH = Path(__file__).resolve().parents[1] / "data" / "exercise_catalog.json"

# Equipment accepted per training location; None means unrestricted.
_LOCATION_EQUIPMENT: Dict[str, Optional[Tuple[str, ...]]] = {
    "academia": None,
    "ambos": None,
    "casa": ("home", "both", "outdoor"),
    "ar_livre": ("home", "both", "outdoor"),
}

_VERSATILE_FIRST = {"both": 0, "home": 1, "outdoor": 1, "gym": 2}


@lru_cache(maxsize=1)
def load_catalog() -> Tuple[ExerciseTemplate, ...]:
    with CATALOG_PATH.open("r", encoding="utf-8") as f:
        raw = json.load(f)
    return tuple(ExerciseTemplate.model_validate(item) for item in raw)


@lru_cache(maxsize=1)
def _catalog_by_group() -> Dict[MuscleGroup, Tuple[ExerciseTemplate, ...]]:
    grouped: Dict[MuscleGroup, List[ExerciseTemplate]] = {}
    for template in load_catalog():
        group = to_muscle_group(template.primary_muscle)
        if group is None:
            raise ValueError(f"Catalog entry {template.name!r} has unknown muscle {template.primary_muscle!r}")
        grouped.setdefault(group, []).append(template)
    return {group: tuple(items) for group, items in grouped.items()}


@lru_cache(maxsize=1)
def _catalog_by_name() -> Dict[str, ExerciseTemplate]:
    index: Dict[str, ExerciseTemplate] = {}
    for template in load_catalog():
        # first entry wins when a name is listed under two groups
        index.setdefault(normalize_text(template.name), template)
    return index


def templates_for_muscle(group: MuscleGroup) -> List[ExerciseTemplate]:
    return list(_catalog_by_group().get(group, ()))


def find_template(name: str | None) -> Optional[ExerciseTemplate]:
    if not name:
        return None
    return _catalog_by_name().get(normalize_text(name))


def filter_by_location(templates: Sequence[ExerciseTemplate], location: TrainingLocation | None) -> List[ExerciseTemplate]:
    """Drop templates whose equipment is unavailable at the training location.

    `casa` and `ar_livre` exclude gym-only equipment. `academia` keeps the
    catalog order. `ambos` is unrestricted but lists versatile equipment first.
    """
    key = location or "academia"
    if key not in _LOCATION_EQUIPMENT:
        raise ValueError(f"Unknown training location: {location!r}")
    allowed = _LOCATION_EQUIPMENT[key]
    out = [t for t in templates if allowed is None or t.equipment in allowed]
    if key == "ambos":
        out.sort(key=lambda t: _VERSATILE_FIRST[t.equipment])
    return out
