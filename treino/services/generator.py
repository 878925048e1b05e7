"""Rule-based weekly plan generator.

Days are assembled from per-muscle slots. Slot sizes come from the activity
level, are raised to the muscle-group contract floor and capped by the
per-muscle maximum. Candidates are filtered by training location and joint
restrictions, required movement patterns are picked first, and the day is then
fitted into the available session time.

The generator never records metrics. Compromises are reported to the optional
per-run quality accumulator.
"""
from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, List, Optional, Sequence, Set, Tuple

from treino.config import get_settings
from treino.models.exercise import ExerciseTemplate, MovementPattern, MuscleGroup
from treino.models.plan import Exercise, TrainingDay, TrainingPlan
from treino.models.profile import Division, TrainingLocation, TrainingProfile
from .catalog import filter_by_location, find_template, templates_for_muscle
from .classification import DayType, normalize_text, to_day_type, to_muscle_group, to_objective
from .contracts import get_contract_for_muscle_group, get_min_structural, joint_restriction_severity, satisfied_patterns
from .day_rules import required_regions
from .levels import LevelRules, resolve_operational_level
from .patterns import base_movement
from .timing import day_seconds, fits_in, parse_rest_seconds

if TYPE_CHECKING:
    from treino.metrics.quality import PlanQualityAccumulator

logger = logging.getLogger(__name__)


class GenerationError(ValueError):
    pass


WEEKDAYS = ["Segunda-feira", "Terça-feira", "Quarta-feira", "Quinta-feira", "Sexta-feira", "Sábado", "Domingo"]

# Weekday indexes used for each weekly frequency.
_WEEKDAY_SPREAD: Dict[int, List[int]] = {
    1: [0],
    2: [0, 3],
    3: [0, 2, 4],
    4: [0, 1, 3, 4],
    5: [0, 1, 2, 3, 4],
    6: [0, 1, 2, 3, 4, 5],
    7: [0, 1, 2, 3, 4, 5, 6],
}

_PPL_ROTATION: List[Tuple[str, str]] = [
    ("Push", "Peito/Tríceps"),
    ("Pull", "Costas/Bíceps"),
    ("Legs", "Pernas"),
]

_COMPOUND_BASE_LIMIT = 2
_ISOLATED_BASE_LIMIT = 1
_MIN_SETS = 2

_REPS_RANGE = re.compile(r"^\s*(\d+)\s*-\s*(\d+)\s*$")

# (BMI lower bound, weight-loss target range, mass-gain (upper bound threshold, target upper bound))
_BMI_BANDS: List[Tuple[float, Tuple[int, int], Tuple[int, int]]] = [
    (35.0, (15, 20), (12, 18)),
    (30.0, (12, 18), (10, 15)),
    (25.0, (10, 15), (8, 12)),
]


@dataclass(frozen=True)
class Slot:
    group: MuscleGroup
    count: int
    # True keeps only rear-delt work, False drops it, None keeps everything
    rear_delt: Optional[bool] = None


def technical_division(training_days: int) -> Division:
    if training_days <= 3:
        return "Full Body"
    if training_days == 4:
        return "Upper/Lower"
    return "PPL"


def _day_sequence(division: Division, training_days: int) -> List[Tuple[str, str]]:
    """(label, type) per training day."""
    weekdays = [WEEKDAYS[i] for i in _WEEKDAY_SPREAD[training_days]]
    days: List[Tuple[str, str]] = []
    for i, weekday in enumerate(weekdays):
        if division == "PPL":
            day_type, focus = _PPL_ROTATION[i % len(_PPL_ROTATION)]
            days.append((f"Treino {chr(ord('A') + i)} – {focus}", day_type))
        elif division == "Upper/Lower":
            if i % 2 == 0:
                days.append((f"{weekday} – Superiores", "Upper"))
            else:
                days.append((f"{weekday} – Inferiores", "Lower"))
        else:
            days.append((f"{weekday} – Corpo Inteiro", "Full Body"))
    return days


def _blueprint(day_type: DayType, rules: LevelRules) -> List[Slot]:
    high_tier = rules.tier in ("athlete", "advanced")
    if day_type == "push":
        return [Slot("chest", rules.large_count), Slot("shoulders", rules.medium_count, rear_delt=False), Slot("triceps", rules.small_count)]
    if day_type == "pull":
        return [Slot("back", rules.large_count), Slot("shoulders", rules.medium_count, rear_delt=True), Slot("biceps", rules.small_count)]
    if day_type == "lower":
        return [
            Slot("quadriceps", rules.large_count),
            Slot("hamstrings", max(2, rules.large_count - 1)),
            Slot("glutes", 1 if high_tier else 0),
            Slot("calves", 1),
        ]
    if day_type == "upper":
        return [
            Slot("chest", max(1, rules.large_count // 2)),
            Slot("back", max(2, rules.large_count // 2)),
            Slot("shoulders", rules.medium_count),
            Slot("biceps", 1),
            Slot("triceps", 1),
        ]
    return [
        Slot("chest", 1),
        Slot("back", 2 if rules.day_total >= 6 else 1),
        Slot("quadriceps", 1),
        Slot("hamstrings", 1),
        Slot("shoulders", 1, rear_delt=False),
        Slot("biceps", 1 if rules.day_total >= 7 else 0),
    ]


def _slot_pool(slot: Slot, location: TrainingLocation) -> List[ExerciseTemplate]:
    pool = filter_by_location(templates_for_muscle(slot.group), location)
    if slot.rear_delt is None:
        return pool
    return [t for t in pool if ("rear_delt" in t.tags) == slot.rear_delt]


def adjust_reps(reps: str, imc: float, objective: str | None) -> str:
    """Shift a 'lo-hi' rep range towards the BMI/objective target, by at most 30% of the range."""
    goal = to_objective(objective)
    if goal not in ("emagrecimento", "ganho_de_massa"):
        return reps
    match = _REPS_RANGE.match(reps or "")
    if match is None:
        return reps
    band = next((b for b in _BMI_BANDS if imc >= b[0]), None)
    if band is None:
        return reps
    lo, hi = int(match.group(1)), int(match.group(2))
    cap = math.ceil(get_settings().REPS_ADJUSTMENT_CAP * max(hi - lo, 1))

    def step(current: int, target: int) -> int:
        return current + max(-cap, min(cap, target - current))

    _, loss_target, (gain_threshold, gain_target) = band
    if goal == "emagrecimento":
        new_lo, new_hi = step(lo, loss_target[0]), step(hi, loss_target[1])
    elif hi < gain_threshold:
        new_lo, new_hi = lo, step(hi, gain_target)
    else:
        return reps
    return f"{new_lo}-{max(new_lo, new_hi)}"


class _DayBuilder:
    def __init__(self, profile: TrainingProfile, rules: LevelRules, quality: Optional["PlanQualityAccumulator"]) -> None:
        self.profile = profile
        self.rules = rules
        self.quality = quality

    def _soft(self, warning_type: str, exercise: Optional[str] = None) -> None:
        if self.quality is not None:
            self.quality.record_soft(warning_type, exercise)  # type: ignore[arg-type]

    def _flexible(self, warning_type: str) -> None:
        if self.quality is not None:
            self.quality.record_flexible(warning_type)  # type: ignore[arg-type]

    def _allowed(self, pool: List[ExerciseTemplate]) -> List[ExerciseTemplate]:
        shoulder, knee = self.profile.joint_limitations, self.profile.knee_limitations
        if not (shoulder or knee):
            return pool
        allowed = [t for t in pool if joint_restriction_severity(t, shoulder, knee)[0] != "HARD"]
        if pool and allowed and allowed[0] is not pool[0] and self.quality is not None:
            self.quality.record_alternative_used()
        return allowed

    def _pattern_targets(self, slot: Slot, pool: Sequence[ExerciseTemplate], covered: Set[MovementPattern]) -> List[MovementPattern]:
        contract = get_contract_for_muscle_group(slot.group)
        if contract is None:
            return []
        supplied: Set[MovementPattern] = set()
        for t in pool:
            supplied.update(satisfied_patterns(contract, t.pattern))
        return [p for p in contract.required_patterns if p in supplied and p not in covered]

    def _slot_count(self, slot: Slot, targets: List[MovementPattern], first_of_contract: bool) -> int:
        floor = len(targets)
        contract = get_contract_for_muscle_group(slot.group)
        if contract is not None and first_of_contract:
            floor = max(floor, get_min_structural(contract, self.rules.key))
        if slot.count == 0 and floor == 0:
            return 0
        return min(self.rules.max_exercises_per_muscle, max(slot.count, floor))

    def _pick(
        self,
        pool: List[ExerciseTemplate],
        count: int,
        targets: List[MovementPattern],
        group: MuscleGroup,
        used: Set[str],
        bases: Dict[str, int],
    ) -> List[ExerciseTemplate]:
        contract = get_contract_for_muscle_group(group)
        chosen: List[ExerciseTemplate] = []

        def take(t: ExerciseTemplate) -> None:
            chosen.append(t)
            used.add(normalize_text(t.name))
            base = base_movement(t.name)
            bases[base] = bases.get(base, 0) + 1

        def free(t: ExerciseTemplate) -> bool:
            return normalize_text(t.name) not in used

        for pattern in targets:
            if len(chosen) >= count:
                break
            for t in pool:
                if free(t) and contract is not None and pattern in satisfied_patterns(contract, t.pattern):
                    take(t)
                    break

        for role, limit in (("structural", _COMPOUND_BASE_LIMIT), ("isolated", _ISOLATED_BASE_LIMIT)):
            for t in pool:
                if len(chosen) >= count:
                    break
                if t.role == role and free(t) and bases.get(base_movement(t.name), 0) < limit:
                    take(t)

        for t in pool:
            if len(chosen) >= count:
                break
            if free(t):
                take(t)
        return chosen

    def _to_exercise(self, template: ExerciseTemplate) -> Exercise:
        return Exercise(
            name=template.name,
            primary_muscle=template.primary_muscle,
            secondary_muscles=list(template.secondary_muscles),
            sets=template.sets,
            reps=adjust_reps(template.reps, self.profile.imc, self.profile.objective),
            rest=template.rest,
            notes=template.notes,
        )

    def build(self, day_type: DayType) -> List[Exercise]:
        used: Set[str] = set()
        bases: Dict[str, int] = {}
        covered: Dict[str, Set[MovementPattern]] = {}
        slots: List[Tuple[MuscleGroup, List[ExerciseTemplate]]] = []

        for slot in _blueprint(day_type, self.rules):
            contract = get_contract_for_muscle_group(slot.group)
            contract_covered = covered.setdefault(contract.name, set()) if contract else set()
            first_of_contract = contract is not None and not any(
                get_contract_for_muscle_group(g) == contract for g, _ in slots
            )
            pool = self._allowed(_slot_pool(slot, self.profile.training_location))
            targets = self._pattern_targets(slot, pool, contract_covered)
            count = self._slot_count(slot, targets, first_of_contract)
            if count == 0:
                continue
            picked = self._pick(pool, count, targets, slot.group, used, bases)
            if len(picked) < count:
                logger.debug("Only %d of %d %s exercises available", len(picked), count, slot.group)
                self._soft("volume_distribution")
            for t in picked:
                severity, joint = joint_restriction_severity(t, self.profile.joint_limitations, self.profile.knee_limitations)
                if severity == "SOFT":
                    self._soft("joint_shoulder" if joint == "shoulder" else "joint_knee", t.name)
                if contract is not None:
                    contract_covered.update(satisfied_patterns(contract, t.pattern))
            slots.append((slot.group, picked))

        regions = required_regions(day_type)
        self._cap(slots, regions)
        for region in regions:
            if not any(g in region for g, items in slots if items):
                raise GenerationError(
                    f"No exercises available for {'/'.join(sorted(region))} "
                    f"at location {self.profile.training_location!r} with the current joint restrictions."
                )
        exercises = [self._to_exercise(t) for _, items in slots for t in items]
        return self._fit_time(exercises, regions)

    def _cap(self, slots: List[Tuple[MuscleGroup, List[ExerciseTemplate]]], regions: List[frozenset]) -> None:
        """Drop exercises from the last slots until the day fits the level cap.

        Slots holding more than one exercise are shortened first; a slot is never
        emptied if that would leave a required region uncovered.
        """
        cap = min(self.rules.day_total, self.rules.max_exercises_per_day)
        while sum(len(items) for _, items in slots) > cap:
            if not (self._drop_one(slots, regions, min_size=2) or self._drop_one(slots, regions, min_size=1)):
                return

    @staticmethod
    def _drop_one(slots: List[Tuple[MuscleGroup, List[ExerciseTemplate]]], regions: List[frozenset], min_size: int) -> bool:
        for group, items in reversed(slots):
            if len(items) < min_size:
                continue
            remaining = [g for g, its in slots for _ in its]
            remaining.remove(group)
            if all(any(g in region for g in remaining) for region in regions):
                items.pop()
                return True
        return False

    def _fit_time(self, exercises: List[Exercise], regions: List[frozenset]) -> List[Exercise]:
        settings = get_settings()
        minutes = self.profile.available_time_minutes
        if fits_in(exercises, minutes):
            return exercises

        budget = minutes * 60
        execution = sum(e.sets * settings.SET_EXECUTION_SECONDS for e in exercises)
        resting = day_seconds(exercises) - execution
        if resting > 0:
            factor = max(0.0, (budget - execution) / resting)
            for e in exercises:
                rest = parse_rest_seconds(e.rest)
                scaled = max(settings.MIN_REST_SECONDS, int(rest * factor))
                if scaled < rest:
                    e.rest = f"{scaled}s"
        if fits_in(exercises, minutes):
            return exercises

        for e in reversed(list(exercises)):
            if fits_in(exercises, minutes) or len(exercises) <= settings.MIN_EXERCISES_PER_DAY:
                break
            template = find_template(e.name)
            if template is None or template.role != "isolated":
                continue
            remaining = [to_muscle_group(x.primary_muscle) for x in exercises if x is not e]
            if all(any(g in region for g in remaining) for region in regions):
                exercises.remove(e)
                self._flexible("volume_adjustment")

        trimmed: Set[int] = set()
        while not fits_in(exercises, minutes):
            changed = False
            for e in reversed(exercises):
                if e.sets > _MIN_SETS:
                    e.sets -= 1
                    changed = True
                    if id(e) not in trimmed:
                        trimmed.add(id(e))
                        self._flexible("series_adjustment")
                    if fits_in(exercises, minutes):
                        break
            if not changed:
                logger.debug("Day still exceeds %d minutes after fitting", minutes)
                break
        return exercises


def _overview(profile: TrainingProfile, division: Division, rules: LevelRules, downgraded: bool) -> str:
    goal = to_objective(profile.objective).replace("_", " ")
    parts = [
        f"Plano {division} com {profile.training_days} dia(s) por semana para nível {rules.label}, "
        f"objetivo {goal}, sessões de até {profile.available_time_minutes} minutos."
    ]
    if downgraded:
        parts.append("O volume foi ajustado ao tempo disponível por sessão.")
    if profile.training_location in ("casa", "ar_livre"):
        parts.append("Exercícios escolhidos para treino sem equipamentos de academia.")
    if profile.joint_limitations or profile.knee_limitations:
        parts.append("Movimentos de maior risco articular foram substituídos por alternativas seguras.")
    return " ".join(parts)


_PROGRESSIONS = {
    "emagrecimento": "Reduza o descanso gradualmente e aumente as repetições antes da carga. Reavalie a cada 4 semanas.",
    "ganho_de_massa": "Aumente a carga quando completar o topo da faixa de repetições em todas as séries. Reavalie a cada 4 semanas.",
    "forca": "Aumente a carga em 2,5 a 5% quando todas as séries forem concluídas com boa técnica. Mantenha descansos longos.",
    "saude": "Priorize a técnica e aumente a carga de forma conservadora a cada 2 ou 3 semanas.",
}


def generate_plan(profile: TrainingProfile, *, quality: Optional["PlanQualityAccumulator"] = None) -> TrainingPlan:
    rules, downgraded = resolve_operational_level(profile.activity_level, profile.available_time_minutes)
    if downgraded:
        logger.info("Activity level %s downgraded to %s for %d minute sessions", profile.activity_level, rules.key, profile.available_time_minutes)
    # day count decides the division; the pipeline records any override
    division = technical_division(profile.training_days)
    builder = _DayBuilder(profile, rules, quality)

    built: Dict[DayType, List[Exercise]] = {}
    days: List[TrainingDay] = []
    for label, type_label in _day_sequence(division, profile.training_days):
        day_type = to_day_type(type_label) or "full_body"
        if day_type not in built:
            built[day_type] = builder.build(day_type)
        exercises = [e.model_copy(deep=True) for e in built[day_type]]
        days.append(TrainingDay(day=label, type=type_label, exercises=exercises))

    return TrainingPlan(
        overview=_overview(profile, division, rules, downgraded),
        progression=_PROGRESSIONS[to_objective(profile.objective)],
        weekly_schedule=days,
    )


def generate_training_plan(
    training_days: int,
    activity_level: str,
    division: Division,
    available_time_minutes: int,
    imc: float,
    objective: str,
    joint_limitations: bool = False,
    knee_limitations: bool = False,
    training_location: TrainingLocation = "academia",
    *,
    quality: Optional["PlanQualityAccumulator"] = None,
) -> TrainingPlan:
    profile = TrainingProfile(
        training_days=training_days,
        activity_level=activity_level,
        division=division,
        available_time_minutes=available_time_minutes,
        imc=imc,
        objective=objective,
        joint_limitations=joint_limitations,
        knee_limitations=knee_limitations,
        training_location=training_location,
    )
    return generate_plan(profile, quality=quality)
