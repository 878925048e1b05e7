"""Observational contract audit.

`audit` compares a plan with the muscle-group contracts and records a
``contract_violation`` metric per unmet contract. It returns nothing and never
raises, so its outcome cannot gate whether a plan is served.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Dict, List, Optional, Sequence, Set

from treino.models.contract import MuscleGroupContract
from treino.models.exercise import MovementPattern
from treino.models.plan import TrainingPlan
from .classification import normalize_text, to_activity_level, to_muscle_group
from .contracts import (
    contract_muscle_groups,
    get_contract_for_muscle_group,
    get_min_structural,
    satisfied_patterns,
)
from .patterns import detect_movement_pattern, is_structural

if TYPE_CHECKING:
    from treino.metrics.store import MetricsService

logger = logging.getLogger(__name__)

DEFAULT_AUDITED_GROUPS = ("quadriceps", "posterior de coxa", "peitoral", "costas", "ombros")


def _contracts_for(muscle_groups: Sequence[str]) -> List[MuscleGroupContract]:
    seen: Dict[str, MuscleGroupContract] = {}
    for name in muscle_groups:
        contract = get_contract_for_muscle_group(name)
        if contract is not None:
            seen.setdefault(contract.name, contract)
    return list(seen.values())


def _audit_contract(plan: TrainingPlan, contract: MuscleGroupContract, activity_level: str | None) -> Optional[Dict]:
    groups = set(contract_muscle_groups(contract))
    structural: Set[str] = set()
    patterns: Set[MovementPattern] = set()
    for day in plan.weekly_schedule:
        for ex in day.exercises:
            if to_muscle_group(ex.primary_muscle) not in groups or not is_structural(ex.name):
                continue
            pattern = detect_movement_pattern(ex.name)
            if pattern == "unilateral" and not contract.allow_unilateral_as_structural:
                continue
            structural.add(normalize_text(ex.name))
            patterns.update(satisfied_patterns(contract, pattern))

    min_required = get_min_structural(contract, activity_level)
    missing = [p for p in contract.required_patterns if p not in patterns]
    if len(structural) >= min_required and not missing:
        return None
    return {
        "contract": contract.name,
        "muscle": sorted(groups)[0] if len(groups) == 1 else contract.name,
        "activity_level": to_activity_level(activity_level),
        "min_required": min_required,
        "required_patterns": list(contract.required_patterns),
        "missing_patterns": missing,
        "structural_count": len(structural),
    }


def audit(
    plan: TrainingPlan,
    activity_level: str | None,
    muscle_groups: Optional[Sequence[str]] = None,
    *,
    metrics: Optional["MetricsService"] = None,
) -> None:
    try:
        for contract in _contracts_for(muscle_groups or DEFAULT_AUDITED_GROUPS):
            violation = _audit_contract(plan, contract, activity_level)
            if violation is None:
                continue
            logger.info("Contract %s not met: %s", contract.name, violation)
            if metrics is not None:
                metrics.rejections.record("contract_violation", violation)
    except Exception:
        logger.exception("Contract audit failed")
