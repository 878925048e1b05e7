from .catalog import load_catalog, templates_for_muscle, find_template, filter_by_location
from .classification import (
    normalize_text,
    to_activity_level,
    to_contract_tier,
    to_muscle_group,
    to_day_type,
    to_division,
    to_objective,
)
from .patterns import detect_movement_pattern, is_structural
from .levels import LevelRules, get_level_rules, resolve_operational_level
from .contracts import (
    get_contract_for_muscle_group,
    get_min_structural,
    is_pattern_required,
    is_pattern_allowed,
    joint_restriction_severity,
)
from .generator import GenerationError, generate_plan, generate_training_plan, technical_division
from .validator import Violation, find_violation, is_usable, find_divergent_same_type_days
from .corrector import correct_same_type_days_exercises
from .auditor import audit

__all__ = [
    "load_catalog",
    "templates_for_muscle",
    "find_template",
    "filter_by_location",
    "normalize_text",
    "to_activity_level",
    "to_contract_tier",
    "to_muscle_group",
    "to_day_type",
    "to_division",
    "to_objective",
    "detect_movement_pattern",
    "is_structural",
    "LevelRules",
    "get_level_rules",
    "resolve_operational_level",
    "get_contract_for_muscle_group",
    "get_min_structural",
    "is_pattern_required",
    "is_pattern_allowed",
    "joint_restriction_severity",
    "GenerationError",
    "generate_plan",
    "generate_training_plan",
    "technical_division",
    "Violation",
    "find_violation",
    "is_usable",
    "find_divergent_same_type_days",
    "correct_same_type_days_exercises",
    "audit",
]
