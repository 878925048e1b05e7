from .graph import GraphState, PlanGraph
from .nodes import plan_generate_node, validate_node, repair_node, audit_node, quality_node

__all__ = [
    "GraphState",
    "PlanGraph",
    "plan_generate_node",
    "validate_node",
    "repair_node",
    "audit_node",
    "quality_node",
]
