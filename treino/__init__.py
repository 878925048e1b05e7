"""Rule-based training plan generation, validation and plan-quality metrics."""

__version__ = "0.1.0"
