from .improvement import (
    ImprovementPlan,
    ImprovementRecommendation,
    Strength,
    generate_improvement_plan,
)

__all__ = [
    "ImprovementPlan",
    "ImprovementRecommendation",
    "Strength",
    "generate_improvement_plan",
]
