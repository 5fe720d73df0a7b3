"""
Domain models package.

Immutable request and result types for the pricing pipeline.
"""

from .batch_request import BatchRequest, LaborRole, RecipeItem
from .batch_cost_result import BatchCostResult

__all__ = [
    "BatchRequest",
    "LaborRole",
    "RecipeItem",
    "BatchCostResult",
]
