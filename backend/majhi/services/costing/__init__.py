# Recipe costing engine
from majhi.services.costing.engine import CostingEngine, costing_engine
from majhi.services.costing.errors import (
    CostingError,
    MasterDataError,
    MaterialNotFoundError,
    RecipeEditError,
    TargetNotFoundError,
)
from majhi.services.costing.evaluator import (
    evaluate_ingredient_cost,
    evaluate_recipe_total,
)
from majhi.services.costing.unit_cost import resolve_unit_cost

__all__ = [
    "CostingEngine",
    "costing_engine",
    "CostingError",
    "MasterDataError",
    "MaterialNotFoundError",
    "RecipeEditError",
    "TargetNotFoundError",
    "evaluate_ingredient_cost",
    "evaluate_recipe_total",
    "resolve_unit_cost",
]
