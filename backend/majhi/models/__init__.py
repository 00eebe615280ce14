from majhi.models.costing import (
    BaseRecipeRef,
    CostAnalysis,
    CostIssue,
    CostIssueType,
    CostingSnapshot,
    Department,
    LineStatus,
    Material,
    MaterialRef,
    Recipe,
    RecipeIngredient,
    RecipeTarget,
    UnitOfMeasure,
)

__all__ = [
    "BaseRecipeRef",
    "CostAnalysis",
    "CostIssue",
    "CostIssueType",
    "CostingSnapshot",
    "Department",
    "LineStatus",
    "Material",
    "MaterialRef",
    "Recipe",
    "RecipeIngredient",
    "RecipeTarget",
    "UnitOfMeasure",
]
