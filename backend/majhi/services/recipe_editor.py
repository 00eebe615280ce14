"""
Majhi Costing - Recipe Editor

Add, re-quantify and remove ingredient lines. Every edit returns a new
snapshot; the one passed in is left untouched so a screen can re-run the
costing engine on the result.
"""

import logging
from decimal import Decimal

from majhi.models.costing import (
    BaseRecipeRef,
    CostingSnapshot,
    IngredientRef,
    MaterialRef,
    Recipe,
    RecipeIngredient,
)
from majhi.services.costing.errors import RecipeEditError, TargetNotFoundError

logger = logging.getLogger(__name__)

DEFAULT_QUANTITY = Decimal("1")


def add_ingredient(
    snapshot: CostingSnapshot,
    target_id: str,
    ref: IngredientRef,
    quantity: Decimal = DEFAULT_QUANTITY,
) -> CostingSnapshot:
    """Append a line to a target's recipe, creating the recipe if needed."""
    _require_target(snapshot, target_id)
    _require_non_negative(quantity)

    if isinstance(ref, MaterialRef):
        if snapshot.get_material(ref.material_id) is None:
            raise RecipeEditError(f"Material not found: {ref.material_id}")
    elif isinstance(ref, BaseRecipeRef):
        if ref.target_id == target_id:
            raise RecipeEditError(f"Target {target_id} cannot be an ingredient of itself")
        component = snapshot.get_target(ref.target_id)
        if component is None:
            raise RecipeEditError(f"Base recipe not found: {ref.target_id}")
        if not component.is_base_recipe:
            raise RecipeEditError(f"{component.name} is a sellable dish, not a base recipe")

    ingredients = snapshot.ingredients_of(target_id) + (
        RecipeIngredient(ref=ref, quantity=quantity),
    )
    logger.info(f"Added {ref.kind} {_ref_id(ref)} to recipe {target_id}")
    return _with_ingredients(snapshot, target_id, ingredients)


def update_quantity(
    snapshot: CostingSnapshot,
    target_id: str,
    index: int,
    quantity: Decimal,
) -> CostingSnapshot:
    """Set the quantity of one line."""
    ingredients = _require_line(snapshot, target_id, index)
    _require_non_negative(quantity)

    updated = tuple(
        ingredient.model_copy(update={"quantity": quantity}) if i == index else ingredient
        for i, ingredient in enumerate(ingredients)
    )
    return _with_ingredients(snapshot, target_id, updated)


def remove_ingredient(
    snapshot: CostingSnapshot,
    target_id: str,
    index: int,
) -> CostingSnapshot:
    """Drop one line from a target's recipe."""
    ingredients = _require_line(snapshot, target_id, index)
    removed = ingredients[index]
    logger.info(f"Removed {removed.ref.kind} {removed.ref_id} from recipe {target_id}")
    return _with_ingredients(
        snapshot,
        target_id,
        ingredients[:index] + ingredients[index + 1:],
    )


def _require_target(snapshot: CostingSnapshot, target_id: str) -> None:
    if snapshot.get_target(target_id) is None:
        raise TargetNotFoundError(target_id)


def _require_line(
    snapshot: CostingSnapshot,
    target_id: str,
    index: int,
) -> tuple[RecipeIngredient, ...]:
    _require_target(snapshot, target_id)
    ingredients = snapshot.ingredients_of(target_id)
    if not 0 <= index < len(ingredients):
        raise RecipeEditError(
            f"Recipe {target_id} has no line {index} ({len(ingredients)} lines)"
        )
    return ingredients


def _require_non_negative(quantity: Decimal) -> None:
    if quantity < 0:
        raise RecipeEditError(f"Quantity must not be negative, got: {quantity}")


def _ref_id(ref: IngredientRef) -> str:
    return ref.material_id if isinstance(ref, MaterialRef) else ref.target_id


def _with_ingredients(
    snapshot: CostingSnapshot,
    target_id: str,
    ingredients: tuple[RecipeIngredient, ...],
) -> CostingSnapshot:
    # Rebuild rather than model_copy so the snapshot's lookup indexes are fresh
    new_recipe = Recipe(target_id=target_id, ingredients=ingredients)
    recipes = [r for r in snapshot.recipes if r.target_id != target_id]
    recipes.append(new_recipe)
    return CostingSnapshot(
        materials=snapshot.materials,
        targets=snapshot.targets,
        recipes=tuple(recipes),
    )
