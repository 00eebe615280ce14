"""
Majhi Costing - Costing Facade
Entry point for screens, sheets and the HTTP API.

LOGIC:
1. Evaluate the target's recipe line by line
2. Build the per-ingredient breakdown (names, unit cost, line total)
3. Sellable dish: yield-adjusted cost and food cost % against selling price
   Base recipe:   cost per prepared unit

Every derived value whose divisor is zero is reported as None.
"""

import logging
from decimal import Decimal
from typing import Optional

from majhi.core.config import settings
from majhi.core.types import Money
from majhi.models.costing import (
    BreakdownLine,
    CostAnalysis,
    CostingSnapshot,
    DashboardSummary,
    IngredientCost,
    MaterialRef,
    RecipeIngredient,
    RecipeTarget,
)
from majhi.services.costing.errors import TargetNotFoundError
from majhi.services.costing.evaluator import evaluate_recipe_total
from majhi.services.costing.unit_cost import HUNDRED, yield_factor

logger = logging.getLogger(__name__)

DELETED_LABEL = "Deleted"
MATERIAL_LABEL = "Material"
BASE_PREP_LABEL = "Base Prep"
PORTION_LABEL = "Portion"


class CostingEngine:
    """
    Recipe costing facade.

    Holds configuration only; every call takes the snapshot to cost, so one
    instance can serve any number of callers.
    """

    def __init__(self, food_cost_alert_percent: Optional[Decimal] = None) -> None:
        if food_cost_alert_percent is None:
            food_cost_alert_percent = settings.FOOD_COST_ALERT_PERCENT
        self._food_cost_alert_percent = food_cost_alert_percent

    @property
    def food_cost_alert_percent(self) -> Decimal:
        return self._food_cost_alert_percent

    # =========================================================================
    # ANALYSIS
    # =========================================================================

    def analyze(self, snapshot: CostingSnapshot, target_id: str) -> CostAnalysis:
        """
        Cost a target and derive its profitability figures.

        Raises TargetNotFoundError for an unknown target id.
        """
        target = snapshot.get_target(target_id)
        if target is None:
            raise TargetNotFoundError(target_id)

        recipe_cost = evaluate_recipe_total(target_id, snapshot)
        ingredients = snapshot.ingredients_of(target_id)
        breakdown = [
            self._breakdown_line(position, ingredient, line, snapshot)
            for position, (ingredient, line) in enumerate(zip(ingredients, recipe_cost.lines))
        ]

        analysis = CostAnalysis(
            target_id=target.id,
            target_name=target.name,
            is_base_recipe=target.is_base_recipe,
            yield_percent=target.yield_percent,
            total_cost=recipe_cost.total_cost,
            breakdown=breakdown,
            issues=list(recipe_cost.issues),
        )

        output_cost = _yield_adjusted(recipe_cost.total_cost, target)
        if target.is_base_recipe:
            analysis.cost_per_prepared_unit = output_cost
        else:
            selling_price = Money.to_decimal(target.selling_price_micros)
            analysis.selling_price = selling_price
            analysis.yield_adjusted_cost = output_cost
            if output_cost is not None and selling_price > 0:
                ratio = _safe_divide(output_cost, selling_price)
                if ratio is not None:
                    analysis.food_cost_percent = ratio * HUNDRED
                    analysis.high_food_cost = analysis.food_cost_percent > self._food_cost_alert_percent

        if analysis.issues:
            logger.warning(
                f"[COSTING] {target.name} ({target.id}) costed with "
                f"{len(analysis.issues)} issue(s): "
                + "; ".join(issue.message for issue in analysis.issues)
            )

        return analysis

    def _breakdown_line(
        self,
        position: int,
        ingredient: RecipeIngredient,
        line: IngredientCost,
        snapshot: CostingSnapshot,
    ) -> BreakdownLine:
        ref = ingredient.ref
        if isinstance(ref, MaterialRef):
            material = snapshot.get_material(ref.material_id)
            name = material.name if material else DELETED_LABEL
            unit_label = material.uom.value if material else ""
            type_label = MATERIAL_LABEL
        else:
            sub_target = snapshot.get_target(ref.target_id)
            name = sub_target.name if sub_target else DELETED_LABEL
            unit_label = PORTION_LABEL
            type_label = BASE_PREP_LABEL

        unit_cost = _safe_divide(line.cost, ingredient.quantity)

        return BreakdownLine(
            position=position,
            ref_id=ingredient.ref_id,
            kind=ref.kind,
            name=name,
            type_label=type_label,
            unit_label=unit_label,
            quantity=ingredient.quantity,
            unit_cost=unit_cost,
            line_total=line.cost,
            status=line.status,
            issues=list(line.issues),
        )

    # =========================================================================
    # QUERY
    # =========================================================================

    def list_targets(
        self,
        snapshot: CostingSnapshot,
        base_recipes: Optional[bool] = None,
    ) -> list[RecipeTarget]:
        """Targets in snapshot order, optionally only base recipes or only dishes."""
        if base_recipes is None:
            return list(snapshot.targets)
        return [t for t in snapshot.targets if t.is_base_recipe == base_recipes]

    def available_components(
        self,
        snapshot: CostingSnapshot,
        target_id: str,
    ) -> list[RecipeTarget]:
        """Base recipes that can be added to a target's recipe (never itself)."""
        return [
            t for t in snapshot.targets
            if t.is_base_recipe and t.id != target_id
        ]

    def dashboard(self, snapshot: CostingSnapshot) -> DashboardSummary:
        """Headline counts and average ticket of sellable dishes."""
        sellable = self.list_targets(snapshot, base_recipes=False)
        price_sum = sum(
            (Money.to_decimal(t.selling_price_micros) for t in sellable),
            Decimal("0"),
        )
        return DashboardSummary(
            material_count=len(snapshot.materials),
            sellable_count=len(sellable),
            base_recipe_count=len(snapshot.targets) - len(sellable),
            avg_selling_price=price_sum / (len(sellable) or 1),
        )


def _yield_adjusted(total_cost: Decimal, target: RecipeTarget) -> Optional[Decimal]:
    """Cost per unit of output after the target's own yield; None for zero yield."""
    return _safe_divide(total_cost, yield_factor(target.yield_percent))


def _safe_divide(numerator: Decimal, denominator: Decimal) -> Optional[Decimal]:
    """Quotient, or None when the divisor is zero or the result is out of range."""
    if denominator == 0:
        return None
    try:
        return numerator / denominator
    except ArithmeticError:
        return None


# Singleton instance
costing_engine = CostingEngine()
