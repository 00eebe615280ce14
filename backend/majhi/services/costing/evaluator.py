"""
Majhi Costing - Recipe Cost Evaluator

Walks a recipe's ingredient graph depth-first:

    item line         cost = effective_unit_cost(material) * quantity
    base_recipe line  cost = (sum of sub-recipe lines / sub yield) * quantity

GUARDRAILS:
- The target ids on the current recursion path travel down as an
  immutable tuple; meeting one again is a cycle, reported and cut off.
- Nesting deeper than MAX_NESTING_DEPTH is cut off and reported.
- Missing references, zero divisors and cycles cost 0 for the affected
  line only. Sibling lines are always evaluated.
- A base recipe's cost per output unit is memoized for the duration of
  one call, so shared sub-recipes are walked once. Nothing survives
  between calls.
"""

import logging
from decimal import Decimal
from typing import NamedTuple, Optional

from majhi.models.costing import (
    BaseRecipeRef,
    CostIssue,
    CostIssueType,
    CostingSnapshot,
    IngredientCost,
    LineStatus,
    MaterialRef,
    RecipeCost,
    RecipeIngredient,
    RecipeTarget,
)
from majhi.services.costing.unit_cost import resolve_unit_cost, yield_factor

logger = logging.getLogger(__name__)

ZERO = Decimal("0")

# Path length at which base recipe references stop being followed
MAX_NESTING_DEPTH = 128

# Issues whose presence depends on the path that reached them
_PATH_DEPENDENT = {CostIssueType.CYCLE, CostIssueType.DEPTH_LIMIT}


class _OutputCost(NamedTuple):
    """Cost per output unit of a base recipe, as first evaluated."""
    per_unit: Optional[Decimal]
    issues: tuple[CostIssue, ...]
    depth: int  # len(visiting) when evaluated

    def rebased(self, visiting: tuple[str, ...]) -> tuple[CostIssue, ...]:
        return tuple(
            issue.model_copy(update={"path": visiting + issue.path[self.depth:]})
            for issue in self.issues
        )


def evaluate_ingredient_cost(
    ingredient: RecipeIngredient,
    snapshot: CostingSnapshot,
    visiting: tuple[str, ...] = (),
    memo: Optional[dict[str, _OutputCost]] = None,
) -> IngredientCost:
    """
    Cost of one ingredient line, including everything nested beneath it.

    `visiting` is the ordered path of target ids currently being evaluated.
    `memo` is shared by the lines of one evaluation; a fresh one is used
    when omitted.
    """
    if memo is None:
        memo = {}
    ref = ingredient.ref
    if isinstance(ref, MaterialRef):
        return _evaluate_material(ref, ingredient.quantity, snapshot, visiting)
    if isinstance(ref, BaseRecipeRef):
        return _evaluate_base_recipe(ref, ingredient.quantity, snapshot, visiting, memo)
    raise TypeError(f"Unknown ingredient reference: {type(ref).__name__}")


def evaluate_recipe_total(target_id: str, snapshot: CostingSnapshot) -> RecipeCost:
    """Sum every line of a target's recipe. A target without a recipe costs 0."""
    path = (target_id,)
    memo: dict[str, _OutputCost] = {}
    lines = tuple(
        evaluate_ingredient_cost(ingredient, snapshot, path, memo)
        for ingredient in snapshot.ingredients_of(target_id)
    )
    return RecipeCost(
        target_id=target_id,
        total_cost=sum((line.cost for line in lines), ZERO),
        lines=lines,
    )


def _evaluate_material(
    ref: MaterialRef,
    quantity: Decimal,
    snapshot: CostingSnapshot,
    visiting: tuple[str, ...],
) -> IngredientCost:
    material = snapshot.get_material(ref.material_id)
    if material is None:
        return _flagged(
            LineStatus.UNRESOLVED,
            CostIssueType.MISSING_REFERENCE,
            ref.material_id,
            visiting,
            f"Material {ref.material_id} no longer exists",
        )

    unit_cost = resolve_unit_cost(material)
    if not unit_cost.is_defined:
        return _flagged(
            LineStatus.UNDEFINED_COST,
            CostIssueType.UNDEFINED_COST,
            material.id,
            visiting,
            f"Unit cost of {material.name} is undefined: {unit_cost.reason}",
        )

    try:
        cost = unit_cost.effective_unit_cost * quantity
    except ArithmeticError:
        return _flagged(
            LineStatus.UNDEFINED_COST,
            CostIssueType.UNDEFINED_COST,
            material.id,
            visiting,
            f"Line cost of {material.name} is out of range",
        )
    return IngredientCost(cost=cost)


def _evaluate_base_recipe(
    ref: BaseRecipeRef,
    quantity: Decimal,
    snapshot: CostingSnapshot,
    visiting: tuple[str, ...],
    memo: dict[str, _OutputCost],
) -> IngredientCost:
    target = snapshot.get_target(ref.target_id)
    if target is None:
        return _flagged(
            LineStatus.UNRESOLVED,
            CostIssueType.MISSING_REFERENCE,
            ref.target_id,
            visiting,
            f"Base recipe {ref.target_id} no longer exists",
        )

    if ref.target_id in visiting:
        return _flagged(
            LineStatus.CYCLE,
            CostIssueType.CYCLE,
            ref.target_id,
            visiting,
            "Recipe cycle: " + " -> ".join(visiting + (ref.target_id,)),
        )

    cached = memo.get(target.id)
    if cached is not None:
        output = cached._replace(issues=cached.rebased(visiting), depth=len(visiting))
    elif len(visiting) >= MAX_NESTING_DEPTH:
        return _flagged(
            LineStatus.UNDEFINED_COST,
            CostIssueType.DEPTH_LIMIT,
            target.id,
            visiting,
            f"{target.name} is nested more than {MAX_NESTING_DEPTH} recipes deep",
        )
    else:
        output = _output_unit_cost(target, snapshot, visiting, memo)

    if output.per_unit is None:
        return IngredientCost(cost=ZERO, status=LineStatus.UNDEFINED_COST, issues=output.issues)

    try:
        cost = output.per_unit * quantity
    except ArithmeticError:
        return _flagged(
            LineStatus.UNDEFINED_COST,
            CostIssueType.UNDEFINED_COST,
            target.id,
            visiting,
            f"Line cost of {target.name} is out of range",
            output.issues,
        )
    return IngredientCost(cost=cost, issues=output.issues)


def _output_unit_cost(
    target: RecipeTarget,
    snapshot: CostingSnapshot,
    visiting: tuple[str, ...],
    memo: dict[str, _OutputCost],
) -> _OutputCost:
    """Evaluate a base recipe's sub-lines and apply its own yield."""
    sub_path = visiting + (target.id,)
    sub_lines = [
        evaluate_ingredient_cost(sub_ingredient, snapshot, sub_path, memo)
        for sub_ingredient in snapshot.ingredients_of(target.id)
    ]
    issues = tuple(issue for line in sub_lines for issue in line.issues)

    per_unit = None
    if target.yield_percent == 0:
        issues += (_issue(
            CostIssueType.UNDEFINED_COST,
            target.id,
            visiting,
            f"Cost per output unit of {target.name} is undefined: yield percent is zero",
        ),)
    else:
        try:
            raw_sub_cost = sum((line.cost for line in sub_lines), ZERO)
            per_unit = raw_sub_cost / yield_factor(target.yield_percent)
        except ArithmeticError:
            issues += (_issue(
                CostIssueType.UNDEFINED_COST,
                target.id,
                visiting,
                f"Cost per output unit of {target.name} is out of range",
            ),)

    output = _OutputCost(per_unit=per_unit, issues=issues, depth=len(visiting))
    if not any(issue.issue_type in _PATH_DEPENDENT for issue in issues):
        memo[target.id] = output
    return output


def _issue(
    issue_type: CostIssueType,
    ref_id: str,
    visiting: tuple[str, ...],
    message: str,
) -> CostIssue:
    logger.debug(f"[COSTING] {issue_type.value}: {message}")
    return CostIssue(issue_type=issue_type, ref_id=ref_id, path=visiting, message=message)


def _flagged(
    status: LineStatus,
    issue_type: CostIssueType,
    ref_id: str,
    visiting: tuple[str, ...],
    message: str,
    nested_issues: tuple[CostIssue, ...] = (),
) -> IngredientCost:
    issue = _issue(issue_type, ref_id, visiting, message)
    return IngredientCost(cost=ZERO, status=status, issues=nested_issues + (issue,))
