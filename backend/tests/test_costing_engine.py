"""
Majhi Costing - Costing Facade Tests

- Demo kitchen fixed point (gravy base + plated dish)
- Breakdown rows, including flagged lines
- Food cost % and cost per prepared unit edge cases
"""

from decimal import Decimal

import pytest

from majhi.core.types import Money, quantize
from majhi.models.costing import (
    BaseRecipeRef,
    CostIssueType,
    CostingSnapshot,
    LineStatus,
    Material,
    MaterialRef,
    Recipe,
    RecipeIngredient,
    RecipeTarget,
    UnitOfMeasure,
)
from majhi.services.costing import CostingEngine, TargetNotFoundError
from majhi.services.demo import GRAVY_ID, MUTTER_PANEER_ID, build_demo_snapshot


@pytest.fixture
def engine() -> CostingEngine:
    return CostingEngine(food_cost_alert_percent=Decimal("35"))


@pytest.fixture
def demo() -> CostingSnapshot:
    return build_demo_snapshot()


def _dish(target_id: str, price: str, yield_percent: str = "100") -> RecipeTarget:
    return RecipeTarget(
        id=target_id,
        name=f"Dish {target_id}",
        selling_price_micros=Money.from_major(price),
        yield_percent=yield_percent,
    )


def _material(material_id: str, price: str, net_content: str = "1") -> Material:
    return Material(
        id=material_id,
        name=f"Material {material_id}",
        uom=UnitOfMeasure.PCS,
        net_content=net_content,
        price_per_package_micros=Money.from_major(price),
    )


def _item(material_id: str, quantity: str) -> RecipeIngredient:
    return RecipeIngredient(ref=MaterialRef(material_id=material_id), quantity=quantity)


class TestDemoKitchen:
    """Fixed-point regression on the demo dataset."""

    def test_gravy_base_recipe(self, engine, demo):
        """Classic Indian Gravy: four materials, 80% yield."""
        analysis = engine.analyze(demo, GRAVY_ID)

        # onion 1800/17 + tomato 2200/23 + oil 28 + masala 42.5
        expected_raw = Decimal(1800) / Decimal(17) + Decimal(2200) / Decimal(23) + Decimal("70.5")
        assert abs(analysis.total_cost - expected_raw) < Decimal("1e-20")
        assert quantize(analysis.total_cost) == Decimal("272.03")
        assert quantize(analysis.cost_per_prepared_unit) == Decimal("340.04")
        assert analysis.is_base_recipe
        assert analysis.food_cost_percent is None
        assert analysis.selling_price is None
        assert analysis.issues == []

    def test_gravy_breakdown(self, engine, demo):
        analysis = engine.analyze(demo, GRAVY_ID)

        assert [line.name for line in analysis.breakdown] == [
            "Local Red Onion", "Fresh Tomato", "Refined Oil", "Garam Masala",
        ]
        assert [quantize(line.line_total) for line in analysis.breakdown] == [
            Decimal("105.88"), Decimal("95.65"), Decimal("28.00"), Decimal("42.50"),
        ]
        onion = analysis.breakdown[0]
        assert onion.type_label == "Material"
        assert onion.unit_label == "KG"
        assert quantize(onion.unit_cost) == Decimal("70.59")

    def test_mutter_paneer_food_cost(self, engine, demo):
        """0.35 gravy + paneer + oil at 380, 95% yield."""
        analysis = engine.analyze(demo, MUTTER_PANEER_ID)

        assert quantize(analysis.total_cost) == Decimal("211.82")
        assert quantize(analysis.yield_adjusted_cost) == Decimal("222.96")
        assert quantize(analysis.food_cost_percent) == Decimal("58.67")
        assert analysis.selling_price == Decimal("380")
        assert analysis.high_food_cost
        assert analysis.cost_per_prepared_unit is None

    def test_mutter_paneer_breakdown(self, engine, demo):
        analysis = engine.analyze(demo, MUTTER_PANEER_ID)
        gravy, paneer, oil = analysis.breakdown

        assert gravy.type_label == "Base Prep"
        assert gravy.unit_label == "Portion"
        assert gravy.kind == "base_recipe"
        assert quantize(gravy.line_total) == Decimal("119.02")
        assert quantize(gravy.unit_cost) == Decimal("340.04")
        assert paneer.line_total == Decimal("90")
        assert oil.line_total == Decimal("2.8")

    def test_food_cost_percent_matches_formula(self, engine, demo):
        analysis = engine.analyze(demo, MUTTER_PANEER_ID)
        expected = analysis.total_cost / Decimal("0.95") / Decimal("380") * 100

        assert abs(analysis.food_cost_percent - expected) < Decimal("1e-20")

    def test_analysis_is_idempotent(self, engine, demo):
        first = engine.analyze(demo, MUTTER_PANEER_ID)
        second = engine.analyze(demo, MUTTER_PANEER_ID)

        assert first.model_dump() == second.model_dump()


class TestFlaggedLines:
    """Missing, undefined and cyclic lines are shown, not hidden."""

    def test_deleted_material_is_marked(self, engine):
        snapshot = CostingSnapshot(
            materials=(_material("i1", "10"),),
            targets=(_dish("d1", "100"),),
            recipes=(Recipe(target_id="d1", ingredients=(_item("i1", "2"), _item("gone", "1"))),),
        )

        analysis = engine.analyze(snapshot, "d1")
        kept, deleted = analysis.breakdown

        assert analysis.total_cost == Decimal("20")
        assert kept.status == LineStatus.RESOLVED
        assert deleted.name == "Deleted"
        assert deleted.status == LineStatus.UNRESOLVED
        assert deleted.line_total == 0
        assert deleted.unit_cost == 0
        assert analysis.has_issues
        assert analysis.issues[0].issue_type == CostIssueType.MISSING_REFERENCE

    def test_zero_quantity_unit_cost_is_undefined(self, engine):
        snapshot = CostingSnapshot(
            materials=(_material("i1", "10"),),
            targets=(_dish("d1", "100"),),
            recipes=(Recipe(target_id="d1", ingredients=(_item("i1", "0"),)),),
        )

        line = engine.analyze(snapshot, "d1").breakdown[0]

        assert line.unit_cost is None
        assert line.line_total == 0
        assert line.status == LineStatus.RESOLVED

    def test_cycle_line_is_reported(self, engine):
        snapshot = CostingSnapshot(
            materials=(_material("i1", "10"),),
            targets=(
                RecipeTarget(id="b1", name="Stock", is_base_recipe=True),
                _dish("d1", "100"),
            ),
            recipes=(
                Recipe(target_id="b1", ingredients=(
                    RecipeIngredient(ref=BaseRecipeRef(target_id="b1")),
                    _item("i1", "1"),
                )),
                Recipe(target_id="d1", ingredients=(RecipeIngredient(ref=BaseRecipeRef(target_id="b1")),)),
            ),
        )

        analysis = engine.analyze(snapshot, "d1")

        assert analysis.total_cost == Decimal("10")
        assert analysis.breakdown[0].status == LineStatus.RESOLVED
        assert [i.issue_type for i in analysis.breakdown[0].issues] == [CostIssueType.CYCLE]


class TestFoodCostEdgeCases:
    """Derived figures with zero divisors are None."""

    def test_zero_ingredient_dish(self, engine):
        snapshot = CostingSnapshot(targets=(_dish("d1", "250"),))

        analysis = engine.analyze(snapshot, "d1")

        assert analysis.total_cost == 0
        assert analysis.breakdown == []
        assert analysis.food_cost_percent == 0
        assert not analysis.high_food_cost

    def test_zero_selling_price(self, engine):
        snapshot = CostingSnapshot(targets=(_dish("d1", "0"),))

        analysis = engine.analyze(snapshot, "d1")

        assert analysis.food_cost_percent is None
        assert analysis.yield_adjusted_cost == 0

    def test_zero_yield_dish(self, engine):
        snapshot = CostingSnapshot(
            materials=(_material("i1", "10"),),
            targets=(_dish("d1", "100", yield_percent="0"),),
            recipes=(Recipe(target_id="d1", ingredients=(_item("i1", "1"),)),),
        )

        analysis = engine.analyze(snapshot, "d1")

        assert analysis.total_cost == Decimal("10")
        assert analysis.yield_adjusted_cost is None
        assert analysis.food_cost_percent is None

    def test_zero_yield_base_recipe(self, engine):
        snapshot = CostingSnapshot(
            targets=(RecipeTarget(id="b1", name="Stock", yield_percent="0", is_base_recipe=True),),
        )

        assert engine.analyze(snapshot, "b1").cost_per_prepared_unit is None

    def test_alert_threshold(self):
        snapshot = CostingSnapshot(
            materials=(_material("i1", "30"),),
            targets=(_dish("d1", "100"),),
            recipes=(Recipe(target_id="d1", ingredients=(_item("i1", "1"),)),),
        )

        assert not CostingEngine(Decimal("35")).analyze(snapshot, "d1").high_food_cost
        assert CostingEngine(Decimal("25")).analyze(snapshot, "d1").high_food_cost

    def test_unknown_target_raises(self, engine):
        with pytest.raises(TargetNotFoundError) as exc:
            engine.analyze(CostingSnapshot(), "nope")

        assert exc.value.target_id == "nope"


class TestQueries:
    """Target listings and dashboard."""

    def test_list_targets_by_kind(self, engine, demo):
        assert [t.id for t in engine.list_targets(demo)] == [GRAVY_ID, MUTTER_PANEER_ID]
        assert [t.id for t in engine.list_targets(demo, base_recipes=True)] == [GRAVY_ID]
        assert [t.id for t in engine.list_targets(demo, base_recipes=False)] == [MUTTER_PANEER_ID]

    def test_available_components_exclude_self(self, engine, demo):
        assert [t.id for t in engine.available_components(demo, MUTTER_PANEER_ID)] == [GRAVY_ID]
        assert engine.available_components(demo, GRAVY_ID) == []

    def test_dashboard(self, engine, demo):
        summary = engine.dashboard(demo)

        assert summary.material_count == 5
        assert summary.sellable_count == 1
        assert summary.base_recipe_count == 1
        assert summary.avg_selling_price == Decimal("380")

    def test_dashboard_empty(self, engine):
        assert engine.dashboard(CostingSnapshot()).avg_selling_price == 0
