"""
Majhi Costing - Master Data Editor Tests

- Add / update / delete materials and menu items
- Deleted records surface as unresolved recipe lines
"""

from decimal import Decimal

import pytest

from majhi.core.types import Money
from majhi.models.costing import CostIssueType, LineStatus, Material, RecipeTarget, UnitOfMeasure
from majhi.services.costing import (
    MasterDataError,
    MaterialNotFoundError,
    TargetNotFoundError,
    costing_engine,
)
from majhi.services.demo import GRAVY_ID, MUTTER_PANEER_ID, build_demo_snapshot
from majhi.services.master_editor import (
    add_material,
    add_target,
    remove_material,
    remove_target,
    update_material,
    update_target,
)


@pytest.fixture
def demo():
    return build_demo_snapshot()


def _ghee(material_id: str = "i6", price: str = "600") -> Material:
    return Material(
        id=material_id,
        item_code="RAW006",
        name="Desi Ghee",
        uom=UnitOfMeasure.LTR,
        net_content="1",
        price_per_package_micros=Money.from_major(price),
    )


class TestMaterials:
    """Single-record material changes."""

    def test_add_material(self, demo):
        updated = add_material(demo, _ghee())

        assert updated.get_material("i6").name == "Desi Ghee"
        assert updated.materials[-1].id == "i6"
        assert demo.get_material("i6") is None

    def test_duplicate_material_rejected(self, demo):
        with pytest.raises(MasterDataError):
            add_material(demo, _ghee("i1"))

    def test_update_material_keeps_position_and_recosts(self, demo):
        paneer = demo.get_material("i5").model_copy(
            update={"price_per_package_micros": Money.from_major("500")}
        )

        updated = update_material(demo, paneer)

        assert [m.id for m in updated.materials] == [m.id for m in demo.materials]
        line = costing_engine.analyze(updated, MUTTER_PANEER_ID).breakdown[1]
        assert line.line_total == Decimal("100")

    def test_update_unknown_material(self, demo):
        with pytest.raises(MaterialNotFoundError) as exc:
            update_material(demo, _ghee())

        assert exc.value.material_id == "i6"

    def test_deleted_material_flags_lines_that_used_it(self, demo):
        """Oil is used by the gravy and the dish; both lines become unresolved."""
        updated = remove_material(demo, "i3")

        gravy = costing_engine.analyze(updated, GRAVY_ID)
        oil_line = gravy.breakdown[2]
        assert oil_line.name == "Deleted"
        assert oil_line.status == LineStatus.UNRESOLVED
        assert oil_line.line_total == 0
        assert gravy.breakdown[0].status == LineStatus.RESOLVED

        dish = costing_engine.analyze(updated, MUTTER_PANEER_ID)
        assert dish.breakdown[2].status == LineStatus.UNRESOLVED
        assert [i.issue_type for i in dish.issues] == [
            CostIssueType.MISSING_REFERENCE,
            CostIssueType.MISSING_REFERENCE,
        ]
        assert dish.total_cost < costing_engine.analyze(demo, MUTTER_PANEER_ID).total_cost

    def test_remove_unknown_material(self, demo):
        with pytest.raises(MaterialNotFoundError):
            remove_material(demo, "nope")


class TestTargets:
    """Single-record menu item changes."""

    def test_add_target_without_recipe(self, demo):
        lassi = RecipeTarget(id="m3", name="Sweet Lassi", selling_price_micros=Money.from_major("90"))

        updated = add_target(demo, lassi)

        assert costing_engine.analyze(updated, "m3").total_cost == 0

    def test_duplicate_target_rejected(self, demo):
        with pytest.raises(MasterDataError):
            add_target(demo, RecipeTarget(id=GRAVY_ID, name="Another Gravy"))

    def test_update_target_keeps_recipe(self, demo):
        dish = demo.get_target(MUTTER_PANEER_ID).model_copy(
            update={"selling_price_micros": Money.from_major("420")}
        )

        updated = update_target(demo, dish)

        assert updated.ingredients_of(MUTTER_PANEER_ID) == demo.ingredients_of(MUTTER_PANEER_ID)
        assert costing_engine.analyze(updated, MUTTER_PANEER_ID).selling_price == Decimal("420")

    def test_update_unknown_target(self, demo):
        with pytest.raises(TargetNotFoundError):
            update_target(demo, RecipeTarget(id="nope", name="Nothing"))

    def test_remove_base_recipe_unresolves_consumers(self, demo):
        updated = remove_target(demo, GRAVY_ID)

        assert updated.get_recipe(GRAVY_ID) is None
        gravy_line = costing_engine.analyze(updated, MUTTER_PANEER_ID).breakdown[0]
        assert gravy_line.status == LineStatus.UNRESOLVED
        assert gravy_line.name == "Deleted"

    def test_remove_unknown_target(self, demo):
        with pytest.raises(TargetNotFoundError):
            remove_target(demo, "nope")
