"""
Majhi Costing - Demo Kitchen

Five materials, one base gravy and one plated dish. Used by the demo
endpoint and as the fixed-point regression dataset in the tests.
"""

from decimal import Decimal

from majhi.core.types import Money
from majhi.models.costing import (
    BaseRecipeRef,
    CostingSnapshot,
    Department,
    Material,
    MaterialRef,
    Recipe,
    RecipeIngredient,
    RecipeTarget,
    UnitOfMeasure,
)

GRAVY_ID = "m1"
MUTTER_PANEER_ID = "m2"


def build_demo_snapshot() -> CostingSnapshot:
    """Build the demo kitchen snapshot."""
    materials = [
        # (id, code, name, brand, uom, net content, price per package, yield %)
        ("i1", "RAW001", "Local Red Onion", "Farmers Choice", UnitOfMeasure.KG, "25", "1500", "85"),
        ("i2", "RAW002", "Fresh Tomato", "Local Market", UnitOfMeasure.KG, "25", "1100", "92"),
        ("i3", "RAW003", "Refined Oil", "Fortune", UnitOfMeasure.LTR, "15", "2100", "100"),
        ("i4", "RAW004", "Garam Masala", "Mdh", UnitOfMeasure.PKT, "0.1", "85", "100"),
        ("i5", "RAW005", "Paneer Block", "Amul", UnitOfMeasure.KG, "1", "450", "100"),
    ]

    targets = [
        RecipeTarget(
            id=GRAVY_ID,
            menu_code="BASE01",
            name="Classic Indian Gravy",
            department=Department.FOOD,
            portion_size="1 KG",
            selling_price_micros=0,
            yield_percent=Decimal("80"),
            is_base_recipe=True,
        ),
        RecipeTarget(
            id=MUTTER_PANEER_ID,
            menu_code="SELL01",
            name="Mutter Paneer Signature",
            department=Department.FOOD,
            portion_size="1 Plate",
            selling_price_micros=Money.from_major("380"),
            yield_percent=Decimal("95"),
            is_base_recipe=False,
        ),
    ]

    recipes = [
        Recipe(
            target_id=GRAVY_ID,
            ingredients=(
                _item("i1", "1.5"),
                _item("i2", "2"),
                _item("i3", "0.2"),
                _item("i4", "0.05"),
            ),
        ),
        Recipe(
            target_id=MUTTER_PANEER_ID,
            ingredients=(
                RecipeIngredient(ref=BaseRecipeRef(target_id=GRAVY_ID), quantity=Decimal("0.35")),
                _item("i5", "0.2"),
                _item("i3", "0.02"),
            ),
        ),
    ]

    return CostingSnapshot(
        materials=tuple(
            Material(
                id=material_id,
                item_code=code,
                name=name,
                brand_name=brand,
                packaging_size=Decimal("1"),
                uom=uom,
                net_content=Decimal(net_content),
                price_per_package_micros=Money.from_major(price),
                yield_percent=Decimal(yield_percent),
            )
            for material_id, code, name, brand, uom, net_content, price, yield_percent in materials
        ),
        targets=tuple(targets),
        recipes=tuple(recipes),
    )


def _item(material_id: str, quantity: str) -> RecipeIngredient:
    return RecipeIngredient(ref=MaterialRef(material_id=material_id), quantity=Decimal(quantity))
