"""
Majhi Costing - Unit Cost Resolver

Purchase record -> cost per usable unit of the material's UOM.

    purchase_unit_cost  = price_per_package / (packaging_size * net_content)
    effective_unit_cost = purchase_unit_cost / (yield_percent / 100)

Yield is always a divisor: losing 15% of an onion to peeling makes each
usable KG dearer, never cheaper.
"""

from decimal import Decimal

from majhi.core.types import Money
from majhi.models.costing import Material, UnitCost

HUNDRED = Decimal("100")


def yield_factor(yield_percent: Decimal) -> Decimal:
    """Convert a yield percentage to a fraction (85 -> 0.85)."""
    return yield_percent / HUNDRED


def resolve_unit_cost(material: Material) -> UnitCost:
    """
    Resolve a material's effective cost per usable unit.

    Returns an undefined UnitCost (effective_unit_cost is None) instead of
    raising when packaging_size * net_content or yield_percent is zero, or
    when the arithmetic leaves the decimal range.
    """
    try:
        pack_quantity = material.packaging_size * material.net_content
        if pack_quantity == 0:
            return UnitCost(
                material_id=material.id,
                reason="packaging size x net content is zero",
            )

        purchase_unit_cost = Money.to_decimal(material.price_per_package_micros) / pack_quantity

        if material.yield_percent == 0:
            return UnitCost(
                material_id=material.id,
                purchase_unit_cost=purchase_unit_cost,
                reason="yield percent is zero",
            )

        effective_unit_cost = purchase_unit_cost / yield_factor(material.yield_percent)
    except ArithmeticError as e:
        return UnitCost(
            material_id=material.id,
            reason=f"unit cost out of range ({type(e).__name__})",
        )

    return UnitCost(
        material_id=material.id,
        purchase_unit_cost=purchase_unit_cost,
        effective_unit_cost=effective_unit_cost,
    )
