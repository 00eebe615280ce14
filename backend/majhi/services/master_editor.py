"""
Majhi Costing - Master Data Editor

Add, edit and delete single materials and menu items. Like the recipe
editor, every change returns a new snapshot.

Deleting a record never rewrites recipes that use it: those lines stay in
place and cost as unresolved until the user fixes them.
"""

import logging

from majhi.models.costing import CostingSnapshot, Material, RecipeTarget
from majhi.services.costing.errors import (
    MasterDataError,
    MaterialNotFoundError,
    TargetNotFoundError,
)

logger = logging.getLogger(__name__)


# =============================================================================
# MATERIALS
# =============================================================================

def add_material(snapshot: CostingSnapshot, material: Material) -> CostingSnapshot:
    """Append a material. Its id must be new."""
    if snapshot.get_material(material.id) is not None:
        raise MasterDataError(f"Material {material.id} already exists")

    logger.info(f"Added material {material.id} ({material.name})")
    return _rebuild(snapshot, materials=snapshot.materials + (material,))


def update_material(snapshot: CostingSnapshot, material: Material) -> CostingSnapshot:
    """Replace the material with the same id, keeping its position."""
    if snapshot.get_material(material.id) is None:
        raise MaterialNotFoundError(material.id)

    materials = tuple(material if m.id == material.id else m for m in snapshot.materials)
    logger.info(f"Updated material {material.id} ({material.name})")
    return _rebuild(snapshot, materials=materials)


def remove_material(snapshot: CostingSnapshot, material_id: str) -> CostingSnapshot:
    """Delete a material. Recipe lines that use it become unresolved."""
    if snapshot.get_material(material_id) is None:
        raise MaterialNotFoundError(material_id)

    materials = tuple(m for m in snapshot.materials if m.id != material_id)
    logger.info(f"Removed material {material_id}")
    return _rebuild(snapshot, materials=materials)


# =============================================================================
# MENU ITEMS
# =============================================================================

def add_target(snapshot: CostingSnapshot, target: RecipeTarget) -> CostingSnapshot:
    """Append a menu item or base recipe. Its id must be new."""
    if snapshot.get_target(target.id) is not None:
        raise MasterDataError(f"Recipe target {target.id} already exists")

    logger.info(f"Added target {target.id} ({target.name})")
    return _rebuild(snapshot, targets=snapshot.targets + (target,))


def update_target(snapshot: CostingSnapshot, target: RecipeTarget) -> CostingSnapshot:
    """Replace the target with the same id. Its recipe is kept."""
    if snapshot.get_target(target.id) is None:
        raise TargetNotFoundError(target.id)

    targets = tuple(target if t.id == target.id else t for t in snapshot.targets)
    logger.info(f"Updated target {target.id} ({target.name})")
    return _rebuild(snapshot, targets=targets)


def remove_target(snapshot: CostingSnapshot, target_id: str) -> CostingSnapshot:
    """
    Delete a target together with its own recipe.

    Other recipes that use it as a base recipe keep the line, which then
    costs as unresolved.
    """
    if snapshot.get_target(target_id) is None:
        raise TargetNotFoundError(target_id)

    logger.info(f"Removed target {target_id}")
    return _rebuild(
        snapshot,
        targets=tuple(t for t in snapshot.targets if t.id != target_id),
        recipes=tuple(r for r in snapshot.recipes if r.target_id != target_id),
    )


def _rebuild(snapshot: CostingSnapshot, **changes) -> CostingSnapshot:
    # New instance so the lookup indexes match the new records
    return CostingSnapshot(
        materials=changes.get("materials", snapshot.materials),
        targets=changes.get("targets", snapshot.targets),
        recipes=changes.get("recipes", snapshot.recipes),
    )
