"""
Majhi Costing - Snapshot Store

Owns the session's master data. Each change swaps in a whole new
CostingSnapshot, so an analysis always runs against a consistent view.
"""

import logging

from majhi.models.costing import CostingSnapshot, Material, RecipeTarget
from majhi.services.demo import build_demo_snapshot

logger = logging.getLogger(__name__)


class SnapshotStore:
    """In-process holder for the current snapshot."""

    def __init__(self) -> None:
        self._snapshot = CostingSnapshot()

    def get(self) -> CostingSnapshot:
        return self._snapshot

    def replace(self, snapshot: CostingSnapshot) -> CostingSnapshot:
        self._snapshot = snapshot
        logger.info(
            f"Snapshot replaced: {len(snapshot.materials)} materials, "
            f"{len(snapshot.targets)} targets, {len(snapshot.recipes)} recipes"
        )
        return snapshot

    def load_demo(self) -> CostingSnapshot:
        return self.replace(build_demo_snapshot())

    def add_materials(self, materials: list[Material]) -> CostingSnapshot:
        current = self._snapshot
        return self.replace(CostingSnapshot(
            materials=current.materials + tuple(materials),
            targets=current.targets,
            recipes=current.recipes,
        ))

    def add_targets(self, targets: list[RecipeTarget]) -> CostingSnapshot:
        current = self._snapshot
        return self.replace(CostingSnapshot(
            materials=current.materials,
            targets=current.targets + tuple(targets),
            recipes=current.recipes,
        ))

    def clear(self) -> None:
        """Drop all data (for testing)."""
        self._snapshot = CostingSnapshot()


# Singleton instance
snapshot_store = SnapshotStore()
