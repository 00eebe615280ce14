"""Costing exceptions.

Data-quality findings (missing references, zero divisors, cycles) are
reported as CostIssue records and never raised. These exceptions cover
caller mistakes only.
"""


class CostingError(Exception):
    """Base class for costing errors."""
    pass


class TargetNotFoundError(CostingError):
    """Raised when a target id is not present in the snapshot."""

    def __init__(self, target_id: str) -> None:
        self.target_id = target_id
        super().__init__(f"Recipe target not found: {target_id}")


class RecipeEditError(CostingError):
    """Raised when a recipe edit cannot be applied."""
    pass


class MaterialNotFoundError(CostingError):
    """Raised when a material id is not present in the snapshot."""

    def __init__(self, material_id: str) -> None:
        self.material_id = material_id
        super().__init__(f"Material not found: {material_id}")


class MasterDataError(CostingError):
    """Raised when a material or target change cannot be applied."""
    pass
