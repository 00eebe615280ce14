"""
Majhi Costing - Recipe Costing Schemas
Materials, recipe targets, recipes and costing results

RULE: Engine inputs are a read-only snapshot. The engine never mutates
      Material, RecipeTarget or Recipe records.
"""

from decimal import Decimal
from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

from majhi.core.types import Amount, MoneyMicros, Percentage, Quantity


class UnitOfMeasure(str, Enum):
    """Purchase units for materials."""
    KG = "KG"
    GM = "GM"
    LTR = "LTR"
    ML = "ML"
    PCS = "PCS"
    PKT = "PKT"
    BOX = "BOX"


class Department(str, Enum):
    """Menu departments."""
    FOOD = "Food"
    LIQUOR = "Liquor"
    CRAFTBEER = "Craftbeer"
    SOFTDRINKS = "Soft Drinks"
    OTHER = "Other"


# =============================================================================
# MASTER DATA
# =============================================================================

class Material(BaseModel):
    """Raw or packaged material as purchased."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    item_code: str = ""
    name: str
    brand_name: str = ""

    # Purchase packaging
    packaging_size: Quantity = Field(default=Decimal("1"), ge=0)  # packages per purchase unit
    uom: UnitOfMeasure
    net_content: Quantity = Field(..., ge=0)  # quantity in uom per package
    price_per_package_micros: MoneyMicros = Field(..., ge=0)

    # Usable fraction after prep loss (trimming, peeling)
    yield_percent: Percentage = Field(default=Decimal("100"))


class RecipeTarget(BaseModel):
    """Menu item: either a sellable dish or a reusable base preparation."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    menu_code: str = ""
    name: str
    department: Department = Department.FOOD
    portion_size: str = ""

    selling_price_micros: MoneyMicros = Field(default=0, ge=0)

    # Output adjustment after processing / reduction / portioning
    yield_percent: Percentage = Field(default=Decimal("100"))

    is_base_recipe: bool = False


# =============================================================================
# RECIPES
# =============================================================================

class MaterialRef(BaseModel):
    """Ingredient line pointing at a purchased material."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["item"] = "item"
    material_id: str


class BaseRecipeRef(BaseModel):
    """Ingredient line pointing at another target, used as a base recipe."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["base_recipe"] = "base_recipe"
    target_id: str


IngredientRef = Annotated[Union[MaterialRef, BaseRecipeRef], Field(discriminator="kind")]


class RecipeIngredient(BaseModel):
    """One line of a recipe."""
    model_config = ConfigDict(frozen=True)

    ref: IngredientRef
    quantity: Quantity = Field(default=Decimal("1"), ge=0)

    @property
    def ref_id(self) -> str:
        if isinstance(self.ref, MaterialRef):
            return self.ref.material_id
        return self.ref.target_id


class Recipe(BaseModel):
    """Ingredient list owned by exactly one target."""
    model_config = ConfigDict(frozen=True)

    target_id: str
    ingredients: tuple[RecipeIngredient, ...] = ()


class CostingSnapshot(BaseModel):
    """
    Immutable view of the kitchen master data.

    Built by the application layer and passed into every evaluation.
    Lookups are indexed once per snapshot.
    """
    model_config = ConfigDict(frozen=True)

    materials: tuple[Material, ...] = ()
    targets: tuple[RecipeTarget, ...] = ()
    recipes: tuple[Recipe, ...] = ()

    _materials_by_id: dict[str, Material] = PrivateAttr(default_factory=dict)
    _targets_by_id: dict[str, RecipeTarget] = PrivateAttr(default_factory=dict)
    _recipes_by_target: dict[str, Recipe] = PrivateAttr(default_factory=dict)

    def model_post_init(self, __context) -> None:
        # First record wins on duplicate ids
        for material in self.materials:
            self._materials_by_id.setdefault(material.id, material)
        for target in self.targets:
            self._targets_by_id.setdefault(target.id, target)
        for recipe in self.recipes:
            self._recipes_by_target.setdefault(recipe.target_id, recipe)

    def get_material(self, material_id: str) -> Optional[Material]:
        return self._materials_by_id.get(material_id)

    def get_target(self, target_id: str) -> Optional[RecipeTarget]:
        return self._targets_by_id.get(target_id)

    def get_recipe(self, target_id: str) -> Optional[Recipe]:
        return self._recipes_by_target.get(target_id)

    def ingredients_of(self, target_id: str) -> tuple[RecipeIngredient, ...]:
        """Ingredient list for a target; empty when it has no recipe."""
        recipe = self.get_recipe(target_id)
        return recipe.ingredients if recipe else ()


# =============================================================================
# COSTING RESULTS
# =============================================================================

class CostIssueType(str, Enum):
    """Data-quality conditions found while costing."""
    MISSING_REFERENCE = "missing_reference"
    UNDEFINED_COST = "undefined_cost"
    CYCLE = "cycle"
    DEPTH_LIMIT = "depth_limit"  # base recipes nested deeper than the evaluator follows


class LineStatus(str, Enum):
    """Resolution status of an ingredient line."""
    RESOLVED = "resolved"
    UNRESOLVED = "unresolved"  # points at a deleted material / target
    UNDEFINED_COST = "undefined_cost"  # zero divisor or out-of-range arithmetic
    CYCLE = "cycle"


class CostIssue(BaseModel):
    """A data-quality finding, located by the target path that reached it."""
    model_config = ConfigDict(frozen=True)

    issue_type: CostIssueType
    ref_id: str
    path: tuple[str, ...] = ()
    message: str


class UnitCost(BaseModel):
    """Resolved cost per usable unit of a material."""
    model_config = ConfigDict(frozen=True)

    material_id: str
    purchase_unit_cost: Optional[Amount] = None
    effective_unit_cost: Optional[Amount] = None
    reason: Optional[str] = None

    @property
    def is_defined(self) -> bool:
        return self.effective_unit_cost is not None


class IngredientCost(BaseModel):
    """Evaluated cost of one ingredient line (including its subtree)."""
    model_config = ConfigDict(frozen=True)

    cost: Amount = Decimal("0")
    status: LineStatus = LineStatus.RESOLVED
    issues: tuple[CostIssue, ...] = ()


class RecipeCost(BaseModel):
    """Evaluated cost of a whole recipe, line by line."""
    model_config = ConfigDict(frozen=True)

    target_id: str
    total_cost: Amount = Decimal("0")
    lines: tuple[IngredientCost, ...] = ()

    @property
    def issues(self) -> tuple[CostIssue, ...]:
        return tuple(issue for line in self.lines for issue in line.issues)


class BreakdownLine(BaseModel):
    """Per-ingredient row of a costing analysis."""
    position: int
    ref_id: str
    kind: Literal["item", "base_recipe"]
    name: str  # "Deleted" when the reference is gone
    type_label: str  # "Material" / "Base Prep"
    unit_label: str  # material UOM or "Portion"
    quantity: Quantity
    unit_cost: Optional[Amount] = None  # undefined when quantity is 0
    line_total: Amount
    status: LineStatus
    issues: list[CostIssue] = []


class CostAnalysis(BaseModel):
    """Costing facade output for one target."""
    target_id: str
    target_name: str
    is_base_recipe: bool
    yield_percent: Percentage

    total_cost: Amount
    breakdown: list[BreakdownLine] = []

    # Sellable dishes
    selling_price: Optional[Amount] = None
    yield_adjusted_cost: Optional[Amount] = None
    food_cost_percent: Optional[Amount] = None
    high_food_cost: bool = False

    # Base recipes
    cost_per_prepared_unit: Optional[Amount] = None

    issues: list[CostIssue] = []

    @property
    def has_issues(self) -> bool:
        return bool(self.issues)


class DashboardSummary(BaseModel):
    """Headline counts for the back-office dashboard."""
    material_count: int
    sellable_count: int
    base_recipe_count: int
    avg_selling_price: Amount
