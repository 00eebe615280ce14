"""
Majhi Costing - CSV Import / Export

Column names follow the back-office spreadsheets so existing
files import unchanged:

    Materials: itemCode,itemName,brandName,packagingSize,uom,netContent,pricePerPackage,yieldPercent
    Targets:   menuCode,menuName,department,portionSize,sellingPrice,yieldPercent,isBaseRecipe

Blank, unparseable or zero numbers fall back to the column default;
out-of-range numbers reject the row.
Imported rows get fresh ids.
"""

import csv
import io
import logging
import uuid
from decimal import Decimal, InvalidOperation
from typing import Optional

from pydantic import BaseModel, ValidationError

from majhi.core.types import Money, quantize
from majhi.models.costing import (
    CostAnalysis,
    CostingSnapshot,
    Department,
    Material,
    RecipeTarget,
    UnitOfMeasure,
)

logger = logging.getLogger(__name__)

MATERIAL_COLUMNS = [
    "id", "itemCode", "itemName", "brandName", "packagingSize",
    "uom", "netContent", "pricePerPackage", "yieldPercent",
]
TARGET_COLUMNS = [
    "id", "menuCode", "menuName", "department", "portionSize",
    "sellingPrice", "yieldPercent", "isBaseRecipe",
]
SHEET_COLUMNS = ["Component", "Type", "Quantity", "Unit Cost", "Total Line Cost"]

DEFAULT_PORTION = "1 Portion"


class MaterialImportResult(BaseModel):
    """Outcome of a material CSV import."""
    total_rows: int = 0
    materials: list[Material] = []
    errors: list[str] = []


class TargetImportResult(BaseModel):
    """Outcome of a menu item CSV import."""
    total_rows: int = 0
    targets: list[RecipeTarget] = []
    errors: list[str] = []


# =============================================================================
# EXPORT
# =============================================================================

def _write_rows(columns: list[str], rows: list[dict]) -> str:
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=columns, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writeheader()
    writer.writerows(rows)
    return buffer.getvalue()


def export_materials(snapshot: CostingSnapshot) -> str:
    """Material master as CSV."""
    return _write_rows(MATERIAL_COLUMNS, [
        {
            "id": m.id,
            "itemCode": m.item_code,
            "itemName": m.name,
            "brandName": m.brand_name,
            "packagingSize": str(m.packaging_size),
            "uom": m.uom.value,
            "netContent": str(m.net_content),
            "pricePerPackage": str(Money.to_decimal(m.price_per_package_micros)),
            "yieldPercent": str(m.yield_percent),
        }
        for m in snapshot.materials
    ])


def export_targets(snapshot: CostingSnapshot) -> str:
    """Menu master as CSV."""
    return _write_rows(TARGET_COLUMNS, [
        {
            "id": t.id,
            "menuCode": t.menu_code,
            "menuName": t.name,
            "department": t.department.value,
            "portionSize": t.portion_size,
            "sellingPrice": str(Money.to_decimal(t.selling_price_micros)),
            "yieldPercent": str(t.yield_percent),
            "isBaseRecipe": "true" if t.is_base_recipe else "false",
        }
        for t in snapshot.targets
    ])


def export_recipe_sheet(analysis: CostAnalysis, places: int = 2) -> str:
    """Costed recipe sheet for one target. Undefined unit costs export blank."""
    return _write_rows(SHEET_COLUMNS, [
        {
            "Component": line.name,
            "Type": line.type_label,
            "Quantity": str(line.quantity),
            "Unit Cost": str(quantize(line.unit_cost, places)) if line.unit_cost is not None else "",
            "Total Line Cost": str(quantize(line.line_total, places)),
        }
        for line in analysis.breakdown
    ])


# =============================================================================
# IMPORT
# =============================================================================

def _number(raw: Optional[str], default: Decimal) -> Decimal:
    """Parse a CSV number; blank, invalid or zero values take the default."""
    if raw is None or not raw.strip():
        return default
    try:
        value = Decimal(raw.strip())
    except InvalidOperation:
        return default
    if not value.is_finite() or value == 0:
        return default
    return value


def _text(row: dict, column: str, default: str = "") -> str:
    return (row.get(column) or "").strip() or default


def import_materials(text: str) -> MaterialImportResult:
    """Parse a material CSV. Bad rows are reported, good rows kept."""
    result = MaterialImportResult()
    reader = csv.DictReader(io.StringIO(text))

    for row_num, row in enumerate(reader, start=2):  # header is row 1
        if not any((value or "").strip() for value in row.values() if isinstance(value, str)):
            continue
        result.total_rows += 1

        uom_raw = _text(row, "uom", UnitOfMeasure.KG.value).upper()
        try:
            uom = UnitOfMeasure(uom_raw)
        except ValueError:
            result.errors.append(f"Row {row_num}: Unknown unit of measure '{uom_raw}'")
            continue

        try:
            material = Material(
                id=str(uuid.uuid4()),
                item_code=_text(row, "itemCode"),
                name=_text(row, "itemName"),
                brand_name=_text(row, "brandName"),
                packaging_size=_number(row.get("packagingSize"), Decimal("1")),
                uom=uom,
                net_content=_number(row.get("netContent"), Decimal("1")),
                price_per_package_micros=Money.from_major(
                    _number(row.get("pricePerPackage"), Decimal("0"))
                ),
                yield_percent=_number(row.get("yieldPercent"), Decimal("100")),
            )
        except ValidationError as e:
            result.errors.append(f"Row {row_num}: {_first_error(e)}")
            continue
        except (ValueError, ArithmeticError) as e:
            result.errors.append(f"Row {row_num}: {e}")
            continue

        result.materials.append(material)

    logger.info(
        f"Imported {len(result.materials)} of {result.total_rows} material rows "
        f"({len(result.errors)} errors)"
    )
    return result


def import_targets(text: str) -> TargetImportResult:
    """Parse a menu item CSV. Bad rows are reported, good rows kept."""
    result = TargetImportResult()
    reader = csv.DictReader(io.StringIO(text))

    for row_num, row in enumerate(reader, start=2):
        if not any((value or "").strip() for value in row.values() if isinstance(value, str)):
            continue
        result.total_rows += 1

        department_raw = _text(row, "department", Department.FOOD.value)
        try:
            department = Department(department_raw)
        except ValueError:
            result.errors.append(f"Row {row_num}: Unknown department '{department_raw}'")
            continue

        try:
            target = RecipeTarget(
                id=str(uuid.uuid4()),
                menu_code=_text(row, "menuCode"),
                name=_text(row, "menuName"),
                department=department,
                portion_size=_text(row, "portionSize", DEFAULT_PORTION),
                selling_price_micros=Money.from_major(
                    _number(row.get("sellingPrice"), Decimal("0"))
                ),
                yield_percent=_number(row.get("yieldPercent"), Decimal("100")),
                is_base_recipe=_text(row, "isBaseRecipe").lower() == "true",
            )
        except ValidationError as e:
            result.errors.append(f"Row {row_num}: {_first_error(e)}")
            continue
        except (ValueError, ArithmeticError) as e:
            result.errors.append(f"Row {row_num}: {e}")
            continue

        result.targets.append(target)

    logger.info(
        f"Imported {len(result.targets)} of {result.total_rows} menu rows "
        f"({len(result.errors)} errors)"
    )
    return result


def _first_error(error: ValidationError) -> str:
    detail = error.errors()[0]
    location = ".".join(str(part) for part in detail["loc"])
    return f"{location}: {detail['msg']}"
