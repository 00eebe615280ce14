"""
Majhi Costing - Recipe Costing API Routes
Back-office endpoints over the in-process snapshot

RULE: Quantities and percentages are Decimal strings, money is int micros
      or a decimal string. JSON floats are rejected.
"""

import re
from decimal import Decimal
from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, File, HTTPException, Query, Response, UploadFile, status
from pydantic import BaseModel, Field

from majhi.core.config import settings
from majhi.core.types import Money, Quantity
from majhi.models.costing import (
    CostAnalysis,
    CostingSnapshot,
    DashboardSummary,
    IngredientRef,
    Material,
    RecipeTarget,
)
from majhi.services import csv_io, master_editor, recipe_editor
from majhi.services.costing import (
    MasterDataError,
    MaterialNotFoundError,
    RecipeEditError,
    TargetNotFoundError,
    costing_engine,
)
from majhi.services.snapshot_store import snapshot_store

router = APIRouter(prefix="/costing", tags=["Recipe Costing"])


class AddIngredientRequest(BaseModel):
    """New recipe line."""
    ref: IngredientRef
    quantity: Quantity = Field(default=Decimal("1"), ge=0)


class UpdateQuantityRequest(BaseModel):
    """Quantity change for one recipe line."""
    quantity: Quantity = Field(..., ge=0)


def _analyze(target_id: str) -> CostAnalysis:
    try:
        return costing_engine.analyze(snapshot_store.get(), target_id)
    except TargetNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


def _csv_response(content: str, filename: str) -> Response:
    # Headers are latin-1: ASCII fallback name plus the RFC 5987 UTF-8 form
    fallback = re.sub(r"[^A-Za-z0-9._-]", "_", filename)
    disposition = (
        f'attachment; filename="{fallback}.csv"; '
        f"filename*=UTF-8''{quote(filename + '.csv', safe='')}"
    )
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": disposition},
    )


async def _read_csv_upload(file: UploadFile) -> str:
    if not (file.filename or "").lower().endswith(".csv"):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="File must be a CSV",
        )
    content = await file.read()
    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="CSV must be UTF-8 encoded",
        )


# =============================================================================
# SNAPSHOT
# =============================================================================

@router.get("/snapshot", response_model=CostingSnapshot)
async def get_snapshot() -> CostingSnapshot:
    """Current materials, targets and recipes."""
    return snapshot_store.get()


@router.put("/snapshot")
async def replace_snapshot(snapshot: CostingSnapshot) -> dict:
    """Replace all master data at once."""
    snapshot_store.replace(snapshot)
    return {
        "status": "replaced",
        "materials": len(snapshot.materials),
        "targets": len(snapshot.targets),
        "recipes": len(snapshot.recipes),
    }


@router.get("/dashboard", response_model=DashboardSummary)
async def get_dashboard() -> DashboardSummary:
    """Headline counts and average ticket."""
    return costing_engine.dashboard(snapshot_store.get())


# =============================================================================
# TARGETS & ANALYSIS
# =============================================================================

@router.get("/targets", response_model=list[RecipeTarget])
async def list_targets(base_recipes: Optional[bool] = Query(None)) -> list[RecipeTarget]:
    """All targets, or only base recipes / only sellable dishes."""
    return costing_engine.list_targets(snapshot_store.get(), base_recipes=base_recipes)


@router.get("/targets/{target_id}/components", response_model=list[RecipeTarget])
async def list_components(target_id: str) -> list[RecipeTarget]:
    """Base recipes that may be added to this target's recipe."""
    snapshot = snapshot_store.get()
    if snapshot.get_target(target_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Recipe target not found: {target_id}")
    return costing_engine.available_components(snapshot, target_id)


@router.get("/targets/{target_id}/analysis", response_model=CostAnalysis)
async def analyze_target(target_id: str) -> CostAnalysis:
    """
    Cost a target.

    Sellable dishes report food cost %, base recipes report cost per
    prepared unit. Unresolved lines are flagged, never fatal.
    """
    return _analyze(target_id)


@router.get("/targets/{target_id}/sheet")
async def export_recipe_sheet(target_id: str) -> Response:
    """Costed recipe sheet as CSV."""
    analysis = _analyze(target_id)
    target = snapshot_store.get().get_target(target_id)
    return _csv_response(
        csv_io.export_recipe_sheet(analysis, settings.COST_DECIMAL_PLACES),
        f"RECIPE_{target.menu_code or target.id}",
    )


# =============================================================================
# RECIPE EDITING
# =============================================================================

def _apply_edit(edit, target_id: str, *args) -> CostAnalysis:
    try:
        updated = edit(snapshot_store.get(), target_id, *args)
    except TargetNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except RecipeEditError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    snapshot_store.replace(updated)
    return _analyze(target_id)


@router.post("/targets/{target_id}/ingredients", response_model=CostAnalysis)
async def add_ingredient(target_id: str, request: AddIngredientRequest) -> CostAnalysis:
    """Add a material or base recipe line and return the new costing."""
    return _apply_edit(recipe_editor.add_ingredient, target_id, request.ref, request.quantity)


@router.patch("/targets/{target_id}/ingredients/{index}", response_model=CostAnalysis)
async def update_ingredient(
    target_id: str,
    index: int,
    request: UpdateQuantityRequest,
) -> CostAnalysis:
    """Change one line's quantity and return the new costing."""
    return _apply_edit(recipe_editor.update_quantity, target_id, index, request.quantity)


@router.delete("/targets/{target_id}/ingredients/{index}", response_model=CostAnalysis)
async def remove_ingredient(target_id: str, index: int) -> CostAnalysis:
    """Remove one line and return the new costing."""
    return _apply_edit(recipe_editor.remove_ingredient, target_id, index)


# =============================================================================
# MASTER DATA
# =============================================================================

def _apply_master_edit(edit, *args) -> CostingSnapshot:
    try:
        updated = edit(snapshot_store.get(), *args)
    except (MaterialNotFoundError, TargetNotFoundError) as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except MasterDataError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return snapshot_store.replace(updated)


@router.get("/materials", response_model=list[Material])
async def list_materials() -> list[Material]:
    """Material master in entry order."""
    return list(snapshot_store.get().materials)


@router.post("/materials", response_model=Material, status_code=status.HTTP_201_CREATED)
async def create_material(material: Material) -> Material:
    """Add one material."""
    _apply_master_edit(master_editor.add_material, material)
    return material


@router.put("/materials/{material_id}", response_model=Material)
async def update_material(material_id: str, material: Material) -> Material:
    """Replace one material; the path id wins over the body id."""
    material = material.model_copy(update={"id": material_id})
    _apply_master_edit(master_editor.update_material, material)
    return material


@router.delete("/materials/{material_id}")
async def delete_material(material_id: str) -> dict:
    """Delete one material. Recipes using it show the line as unresolved."""
    _apply_master_edit(master_editor.remove_material, material_id)
    return {"status": "deleted", "material_id": material_id}


@router.post("/targets", response_model=RecipeTarget, status_code=status.HTTP_201_CREATED)
async def create_target(target: RecipeTarget) -> RecipeTarget:
    """Add one menu item or base recipe."""
    _apply_master_edit(master_editor.add_target, target)
    return target


@router.put("/targets/{target_id}", response_model=RecipeTarget)
async def update_target(target_id: str, target: RecipeTarget) -> RecipeTarget:
    """Replace one menu item; the path id wins over the body id."""
    target = target.model_copy(update={"id": target_id})
    _apply_master_edit(master_editor.update_target, target)
    return target


@router.delete("/targets/{target_id}")
async def delete_target(target_id: str) -> dict:
    """Delete one menu item and its recipe."""
    _apply_master_edit(master_editor.remove_target, target_id)
    return {"status": "deleted", "target_id": target_id}


# =============================================================================
# CSV IMPORT / EXPORT
# =============================================================================

@router.get("/materials/export")
async def export_materials() -> Response:
    """Material master as CSV."""
    return _csv_response(csv_io.export_materials(snapshot_store.get()), "ITEM_MASTER")


@router.get("/targets/export")
async def export_targets() -> Response:
    """Menu master as CSV."""
    return _csv_response(csv_io.export_targets(snapshot_store.get()), "MENU_MASTER")


@router.post("/materials/import")
async def import_materials(file: UploadFile = File(...)) -> dict:
    """Append materials from a CSV file."""
    result = csv_io.import_materials(await _read_csv_upload(file))
    snapshot_store.add_materials(result.materials)
    return {
        "status": "imported",
        "total_rows": result.total_rows,
        "imported": len(result.materials),
        "errors": result.errors,
    }


@router.post("/targets/import")
async def import_targets(file: UploadFile = File(...)) -> dict:
    """Append menu items from a CSV file."""
    result = csv_io.import_targets(await _read_csv_upload(file))
    snapshot_store.add_targets(result.targets)
    return {
        "status": "imported",
        "total_rows": result.total_rows,
        "imported": len(result.targets),
        "errors": result.errors,
    }


# =============================================================================
# DEMO DATA
# =============================================================================

@router.post("/demo/setup")
async def setup_demo_data() -> dict:
    """Load the demo kitchen and cost its dishes."""
    snapshot = snapshot_store.load_demo()
    analyses = [costing_engine.analyze(snapshot, t.id) for t in snapshot.targets]
    places = settings.COST_DECIMAL_PLACES
    return {
        "status": "demo_data_created",
        "materials": len(snapshot.materials),
        "targets": len(snapshot.targets),
        "analysis_summary": [
            {
                "target": a.target_name,
                "total_cost": Money.to_str(a.total_cost, places),
                "food_cost_percent": (
                    Money.to_str(a.food_cost_percent, places) if a.food_cost_percent is not None else None
                ),
                "cost_per_prepared_unit": (
                    Money.to_str(a.cost_per_prepared_unit, places)
                    if a.cost_per_prepared_unit is not None else None
                ),
            }
            for a in analyses
        ],
    }


@router.delete("/data/clear")
async def clear_data() -> dict:
    """Clear all costing data (for testing)."""
    snapshot_store.clear()
    return {"status": "cleared"}
