# lab_inventory/routers/items.py
"""
Items Router - catalog CRUD, scanner lookup, low-stock and summary.
"""
from __future__ import annotations
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from lab_inventory.database import get_session
from lab_inventory.errors import InvariantViolationError, ItemNotFoundError
from lab_inventory.models import ItemIdsIn, ItemIn, ItemOut, ItemUpdate, StockSummaryOut
from lab_inventory.services.catalog import CatalogService

router = APIRouter(prefix="/items", tags=["Items"])


@router.get("", response_model=List[ItemOut])
async def list_items(db: AsyncSession = Depends(get_session)):
    return await CatalogService(db).list_items()


@router.get("/low-stock", response_model=List[ItemOut])
async def low_stock_items(db: AsyncSession = Depends(get_session)):
    """Items with quantity_available below min_stock_threshold."""
    return await CatalogService(db).low_stock_items()


@router.get("/summary", response_model=StockSummaryOut)
async def stock_summary(db: AsyncSession = Depends(get_session)):
    return await CatalogService(db).stock_summary()


@router.get("/lookup", response_model=ItemOut)
async def lookup_item(
    code: str = Query(..., min_length=1, description="Scanned or typed SKU"),
    db: AsyncSession = Depends(get_session),
):
    """Resolve a barcode/QR text to an item by SKU."""
    item = await CatalogService(db).find_by_code(code)
    if item is None:
        raise HTTPException(404, detail=f"No item found with SKU: {code}")
    return item


@router.get("/{item_id}", response_model=ItemOut)
async def get_item(item_id: int, db: AsyncSession = Depends(get_session)):
    try:
        return await CatalogService(db).get_item(item_id)
    except ItemNotFoundError as e:
        raise HTTPException(404, detail=str(e))


@router.post("", response_model=ItemOut, status_code=status.HTTP_201_CREATED)
async def create_item(payload: ItemIn, db: AsyncSession = Depends(get_session)):
    try:
        return await CatalogService(db).create_item(payload)
    except InvariantViolationError as e:
        raise HTTPException(400, detail=str(e))
    except IntegrityError:
        raise HTTPException(409, detail=f"SKU already exists: {payload.sku}")


@router.patch("/{item_id}", response_model=ItemOut)
async def update_item(item_id: int, payload: ItemUpdate, db: AsyncSession = Depends(get_session)):
    try:
        return await CatalogService(db).update_item(item_id, payload)
    except ItemNotFoundError as e:
        raise HTTPException(404, detail=str(e))
    except InvariantViolationError as e:
        raise HTTPException(400, detail=str(e))
    except IntegrityError:
        raise HTTPException(409, detail="Update conflicts with another item or with current stock")


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_item(item_id: int, db: AsyncSession = Depends(get_session)):
    deleted = await CatalogService(db).delete_items([item_id])
    if not deleted:
        raise HTTPException(404, detail=f"Item {item_id} not found")


@router.post("/delete")
async def delete_items(payload: ItemIdsIn, db: AsyncSession = Depends(get_session)):
    """Bulk delete; related transactions go with their items."""
    deleted = await CatalogService(db).delete_items(payload.ids)
    return {"deleted": deleted}
