"""Inventory listing endpoint."""
from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends

from stylecraft.handlers.dependencies import get_inventory_service
from stylecraft.models import InventoryItem
from stylecraft.services.inventory import InventoryService

router = APIRouter()


@router.get("/api/inventory", response_model=List[InventoryItem])
def list_inventory(inventory: InventoryService = Depends(get_inventory_service)):
    # Sync route: the GCS client blocks, FastAPI runs this in its threadpool.
    return inventory.list_items()
