# shelflife/routers/maintenance.py
from __future__ import annotations

from fastapi import APIRouter, Depends

from shelflife.routers.deps import get_store
from shelflife.services.product_store import ProductStore

router = APIRouter(prefix="/maintenance", tags=["maintenance"])


@router.post("/reset", summary="Drop and recreate the products table with seed data")
def reset_products(store: ProductStore = Depends(get_store)):
    """Migrare distructivă la aceeași versiune: toate rândurile custom dispar, rămâne seed-ul."""
    version = store.schema_version
    store.migrate(version, version)
    return {"schema_version": version, "rows": store.count_products()}
