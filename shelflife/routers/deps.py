# shelflife/routers/deps.py
from __future__ import annotations

from fastapi import HTTPException, Request, status

from shelflife.services.product_store import ProductStore


def get_store(request: Request) -> ProductStore:
    """Dependency: store-ul atașat aplicației în create_app (app.state.store)."""
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Product store not configured")
    return store
