# shelflife/routers/product.py
from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response, status

from shelflife.routers.deps import get_store
from shelflife.schemas.product import ProductCreate, ProductList, ProductRead
from shelflife.services.product_store import ProductStore

router = APIRouter(prefix="/products", tags=["products"])


@router.get(
    "",
    response_model=ProductList,
    summary="List products (all, or exact name match)",
)
def list_products(
    response: Response,
    name: str | None = Query(
        default=None,
        description="Exact, case-sensitive product name; omit for all products",
    ),
    store: ProductStore = Depends(get_store),
):
    """
    Returnează produsele în ordinea inserării.
    - `name`: potrivire exactă (case-sensitive); `?name=` → listă goală; fără `name` → toate produsele
    """
    items = store.get_products_by_name(name) if name is not None else store.get_all_products()
    # Header util pentru UI-uri
    response.headers["X-Total-Count"] = str(len(items))
    return ProductList(items=items, total=len(items))


@router.post(
    "",
    response_model=ProductRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create a product",
)
def create_product(payload: ProductCreate, store: ProductStore = Depends(get_store)):
    new_id = store.add_product(payload.name, payload.expiration_date)
    return ProductRead(id=new_id, name=payload.name, expiration_date=payload.expiration_date)


@router.delete(
    "",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete all products",
)
def delete_all_products(store: ProductStore = Depends(get_store)):
    store.delete_all_products()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
