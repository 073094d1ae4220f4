# shelflife/routers/report.py
from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query

from shelflife.core import clock
from shelflife.core.settings import settings
from shelflife.routers.deps import get_store
from shelflife.schemas.report import ReportEntry, ReportRead
from shelflife.services.expiration_report import build_report
from shelflife.services.product_store import ProductStore

router = APIRouter(tags=["report"])


@router.get(
    "/report",
    response_model=ReportRead,
    summary="Days until expiration per product (bar chart data)",
)
def expiration_report(
    name: str | None = Query(
        default=None,
        description="Exact product name filter; omit for all products",
    ),
    today: date | None = Query(
        default=None,
        description="Reference date (YYYY-MM-DD); defaults to the current date",
    ),
    store: ProductStore = Depends(get_store),
):
    """
    Store → builder → răspuns. O eroare la citire (StorageError/ParseError) oprește
    construirea raportului: nu există grafic parțial.
    """
    products = store.get_products_by_name(name) if name is not None else store.get_all_products()
    ref = today or clock.today()
    points = build_report(products, ref)

    entries = [
        ReportEntry(
            index=point.index,
            days_until_expiration=point.days_until_expiration,
            product_id=product.id,
            name=product.name,
            expiration_date=product.expiration_date,
        )
        for point, product in zip(points, products)
    ]
    return ReportRead(label=settings.REPORT_LABEL, today=ref, name_filter=name, entries=entries)
