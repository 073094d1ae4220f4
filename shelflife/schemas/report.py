# shelflife/schemas/report.py
from __future__ import annotations

from datetime import date
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class ReportEntry(BaseModel):
    """Un punct din grafic (bară) + produsul din care provine."""
    index: int
    days_until_expiration: int
    product_id: int
    name: str
    expiration_date: date


class ReportRead(BaseModel):
    """Raportul complet: eticheta setului de date, data de referință și punctele, în ordine."""
    label: str
    today: date
    name_filter: Optional[str] = None
    entries: List[ReportEntry]

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "label": "消費期限までの日数",
                    "today": "2024-09-20",
                    "name_filter": None,
                    "entries": [
                        {
                            "index": 0,
                            "days_until_expiration": 10,
                            "product_id": 1,
                            "name": "食料",
                            "expiration_date": "2024-09-30",
                        }
                    ],
                }
            ]
        }
    )
