# shelflife/schemas/product.py
from __future__ import annotations

from datetime import date, datetime
from typing import List
import re

from pydantic import BaseModel, Field, ConfigDict, field_validator

# Data calendaristică strictă: YYYY-MM-DD (fără oră, fără timestamp-uri numerice)
ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class ProductBase(BaseModel):
    """Câmpuri comune pentru produs; folosit la create/read."""
    name: str = Field(..., min_length=1, max_length=255)
    expiration_date: date

    # --- Validators ---
    @field_validator("name")
    @classmethod
    def _name_strip_nonempty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("name must not be empty")
        # numele se stochează exact (potrivirea la filtrare e byte-exact)
        return v

    @field_validator("expiration_date", mode="before")
    @classmethod
    def _date_iso_only(cls, v):
        if isinstance(v, datetime):
            raise ValueError("expiration_date must be a calendar date without time of day")
        if isinstance(v, date):
            return v
        if isinstance(v, str) and ISO_DATE_RE.match(v.strip()):
            return v.strip()
        raise ValueError("expiration_date must be an ISO date (YYYY-MM-DD)")

    model_config = ConfigDict(
        # oferă exemple utile în OpenAPI
        json_schema_extra={
            "examples": [
                {
                    "name": "食料",
                    "expiration_date": "2024-09-30",
                }
            ]
        }
    )


class ProductCreate(ProductBase):
    """Payload pentru creare produs."""
    pass


class ProductRead(ProductBase):
    """Produs citit din store (id atribuit de DB)."""
    id: int
    model_config = ConfigDict(from_attributes=True)


class ProductList(BaseModel):
    """Răspuns listă: produse în ordinea inserării + total."""
    items: List[ProductRead]
    total: int
