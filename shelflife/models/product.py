# shelflife/models/product.py
from __future__ import annotations

from sqlalchemy import Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from shelflife.database import Base

TABLE_PRODUCTS = "products"


class Product(Base):
    """
    Tabelul 'products' (un singur tabel, fără FK).

    Note:
    - `id` e INTEGER PRIMARY KEY AUTOINCREMENT: id-urile nu se refolosesc nici după ștergere totală.
    - `name` nu e unic; filtrarea după nume întoarce toate potrivirile.
    - `expirationDate` e TEXT ISO-8601 (`YYYY-MM-DD`); parsarea se face la citire.
    - Fără indexuri în afară de PK.
    """
    __tablename__ = TABLE_PRODUCTS
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(Text, nullable=True)
    expiration_date: Mapped[str] = mapped_column("expirationDate", Text, nullable=True)

    def __repr__(self) -> str:
        # scurtează numele în repr pentru loguri mai curate
        name_preview = (self.name[:32] + "…") if self.name and len(self.name) > 33 else self.name
        return f"<Product id={self.id!r} name={name_preview!r} expirationDate={self.expiration_date!r}>"
