# shelflife/crud/product.py
from __future__ import annotations

from typing import Iterable, List, Sequence, Tuple

from sqlalchemy import delete, func, inspect, select, text
from sqlalchemy.orm import Session

from shelflife.models.product import Product, TABLE_PRODUCTS


# -------------------------- Schema lifecycle --------------------------

def table_exists(db: Session) -> bool:
    """True dacă tabelul 'products' există deja în fișierul SQLite."""
    return inspect(db.connection()).has_table(TABLE_PRODUCTS)


def create_table(db: Session) -> None:
    Product.__table__.create(bind=db.connection())


def drop_table(db: Session) -> None:
    # DROP TABLE șterge și rândul din sqlite_sequence → id-urile pornesc din nou de la 1.
    # Rulează în tranzacția sesiunii (vezi database._enable_transactional_ddl).
    Product.__table__.drop(bind=db.connection(), checkfirst=True)


def get_schema_version(db: Session) -> int:
    return int(db.execute(text("PRAGMA user_version")).scalar_one() or 0)


def set_schema_version(db: Session, version: int) -> None:
    # PRAGMA nu acceptă parametri legați; valoarea e forțată la int
    db.execute(text(f"PRAGMA user_version = {int(version)}"))


# -------------------------- Mutations --------------------------

def insert(db: Session, name: str, expiration_iso: str) -> int:
    """Inserează un rând și întoarce id-ul atribuit de AUTOINCREMENT."""
    obj = Product(name=name, expiration_date=expiration_iso)
    db.add(obj)
    db.flush()
    return int(obj.id)


def insert_many(db: Session, rows: Iterable[Tuple[str, str]]) -> List[int]:
    return [insert(db, name, expiration_iso) for name, expiration_iso in rows]


def delete_all(db: Session) -> int:
    """Șterge toate rândurile. Returnează numărul de rânduri șterse."""
    res = db.execute(delete(Product))
    return int(getattr(res, "rowcount", 0) or 0)


# -------------------------- Reads --------------------------

def list_by_name(db: Session, name: str) -> Sequence[Product]:
    """
    Rânduri cu `name` egal exact (case-sensitive, byte-exact în SQLite pentru '=').
    Ordinea e cea a inserării (id crescător).
    """
    stmt = select(Product).where(Product.name == name).order_by(Product.id.asc())
    return db.execute(stmt).scalars().all()


def list_all(db: Session) -> Sequence[Product]:
    stmt = select(Product).order_by(Product.id.asc())
    return db.execute(stmt).scalars().all()


def count(db: Session) -> int:
    return int(db.scalar(select(func.count(Product.id))) or 0)
