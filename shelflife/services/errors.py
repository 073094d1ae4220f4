# shelflife/services/errors.py
from __future__ import annotations


class ShelfLifeError(Exception):
    """Baza pentru erorile tipizate ale store-ului și ale raportului."""
    pass


class StorageError(ShelfLifeError):
    """Ridicată când baza durabilă nu poate fi deschisă, citită sau scrisă (I/O, corupere, permisiuni)."""
    pass


class ParseError(ShelfLifeError):
    """Ridicată când o dată stocată nu respectă formatul YYYY-MM-DD; citirea întreagă e abandonată."""

    def __init__(self, row_id: int | None, raw_value: object):
        self.row_id = row_id
        self.raw_value = raw_value
        super().__init__(f"Invalid stored expirationDate {raw_value!r} for product id={row_id}")


class ConstraintViolation(ShelfLifeError):
    """Rezervată pentru constrângeri viitoare (unicitate, câmpuri obligatorii)."""
    pass


class InvalidArgument(ShelfLifeError, ValueError):
    """Input invalid pentru store sau pentru builder-ul de raport (ex. dată lipsă)."""
    pass


__all__ = [
    "ShelfLifeError",
    "StorageError",
    "ParseError",
    "ConstraintViolation",
    "InvalidArgument",
]
