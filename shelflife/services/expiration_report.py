# shelflife/services/expiration_report.py
from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, List, NamedTuple

from shelflife.services.errors import InvalidArgument


class ReportPoint(NamedTuple):
    """(index, zile până la expirare); compară egal cu tuple-ul simplu."""
    index: int
    days_until_expiration: int


def _is_calendar_date(value: object) -> bool:
    # datetime e subclasă de date, dar are oră → respins
    return isinstance(value, date) and not isinstance(value, datetime)


def days_until(expiration_date: date, today: date) -> int:
    """Zile întregi, cu semn: >0 în viitor, 0 azi, <0 deja expirat."""
    return (expiration_date - today).days


def build_report(products: Iterable[object], today: date) -> List[ReportPoint]:
    """
    Transformare pură: produse → puncte pentru grafic.

    - `today` e input explicit (nu se citește ceasul aici).
    - Păstrează ordinea și lungimea; fără sortare, filtrare sau deduplicare.
    - Produsele expirate rămân în raport cu valoare negativă.
    - Fiecare produs trebuie să aibă atributul `expiration_date` de tip date.
    """
    if not _is_calendar_date(today):
        raise InvalidArgument(f"today must be a datetime.date without time of day, got {today!r}")

    points: List[ReportPoint] = []
    for i, product in enumerate(products):
        expiration = getattr(product, "expiration_date", None)
        if not _is_calendar_date(expiration):
            raise InvalidArgument(f"product at position {i} has invalid expiration_date {expiration!r}")
        points.append(ReportPoint(i, days_until(expiration, today)))
    return points


__all__ = ["ReportPoint", "build_report", "days_until"]
