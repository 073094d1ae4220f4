# tests/conftest.py
from __future__ import annotations

from pathlib import Path
from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from shelflife.services.product_store import ProductStore


# --- Fixuri store -------------------------------------------------------------
@pytest.fixture()
def db_url(tmp_path: Path) -> str:
    """Fișier SQLite nou per test; directorul 'var' e creat de store.open()."""
    return f"sqlite:///{tmp_path / 'var' / 'products.db'}"


@pytest.fixture()
def raw_store(tmp_path: Path) -> Iterator[ProductStore]:
    """Store nedeschis: tabelul nu există încă."""
    s = ProductStore(f"sqlite:///{tmp_path / 'raw.db'}")
    yield s
    s.dispose()


@pytest.fixture()
def store(db_url: str) -> Iterator[ProductStore]:
    """Store deschis, cu seed-ul implicit (3 rânduri)."""
    s = ProductStore(db_url)
    s.open()
    yield s
    s.dispose()


# --- Fixură client ------------------------------------------------------------
@pytest.fixture()
def client(store: ProductStore) -> Iterator[TestClient]:
    """Client HTTP in-process; lifespan-ul rulează store.open() (idempotent)."""
    from shelflife.main import create_app

    with TestClient(create_app(store)) as c:
        yield c
