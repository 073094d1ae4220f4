# tests/test_product_store.py
from __future__ import annotations

from datetime import date, datetime
from pathlib import Path

import pytest
from sqlalchemy import create_engine, inspect, text
from sqlalchemy.exc import OperationalError

from shelflife.crud import product as crud_product
from shelflife.services.errors import InvalidArgument, ParseError, StorageError
from shelflife.services.product_store import DEFAULT_SEED, ProductStore, parse_stored_date


def _pairs(products):
    return [(p.name, p.expiration_date) for p in products]


def _raw_exec(url: str, sql: str, **params) -> None:
    """Scrie direct în fișier, ocolind store-ul (simulează corupere externă)."""
    engine = create_engine(url)
    try:
        with engine.begin() as conn:
            conn.execute(text(sql), params)
    finally:
        engine.dispose()


# --- Schema lifecycle ---------------------------------------------------------
def test_initialize_creates_table_and_seed_once(raw_store: ProductStore):
    assert raw_store.initialize() is True
    # al doilea apel nu recreează și nu dublează seed-ul
    assert raw_store.initialize() is False

    products = raw_store.get_all_products()
    assert _pairs(products) == list(DEFAULT_SEED)
    assert [p.id for p in products] == [1, 2, 3]
    assert raw_store.schema_version_stored() == raw_store.schema_version


def test_table_layout(store: ProductStore, db_url: str):
    engine = create_engine(db_url)
    try:
        insp = inspect(engine)
        assert insp.get_table_names() == ["products"]
        cols = [c["name"] for c in insp.get_columns("products")]
        assert cols == ["id", "name", "expirationDate"]
        assert insp.get_indexes("products") == []
        assert insp.get_foreign_keys("products") == []
    finally:
        engine.dispose()


def test_open_is_idempotent(store: ProductStore):
    store.add_product("牛乳", date(2024, 9, 25))
    store.open()
    store.open()
    assert store.count_products() == 4


def test_open_creates_missing_parent_directory(tmp_path: Path):
    url = f"sqlite:///{tmp_path / 'nested' / 'dir' / 'products.db'}"
    s = ProductStore(url)
    try:
        s.open()
        assert (tmp_path / "nested" / "dir" / "products.db").is_file()
        assert s.count_products() == len(DEFAULT_SEED)
    finally:
        s.dispose()


def _failing_seed(*args, **kwargs):
    raise OperationalError("INSERT INTO products", {}, Exception("disk I/O error"))


def test_failed_migration_keeps_previous_rows(store: ProductStore, monkeypatch: pytest.MonkeyPatch):
    store.add_product("牛乳", date(2024, 9, 25))
    before = store.get_all_products()

    monkeypatch.setattr(crud_product, "insert_many", _failing_seed)
    with pytest.raises(StorageError):
        store.migrate(1, 2)
    monkeypatch.undo()

    # DROP + CREATE + seed + user_version fac rollback împreună
    assert store.get_all_products() == before
    assert store.schema_version_stored() == 1


def test_failed_initialize_leaves_no_table(raw_store: ProductStore, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(crud_product, "insert_many", _failing_seed)
    with pytest.raises(StorageError):
        raw_store.initialize()
    monkeypatch.undo()

    # tabelul nu rămâne gol și marcat: următorul initialize() îl creează cu seed
    assert raw_store.schema_version_stored() == 0
    assert raw_store.initialize() is True
    assert _pairs(raw_store.get_all_products()) == list(DEFAULT_SEED)


def test_migrate_drops_custom_rows_and_reseeds(store: ProductStore):
    store.add_product("牛乳", date(2024, 9, 25))
    store.add_product("卵", date(2024, 9, 22))
    assert store.count_products() == 5

    store.migrate(1, 1)

    products = store.get_all_products()
    assert _pairs(products) == list(DEFAULT_SEED)
    # DROP TABLE resetează și secvența AUTOINCREMENT
    assert [p.id for p in products] == [1, 2, 3]


def test_open_with_newer_code_version_runs_destructive_migration(store: ProductStore, db_url: str):
    store.add_product("牛乳", date(2024, 9, 25))

    upgraded = ProductStore(db_url, schema_version=2)
    try:
        upgraded.open()
        assert upgraded.schema_version_stored() == 2
        assert _pairs(upgraded.get_all_products()) == list(DEFAULT_SEED)
    finally:
        upgraded.dispose()


def test_open_refuses_downgrade(db_url: str):
    newer = ProductStore(db_url, schema_version=3)
    newer.open()
    newer.dispose()

    older = ProductStore(db_url, schema_version=1)
    try:
        with pytest.raises(StorageError):
            older.open()
    finally:
        older.dispose()


def test_open_stamps_unversioned_existing_table(tmp_path: Path):
    url = f"sqlite:///{tmp_path / 'legacy.db'}"
    _raw_exec(
        url,
        "CREATE TABLE products (id INTEGER PRIMARY KEY AUTOINCREMENT, name TEXT, expirationDate TEXT)",
    )
    _raw_exec(url, "INSERT INTO products (name, expirationDate) VALUES (:n, :d)", n="米", d="2025-01-01")

    s = ProductStore(url)
    try:
        s.open()
        # tabelul existent e păstrat, doar primește versiune
        assert _pairs(s.get_all_products()) == [("米", date(2025, 1, 1))]
        assert s.schema_version_stored() == s.schema_version
    finally:
        s.dispose()


# --- Insert / read ------------------------------------------------------------
def test_add_product_returns_fresh_id_and_is_readable(store: ProductStore):
    before = {p.id for p in store.get_all_products()}
    new_id = store.add_product("牛乳", date(2024, 9, 25))

    assert new_id not in before
    products = store.get_all_products()
    assert products[-1].id == new_id
    assert (products[-1].name, products[-1].expiration_date) == ("牛乳", date(2024, 9, 25))


def test_ids_are_never_reused_after_delete_all(store: ProductStore):
    assert store.delete_all_products() == 3
    assert store.get_all_products() == []

    new_id = store.add_product("食料", date(2024, 9, 30))
    assert new_id == 4


def test_get_all_products_keeps_insertion_order(store: ProductStore):
    store.add_product("B", date(2024, 1, 2))
    store.add_product("A", date(2024, 1, 1))
    names = [p.name for p in store.get_all_products()]
    assert names == ["食料", "衣服", "食料", "B", "A"]


def test_filter_by_name_is_ordered_subset_of_all(store: ProductStore):
    store.add_product("衣服", date(2024, 12, 1))
    store.add_product("食料", date(2025, 1, 1))
    every = store.get_all_products()

    for name in {p.name for p in every} | {"存在しない"}:
        expected = [p for p in every if p.name == name]
        assert store.get_products_by_name(name) == expected


def test_filter_by_name_single_match_keeps_store_id(store: ProductStore):
    products = store.get_products_by_name("衣服")
    assert len(products) == 1
    assert products[0].id == 2
    assert products[0].expiration_date == date(2024, 10, 15)


def test_filter_by_name_is_case_sensitive_and_exact(store: ProductStore):
    store.add_product("Milk", date(2024, 9, 25))
    assert store.get_products_by_name("milk") == []
    assert store.get_products_by_name("Milk ") == []
    assert [p.name for p in store.get_products_by_name("Milk")] == ["Milk"]


def test_filter_with_no_match_returns_empty_list(store: ProductStore):
    assert store.get_products_by_name("nope") == []


@pytest.mark.parametrize("name", ["", "   ", None, 42])
def test_add_product_rejects_bad_name(store: ProductStore, name):
    with pytest.raises(InvalidArgument):
        store.add_product(name, date(2024, 9, 30))
    assert store.count_products() == 3


@pytest.mark.parametrize("value", ["2024-09-30", datetime(2024, 9, 30, 12, 0), None])
def test_add_product_rejects_non_date(store: ProductStore, value):
    with pytest.raises(InvalidArgument):
        store.add_product("食料", value)


# --- Failure semantics --------------------------------------------------------
@pytest.mark.parametrize("raw", ["2024/09/30", "2024-9-30", "20240930", "2024-02-30", "", "soon"])
def test_corrupt_date_aborts_whole_read(store: ProductStore, db_url: str, raw: str):
    _raw_exec(db_url, "INSERT INTO products (name, expirationDate) VALUES (:n, :d)", n="衣服", d=raw)

    with pytest.raises(ParseError) as ei:
        store.get_all_products()
    assert ei.value.row_id == 4
    assert ei.value.raw_value == raw

    with pytest.raises(ParseError):
        store.get_products_by_name("衣服")
    # rândurile valide cu alt nume se citesc în continuare
    assert len(store.get_products_by_name("食料")) == 2


def test_null_date_is_a_parse_error(store: ProductStore, db_url: str):
    _raw_exec(db_url, "INSERT INTO products (name, expirationDate) VALUES (:n, NULL)", n="X")
    with pytest.raises(ParseError):
        store.get_all_products()


def test_parse_stored_date_accepts_iso():
    assert parse_stored_date("2024-09-30", 1) == date(2024, 9, 30)


def test_unopenable_database_raises_storage_error(tmp_path: Path):
    # un director nu poate fi deschis ca fișier SQLite
    s = ProductStore(f"sqlite:///{tmp_path}")
    try:
        with pytest.raises(StorageError):
            s.get_all_products()
        with pytest.raises(StorageError):
            s.add_product("食料", date(2024, 9, 30))
    finally:
        s.dispose()


def test_corrupt_database_file_raises_storage_error(tmp_path: Path):
    path = tmp_path / "broken.db"
    path.write_bytes(b"this is definitely not a sqlite database" * 200)
    s = ProductStore(f"sqlite:///{path}")
    try:
        with pytest.raises(StorageError):
            s.open()
    finally:
        s.dispose()


def test_reads_before_open_raise_storage_error(raw_store: ProductStore):
    # tabelul lipsește → OperationalError mapat la StorageError
    with pytest.raises(StorageError):
        raw_store.get_all_products()


def test_custom_seed(tmp_path: Path):
    s = ProductStore(f"sqlite:///{tmp_path / 'custom.db'}", seed=[("水", date(2030, 1, 1))])
    try:
        s.open()
        assert _pairs(s.get_all_products()) == [("水", date(2030, 1, 1))]
    finally:
        s.dispose()


def test_filter_by_empty_name_returns_empty_list(store: ProductStore):
    assert store.get_products_by_name("") == []
