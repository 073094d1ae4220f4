# shelflife/services/product_store.py
from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from datetime import date, datetime
from typing import Generator, Iterable, List, Optional, Sequence, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from shelflife.core.settings import settings
from shelflife.crud import product as crud
from shelflife.database import build_engine, ensure_parent_dir, make_session_factory, session_scope
from shelflife.models.product import Product as ProductRow
from shelflife.schemas.product import ISO_DATE_RE, ProductRead
from shelflife.services.errors import InvalidArgument, ParseError, StorageError

logger = logging.getLogger("shelflife.store")

# Versiunea schemei curente (PRAGMA user_version)
SCHEMA_VERSION = 1

# Date de exemplu inserate la crearea tabelului (ordinea contează: id 1, 2, 3)
DEFAULT_SEED: Tuple[Tuple[str, date], ...] = (
    ("食料", date(2024, 9, 30)),
    ("衣服", date(2024, 10, 15)),
    ("食料", date(2024, 8, 20)),
)


def parse_stored_date(raw: object, row_id: Optional[int] = None) -> date:
    """Parsează `expirationDate` stocat; orice abatere de la YYYY-MM-DD → ParseError."""
    if not isinstance(raw, str) or not ISO_DATE_RE.match(raw):
        raise ParseError(row_id, raw)
    try:
        return date.fromisoformat(raw)
    except ValueError as e:
        # ex. 2024-02-30: formatul e corect, dar data nu există
        raise ParseError(row_id, raw) from e


def _check_date(value: object, what: str) -> date:
    if isinstance(value, datetime) or not isinstance(value, date):
        raise InvalidArgument(f"{what} must be a datetime.date without time of day, got {value!r}")
    return value


class ProductStore:
    """
    Store durabil pentru produse (un singur tabel SQLite).

    - Fiecare operație deschide o sesiune proprie și o închide înainte de return
      (NullPool pe fișier → nicio conexiune ținută între apeluri).
    - Operațiile care scriu (add/delete/initialize/migrate) sunt serializate cu un lock
      de proces; endpoint-urile sync rulează în threadpool.
    - Erorile SQLAlchemy devin StorageError; datele corupte devin ParseError (citirea e abandonată).
    """

    def __init__(
        self,
        database_url: Optional[str] = None,
        *,
        echo: Optional[bool] = None,
        seed: Iterable[Tuple[str, date]] = DEFAULT_SEED,
        schema_version: int = SCHEMA_VERSION,
    ) -> None:
        self.database_url = (database_url or settings.DATABASE_URL).strip()
        self.schema_version = int(schema_version)
        self._seed = tuple((name, _check_date(d, "seed expiration_date")) for name, d in seed)
        self._engine = build_engine(self.database_url, echo=settings.DB_ECHO if echo is None else echo)
        self._factory = make_session_factory(self._engine)
        self._write_lock = threading.RLock()

    def __repr__(self) -> str:
        return f"<ProductStore url={self.database_url!r} schema_version={self.schema_version}>"

    # -------------------------- Internals --------------------------

    @contextmanager
    def _session(self, op: str) -> Generator[Session, None, None]:
        try:
            with session_scope(self._factory) as db:
                yield db
        except SQLAlchemyError as e:
            logger.exception("Storage failure during %s (%s)", op, self.database_url)
            raise StorageError(f"{op} failed: {e.__class__.__name__}: {e}") from e

    def _create_and_seed(self, db: Session, version: int) -> None:
        crud.create_table(db)
        ids = crud.insert_many(db, ((name, d.isoformat()) for name, d in self._seed))
        crud.set_schema_version(db, version)
        logger.info("Created table 'products' (schema v%s) with %d seed row(s): ids=%s", version, len(ids), ids)

    @staticmethod
    def _to_products(rows: Sequence[ProductRow]) -> List[ProductRead]:
        # rândurile stocate nu mai trec prin validatorii de input; doar data e parsată strict
        return [
            ProductRead.model_construct(
                id=row.id,
                name=row.name,
                expiration_date=parse_stored_date(row.expiration_date, row.id),
            )
            for row in rows
        ]

    # -------------------------- Schema lifecycle --------------------------

    def open(self) -> None:
        """
        Echivalentul "open helper": creează tabelul la prima folosire,
        rulează migrarea distructivă când versiunea stocată e mai veche.
        """
        try:
            ensure_parent_dir(self.database_url)
        except OSError as e:
            logger.exception("Cannot create directory for %s", self.database_url)
            raise StorageError(f"open failed: {e}") from e

        with self._write_lock:
            with self._session("open") as db:
                exists = crud.table_exists(db)
                stored = crud.get_schema_version(db)
                if exists and stored == 0:
                    # tabel creat fără versiune (ex. manual) → doar îl marcăm
                    logger.warning("Table 'products' has no schema version; stamping v%s", self.schema_version)
                    crud.set_schema_version(db, self.schema_version)
                    stored = self.schema_version

            if not exists:
                self.initialize()
            elif stored > self.schema_version:
                raise StorageError(
                    f"Database schema v{stored} is newer than supported v{self.schema_version}; downgrade unsupported"
                )
            elif stored < self.schema_version:
                self.migrate(stored, self.schema_version)
            else:
                logger.info("Product store ready (schema v%s, %s)", stored, self.database_url)

    def initialize(self) -> bool:
        """Idempotent: creează + populează tabelul doar dacă lipsește. True dacă l-a creat acum."""
        with self._write_lock, self._session("initialize") as db:
            if crud.table_exists(db):
                logger.debug("Table 'products' already present; nothing to initialize")
                return False
            self._create_and_seed(db, self.schema_version)
            return True

    def migrate(self, old_version: int, new_version: int) -> None:
        """
        Migrare DISTRUCTIVĂ: DROP TABLE + recreare + seed.
        Limitare cunoscută: datele existente se pierd.
        """
        logger.warning("Destructive migration v%s -> v%s: dropping table 'products'", old_version, new_version)
        with self._write_lock, self._session("migrate") as db:
            crud.drop_table(db)
            self._create_and_seed(db, new_version)

    def schema_version_stored(self) -> int:
        with self._session("schema_version") as db:
            return crud.get_schema_version(db)

    # -------------------------- Mutations --------------------------

    def add_product(self, name: str, expiration_date: date) -> int:
        """Adaugă un produs; întoarce id-ul atribuit."""
        if not isinstance(name, str) or not name.strip():
            raise InvalidArgument(f"name must be a non-empty string, got {name!r}")
        _check_date(expiration_date, "expiration_date")

        with self._write_lock, self._session("add_product") as db:
            new_id = crud.insert(db, name, expiration_date.isoformat())
        logger.info("Added product id=%s name=%r expirationDate=%s", new_id, name, expiration_date.isoformat())
        return new_id

    def delete_all_products(self) -> int:
        """Șterge toate produsele (ireversibil). Întoarce numărul de rânduri șterse."""
        with self._write_lock, self._session("delete_all_products") as db:
            deleted = crud.delete_all(db)
        logger.info("Deleted all products (%d row(s))", deleted)
        return deleted

    # -------------------------- Reads --------------------------

    def get_products_by_name(self, name: str) -> List[ProductRead]:
        if not isinstance(name, str):
            raise InvalidArgument(f"name must be a string, got {name!r}")
        with self._session("get_products_by_name") as db:
            return self._to_products(crud.list_by_name(db, name))

    def get_all_products(self) -> List[ProductRead]:
        with self._session("get_all_products") as db:
            return self._to_products(crud.list_all(db))

    def count_products(self) -> int:
        with self._session("count_products") as db:
            return crud.count(db)

    def dispose(self) -> None:
        self._engine.dispose()


__all__ = [
    "DEFAULT_SEED",
    "SCHEMA_VERSION",
    "ProductStore",
    "parse_stored_date",
]
