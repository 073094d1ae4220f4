# shelflife/database.py
from __future__ import annotations

import os
from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy import MetaData, create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import NullPool, StaticPool

# -----------------------------
# Naming convention (constrângeri cu nume stabile)
# -----------------------------
NAMING_CONVENTION = {
    "ix": "ix_%(table_name)s_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

# SQLite nu are scheme; metadata fără schema implicită
metadata = MetaData(naming_convention=NAMING_CONVENTION)
Base = declarative_base(metadata=metadata)

_MEMORY_URLS = {"sqlite://", "sqlite:///:memory:", "sqlite+pysqlite:///:memory:"}

# -----------------------------
# Helpers
# -----------------------------
def sqlite_file_path(url: str) -> Optional[str]:
    """Calea fișierului SQLite din URL sau None pentru baze in-memory."""
    if url in _MEMORY_URLS:
        return None
    database = make_url(url).database
    if not database or database == ":memory:":
        return None
    return database

def ensure_parent_dir(url: str) -> None:
    """Creează directorul părinte al fișierului SQLite (ex. ./var) dacă lipsește."""
    path = sqlite_file_path(url)
    if not path:
        return
    parent = os.path.dirname(os.path.abspath(path))
    os.makedirs(parent, exist_ok=True)

# -----------------------------
# Engine factory
# -----------------------------
def _build_engine_kwargs(url: str, echo: bool) -> dict:
    # SQLite: driverul e single-thread → dezactivează check_same_thread
    kwargs: dict = {"echo": echo, "connect_args": {"check_same_thread": False}}
    if url in _MEMORY_URLS:
        # In-memory → StaticPool (altfel fiecare conexiune are DB separat)
        kwargs["poolclass"] = StaticPool
    else:
        # Fișier → NullPool: conexiunea se închide la finalul fiecărei sesiuni
        kwargs["poolclass"] = NullPool
    return kwargs

def _enable_transactional_ddl(engine: Engine) -> None:
    """
    Rețeta pysqlite din documentația SQLAlchemy: driverul nu mai pornește singur tranzacții,
    BEGIN-ul îl emitem noi → DROP/CREATE/INSERT/PRAGMA user_version fac commit sau rollback împreună.
    """
    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")

def build_engine(url: str, *, echo: bool = False) -> Engine:
    engine = create_engine(url, **_build_engine_kwargs(url, echo))
    _enable_transactional_ddl(engine)
    return engine

# -----------------------------
# Session factory
# -----------------------------
def make_session_factory(engine: Engine) -> sessionmaker:
    # expire_on_commit=False → obiectele rămân utilizabile după commit
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)

@contextmanager
def session_scope(factory: sessionmaker) -> Generator[Session, None, None]:
    """
    Sesiune cu commit la final, rollback la excepție și close garantat.
    Exemplu:
        with session_scope(factory) as db:
            db.add(obj)
    """
    db: Session = factory()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()

__all__ = [
    "Base",
    "metadata",
    "build_engine",
    "ensure_parent_dir",
    "make_session_factory",
    "session_scope",
    "sqlite_file_path",
]
