"""Key-value storage collaborators.

The engine needs exactly one capability from storage: ``await store.get(key)``
returning the serialized collection or ``None`` when the key is absent. How
values get written is the host application's business; the adapters below only
expose ``set`` so tests, seeding scripts, and the CLI have a way in.

Adapters
--------
- :class:`InMemoryStore`: dict-backed.
- :class:`JsonFileStore`: one JSON object file mapping keys to serialized
  strings (the shape of a device key-value dump). Re-read on every ``get``.
- :class:`SqlKeyValueStore`: a ``kv_entries`` table via SQLAlchemy. Blocking
  database calls run in a worker thread so ``get`` stays awaitable.
"""

from __future__ import annotations

import asyncio
import json
import os
import tempfile
import threading
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from pathlib import Path
from typing import Protocol, runtime_checkable

from sqlalchemy import String, Text, create_engine, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column, sessionmaker

from .logging_setup import get_logger

_logger = get_logger(__name__)


@runtime_checkable
class KeyValueStore(Protocol):
    async def get(self, key: str) -> str | None: ...


# ---------------------------------------------------------------------------
# In-memory
# ---------------------------------------------------------------------------


class InMemoryStore:
    def __init__(self, items: Mapping[str, str] | None = None) -> None:
        self._items: dict[str, str] = dict(items or {})

    async def get(self, key: str) -> str | None:
        return self._items.get(key)

    async def set(self, key: str, value: str) -> None:
        self._items[key] = value


# ---------------------------------------------------------------------------
# JSON file
# ---------------------------------------------------------------------------


class JsonFileStore:
    """Keys and serialized values kept in a single JSON object file.

    A missing file behaves as an empty store. A file whose top level is not an
    object, or whose values are not strings, raises ``ValueError`` on read.
    Writes through one instance are serialized and replace the file atomically.
    """

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self.path = Path(path)
        self._write_lock = threading.Lock()

    def _read_all(self) -> dict[str, str]:
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        data = json.loads(text) if text.strip() else {}
        if not isinstance(data, dict):
            raise ValueError(f"{self.path}: expected a JSON object at top level")
        bad = sorted(k for k, v in data.items() if not isinstance(v, str))
        if bad:
            raise ValueError(f"{self.path}: values must be strings (keys: {', '.join(bad)})")
        return data

    def _write_item(self, key: str, value: str) -> None:
        with self._write_lock:
            data = self._read_all()
            data[key] = value
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self.path.parent,
                prefix=f".{self.path.name}.",
                suffix=".tmp",
                delete=False,
            ) as fh:
                json.dump(data, fh, ensure_ascii=False, indent=2)
                fh.write("\n")
            try:
                os.replace(fh.name, self.path)
            except OSError:
                Path(fh.name).unlink(missing_ok=True)
                raise

    async def get(self, key: str) -> str | None:
        data = await asyncio.to_thread(self._read_all)
        return data.get(key)

    async def set(self, key: str, value: str) -> None:
        await asyncio.to_thread(self._write_item, key, value)


# ---------------------------------------------------------------------------
# SQL (SQLAlchemy)
# ---------------------------------------------------------------------------


class Base(DeclarativeBase):
    pass


class KvEntry(Base):
    __tablename__ = "kv_entries"

    key: Mapped[str] = mapped_column(String, primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)


def _database_url(override: str | None = None) -> str:
    url = override or os.getenv("DATABASE_URL")
    if not url:
        raise RuntimeError("DATABASE_URL is not set; cannot initialize the SQL store")
    return url


class SqlKeyValueStore:
    """Key-value reads against the ``kv_entries`` table.

    Pass an existing ``engine`` or a ``database_url``; with neither, the
    ``DATABASE_URL`` environment variable is used.
    """

    def __init__(self, engine: Engine | None = None, *, database_url: str | None = None) -> None:
        if engine is None:
            engine = create_engine(_database_url(database_url), pool_pre_ping=True)
        self.engine = engine
        self._session_maker = sessionmaker(bind=engine, expire_on_commit=False, class_=Session)

    def create_schema(self) -> None:
        Base.metadata.create_all(bind=self.engine, tables=[KvEntry.__table__])

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Provide a transactional scope around a series of operations."""

        session = self._session_maker()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def _get_sync(self, key: str) -> str | None:
        with self.session_scope() as session:
            stmt = select(KvEntry.value).where(KvEntry.key == key)
            return session.execute(stmt).scalar_one_or_none()

    def _set_sync(self, key: str, value: str) -> None:
        with self.session_scope() as session:
            session.merge(KvEntry(key=key, value=value))

    async def get(self, key: str) -> str | None:
        _logger.debug("sql get key=%s", key)
        return await asyncio.to_thread(self._get_sync, key)

    async def set(self, key: str, value: str) -> None:
        await asyncio.to_thread(self._set_sync, key, value)


__all__ = [
    "Base",
    "InMemoryStore",
    "JsonFileStore",
    "KeyValueStore",
    "KvEntry",
    "SqlKeyValueStore",
]
