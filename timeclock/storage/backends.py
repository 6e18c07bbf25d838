"""Durable key-value backends for the credential store.

The mobile client persisted its token in ``localStorage`` on the web and in
``AsyncStorage`` on devices. Here the same contract is offered by three
interchangeable backends:

* ``MemoryStorage`` keeps values in a dict; nothing survives the process.
* ``JsonFileStorage`` keeps a single JSON object on disk, the closest match to
  ``localStorage``.
* ``SqlStorage`` keeps rows in a ``kv_store`` table through SQLAlchemy, which
  plays the part of the device database.

Every backend raises ``StorageError`` when the underlying medium fails so the
caller only has to handle one exception type.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, Protocol

from sqlalchemy import Column, Text, create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker

from ..core.config import AppSettings
from ..core.errors import StorageError

STORAGE_FILENAME = "storage.json"

Base = declarative_base()


class KeyValueStorage(Protocol):
    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str) -> None: ...

    async def remove(self, key: str) -> None: ...


class MemoryStorage:
    def __init__(self, initial: Dict[str, str] | None = None) -> None:
        self._values: Dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> str | None:
        return self._values.get(key)

    async def set(self, key: str, value: str) -> None:
        self._values[key] = value

    async def remove(self, key: str) -> None:
        self._values.pop(key, None)


class JsonFileStorage:
    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise StorageError(f"Could not read {self.path}") from exc
        if not isinstance(raw, dict):
            raise StorageError(f"{self.path} does not contain a JSON object")
        return {str(k): str(v) for k, v in raw.items() if v is not None}

    def _dump(self, payload: Dict[str, str]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
        except OSError as exc:
            raise StorageError(f"Could not write {self.path}") from exc

    async def get(self, key: str) -> str | None:
        return self._load().get(key)

    async def set(self, key: str, value: str) -> None:
        payload = self._load()
        payload[key] = value
        self._dump(payload)

    async def remove(self, key: str) -> None:
        payload = self._load()
        if key in payload:
            del payload[key]
            self._dump(payload)


class KeyValue(Base):
    __tablename__ = "kv_store"

    key = Column(Text, primary_key=True)
    value = Column(Text, nullable=False)


class SqlStorage:
    def __init__(self, url: str) -> None:
        # Same SQLite threading caveat as any SQLAlchemy engine shared across callers.
        connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
        try:
            self.engine = create_engine(url, connect_args=connect_args)
            Base.metadata.create_all(bind=self.engine)
        except SQLAlchemyError as exc:
            raise StorageError(f"Could not open storage database {url}") from exc
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    async def get(self, key: str) -> str | None:
        db = self.SessionLocal()
        try:
            row = db.get(KeyValue, key)
            return row.value if row is not None else None
        except SQLAlchemyError as exc:
            raise StorageError(f"Could not read {key!r}") from exc
        finally:
            db.close()

    async def set(self, key: str, value: str) -> None:
        db = self.SessionLocal()
        try:
            db.merge(KeyValue(key=key, value=value))
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            raise StorageError(f"Could not write {key!r}") from exc
        finally:
            db.close()

    async def remove(self, key: str) -> None:
        db = self.SessionLocal()
        try:
            row = db.get(KeyValue, key)
            if row is not None:
                db.delete(row)
                db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            raise StorageError(f"Could not remove {key!r}") from exc
        finally:
            db.close()


def build_storage(app_settings: AppSettings) -> KeyValueStorage:
    backend = app_settings.STORAGE_BACKEND
    if backend == "memory":
        return MemoryStorage()
    if backend == "sql":
        app_settings.DATA_DIR.mkdir(parents=True, exist_ok=True)
        return SqlStorage(app_settings.storage_db_url)
    return JsonFileStorage(app_settings.DATA_DIR / STORAGE_FILENAME)
