"""Key-value persistence layer for lifecycle entities."""

import json
import sqlite3
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Optional, Sequence

import structlog

from ..errors import PersistenceError

# (entity type, product id, sub id) - sub id is None for single records
StoreKey = tuple[str, int, Optional[int]]

NO_SUB_ID = -1


class WriteKind(Enum):
    """Kinds of write operation in a batch."""
    PUT = "put"
    DELETE = "delete"
    DELETE_PREFIX = "delete_prefix"


@dataclass(frozen=True)
class WriteOp:
    """A single write queued for an atomic batch."""
    kind: WriteKind
    entity: str
    product_id: int
    sub_id: Optional[int] = None
    value: Optional[dict[str, Any]] = None

    @classmethod
    def put(cls, entity: str, product_id: int, value: dict[str, Any],
            sub_id: Optional[int] = None) -> "WriteOp":
        return cls(WriteKind.PUT, entity, product_id, sub_id, value)

    @classmethod
    def delete(cls, entity: str, product_id: int, sub_id: Optional[int] = None) -> "WriteOp":
        return cls(WriteKind.DELETE, entity, product_id, sub_id)

    @classmethod
    def delete_prefix(cls, entity: str, product_id: int) -> "WriteOp":
        return cls(WriteKind.DELETE_PREFIX, entity, product_id)


def _encode(op: WriteOp) -> Optional[str]:
    if op.kind is not WriteKind.PUT:
        return None
    try:
        return json.dumps(op.value, sort_keys=True)
    except (TypeError, ValueError) as e:
        raise PersistenceError(
            f"Value is not serializable: {e}",
            operation="put",
            target=f"{op.entity}:{op.product_id}:{op.sub_id}"
        ) from e


class KeyValueStore(ABC):
    """Durable storage keyed by (entity, product id[, sub id])."""

    @abstractmethod
    def get(self, entity: str, product_id: int,
            sub_id: Optional[int] = None) -> Optional[dict[str, Any]]:
        """Get a single record, None if absent."""
        pass

    @abstractmethod
    def list_prefix(self, entity: str, product_id: int) -> list[dict[str, Any]]:
        """List every sub-keyed record under (entity, product id), ordered by sub id."""
        pass

    @abstractmethod
    def apply(self, ops: Sequence[WriteOp]) -> None:
        """Apply a batch of writes atomically: all of them or none."""
        pass

    def put(self, entity: str, product_id: int, value: dict[str, Any],
            sub_id: Optional[int] = None) -> None:
        self.apply([WriteOp.put(entity, product_id, value, sub_id)])

    def delete(self, entity: str, product_id: int, sub_id: Optional[int] = None) -> None:
        self.apply([WriteOp.delete(entity, product_id, sub_id)])

    def count_prefix(self, entity: str, product_id: int) -> int:
        return len(self.list_prefix(entity, product_id))


class InMemoryStore(KeyValueStore):
    """Process-local store; values are kept as JSON to match durable backends."""

    def __init__(self):
        self._data: dict[StoreKey, str] = {}
        self.logger = structlog.get_logger("store.memory")

    def get(self, entity: str, product_id: int,
            sub_id: Optional[int] = None) -> Optional[dict[str, Any]]:
        raw = self._data.get((entity, product_id, sub_id))
        return json.loads(raw) if raw is not None else None

    def list_prefix(self, entity: str, product_id: int) -> list[dict[str, Any]]:
        keys = sorted(
            key for key in self._data
            if key[0] == entity and key[1] == product_id and key[2] is not None
        )
        return [json.loads(self._data[key]) for key in keys]

    def apply(self, ops: Sequence[WriteOp]) -> None:
        # Encode everything up front so a bad value aborts before any mutation
        encoded = [(op, _encode(op)) for op in ops]

        for op, raw in encoded:
            key = (op.entity, op.product_id, op.sub_id)
            if op.kind is WriteKind.PUT:
                self._data[key] = raw
            elif op.kind is WriteKind.DELETE:
                self._data.pop(key, None)
            else:
                for existing in [k for k in self._data
                                 if k[0] == op.entity and k[1] == op.product_id
                                 and k[2] is not None]:
                    del self._data[existing]

        self.logger.debug("Batch applied", op_count=len(ops))


class SQLiteStore(KeyValueStore):
    """SQLite-based key-value store."""

    def __init__(self, db_path: str = "crowdfund.db"):
        self.db_path = Path(db_path)
        self.logger = structlog.get_logger("store.sqlite")
        self._lock = threading.Lock()

        self._init_database()

    def _init_database(self) -> None:
        """Initialize database schema."""
        with self._get_connection("init") as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS entities (
                    entity TEXT NOT NULL,
                    product_id INTEGER NOT NULL,
                    sub_id INTEGER NOT NULL,
                    data TEXT NOT NULL,
                    PRIMARY KEY (entity, product_id, sub_id)
                )
            """)

            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_entities_product ON entities(product_id)
            """)

            conn.commit()

    @contextmanager
    def _get_connection(self, operation: str):
        """Get database connection, translating sqlite failures."""
        conn = None
        try:
            conn = sqlite3.connect(self.db_path, timeout=30.0)
            conn.row_factory = sqlite3.Row
            yield conn
        except sqlite3.Error as e:
            if conn:
                conn.rollback()
            self.logger.error("Database error", operation=operation, error=str(e))
            raise PersistenceError(
                f"Database error during {operation}: {e}",
                operation=operation,
                target=str(self.db_path)
            ) from e
        finally:
            if conn:
                conn.close()

    def get(self, entity: str, product_id: int,
            sub_id: Optional[int] = None) -> Optional[dict[str, Any]]:
        with self._get_connection("get") as conn:
            row = conn.execute("""
                SELECT data FROM entities
                WHERE entity = ? AND product_id = ? AND sub_id = ?
            """, (entity, product_id, NO_SUB_ID if sub_id is None else sub_id)).fetchone()

            return json.loads(row["data"]) if row else None

    def list_prefix(self, entity: str, product_id: int) -> list[dict[str, Any]]:
        with self._get_connection("list_prefix") as conn:
            rows = conn.execute("""
                SELECT data FROM entities
                WHERE entity = ? AND product_id = ? AND sub_id != ?
                ORDER BY sub_id
            """, (entity, product_id, NO_SUB_ID)).fetchall()

            return [json.loads(row["data"]) for row in rows]

    def apply(self, ops: Sequence[WriteOp]) -> None:
        encoded = [(op, _encode(op)) for op in ops]

        with self._lock:
            with self._get_connection("apply") as conn:
                for op, raw in encoded:
                    sub_id = NO_SUB_ID if op.sub_id is None else op.sub_id
                    if op.kind is WriteKind.PUT:
                        conn.execute("""
                            INSERT OR REPLACE INTO entities (entity, product_id, sub_id, data)
                            VALUES (?, ?, ?, ?)
                        """, (op.entity, op.product_id, sub_id, raw))
                    elif op.kind is WriteKind.DELETE:
                        conn.execute("""
                            DELETE FROM entities
                            WHERE entity = ? AND product_id = ? AND sub_id = ?
                        """, (op.entity, op.product_id, sub_id))
                    else:
                        conn.execute("""
                            DELETE FROM entities
                            WHERE entity = ? AND product_id = ? AND sub_id != ?
                        """, (op.entity, op.product_id, NO_SUB_ID))

                conn.commit()

        self.logger.debug("Batch applied", op_count=len(ops))

    def get_stats(self) -> dict[str, Any]:
        """Get database statistics."""
        with self._get_connection("stats") as conn:
            total_count = conn.execute("SELECT COUNT(*) FROM entities").fetchone()[0]

            entity_counts = {}
            for row in conn.execute("""
                SELECT entity, COUNT(*) as count FROM entities GROUP BY entity
            """):
                entity_counts[row[0]] = row[1]

            return {
                "total_records": total_count,
                "records_by_entity": entity_counts,
            }


def create_store(backend: str = "memory", db_path: str = "crowdfund.db") -> KeyValueStore:
    """Build the store backend named in configuration."""
    if backend == "memory":
        return InMemoryStore()
    if backend == "sqlite":
        return SQLiteStore(db_path)
    raise ValueError(f"Unknown storage backend: {backend}")
