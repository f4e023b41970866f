"""Tests for the key-value persistence layer."""

import os
import sqlite3
import tempfile
from unittest.mock import patch

import pytest

from crowdfund_app.errors import PersistenceError
from crowdfund_app.persistence.store import (
    InMemoryStore,
    SQLiteStore,
    WriteKind,
    WriteOp,
    create_store,
)


class TestWriteOp:
    """Test WriteOp constructors."""

    def test_put_op(self):
        op = WriteOp.put("product", 1, {"id": 1})
        assert op.kind is WriteKind.PUT
        assert op.sub_id is None
        assert op.value == {"id": 1}

    def test_delete_prefix_op(self):
        op = WriteOp.delete_prefix("contribution", 3)
        assert op.kind is WriteKind.DELETE_PREFIX
        assert op.product_id == 3


class StoreContract:
    """Behaviour shared by every store backend."""

    def make_store(self):
        raise NotImplementedError

    def test_get_missing_returns_none(self):
        store = self.make_store()
        assert store.get("product", 1) is None

    def test_put_and_get(self):
        store = self.make_store()
        store.put("product", 1, {"id": 1, "name": "Lamp"})

        assert store.get("product", 1) == {"id": 1, "name": "Lamp"}

    def test_put_overwrites(self):
        store = self.make_store()
        store.put("product", 1, {"total_funded": 0})
        store.put("product", 1, {"total_funded": 50})

        assert store.get("product", 1) == {"total_funded": 50}

    def test_list_prefix_orders_by_sub_id(self):
        store = self.make_store()
        for sub_id in (10, 2, 0):
            store.put("contribution", 1, {"seq": sub_id}, sub_id=sub_id)

        assert [r["seq"] for r in store.list_prefix("contribution", 1)] == [0, 2, 10]

    def test_list_prefix_is_scoped(self):
        store = self.make_store()
        store.put("product", 1, {"id": 1})
        store.put("milestone", 1, {"m": 0}, sub_id=0)
        store.put("milestone", 2, {"m": 9}, sub_id=0)
        store.put("reward_tier", 1, {"t": 0}, sub_id=0)

        assert store.list_prefix("milestone", 1) == [{"m": 0}]
        assert store.list_prefix("milestone", 3) == []
        assert store.list_prefix("product", 1) == []

    def test_delete(self):
        store = self.make_store()
        store.put("milestone", 1, {"m": 0}, sub_id=0)
        store.delete("milestone", 1, sub_id=0)

        assert store.get("milestone", 1, 0) is None

    def test_apply_batch_with_delete_prefix(self):
        store = self.make_store()
        store.put("contribution", 1, {"a": 1}, sub_id=0)
        store.put("contribution", 1, {"a": 2}, sub_id=1)
        store.put("contribution", 2, {"a": 3}, sub_id=0)

        store.apply([
            WriteOp.put("product", 1, {"status": "failed"}),
            WriteOp.delete_prefix("contribution", 1),
        ])

        assert store.list_prefix("contribution", 1) == []
        assert store.list_prefix("contribution", 2) == [{"a": 3}]
        assert store.get("product", 1) == {"status": "failed"}

    def test_unserializable_batch_writes_nothing(self):
        store = self.make_store()

        with pytest.raises(PersistenceError):
            store.apply([
                WriteOp.put("product", 1, {"id": 1}),
                WriteOp.put("product", 2, {"bad": object()}),
            ])

        assert store.get("product", 1) is None

    def test_values_are_copies(self):
        store = self.make_store()
        value = {"items": [1]}
        store.put("product", 1, value)
        value["items"].append(2)

        assert store.get("product", 1) == {"items": [1]}

    def test_count_prefix(self):
        store = self.make_store()
        store.put("contribution", 1, {}, sub_id=0)
        store.put("contribution", 1, {}, sub_id=1)

        assert store.count_prefix("contribution", 1) == 2


class TestInMemoryStore(StoreContract):
    """Test InMemoryStore."""

    def make_store(self):
        return InMemoryStore()


class TestSQLiteStore(StoreContract):
    """Test SQLiteStore."""

    def setup_method(self):
        """Setup test database."""
        self.temp_dir = tempfile.mkdtemp()
        self.db_path = os.path.join(self.temp_dir, "test_store.db")

    def teardown_method(self):
        """Cleanup test database."""
        import shutil
        shutil.rmtree(self.temp_dir)

    def make_store(self):
        return SQLiteStore(self.db_path)

    def test_init_database(self):
        """Test database initialization creates the entities table."""
        store = self.make_store()

        with store._get_connection("test") as conn:
            cursor = conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
            tables = [row[0] for row in cursor.fetchall()]
            assert "entities" in tables

    def test_data_survives_reopen(self):
        """Test records persist across store instances."""
        self.make_store().put("product", 1, {"id": 1})

        assert self.make_store().get("product", 1) == {"id": 1}

    def test_get_stats(self):
        store = self.make_store()
        store.put("product", 1, {"id": 1})
        store.put("milestone", 1, {}, sub_id=0)
        store.put("milestone", 1, {}, sub_id=1)

        stats = store.get_stats()
        assert stats["total_records"] == 3
        assert stats["records_by_entity"] == {"product": 1, "milestone": 2}

    def test_sqlite_error_becomes_persistence_error(self):
        """Test driver errors are surfaced as PersistenceError."""
        store = self.make_store()

        with patch("crowdfund_app.persistence.store.sqlite3.connect",
                   side_effect=sqlite3.OperationalError("disk I/O error")):
            with pytest.raises(PersistenceError) as exc_info:
                store.get("product", 1)

        assert exc_info.value.operation == "get"
        assert exc_info.value.recoverable is False


class TestCreateStore:
    """Test store factory."""

    def test_memory(self):
        assert isinstance(create_store("memory"), InMemoryStore)

    def test_sqlite(self, tmp_path):
        assert isinstance(create_store("sqlite", str(tmp_path / "x.db")), SQLiteStore)

    def test_unknown(self):
        with pytest.raises(ValueError):
            create_store("redis")
