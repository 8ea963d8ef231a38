"""
ChainIngest - Storage Tests
=============================
Unit tests for SQLite and in-memory stores.
"""

import pytest

from chain_ingest.domain.models import (
    BlockRecord,
    OutputRecord,
    ResolvedInput,
    TransactionRecord,
    TxOutputRecord,
)
from chain_ingest.errors import DatabaseConnectionError, DatabaseWriteError
from chain_ingest.storage.db import SQLiteTransactionStore
from chain_ingest.storage.memory import MemoryTransactionStore
from chain_ingest.version import __version__


def _tx_record(hx, tx_id, block_id, outputs):
    return TransactionRecord(
        tx_hash=hx(tx_id),
        block_hash=hx(block_id),
        version=1,
        lock_time=0,
        inputs=(ResolvedInput(hx(tx_id), 0, "0" * 64, 4294967295, "", 0xFFFFFFFF, 0, "0" * 64),),
        outputs=tuple(
            TxOutputRecord(hx(tx_id), index, value, "76a914", address)
            for index, (value, address) in enumerate(outputs)
        ),
    )


class TestSQLiteTransactionStore:
    """Test SQLiteTransactionStore class"""

    def test_database_initialization(self, sqlite_store):
        """Test database initializes empty"""
        sqlite_store.probe()

        assert sqlite_store.get_block_count() == 0
        assert sqlite_store.get_transaction_count() == 0
        assert sqlite_store.get_latest_block_height() is None

    def test_metadata_written(self, sqlite_store):
        sqlite_store.probe()

        assert sqlite_store.get_metadata("schema_version") == "1"
        assert sqlite_store.get_metadata("writer_version") == __version__
        assert sqlite_store.get_metadata("missing") is None

    def test_save_and_load_block(self, sqlite_store, make_block):
        record = BlockRecord.from_block(make_block(0xB0), 0)

        sqlite_store.insert_block(record)

        assert sqlite_store.load_block(0) == record
        assert sqlite_store.get_latest_block_height() == 0

    def test_bulk_insert_and_find(self, sqlite_store, hx):
        """Test inserted transactions are found by hash"""
        sqlite_store.insert_transactions([
            _tx_record(hx, 1, 0xB0, [(500, "addrA"), (10, "addrC")]),
            _tx_record(hx, 2, 0xB0, [(7, "")]),
        ])

        stored = sqlite_store.find_transaction_by_hash(hx(1))

        assert sqlite_store.get_transaction_count() == 2
        assert stored.block_hash == hx(0xB0)
        assert stored.output(1) == OutputRecord(10, "addrC")

    def test_find_missing(self, sqlite_store, hx):
        assert sqlite_store.find_transaction_by_hash(hx(9)) is None
        assert sqlite_store.load_transaction_document(hx(9)) is None

    def test_duplicate_hash_latest_wins(self, sqlite_store, hx):
        """Test no dedup: lookup returns the most recent row"""
        sqlite_store.insert_transactions([_tx_record(hx, 1, 0xB0, [(500, "old")])])
        sqlite_store.insert_transactions([_tx_record(hx, 1, 0xB1, [(600, "new")])])

        stored = sqlite_store.find_transaction_by_hash(hx(1))

        assert sqlite_store.get_transaction_count() == 2
        assert stored.block_hash == hx(0xB1)
        assert stored.output(0) == OutputRecord(600, "new")

    def test_full_document_roundtrip(self, sqlite_store, hx):
        record = _tx_record(hx, 1, 0xB0, [(500, "addrA")])
        sqlite_store.insert_transactions([record])

        doc = sqlite_store.load_transaction_document(hx(1))

        assert TransactionRecord.from_document(doc) == record
        assert doc["txInputs"][0]["address"] == "0" * 64

    def test_empty_bulk_insert_noop(self, sqlite_store):
        sqlite_store.insert_transactions([])

        assert sqlite_store.get_transaction_count() == 0

    def test_write_failure(self, sqlite_store, hx):
        """Test failed bulk insert raises DatabaseWriteError"""
        sqlite_store._get_connection().execute("DROP TABLE transactions")

        with pytest.raises(DatabaseWriteError) as exc_info:
            sqlite_store.insert_transactions([_tx_record(hx, 1, 0xB0, [(1, "a")])])

        assert exc_info.value.code == "TX_BULK_INSERT_FAILED"

    def test_unreachable_database(self, temp_data_dir):
        """Test directory as database path fails on probe"""
        store = SQLiteTransactionStore(temp_data_dir)

        with pytest.raises(DatabaseConnectionError):
            store.probe()

    def test_persistence_across_instances(self, temp_data_dir, hx):
        db_path = temp_data_dir / "persist.db"

        first = SQLiteTransactionStore(db_path)
        first.insert_transactions([_tx_record(hx, 1, 0xB0, [(500, "addrA")])])
        first.close()

        second = SQLiteTransactionStore(db_path)
        try:
            assert second.find_transaction_by_hash(hx(1)).output(0).address == "addrA"
        finally:
            second.close()


class TestMemoryTransactionStore:
    """Test MemoryTransactionStore class"""

    def test_unavailable_probe(self):
        with pytest.raises(DatabaseConnectionError):
            MemoryTransactionStore(available=False).probe()

    def test_counters(self, memory_store, hx):
        memory_store.insert_transactions([_tx_record(hx, 1, 0xB0, [(500, "addrA")])])
        memory_store.find_transaction_by_hash(hx(1))
        memory_store.find_transaction_by_hash(hx(2))

        assert memory_store.bulk_writes == 1
        assert memory_store.find_calls == 2

    def test_latest_wins(self, memory_store, hx):
        memory_store.insert_transactions([_tx_record(hx, 1, 0xB0, [(500, "old")])])
        memory_store.insert_transactions([_tx_record(hx, 1, 0xB1, [(600, "new")])])

        assert memory_store.find_transaction_by_hash(hx(1)).output(0).address == "new"
        assert memory_store.get_transaction_count() == 2
