"""
ChainIngest - Pipeline Tests
==============================
Unit tests for BlockIngestionPipeline lifecycle and batching.
"""

import pytest

from chain_ingest.constants import CoinType, CoinbaseAddressPolicy
from chain_ingest.errors import DatabaseConnectionError, DatabaseWriteError, PipelineStateError
from chain_ingest.services.ingest_service import BlockIngestionPipeline, PipelineState
from chain_ingest.storage.memory import MemoryTransactionStore


class BrokenWriteStore(MemoryTransactionStore):
    """Store che fallisce il bulk insert"""

    def insert_transactions(self, records):
        raise DatabaseWriteError("disk full", code="TX_BULK_INSERT_FAILED")


@pytest.fixture
def pipeline(memory_store, test_config):
    """Pipeline su store in memoria"""
    return BlockIngestionPipeline(memory_store, test_config)


class TestPipelineLifecycle:
    """Test state transitions"""

    def test_start_probes_store(self, pipeline):
        pipeline.on_start(CoinType.BITCOIN, 100)

        assert pipeline.state is PipelineState.CONNECTED
        assert pipeline.coin is CoinType.BITCOIN
        assert pipeline.stats.start_height == 100

    def test_unreachable_store_is_fatal(self, test_config):
        """Test probe failure aborts on_start"""
        pipeline = BlockIngestionPipeline(MemoryTransactionStore(available=False), test_config)

        with pytest.raises(DatabaseConnectionError):
            pipeline.on_start(CoinType.BITCOIN, 0)

        assert pipeline.state is PipelineState.IDLE

    def test_block_before_start_rejected(self, pipeline, make_block):
        with pytest.raises(PipelineStateError):
            pipeline.on_block(make_block(0xB0), 0)

    def test_double_start_rejected(self, pipeline):
        pipeline.on_start(CoinType.BITCOIN, 0)

        with pytest.raises(PipelineStateError):
            pipeline.on_start(CoinType.BITCOIN, 0)

    def test_block_after_complete_rejected(self, pipeline, make_block):
        pipeline.on_start(CoinType.BITCOIN, 0)
        pipeline.on_complete(0)

        assert pipeline.state is PipelineState.FINISHED

        with pytest.raises(PipelineStateError):
            pipeline.on_block(make_block(0xB0), 0)

    def test_complete_without_blocks(self, pipeline):
        pipeline.on_start(CoinType.LITECOIN, 5)

        stats = pipeline.on_complete(5)

        assert stats.blocks == 0
        assert stats.finished_at is not None


class TestBlockIngestion:
    """Test per-block processing"""

    def test_single_bulk_write_per_block(self, pipeline, memory_store, make_block, make_tx):
        """Test block document plus one bulk insert for all transactions"""
        block = make_block(0xB0, [
            make_tx(1, inputs=[(0, 0xFFFFFFFF)], outputs=[(50, "addrMiner")]),
            make_tx(2, inputs=[(1, 0)], outputs=[(30, "addrB"), (20, "addrC")]),
            make_tx(3, inputs=[(2, 1)], outputs=[(20, "addrD")]),
        ])

        pipeline.on_start(CoinType.BITCOIN, 0)
        pipeline.on_block(block, 0)

        assert memory_store.get_block_count() == 1
        assert memory_store.bulk_writes == 1
        assert memory_store.get_transaction_count() == 3

    def test_transactions_keep_native_order(self, pipeline, memory_store, make_block, make_tx, hx):
        block = make_block(0xB0, [make_tx(3), make_tx(1), make_tx(2)])

        pipeline.on_start(CoinType.BITCOIN, 0)
        pipeline.on_block(block, 0)

        assert [t.tx_hash for t in memory_store.transactions] == [hx(3), hx(1), hx(2)]

    def test_block_record_height(self, pipeline, memory_store, make_block, hx):
        pipeline.on_start(CoinType.BITCOIN, 41)
        pipeline.on_block(make_block(0xB0), 42)

        assert memory_store.blocks[0].height == 42
        assert memory_store.blocks[0].hash == hx(0xB0)
        assert memory_store.bulk_writes == 0

    def test_hashes_stored_byte_reversed(self, pipeline, memory_store, make_block, make_tx, hx):
        """Test document hashes are the byte-reversed hex of the internal hashes"""
        tx_raw = bytes(range(1, 33))
        spend_raw = bytes(range(33, 65))
        block_raw = bytes(range(100, 132))
        prev_raw = bytes(range(140, 172))
        block = make_block(block_raw, [
            make_tx(tx_raw, inputs=[(0, 0xFFFFFFFF)], outputs=[(50, "addrA")]),
            make_tx(spend_raw, inputs=[(tx_raw, 0)], outputs=[(40, "addrB")]),
        ], prev_id=prev_raw)

        pipeline.on_start(CoinType.BITCOIN, 0)
        pipeline.on_block(block, 0)

        stored_block = memory_store.blocks[0]
        assert stored_block.hash == block_raw[::-1].hex()
        assert stored_block.hash != block_raw.hex()
        assert stored_block.previous_hash == prev_raw[::-1].hex()

        first, spend = memory_store.transactions
        assert first.tx_hash == tx_raw[::-1].hex()
        assert first.tx_hash != tx_raw.hex()
        assert first.block_hash == hx(block_raw)
        assert first.outputs[0].tx_hash == hx(tx_raw)

        spent = spend.inputs[0]
        assert spent.tx_hash == hx(spend_raw)
        assert spent.hash_prev_out == hx(tx_raw)
        assert spent.value == 50
        assert spent.address == "addrA"
        assert pipeline.stats.cache_hits == 1

    def test_cache_not_shared_across_blocks(self, pipeline, memory_store, make_block, make_tx):
        """Test cross-block reference goes through the store"""
        pipeline.on_start(CoinType.BITCOIN, 0)
        pipeline.on_block(make_block(0xB0, [make_tx(1, outputs=[(10, "addrC")])]), 0)
        pipeline.on_block(make_block(0xB1, [make_tx(2, inputs=[(1, 0)])], prev_id=0xB0), 1)

        assert memory_store.find_calls == 1
        assert pipeline.stats.store_hits == 1
        assert pipeline.stats.cache_hits == 0

    def test_coinbase_policy_override(self, memory_store, test_config, make_block, make_tx):
        pipeline = BlockIngestionPipeline(
            memory_store,
            test_config,
            coinbase_policy=CoinbaseAddressPolicy.EMPTY
        )

        pipeline.on_start(CoinType.BITCOIN, 0)
        pipeline.on_block(make_block(0xB0, [make_tx(1, inputs=[(0, 0xFFFFFFFF)])]), 0)

        assert memory_store.transactions[0].inputs[0].address == ""

    def test_write_failure_propagates(self, test_config, make_block, make_tx):
        """Test storage failure aborts the run after the block document"""
        store = BrokenWriteStore()
        pipeline = BlockIngestionPipeline(store, test_config)
        pipeline.on_start(CoinType.BITCOIN, 0)

        with pytest.raises(DatabaseWriteError):
            pipeline.on_block(make_block(0xB0, [make_tx(1, outputs=[(1, "a")])]), 0)

        assert store.get_block_count() == 1
        assert pipeline.stats.blocks == 0

    def test_failed_block_not_counted(self, test_config, make_block, make_tx):
        """Test counters exclude a block whose bulk insert failed"""
        store = BrokenWriteStore()
        pipeline = BlockIngestionPipeline(store, test_config)
        pipeline.on_start(CoinType.BITCOIN, 0)
        block = make_block(0xB0, [
            make_tx(1, inputs=[(0, 0xFFFFFFFF)], outputs=[(50, "addrMiner"), (1, None)]),
            make_tx(2, inputs=[(1, 0), (9, 0)], outputs=[(50, "addrB")]),
        ])

        with pytest.raises(DatabaseWriteError):
            pipeline.on_block(block, 0)

        stats = pipeline.stats
        assert stats.transactions == 0
        assert stats.inputs == 0
        assert stats.outputs == 0
        assert stats.unrecognized_outputs == 0
        assert stats.coinbase_inputs == 0
        assert stats.cache_hits == 0
        assert stats.unresolved_inputs == 0
        assert stats.resolution.store_queries == 0

    def test_stats_counters(self, pipeline, make_block, make_tx):
        pipeline.on_start(CoinType.BITCOIN, 0)
        pipeline.on_block(make_block(0xB0, [
            make_tx(1, inputs=[(0, 0xFFFFFFFF)], outputs=[(50, "addrMiner"), (0, None)]),
            make_tx(2, inputs=[(1, 0), (9, 0)], outputs=[(50, "addrB")]),
        ]), 0)
        stats = pipeline.on_complete(0)

        assert stats.blocks == 1
        assert stats.transactions == 2
        assert stats.inputs == 3
        assert stats.outputs == 3
        assert stats.unrecognized_outputs == 1
        assert stats.coinbase_inputs == 1
        assert stats.cache_hits == 1
        assert stats.unresolved_inputs == 1

    def test_summary_text(self, pipeline, make_block):
        pipeline.on_start(CoinType.BITCOIN, 0)
        pipeline.on_block(make_block(0xB0), 0)
        pipeline.on_block(make_block(0xB1, prev_id=0xB0), 1)

        summary = pipeline.on_complete(1).summary()

        assert summary.startswith("Done.\nDumped all 2 blocks (0 - 1):")
