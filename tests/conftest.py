"""
ChainIngest - Pytest Configuration
====================================
Fixtures e configurazione per testing.

Last Updated: 2026-10-19
Version: 1.0.0
"""

import pytest
from pathlib import Path
import tempfile
import shutil

# Internal imports
from chain_ingest.config import IngestSettings
from chain_ingest.domain.models import (
    Block,
    BlockHeader,
    EvaluatedScript,
    EvaluatedTx,
    EvaluatedTxOut,
    OutPoint,
    TxInput,
    TxOutput,
)
from chain_ingest.storage.db import SQLiteTransactionStore
from chain_ingest.storage.memory import MemoryTransactionStore


def raw_hash(n) -> bytes:
    """
    Hash di test in ordine interno.

    Un int diventa il byte `n` ripetuto (0 = sentinel coinbase);
    bytes di 32 byte sono restituiti invariati (hash non simmetrici).
    """
    if isinstance(n, bytes):
        return n
    return bytes([n]) * 32


def display_hash(n) -> str:
    """Hex di visualizzazione (byte invertiti) di raw_hash(n)"""
    return raw_hash(n)[::-1].hex()


# ============================================================================
# CONFIGURATION FIXTURES
# ============================================================================

@pytest.fixture
def temp_data_dir():
    """Temporary data directory"""
    temp_dir = Path(tempfile.mkdtemp())
    yield temp_dir
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def test_config(temp_data_dir):
    """Test configuration"""
    return IngestSettings(
        data_dir=temp_data_dir,
        log_to_file=False,
        show_progress=False,
    )


# ============================================================================
# STORAGE FIXTURES
# ============================================================================

@pytest.fixture
def sqlite_store(test_config):
    """SQLite store su file temporaneo"""
    store = SQLiteTransactionStore(test_config.get_db_path())
    yield store
    store.close()


@pytest.fixture
def memory_store():
    """In-memory store con contatori di chiamata"""
    return MemoryTransactionStore()


# ============================================================================
# BUILDER FIXTURES
# ============================================================================

@pytest.fixture
def h():
    """raw_hash come fixture"""
    return raw_hash


@pytest.fixture
def hx():
    """display_hash come fixture"""
    return display_hash


@pytest.fixture
def make_tx():
    """
    Builder di EvaluatedTx.

    inputs: [(prev_tx_id, prev_index)], prev_tx_id 0 = coinbase
    outputs: [(value, address)], address None = script non riconosciuto
    """
    def _make(tx_id, inputs=(), outputs=(), version=1, locktime=0):
        return EvaluatedTx(
            hash=raw_hash(tx_id),
            version=version,
            locktime=locktime,
            inputs=tuple(
                TxInput(OutPoint(raw_hash(prev), index), script_sig=b"\x51", seq_no=0xFFFFFFFF)
                for prev, index in inputs
            ),
            outputs=tuple(
                EvaluatedTxOut(
                    TxOutput(value, b"\x76\xa9\x14"),
                    EvaluatedScript(
                        address,
                        "Pay2PublicKeyHash" if address else "NotRecognised"
                    ),
                )
                for value, address in outputs
            ),
        )
    return _make


@pytest.fixture
def make_block():
    """Builder di Block: make_block(block_id, txs, prev_id=0)"""
    def _make(block_id, txs=(), prev_id=0):
        header = BlockHeader(
            hash=raw_hash(block_id),
            version=1,
            prev_hash=raw_hash(prev_id),
            merkle_root=raw_hash(0xEE),
            timestamp=1231006505,
            bits=0x1D00FFFF,
            nonce=2083236893,
        )
        return Block(header=header, size=285, txs=tuple(txs))
    return _make


@pytest.fixture
def sample_fixture_data(hx):
    """Fixture JSON: due blocchi, spesa cross-block"""
    return {
        "coin": "bitcoin",
        "start_height": 0,
        "blocks": [
            {
                "hash": hx(0xB0),
                "prev_hash": hx(0),
                "merkle_root": hx(0xEE),
                "version": 1,
                "timestamp": 1231006505,
                "bits": 486604799,
                "nonce": 2083236893,
                "size": 285,
                "txs": [
                    {
                        "hash": hx(0x01),
                        "inputs": [{"prev_hash": hx(0), "prev_index": 4294967295}],
                        "outputs": [
                            {"value": 5000000000, "script_pubkey": "76a914", "address": "addrMiner",
                             "pattern": "Pay2PublicKeyHash"}
                        ],
                    }
                ],
            },
            {
                "hash": hx(0xB1),
                "prev_hash": hx(0xB0),
                "txs": [
                    {
                        "hash": hx(0x02),
                        "inputs": [{"prev_hash": hx(0x01), "prev_index": 0, "script_sig": "51"}],
                        "outputs": [
                            {"value": 4000000000, "address": "addrB"},
                            {"value": 999990000, "script_pubkey": "6a"},
                        ],
                    }
                ],
            },
        ],
    }
