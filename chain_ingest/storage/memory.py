"""
ChainIngest - In-Memory Store
===============================
Store volatile con lo stesso contratto di SQLiteTransactionStore.

Usato da `chainingest replay --in-memory` (dry run) e dai test, dove i
contatori di chiamata permettono di verificare quante query ha fatto la
risoluzione.
"""

from typing import Dict, List, Optional, Sequence

from chain_ingest.domain.models import (
    BlockRecord,
    StoredTransaction,
    TransactionRecord,
)
from chain_ingest.errors import DatabaseConnectionError
from chain_ingest.storage.base import TransactionStore


class MemoryTransactionStore(TransactionStore):
    """
    Store in memoria.

    Attributes:
        blocks: Documenti blocco in ordine di scrittura
        transactions: Documenti tx in ordine di scrittura
        find_calls: Numero di chiamate a find_transaction_by_hash
        bulk_writes: Numero di chiamate a insert_transactions
        available: Se False, probe() fallisce
    """

    def __init__(self, available: bool = True):
        self.blocks: List[BlockRecord] = []
        self.transactions: List[TransactionRecord] = []
        self._by_hash: Dict[str, TransactionRecord] = {}
        self.find_calls = 0
        self.bulk_writes = 0
        self.available = available

    def probe(self) -> None:
        if not self.available:
            raise DatabaseConnectionError(
                "In-memory store marked unavailable",
                code="DB_PING_FAILED"
            )

    def insert_block(self, record: BlockRecord) -> None:
        self.blocks.append(record)

    def insert_transactions(self, records: Sequence[TransactionRecord]) -> None:
        self.bulk_writes += 1
        for record in records:
            self.transactions.append(record)
            # Ultimo scritto vince, come nello store SQLite
            self._by_hash[record.tx_hash] = record

    def find_transaction_by_hash(self, tx_hash: str) -> Optional[StoredTransaction]:
        self.find_calls += 1
        record = self._by_hash.get(tx_hash)
        if record is None:
            return None
        return StoredTransaction.from_record(record)

    def get_block_count(self) -> int:
        return len(self.blocks)

    def get_transaction_count(self) -> int:
        return len(self.transactions)

    def get_latest_block_height(self) -> Optional[int]:
        if not self.blocks:
            return None
        return max(b.height for b in self.blocks)


__all__ = [
    "MemoryTransactionStore",
]
