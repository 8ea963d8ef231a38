"""
ChainIngest - Storage Package
===============================
Store persistente per blocchi e transazioni annotate.
"""

from chain_ingest.storage.base import TransactionStore
from chain_ingest.storage.db import SQLiteTransactionStore
from chain_ingest.storage.memory import MemoryTransactionStore

__all__ = [
    "TransactionStore",
    "SQLiteTransactionStore",
    "MemoryTransactionStore",
]
