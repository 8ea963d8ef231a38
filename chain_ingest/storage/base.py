"""
ChainIngest - Store Interface
===============================
Contratto dello store persistente consumato da resolver e pipeline.
"""

from abc import ABC, abstractmethod
from typing import Optional, Sequence

from chain_ingest.domain.models import (
    BlockRecord,
    StoredTransaction,
    TransactionRecord,
)


class TransactionStore(ABC):
    """
    Store persistente per blocchi e transazioni.

    Errori:
        - probe: DatabaseConnectionError
        - insert_*: DatabaseWriteError
        - find_*: DatabaseQueryError

    insert_transactions NON garantisce all-or-nothing a livello di
    contratto: i chiamanti devono trattare un fallimento come possibile
    scrittura parziale.
    """

    @abstractmethod
    def probe(self) -> None:
        """Liveness check"""

    @abstractmethod
    def insert_block(self, record: BlockRecord) -> None:
        """Inserisce un documento blocco"""

    @abstractmethod
    def insert_transactions(self, records: Sequence[TransactionRecord]) -> None:
        """Bulk insert documenti transazione"""

    @abstractmethod
    def find_transaction_by_hash(self, tx_hash: str) -> Optional[StoredTransaction]:
        """
        Transazione già scritta, None se assente.

        Args:
            tx_hash: Hash in reversed hex
        """

    def close(self) -> None:
        """Rilascia risorse (default: nessuna)"""


__all__ = [
    "TransactionStore",
]
