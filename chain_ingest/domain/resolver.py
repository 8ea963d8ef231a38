"""
ChainIngest - Input Resolver
==============================
Risoluzione di value/address dell'output speso da ogni input.

Last Updated: 2026-10-19
Version: 1.0.0

Algoritmo (per input):
1. prev hash = sentinel coinbase → value 0, address secondo policy
2. lookup in OutputCache del blocco → nessun I/O
3. fallback: una sola query allo store per hash, output alla posizione
4. nessun risultato → value 0, address "", WARNING (non fatale)

Il resolver non scrive mai sullo store.
"""

from dataclasses import dataclass
from typing import List, Optional

from chain_ingest.constants import CoinbaseAddressPolicy, NULL_HASH_HEX
from chain_ingest.domain.cache import OutputCache
from chain_ingest.domain.models import (
    EvaluatedTx,
    OutputKey,
    OutputRecord,
    ResolvedInput,
    TxInput,
)
from chain_ingest.logging_setup import get_logger
from chain_ingest.storage.base import TransactionStore
from chain_ingest.utils.serialization import arr_to_hex, arr_to_hex_swapped


# ============================================================================
# MODULE LOGGER
# ============================================================================

logger = get_logger("resolver")


# ============================================================================
# RESOLUTION COUNTERS
# ============================================================================

@dataclass
class ResolutionStats:
    """Contatori di risoluzione per run"""
    cache_hits: int = 0
    store_hits: int = 0
    store_queries: int = 0
    unresolved: int = 0
    coinbase: int = 0

    def to_dict(self) -> dict:
        return {
            "cache_hits": self.cache_hits,
            "store_hits": self.store_hits,
            "store_queries": self.store_queries,
            "unresolved": self.unresolved,
            "coinbase": self.coinbase,
        }

    def merge(self, other: "ResolutionStats") -> None:
        """Somma i contatori di `other`"""
        self.cache_hits += other.cache_hits
        self.store_hits += other.store_hits
        self.store_queries += other.store_queries
        self.unresolved += other.unresolved
        self.coinbase += other.coinbase


# ============================================================================
# RESOLVER
# ============================================================================

class InputResolver:
    """
    Risolve gli input di una transazione.

    Attributes:
        store: Store persistente (fallback cross-block)
        coinbase_policy: Indirizzo scritto sui coinbase input
        stats: Contatori cumulativi

    Examples:
        >>> resolver = InputResolver(store)
        >>> cache = OutputCache()
        >>> resolved = resolver.resolve_inputs(tx, cache)
    """

    def __init__(
        self,
        store: TransactionStore,
        coinbase_policy: CoinbaseAddressPolicy = CoinbaseAddressPolicy.SENTINEL
    ):
        self.store = store
        self.coinbase_policy = CoinbaseAddressPolicy(coinbase_policy)
        self.stats = ResolutionStats()

    @property
    def coinbase_address(self) -> str:
        if self.coinbase_policy is CoinbaseAddressPolicy.SENTINEL:
            return NULL_HASH_HEX
        return ""

    def resolve_inputs(
        self,
        tx: EvaluatedTx,
        cache: OutputCache,
        stats: Optional[ResolutionStats] = None
    ) -> List[ResolvedInput]:
        """
        Risolve tutti gli input di `tx`, in ordine.

        Args:
            tx: Transazione spender
            cache: Cache del blocco corrente
            stats: Contatori da aggiornare (default: self.stats)

        Returns:
            List[ResolvedInput]: Un record per input

        Raises:
            DatabaseQueryError: Se la query di fallback fallisce
        """
        tx_hash_hex = arr_to_hex_swapped(tx.hash)
        return [
            self.resolve(tx_hash_hex, index_in, txin, cache, stats)
            for index_in, txin in enumerate(tx.inputs)
        ]

    def resolve(
        self,
        tx_hash_hex: str,
        index_in: int,
        txin: TxInput,
        cache: OutputCache,
        stats: Optional[ResolutionStats] = None
    ) -> ResolvedInput:
        """
        Risolve un singolo input.

        Args:
            tx_hash_hex: Hash tx spender (reversed hex)
            index_in: Posizione input
            txin: Input grezzo
            cache: Cache del blocco corrente
            stats: Contatori da aggiornare (default: self.stats)

        Returns:
            ResolvedInput: Input annotato
        """
        if stats is None:
            stats = self.stats

        outpoint = txin.outpoint
        prev_hash_hex = arr_to_hex_swapped(outpoint.txid)

        if outpoint.is_null():
            stats.coinbase += 1
            record = OutputRecord(0, self.coinbase_address)
        else:
            record = self._lookup(OutputKey.from_outpoint(outpoint), prev_hash_hex, cache, stats)
            if record is None:
                stats.unresolved += 1
                logger.warning(
                    f"Unable to resolve previous output {prev_hash_hex}:{outpoint.index} "
                    f"spent by txid: {tx_hash_hex} (input {index_in})",
                    extra_data={
                        "txid": tx_hash_hex,
                        "index_in": index_in,
                        "hash_prev_out": prev_hash_hex,
                        "index_prev_out": outpoint.index,
                    }
                )
                record = OutputRecord(0, "")

        return ResolvedInput(
            tx_hash=tx_hash_hex,
            index_in=index_in,
            hash_prev_out=prev_hash_hex,
            index_prev_out=outpoint.index,
            script_sig=arr_to_hex(txin.script_sig),
            sequence_number=txin.seq_no,
            value=record.value,
            address=record.address,
        )

    def _lookup(
        self,
        key: OutputKey,
        prev_hash_hex: str,
        cache: OutputCache,
        stats: ResolutionStats
    ) -> Optional[OutputRecord]:
        """Cache del blocco, poi store"""
        record = cache.get(key)
        if record is not None:
            stats.cache_hits += 1
            return record

        stats.store_queries += 1
        stored = self.store.find_transaction_by_hash(prev_hash_hex)
        if stored is None:
            return None

        record = stored.output(key.index)
        if record is not None:
            stats.store_hits += 1
        return record


__all__ = [
    "InputResolver",
    "ResolutionStats",
]
