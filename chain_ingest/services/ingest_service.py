"""
ChainIngest - Block Ingestion Pipeline
========================================
Orchestrazione per-blocco: record output, risoluzione input, bulk write.

Last Updated: 2026-10-19
Version: 1.0.0

Stati:
    IDLE → CONNECTED (on_start) → STREAMING (on_block) → FINISHED (on_complete)

Per ogni blocco:
1. Cache nuova (locale all'ingest, mai salvata sull'istanza)
2. Per ogni tx in ordine nativo:
   - record output → cache
   - risoluzione input (cache, poi store)
   - assemblaggio TransactionRecord
3. insert_block, poi un solo insert_transactions per il batch
4. Cache scartata, contatori aggiornati

Errori dello store sono fatali e vengono propagati; nessun rollback dei
documenti già scritti, nessun retry.
"""

import time
from enum import Enum
from typing import List, Optional

from chain_ingest.config import IngestSettings, get_settings
from chain_ingest.constants import CoinType, CoinbaseAddressPolicy
from chain_ingest.domain.cache import OutputCache
from chain_ingest.domain.models import Block, BlockRecord, OutputKey, TransactionRecord
from chain_ingest.domain.records import (
    build_output_records,
    build_transaction_record,
    count_unrecognized,
)
from chain_ingest.domain.resolver import InputResolver, ResolutionStats
from chain_ingest.errors import PipelineStateError, StorageError
from chain_ingest.logging_setup import get_logger, PerformanceLogger
from chain_ingest.services.base import BlockCallback
from chain_ingest.services.stats import IngestStats
from chain_ingest.storage.base import TransactionStore
from chain_ingest.utils.serialization import arr_to_hex_swapped


# ============================================================================
# MODULE LOGGER
# ============================================================================

logger = get_logger("pipeline")


# ============================================================================
# PIPELINE STATE
# ============================================================================

class PipelineState(Enum):
    """Stato della run"""
    IDLE = "idle"
    CONNECTED = "connected"
    STREAMING = "streaming"
    FINISHED = "finished"


# ============================================================================
# PIPELINE
# ============================================================================

class BlockIngestionPipeline(BlockCallback):
    """
    Pipeline di ingestion blocchi.

    Lo store è iniettato dal chiamante: SQLite in produzione, in memoria
    per test e dry run.

    Attributes:
        store: Store persistente
        config: Configurazione
        resolver: Resolver input (cache + store)
        state: Stato corrente
        stats: Contatori run

    Examples:
        >>> pipeline = BlockIngestionPipeline(SQLiteTransactionStore(path))
        >>> pipeline.on_start(CoinType.BITCOIN, 0)
        >>> for height, block in enumerate(blocks):
        ...     pipeline.on_block(block, height)
        >>> stats = pipeline.on_complete(len(blocks) - 1)
    """

    def __init__(
        self,
        store: TransactionStore,
        config: Optional[IngestSettings] = None,
        coinbase_policy: Optional[CoinbaseAddressPolicy] = None
    ):
        self.store = store
        self.config = config or get_settings()

        if coinbase_policy is None:
            coinbase_policy = self.config.get_coinbase_policy()

        self.resolver = InputResolver(store, coinbase_policy)
        self.state = PipelineState.IDLE
        self.coin: Optional[CoinType] = None
        self.stats = IngestStats(resolution=self.resolver.stats)

    # ========================================================================
    # LIFECYCLE
    # ========================================================================

    def on_start(self, coin: CoinType, block_height: int) -> None:
        """
        Verifica connettività store e registra altezza iniziale.

        Raises:
            PipelineStateError: Se la run è già iniziata
            DatabaseConnectionError: Se store non raggiungibile
        """
        if self.state is not PipelineState.IDLE:
            raise PipelineStateError(
                f"Cannot start pipeline in state {self.state.value}",
                code="PIPELINE_ALREADY_STARTED"
            )

        self.coin = CoinType(coin)
        logger.info(
            "Using `chainingest` pipeline",
            extra_data={"coin": self.coin.value, "start_height": block_height}
        )

        self.store.probe()
        logger.info("Connected successfully.")

        self.stats.start_height = block_height
        self.stats.end_height = block_height
        self.state = PipelineState.CONNECTED

    def on_block(self, block: Block, block_height: int) -> None:
        """
        Ingest di un blocco completo.

        Raises:
            PipelineStateError: Se chiamato prima di on_start o dopo on_complete
            DatabaseWriteError: Se una scrittura fallisce (fatale)
            DatabaseQueryError: Se una query di risoluzione fallisce (fatale)
        """
        if self.state not in (PipelineState.CONNECTED, PipelineState.STREAMING):
            raise PipelineStateError(
                f"Cannot ingest block in state {self.state.value}",
                code="PIPELINE_NOT_STREAMING",
                details={"height": block_height}
            )

        self.state = PipelineState.STREAMING

        with PerformanceLogger(
            logger,
            "ingest_block",
            threshold_ms=self.config.slow_block_threshold_ms,
            extra_data={"height": block_height, "tx_count": block.tx_count}
        ):
            try:
                self._ingest_block(block, block_height)
            except StorageError as e:
                logger.error(
                    f"Aborting run at block {block_height}: {e.message}",
                    extra_data={"height": block_height, **e.to_dict()}
                )
                raise

    def on_complete(self, block_height: int) -> IngestStats:
        """
        Chiude la run e logga il riepilogo.

        Returns:
            IngestStats: Contatori finali
        """
        if self.state not in (PipelineState.CONNECTED, PipelineState.STREAMING):
            raise PipelineStateError(
                f"Cannot complete pipeline in state {self.state.value}",
                code="PIPELINE_NOT_STARTED"
            )

        self.stats.end_height = block_height
        self.stats.finished_at = time.time()
        self.state = PipelineState.FINISHED

        logger.info(self.stats.summary(), extra_data=self.stats.to_dict())

        return self.stats

    # ========================================================================
    # BLOCK PROCESSING
    # ========================================================================

    def _ingest_block(self, block: Block, block_height: int) -> None:
        block_hash_hex = arr_to_hex_swapped(block.header.hash)
        resolution = ResolutionStats()
        batch = self._build_batch(block, block_hash_hex, resolution)

        self.store.insert_block(BlockRecord.from_block(block, block_height))
        if batch:
            self.store.insert_transactions(batch)

        # Contatori solo per blocchi scritti per intero
        self.stats.blocks += 1
        self.stats.transactions += block.tx_count
        self.stats.end_height = block_height
        for record in batch:
            self.stats.inputs += record.input_count
            self.stats.outputs += record.output_count
            self.stats.unrecognized_outputs += count_unrecognized(record.outputs)
        self.stats.resolution.merge(resolution)

        logger.debug(
            "Inserted block into db",
            extra_data={"height": block_height, "hash": block_hash_hex, "tx_count": len(batch)}
        )

    def _build_batch(
        self,
        block: Block,
        block_hash_hex: str,
        resolution: ResolutionStats
    ) -> List[TransactionRecord]:
        """Record di tutte le tx del blocco, con cache limitata a questa chiamata"""
        cache = OutputCache()
        batch: List[TransactionRecord] = []

        for tx in block.txs:
            tx_hash_hex = arr_to_hex_swapped(tx.hash)

            outputs = build_output_records(tx, tx_hash_hex)
            for out in outputs:
                cache.put(OutputKey(tx.hash, out.index_out), out.record)

            inputs = self.resolver.resolve_inputs(tx, cache, resolution)
            batch.append(build_transaction_record(tx, block_hash_hex, inputs, outputs))

        return batch


__all__ = [
    "BlockIngestionPipeline",
    "PipelineState",
]
