"""
ChainIngest - Domain Package
==============================
Modelli, cache per-blocco, risoluzione input e assemblaggio record.
"""

from chain_ingest.domain.models import (
    OutPoint,
    TxInput,
    TxOutput,
    EvaluatedScript,
    EvaluatedTxOut,
    EvaluatedTx,
    BlockHeader,
    Block,
    OutputKey,
    OutputRecord,
    TxOutputRecord,
    ResolvedInput,
    TransactionRecord,
    StoredTransaction,
    BlockRecord,
)
from chain_ingest.domain.cache import OutputCache
from chain_ingest.domain.records import (
    build_output_records,
    build_transaction_record,
)
from chain_ingest.domain.resolver import InputResolver, ResolutionStats

__all__ = [
    "OutPoint",
    "TxInput",
    "TxOutput",
    "EvaluatedScript",
    "EvaluatedTxOut",
    "EvaluatedTx",
    "BlockHeader",
    "Block",
    "OutputKey",
    "OutputRecord",
    "TxOutputRecord",
    "ResolvedInput",
    "TransactionRecord",
    "StoredTransaction",
    "BlockRecord",
    "OutputCache",
    "build_output_records",
    "build_transaction_record",
    "InputResolver",
    "ResolutionStats",
]
