"""
ChainIngest - Record Assembly
===============================
Costruzione dei record output e del documento transazione.

Funzioni pure: stesso output grezzo → stesso record.
"""

from typing import List, Sequence

from chain_ingest.domain.models import (
    EvaluatedTx,
    EvaluatedTxOut,
    ResolvedInput,
    TransactionRecord,
    TxOutputRecord,
)
from chain_ingest.logging_setup import get_logger
from chain_ingest.utils.serialization import arr_to_hex, arr_to_hex_swapped


# ============================================================================
# MODULE LOGGER
# ============================================================================

logger = get_logger("records")


# ============================================================================
# OUTPUT RECORDS
# ============================================================================

def build_output_record(
    txout: EvaluatedTxOut,
    tx_hash_hex: str,
    index: int
) -> TxOutputRecord:
    """
    Record di un singolo output.

    Se lo script non ha un indirizzo riconosciuto (None o ""), address = ""
    e viene emesso un diagnostic DEBUG (non fatale). Stessa regola di
    count_unrecognized.

    Args:
        txout: Output valutato
        tx_hash_hex: Hash tx produttrice (reversed hex)
        index: Posizione output

    Returns:
        TxOutputRecord: Record posizionato
    """
    address = txout.script.address
    if not address:
        logger.debug(
            f"Unable to evaluate address for utxo in txid: {tx_hash_hex} "
            f"({txout.script.pattern})",
            extra_data={
                "txid": tx_hash_hex,
                "index_out": index,
                "pattern": txout.script.pattern,
            }
        )
        address = ""

    return TxOutputRecord(
        tx_hash=tx_hash_hex,
        index_out=index,
        value=txout.out.value,
        script_pubkey=arr_to_hex(txout.out.script_pubkey),
        address=address,
    )


def build_output_records(tx: EvaluatedTx, tx_hash_hex: str) -> List[TxOutputRecord]:
    """
    Record di tutti gli output di una tx, in ordine di posizione.

    Examples:
        >>> records = build_output_records(tx, "ab" * 32)
        >>> [r.index_out for r in records]
        [0, 1]
    """
    return [
        build_output_record(txout, tx_hash_hex, index)
        for index, txout in enumerate(tx.outputs)
    ]


def count_unrecognized(records: Sequence[TxOutputRecord]) -> int:
    """Numero di output senza indirizzo"""
    return sum(1 for r in records if not r.address)


# ============================================================================
# TRANSACTION RECORD
# ============================================================================

def build_transaction_record(
    tx: EvaluatedTx,
    block_hash_hex: str,
    inputs: Sequence[ResolvedInput],
    outputs: Sequence[TxOutputRecord]
) -> TransactionRecord:
    """Assembla il documento transazione"""
    return TransactionRecord(
        tx_hash=arr_to_hex_swapped(tx.hash),
        block_hash=block_hash_hex,
        version=tx.version,
        lock_time=tx.locktime,
        inputs=tuple(inputs),
        outputs=tuple(outputs),
    )


__all__ = [
    "build_output_record",
    "build_output_records",
    "count_unrecognized",
    "build_transaction_record",
]
