"""
ChainIngest - Core Domain Models
==================================
Strutture dati dell'ingestion.

Last Updated: 2026-10-19
Version: 1.0.0

Oggetti upstream (consegnati dal parser, già deserializzati e con script
valutato):
- OutPoint, TxInput, TxOutput
- EvaluatedScript, EvaluatedTxOut, EvaluatedTx
- BlockHeader, Block

Record persistiti:
- OutputKey: (hash tx produttrice, indice output)
- OutputRecord: (value, address) di un output
- TxOutputRecord: output posizionato come salvato nel documento tx
- ResolvedInput: input annotato con value/address dell'output speso
- TransactionRecord, BlockRecord: documenti scritti sullo store
- StoredTransaction: vista di un documento tx riletto dallo store

Tutte le strutture sono immutabili (frozen).

Gli hash upstream sono bytes (32) in ordine interno; nei record e nei
documenti sono hex con byte order invertito.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any, Tuple

from chain_ingest.constants import (
    HASH_SIZE,
    NULL_HASH,
    MAX_OUTPUT_VALUE,
)
from chain_ingest.errors import ValidationError
from chain_ingest.utils.serialization import (
    arr_to_hex_swapped,
    hex_swapped_to_arr,
    hex_to_arr,
)


def _check_hash(value: bytes, name: str) -> None:
    if not isinstance(value, (bytes, bytearray)) or len(value) != HASH_SIZE:
        raise ValidationError(
            f"{name} must be {HASH_SIZE} bytes",
            code="INVALID_HASH",
            details={"field": name}
        )


def _check_value(value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool) or not 0 <= value <= MAX_OUTPUT_VALUE:
        raise ValidationError(
            f"Invalid output value: {value}. Must be an unsigned 64-bit integer.",
            code="INVALID_OUTPUT_VALUE",
            details={"value": value}
        )


# ============================================================================
# UPSTREAM: TRANSACTION INPUT/OUTPUT
# ============================================================================

@dataclass(frozen=True)
class OutPoint:
    """
    Riferimento all'output speso da un input.

    Attributes:
        txid (bytes): Hash tx precedente (32 bytes, ordine interno)
        index (int): Indice output nella tx precedente
    """

    txid: bytes
    index: int

    def __post_init__(self):
        _check_hash(self.txid, "outpoint.txid")
        if self.index < 0:
            raise ValidationError(
                f"Outpoint index must be non-negative, got {self.index}",
                code="INVALID_OUTPOINT_INDEX"
            )

    def is_null(self) -> bool:
        """True se l'outpoint è il sentinel coinbase"""
        return self.txid == NULL_HASH


@dataclass(frozen=True)
class TxInput:
    """
    Input grezzo di transazione.

    Attributes:
        outpoint (OutPoint): Output speso
        script_sig (bytes): Script di sblocco
        seq_no (int): Sequence number
    """

    outpoint: OutPoint
    script_sig: bytes = b""
    seq_no: int = 0xFFFFFFFF

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> TxInput:
        """
        Deserializza input da fixture.

        Examples:
            >>> inp = TxInput.from_dict({"prev_hash": "00" * 32, "prev_index": 0})
            >>> inp.outpoint.is_null()
            True
        """
        return cls(
            outpoint=OutPoint(
                txid=hex_swapped_to_arr(data["prev_hash"]),
                index=int(data["prev_index"]),
            ),
            script_sig=hex_to_arr(data.get("script_sig", "")),
            seq_no=int(data.get("sequence", 0xFFFFFFFF)),
        )


@dataclass(frozen=True)
class TxOutput:
    """
    Output grezzo: valore + locking script.

    Attributes:
        value (int): Valore nell'unità minima (satoshi)
        script_pubkey (bytes): Locking script
    """

    value: int
    script_pubkey: bytes = b""

    def __post_init__(self):
        _check_value(self.value)


@dataclass(frozen=True)
class EvaluatedScript:
    """
    Risultato della valutazione script (collaboratore esterno).

    Attributes:
        address (Optional[str]): Indirizzo riconosciuto, None se pattern ignoto
        pattern (str): Nome del pattern script (es. "Pay2PublicKeyHash")
    """

    address: Optional[str]
    pattern: str = "NotRecognised"


@dataclass(frozen=True)
class EvaluatedTxOut:
    """Output con script già valutato"""

    out: TxOutput
    script: EvaluatedScript

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> EvaluatedTxOut:
        """
        Deserializza output da fixture.

        Examples:
            >>> out = EvaluatedTxOut.from_dict({"value": 500, "address": "addrA"})
            >>> out.script.address
            'addrA'
        """
        address = data.get("address") or None
        default_pattern = "Unknown" if address else "NotRecognised"
        return cls(
            out=TxOutput(
                value=int(data["value"]),
                script_pubkey=hex_to_arr(data.get("script_pubkey", "")),
            ),
            script=EvaluatedScript(
                address=address,
                pattern=data.get("pattern", default_pattern),
            ),
        )


@dataclass(frozen=True)
class EvaluatedTx:
    """
    Transazione deserializzata con output valutati.

    Attributes:
        hash (bytes): Txid (32 bytes, ordine interno)
        version (int): Versione tx
        locktime (int): Lock time
        inputs (Tuple[TxInput, ...]): Input in ordine
        outputs (Tuple[EvaluatedTxOut, ...]): Output in ordine
    """

    hash: bytes
    version: int
    locktime: int
    inputs: Tuple[TxInput, ...] = ()
    outputs: Tuple[EvaluatedTxOut, ...] = ()

    def __post_init__(self):
        _check_hash(self.hash, "tx.hash")

    @property
    def in_count(self) -> int:
        return len(self.inputs)

    @property
    def out_count(self) -> int:
        return len(self.outputs)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> EvaluatedTx:
        """Deserializza transazione da fixture (hash in reversed hex)"""
        return cls(
            hash=hex_swapped_to_arr(data["hash"]),
            version=int(data.get("version", 1)),
            locktime=int(data.get("locktime", 0)),
            inputs=tuple(TxInput.from_dict(i) for i in data.get("inputs", [])),
            outputs=tuple(EvaluatedTxOut.from_dict(o) for o in data.get("outputs", [])),
        )

    def __repr__(self) -> str:
        return (
            f"EvaluatedTx(hash={arr_to_hex_swapped(self.hash)[:16]}..., "
            f"inputs={self.in_count}, outputs={self.out_count})"
        )


# ============================================================================
# UPSTREAM: BLOCK
# ============================================================================

@dataclass(frozen=True)
class BlockHeader:
    """Header blocco (hash già calcolato dal parser)"""

    hash: bytes
    version: int
    prev_hash: bytes
    merkle_root: bytes
    timestamp: int
    bits: int
    nonce: int

    def __post_init__(self):
        _check_hash(self.hash, "header.hash")
        _check_hash(self.prev_hash, "header.prev_hash")
        _check_hash(self.merkle_root, "header.merkle_root")


@dataclass(frozen=True)
class Block:
    """
    Blocco deserializzato.

    Attributes:
        header (BlockHeader): Header
        size (int): Dimensione serializzata (bytes)
        txs (Tuple[EvaluatedTx, ...]): Transazioni in ordine nativo
    """

    header: BlockHeader
    size: int
    txs: Tuple[EvaluatedTx, ...] = ()

    @property
    def tx_count(self) -> int:
        return len(self.txs)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Block:
        """
        Deserializza blocco da fixture.

        Formato:
            {"hash", "version", "prev_hash", "merkle_root", "timestamp",
             "bits", "nonce", "size", "txs": [...]}
        """
        header = BlockHeader(
            hash=hex_swapped_to_arr(data["hash"]),
            version=int(data.get("version", 1)),
            prev_hash=hex_swapped_to_arr(data.get("prev_hash", "00" * HASH_SIZE)),
            merkle_root=hex_swapped_to_arr(data.get("merkle_root", "00" * HASH_SIZE)),
            timestamp=int(data.get("timestamp", 0)),
            bits=int(data.get("bits", 0)),
            nonce=int(data.get("nonce", 0)),
        )
        return cls(
            header=header,
            size=int(data.get("size", 0)),
            txs=tuple(EvaluatedTx.from_dict(tx) for tx in data.get("txs", [])),
        )

    def __repr__(self) -> str:
        return (
            f"Block(hash={arr_to_hex_swapped(self.header.hash)[:16]}..., "
            f"txs={self.tx_count})"
        )


# ============================================================================
# OUTPUT KEY / OUTPUT RECORD
# ============================================================================

@dataclass(frozen=True, order=True)
class OutputKey:
    """
    Chiave univoca di un output nell'intera chain.

    Attributes:
        tx_hash (bytes): Hash tx produttrice (ordine interno)
        index (int): Posizione output
    """

    tx_hash: bytes
    index: int

    def __post_init__(self):
        _check_hash(self.tx_hash, "output_key.tx_hash")
        if self.index < 0:
            raise ValidationError(
                f"index must be non-negative, got {self.index}",
                code="INVALID_OUTPUT_INDEX"
            )

    @classmethod
    def from_outpoint(cls, outpoint: OutPoint) -> OutputKey:
        return cls(outpoint.txid, outpoint.index)

    def __str__(self) -> str:
        return f"{arr_to_hex_swapped(self.tx_hash)}:{self.index}"


@dataclass(frozen=True)
class OutputRecord:
    """
    Forma minima di un output: valore + indirizzo.

    Attributes:
        value (int): Valore (unsigned 64-bit)
        address (str): Indirizzo, "" se pattern non riconosciuto
    """

    value: int
    address: str = ""

    def __post_init__(self):
        _check_value(self.value)


@dataclass(frozen=True)
class TxOutputRecord:
    """
    Output come salvato nel documento transazione.

    Examples:
        >>> rec = TxOutputRecord("ab" * 32, 0, 500, "76a9", "addrA")
        >>> rec.record
        OutputRecord(value=500, address='addrA')
    """

    tx_hash: str
    index_out: int
    value: int
    script_pubkey: str
    address: str

    @property
    def record(self) -> OutputRecord:
        return OutputRecord(self.value, self.address)

    def to_document(self) -> Dict[str, Any]:
        return {
            "txHash": self.tx_hash,
            "indexOut": self.index_out,
            "value": self.value,
            "scriptPubKey": self.script_pubkey,
            "address": self.address,
        }

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> TxOutputRecord:
        return cls(
            tx_hash=doc["txHash"],
            index_out=doc["indexOut"],
            value=doc["value"],
            script_pubkey=doc.get("scriptPubKey", ""),
            address=doc.get("address", ""),
        )


# ============================================================================
# RESOLVED INPUT
# ============================================================================

@dataclass(frozen=True)
class ResolvedInput:
    """
    Input annotato con value/address dell'output che spende.

    Attributes:
        tx_hash (str): Hash tx spender (reversed hex)
        index_in (int): Posizione input nella tx spender
        hash_prev_out (str): Hash tx referenziata (reversed hex)
        index_prev_out (int): Indice output referenziato
        script_sig (str): scriptSig (hex)
        sequence_number (int): Sequence
        value (int): Valore risolto (0 se coinbase o non risolto)
        address (str): Indirizzo risolto
    """

    tx_hash: str
    index_in: int
    hash_prev_out: str
    index_prev_out: int
    script_sig: str
    sequence_number: int
    value: int
    address: str

    def to_document(self) -> Dict[str, Any]:
        return {
            "txHash": self.tx_hash,
            "hashPrevOut": self.hash_prev_out,
            "indexPrevOut": self.index_prev_out,
            "indexIn": self.index_in,
            "scriptSig": self.script_sig,
            "sequenceNumber": self.sequence_number,
            "value": self.value,
            "address": self.address,
        }

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> ResolvedInput:
        return cls(
            tx_hash=doc["txHash"],
            index_in=doc["indexIn"],
            hash_prev_out=doc["hashPrevOut"],
            index_prev_out=doc["indexPrevOut"],
            script_sig=doc.get("scriptSig", ""),
            sequence_number=doc.get("sequenceNumber", 0),
            value=doc.get("value", 0),
            address=doc.get("address", ""),
        )


# ============================================================================
# TRANSACTION RECORD
# ============================================================================

@dataclass(frozen=True)
class TransactionRecord:
    """
    Documento transazione scritto sullo store.

    Output indicizzati implicitamente per posizione.
    """

    tx_hash: str
    block_hash: str
    version: int
    lock_time: int
    inputs: Tuple[ResolvedInput, ...] = ()
    outputs: Tuple[TxOutputRecord, ...] = ()

    @property
    def input_count(self) -> int:
        return len(self.inputs)

    @property
    def output_count(self) -> int:
        return len(self.outputs)

    def to_document(self) -> Dict[str, Any]:
        """
        Serializza nel formato documento.

        Examples:
            >>> rec = TransactionRecord("aa" * 32, "bb" * 32, 1, 0)
            >>> rec.to_document()["inputCount"]
            0
        """
        return {
            "txHash": self.tx_hash,
            "blockHash": self.block_hash,
            "version": self.version,
            "lockTime": self.lock_time,
            "inputCount": self.input_count,
            "txInputs": [i.to_document() for i in self.inputs],
            "outputCount": self.output_count,
            "txOutputs": [o.to_document() for o in self.outputs],
        }

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> TransactionRecord:
        return cls(
            tx_hash=doc["txHash"],
            block_hash=doc["blockHash"],
            version=doc.get("version", 1),
            lock_time=doc.get("lockTime", 0),
            inputs=tuple(ResolvedInput.from_document(i) for i in doc.get("txInputs", [])),
            outputs=tuple(TxOutputRecord.from_document(o) for o in doc.get("txOutputs", [])),
        )


@dataclass(frozen=True)
class StoredTransaction:
    """
    Transazione riletta dallo store (per la risoluzione cross-block).

    Attributes:
        tx_hash (str): Hash (reversed hex)
        block_hash (str): Blocco contenitore (reversed hex)
        outputs (Tuple[TxOutputRecord, ...]): Output salvati
    """

    tx_hash: str
    block_hash: str
    outputs: Tuple[TxOutputRecord, ...] = field(default_factory=tuple)

    def output(self, index: int) -> Optional[OutputRecord]:
        """
        Output alla posizione `index`, None se assente.

        Examples:
            >>> stored = StoredTransaction("aa" * 32, "bb" * 32, ())
            >>> stored.output(0) is None
            True
        """
        if 0 <= index < len(self.outputs) and self.outputs[index].index_out == index:
            return self.outputs[index].record

        # Documenti con output fuori ordine
        for out in self.outputs:
            if out.index_out == index:
                return out.record

        return None

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> StoredTransaction:
        return cls(
            tx_hash=doc["txHash"],
            block_hash=doc["blockHash"],
            outputs=tuple(TxOutputRecord.from_document(o) for o in doc.get("txOutputs", [])),
        )

    @classmethod
    def from_record(cls, record: TransactionRecord) -> StoredTransaction:
        return cls(record.tx_hash, record.block_hash, record.outputs)


# ============================================================================
# BLOCK RECORD
# ============================================================================

@dataclass(frozen=True)
class BlockRecord:
    """Documento blocco scritto sullo store"""

    hash: str
    height: int
    version: int
    size: int
    previous_hash: str
    merkle_root_hash: str
    timestamp: int
    bits: int
    tx_count: int
    nonce: int

    @classmethod
    def from_block(cls, block: Block, height: int) -> BlockRecord:
        """
        Costruisce record dal blocco upstream.

        Args:
            block: Blocco deserializzato
            height: Altezza nella chain
        """
        header = block.header
        return cls(
            hash=arr_to_hex_swapped(header.hash),
            height=height,
            version=header.version,
            size=block.size,
            previous_hash=arr_to_hex_swapped(header.prev_hash),
            merkle_root_hash=arr_to_hex_swapped(header.merkle_root),
            timestamp=header.timestamp,
            bits=header.bits,
            tx_count=block.tx_count,
            nonce=header.nonce,
        )

    def to_document(self) -> Dict[str, Any]:
        return {
            "hash": self.hash,
            "blockHeight": self.height,
            "version": self.version,
            "size": self.size,
            "previousHash": self.previous_hash,
            "merkleRootHash": self.merkle_root_hash,
            "timestamp": self.timestamp,
            "nBits": self.bits,
            "txCount": self.tx_count,
            "nNonce": self.nonce,
        }

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> BlockRecord:
        return cls(
            hash=doc["hash"],
            height=doc["blockHeight"],
            version=doc["version"],
            size=doc["size"],
            previous_hash=doc["previousHash"],
            merkle_root_hash=doc["merkleRootHash"],
            timestamp=doc["timestamp"],
            bits=doc["nBits"],
            tx_count=doc["txCount"],
            nonce=doc["nNonce"],
        )


# ============================================================================
# EXPORT
# ============================================================================

__all__ = [
    # Upstream
    "OutPoint",
    "TxInput",
    "TxOutput",
    "EvaluatedScript",
    "EvaluatedTxOut",
    "EvaluatedTx",
    "BlockHeader",
    "Block",

    # Records
    "OutputKey",
    "OutputRecord",
    "TxOutputRecord",
    "ResolvedInput",
    "TransactionRecord",
    "StoredTransaction",
    "BlockRecord",
]
