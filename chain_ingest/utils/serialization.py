"""
ChainIngest - Serialization Utilities
=======================================
Conversioni hash/hex e helper JSON per i documenti salvati.
"""

import json
from typing import Any, Optional
from datetime import datetime

from chain_ingest.constants import HASH_SIZE
from chain_ingest.errors import ValidationError
from chain_ingest.logging_setup import get_logger

logger = get_logger("utils.serialization")


# ============================================================================
# BYTES/HEX CONVERSION
# ============================================================================

def arr_to_hex(data: bytes) -> str:
    """
    Bytes → hex (ordine naturale).

    Usato per script (scriptSig, scriptPubKey).

    Examples:
        >>> arr_to_hex(b'\\x76\\xa9')
        '76a9'
    """
    return data.hex()


def arr_to_hex_swapped(data: bytes) -> str:
    """
    Bytes → hex con byte order invertito.

    Formato di visualizzazione e storage degli hash (block hash, txid).

    Examples:
        >>> arr_to_hex_swapped(b'\\x01\\x02\\x03')
        '030201'
    """
    return data[::-1].hex()


def hex_to_arr(hex_str: str) -> bytes:
    """
    Hex → bytes (ordine naturale).

    Raises:
        ValidationError: Se hex invalido
    """
    try:
        return bytes.fromhex(hex_str)
    except (ValueError, TypeError) as e:
        raise ValidationError(
            f"Invalid hex string: {e}",
            code="INVALID_HEX",
            details={"value": str(hex_str)[:80]}
        )


def hex_swapped_to_arr(hex_str: str) -> bytes:
    """
    Hex reversed (display) → hash bytes interni.

    Raises:
        ValidationError: Se hex invalido o lunghezza diversa da HASH_SIZE

    Examples:
        >>> hex_swapped_to_arr("00" * 31 + "01")[0]
        1
    """
    data = hex_to_arr(hex_str)[::-1]
    if len(data) != HASH_SIZE:
        raise ValidationError(
            f"Hash must be {HASH_SIZE} bytes, got {len(data)}",
            code="INVALID_HASH_LENGTH",
            details={"value": hex_str}
        )
    return data


# ============================================================================
# JSON SERIALIZATION
# ============================================================================

def serialize_to_json(obj: Any, indent: Optional[int] = None) -> str:
    """
    Serializza oggetto in JSON.

    Gestisce datetime, bytes e oggetti con `to_document()` / `to_dict()`.
    """
    def default_handler(o):
        if isinstance(o, datetime):
            return o.isoformat()
        elif isinstance(o, bytes):
            return o.hex()
        elif hasattr(o, 'to_document'):
            return o.to_document()
        elif hasattr(o, 'to_dict'):
            return o.to_dict()
        else:
            return str(o)

    return json.dumps(obj, default=default_handler, indent=indent)


def deserialize_from_json(json_str: str) -> Any:
    """
    Deserializza JSON.

    Raises:
        json.JSONDecodeError: Se JSON invalido (loggato)
    """
    try:
        return json.loads(json_str)
    except json.JSONDecodeError as e:
        logger.error(f"Deserialization failed: {e}")
        raise


# ============================================================================
# EXPORT
# ============================================================================

__all__ = [
    "arr_to_hex",
    "arr_to_hex_swapped",
    "hex_to_arr",
    "hex_swapped_to_arr",
    "serialize_to_json",
    "deserialize_from_json",
]
