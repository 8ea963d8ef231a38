"""
ChainIngest - Core Constants
==============================
Costanti del formato dati e dei coin supportati.

Last Updated: 2026-10-19
Version: 1.0.0
"""

from enum import Enum
from typing import Final


# ============================================================================
# HASH & SENTINEL
# ============================================================================

# Lunghezza hash (block hash, txid, outpoint)
HASH_SIZE: Final[int] = 32

# Previous-output hash dei coinbase input (nessun output reale)
NULL_HASH: Final[bytes] = bytes(HASH_SIZE)

# Rappresentazione testuale del sentinel (reversed hex)
NULL_HASH_HEX: Final[str] = "0" * (HASH_SIZE * 2)

# Range valori output (unsigned 64-bit)
MAX_OUTPUT_VALUE: Final[int] = 2 ** 64 - 1


# ============================================================================
# COINBASE ADDRESS POLICY
# ============================================================================

class CoinbaseAddressPolicy(str, Enum):
    """
    Indirizzo scritto sui coinbase input.

    SENTINEL: testo dell'hash nullo (comportamento storico)
    EMPTY: stringa vuota
    """
    SENTINEL = "sentinel"
    EMPTY = "empty"


# ============================================================================
# COIN TYPES
# ============================================================================

class CoinType(str, Enum):
    """Coin supportati dal parser upstream"""
    BITCOIN = "bitcoin"
    TESTNET3 = "testnet3"
    NAMECOIN = "namecoin"
    LITECOIN = "litecoin"
    DOGECOIN = "dogecoin"
    MYRIADCOIN = "myriadcoin"
    UNOBTANIUM = "unobtanium"
    NOTEBLOCKCHAIN = "noteblockchain"

    @classmethod
    def from_name(cls, name: str) -> "CoinType":
        """
        Risolve nome coin (case-insensitive).

        Raises:
            ValueError: Se coin sconosciuto
        """
        try:
            return cls(name.strip().lower())
        except ValueError:
            valid = [c.value for c in cls]
            raise ValueError(f"Unknown coin: {name}. Must be one of {valid}")


# ============================================================================
# STORAGE DEFAULTS
# ============================================================================

DEFAULT_DB_FILENAME: Final[str] = "chainingest.db"
DEFAULT_DB_TIMEOUT_SECONDS: Final[float] = 30.0


# ============================================================================
# EXPORT
# ============================================================================

__all__ = [
    "HASH_SIZE",
    "NULL_HASH",
    "NULL_HASH_HEX",
    "MAX_OUTPUT_VALUE",
    "CoinbaseAddressPolicy",
    "CoinType",
    "DEFAULT_DB_FILENAME",
    "DEFAULT_DB_TIMEOUT_SECONDS",
]
