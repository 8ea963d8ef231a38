"""
ChainIngest - Per-Block Output Cache
======================================
Mapping OutputKey → OutputRecord limitato al blocco corrente.

Rende visibili gli output creati nel blocco alle transazioni successive
dello stesso blocco, senza I/O. Viene creato all'inizio dell'ingest di un
blocco e scartato alla fine: non è mai condiviso tra blocchi, e i
riferimenti cross-block passano sempre dallo store.

Performance:
- O(1) put/get
"""

from typing import Dict, Optional

from chain_ingest.domain.models import OutputKey, OutputRecord


class OutputCache:
    """
    Cache output del blocco corrente.

    Nessuna rimozione puntuale, nessun errore: i lookup mancano e basta.
    Non thread-safe (posseduta da un solo ingest).

    Examples:
        >>> cache = OutputCache()
        >>> key = OutputKey(b'\\x01' * 32, 0)
        >>> cache.put(key, OutputRecord(500, "addrA"))
        >>> cache.get(key).value
        500
    """

    __slots__ = ("_entries",)

    def __init__(self):
        self._entries: Dict[OutputKey, OutputRecord] = {}

    def put(self, key: OutputKey, record: OutputRecord) -> None:
        """Inserisce o sovrascrive"""
        self._entries[key] = record

    def get(self, key: OutputKey) -> Optional[OutputRecord]:
        """Lookup puro, None se assente"""
        return self._entries.get(key)

    def __contains__(self, key: OutputKey) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"OutputCache(entries={len(self._entries)})"


__all__ = [
    "OutputCache",
]
