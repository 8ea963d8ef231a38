"""
ChainIngest - Block Callback Interface
========================================
Interfaccia tra una sorgente di blocchi (parser, replay da fixture, test
harness) e chi li consuma.

Sequenza garantita dalla sorgente:
    on_start(coin, start_height)
    on_block(block, height)   # per ogni blocco, in ordine di altezza
    on_complete(end_height)
"""

from abc import ABC, abstractmethod
from typing import Any

from chain_ingest.constants import CoinType
from chain_ingest.domain.models import Block


class BlockCallback(ABC):
    """Consumer di uno stream sequenziale di blocchi"""

    @abstractmethod
    def on_start(self, coin: CoinType, block_height: int) -> None:
        """Inizio stream"""

    @abstractmethod
    def on_block(self, block: Block, block_height: int) -> None:
        """Un blocco, già deserializzato e con script valutati"""

    @abstractmethod
    def on_complete(self, block_height: int) -> Any:
        """Fine stream"""


__all__ = [
    "BlockCallback",
]
