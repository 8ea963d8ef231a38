"""
ChainIngest - Ingest Statistics
=================================
Contatori di run e riepilogo finale.
"""

import time
from dataclasses import dataclass, field
from typing import Dict, Optional

from chain_ingest.domain.resolver import ResolutionStats


@dataclass
class IngestStats:
    """
    Contatori cumulativi di una run.

    Attributes:
        start_height: Altezza iniziale (on_start)
        end_height: Altezza finale (on_complete)
        blocks: Blocchi ingeriti
        transactions: Transazioni scritte
        inputs: Input risolti (coinbase inclusi)
        outputs: Output scritti
        unrecognized_outputs: Output senza indirizzo
        resolution: Contatori del resolver
        started_at: Timestamp inizio run
        finished_at: Timestamp fine run
    """
    start_height: int = 0
    end_height: int = 0
    blocks: int = 0
    transactions: int = 0
    inputs: int = 0
    outputs: int = 0
    unrecognized_outputs: int = 0
    resolution: ResolutionStats = field(default_factory=ResolutionStats)
    started_at: float = field(default_factory=time.time)
    finished_at: Optional[float] = None

    @property
    def cache_hits(self) -> int:
        return self.resolution.cache_hits

    @property
    def store_hits(self) -> int:
        return self.resolution.store_hits

    @property
    def unresolved_inputs(self) -> int:
        return self.resolution.unresolved

    @property
    def coinbase_inputs(self) -> int:
        return self.resolution.coinbase

    def elapsed_seconds(self) -> float:
        end = self.finished_at if self.finished_at is not None else time.time()
        return max(0.0, end - self.started_at)

    def to_dict(self) -> Dict:
        return {
            "start_height": self.start_height,
            "end_height": self.end_height,
            "blocks": self.blocks,
            "transactions": self.transactions,
            "inputs": self.inputs,
            "outputs": self.outputs,
            "unrecognized_outputs": self.unrecognized_outputs,
            **self.resolution.to_dict(),
            "elapsed_seconds": round(self.elapsed_seconds(), 3),
        }

    def summary(self) -> str:
        """
        Riepilogo testuale.

        Examples:
            >>> print(IngestStats(end_height=2, blocks=3, transactions=5).summary())
            Done.
            Dumped all 3 blocks (0 - 2):
                -> transactions:         5
            ...
        """
        return (
            f"Done.\n"
            f"Dumped all {self.blocks} blocks ({self.start_height} - {self.end_height}):\n"
            f"\t-> transactions: {self.transactions:9}\n"
            f"\t-> inputs:       {self.inputs:9}\n"
            f"\t-> outputs:      {self.outputs:9}\n"
            f"\t-> unresolved:   {self.unresolved_inputs:9}"
        )


__all__ = [
    "IngestStats",
]
