"""
ChainIngest - Services Package
================================
Pipeline di ingestion e interfaccia callback.
"""

from chain_ingest.services.base import BlockCallback
from chain_ingest.services.stats import IngestStats
from chain_ingest.services.ingest_service import BlockIngestionPipeline, PipelineState

__all__ = [
    "BlockCallback",
    "IngestStats",
    "BlockIngestionPipeline",
    "PipelineState",
]
