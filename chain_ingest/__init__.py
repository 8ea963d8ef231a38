"""
ChainIngest - Block Ingestion Engine
======================================
Ingest di blocchi in uno store documentale con input risolti
(value e address dell'output speso).

Version: 1.0.0
License: MIT
"""

from chain_ingest.version import __version__

__author__ = "ChainIngest Team"
__license__ = "MIT"

# Core imports
from chain_ingest.config import IngestSettings, get_settings
from chain_ingest.domain.cache import OutputCache
from chain_ingest.domain.resolver import InputResolver

# Storage
from chain_ingest.storage.base import TransactionStore
from chain_ingest.storage.db import SQLiteTransactionStore
from chain_ingest.storage.memory import MemoryTransactionStore

# Services
from chain_ingest.services.base import BlockCallback
from chain_ingest.services.ingest_service import BlockIngestionPipeline
from chain_ingest.host.replay import FixtureBlockSource

# Constants
from chain_ingest.constants import CoinType, CoinbaseAddressPolicy

__all__ = [
    # Version
    "__version__",

    # Core
    "IngestSettings",
    "get_settings",
    "OutputCache",
    "InputResolver",

    # Storage
    "TransactionStore",
    "SQLiteTransactionStore",
    "MemoryTransactionStore",

    # Services
    "BlockCallback",
    "BlockIngestionPipeline",
    "FixtureBlockSource",

    # Constants
    "CoinType",
    "CoinbaseAddressPolicy",
]
