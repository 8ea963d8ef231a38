"""
ChainIngest - Hosts
=====================
Sorgenti di blocchi che pilotano un BlockCallback.
"""

from chain_ingest.host.replay import FixtureBlockSource

__all__ = [
    "FixtureBlockSource",
]
