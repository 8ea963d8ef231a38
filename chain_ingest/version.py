"""
ChainIngest - Version
=======================
Versione del pacchetto, registrata anche nella tabella metadata dello store.
"""

from typing import NamedTuple


class VersionInfo(NamedTuple):
    major: int
    minor: int
    patch: int


VERSION = VersionInfo(1, 0, 0)

__version__ = ".".join(str(part) for part in VERSION)

__all__ = [
    "__version__",
    "VERSION",
    "VersionInfo",
]
