"""
ChainIngest - Utilities
=========================
"""

from chain_ingest.utils.serialization import (
    arr_to_hex,
    arr_to_hex_swapped,
    hex_to_arr,
    hex_swapped_to_arr,
    serialize_to_json,
    deserialize_from_json,
)

__all__ = [
    "arr_to_hex",
    "arr_to_hex_swapped",
    "hex_to_arr",
    "hex_swapped_to_arr",
    "serialize_to_json",
    "deserialize_from_json",
]
