"""
ChainIngest - Fixture Replay Host
===================================
Sorgente di blocchi da file JSON (blocchi già deserializzati e valutati).

Formato fixture:
    {
        "coin": "bitcoin",
        "start_height": 0,
        "blocks": [
            {"hash": "...", "prev_hash": "...", "merkle_root": "...",
             "version": 1, "timestamp": 0, "bits": 0, "nonce": 0, "size": 0,
             "txs": [
                {"hash": "...", "version": 1, "locktime": 0,
                 "inputs": [{"prev_hash": "...", "prev_index": 0,
                             "script_sig": "", "sequence": 4294967295}],
                 "outputs": [{"value": 500, "script_pubkey": "",
                              "address": "addrA", "pattern": "Pay2PublicKeyHash"}]}
             ]}
        ]
    }

Hash in reversed hex (formato di visualizzazione), script in hex.
"""

import json
from pathlib import Path
from typing import Any, Dict, Iterator, List, Tuple

from tqdm import tqdm

from chain_ingest.constants import CoinType
from chain_ingest.domain.models import Block
from chain_ingest.errors import FixtureError, ValidationError
from chain_ingest.logging_setup import get_logger
from chain_ingest.services.base import BlockCallback


# ============================================================================
# MODULE LOGGER
# ============================================================================

logger = get_logger("replay")


# ============================================================================
# FIXTURE SOURCE
# ============================================================================

class FixtureBlockSource:
    """
    Replay di blocchi da fixture JSON verso un BlockCallback.

    Attributes:
        coin: Coin della fixture
        start_height: Altezza del primo blocco
        blocks: Blocchi deserializzati

    Examples:
        >>> source = FixtureBlockSource.from_file(Path("blocks.json"))
        >>> stats = source.run(pipeline)
    """

    def __init__(
        self,
        blocks: List[Block],
        coin: CoinType = CoinType.BITCOIN,
        start_height: int = 0
    ):
        if start_height < 0:
            raise FixtureError(
                f"start_height must be non-negative, got {start_height}",
                code="INVALID_START_HEIGHT"
            )

        self.blocks = blocks
        self.coin = coin
        self.start_height = start_height

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FixtureBlockSource":
        """
        Costruisce la sorgente da fixture già decodificata.

        Raises:
            FixtureError: Se la fixture è malformata
        """
        if not isinstance(data, dict) or not isinstance(data.get("blocks"), list):
            raise FixtureError(
                "Fixture must be an object with a 'blocks' list",
                code="INVALID_FIXTURE"
            )

        try:
            coin = CoinType.from_name(data.get("coin", CoinType.BITCOIN.value))
            start_height = int(data.get("start_height", 0))
        except (TypeError, ValueError, AttributeError) as e:
            raise FixtureError(f"Invalid fixture header: {e}", code="INVALID_FIXTURE")

        blocks = []
        for position, block_data in enumerate(data["blocks"]):
            try:
                blocks.append(Block.from_dict(block_data))
            except ValidationError as e:
                raise FixtureError(
                    f"Invalid block at position {position}: {e.message}",
                    code="INVALID_FIXTURE_BLOCK",
                    details={"position": position, **e.details}
                )
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                raise FixtureError(
                    f"Invalid block at position {position}: {e!r}",
                    code="INVALID_FIXTURE_BLOCK",
                    details={"position": position}
                )

        return cls(blocks, coin=coin, start_height=start_height)

    @classmethod
    def from_file(cls, path: Path) -> "FixtureBlockSource":
        """
        Carica fixture da file JSON.

        Raises:
            FixtureError: Se file illeggibile o JSON invalido
        """
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except OSError as e:
            raise FixtureError(f"Cannot read fixture {path}: {e}", code="FIXTURE_READ_FAILED")
        except json.JSONDecodeError as e:
            raise FixtureError(f"Invalid JSON in {path}: {e}", code="FIXTURE_DECODE_FAILED")

        source = cls.from_dict(data)
        logger.info(
            f"Loaded {len(source.blocks)} blocks from {path}",
            extra_data={"coin": source.coin.value, "start_height": source.start_height}
        )
        return source

    @property
    def end_height(self) -> int:
        """Altezza dell'ultimo blocco (start_height se vuota)"""
        return self.start_height + max(len(self.blocks) - 1, 0)

    def iter_blocks(self) -> Iterator[Tuple[int, Block]]:
        """(height, block) in ordine"""
        for offset, block in enumerate(self.blocks):
            yield self.start_height + offset, block

    def run(self, callback: BlockCallback, show_progress: bool = False) -> Any:
        """
        Esegue on_start / on_block* / on_complete.

        Errori del callback sono propagati (la run si interrompe).

        Returns:
            Valore restituito da on_complete
        """
        callback.on_start(self.coin, self.start_height)

        for height, block in tqdm(
            self.iter_blocks(),
            total=len(self.blocks),
            desc="Ingesting blocks",
            unit="block",
            disable=not show_progress
        ):
            callback.on_block(block, height)

        return callback.on_complete(self.end_height)


__all__ = [
    "FixtureBlockSource",
]
