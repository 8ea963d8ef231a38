#!/usr/bin/env python3
"""
ChainIngest - Replay Blocks
=============================
Replay di una fixture JSON di blocchi nello store SQLite.

Le opzioni non passate restano a quanto definito dall'environment
(CHAININGEST_*).
"""

import sys
import argparse
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from chain_ingest.cli.main import load_settings
from chain_ingest.config import IngestSettings
from chain_ingest.errors import ChainIngestException
from chain_ingest.host.replay import FixtureBlockSource
from chain_ingest.logging_setup import setup_logging, get_logger
from chain_ingest.services.ingest_service import BlockIngestionPipeline
from chain_ingest.storage.db import SQLiteTransactionStore

logger = get_logger("replay")


def parse_args(argv=None) -> argparse.Namespace:
    """Parse command line"""
    parser = argparse.ArgumentParser(
        description='Replay a block fixture into a ChainIngest database'
    )
    parser.add_argument(
        'fixture',
        type=str,
        help='JSON fixture with evaluated blocks'
    )
    parser.add_argument(
        '--data-dir',
        type=str,
        help='Custom data directory'
    )
    parser.add_argument(
        '--db',
        type=str,
        help='Database path (overrides --data-dir)'
    )
    parser.add_argument(
        '--coinbase-address',
        choices=['sentinel', 'empty'],
        default=None,
        help='Address written on coinbase inputs (default: from environment)'
    )
    parser.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        default=None,
        help='Log level (default: from environment)'
    )

    return parser.parse_args(argv)


def settings_from_args(args: argparse.Namespace) -> IngestSettings:
    """
    Settings da environment + opzioni esplicite.

    Raises:
        ConfigError: Se la configurazione è invalida
    """
    return load_settings(
        coinbase_address=args.coinbase_address,
        log_level=args.log_level,
        data_dir=Path(args.data_dir) if args.data_dir else None,
        db_path=Path(args.db) if args.db else None,
    )


def main():
    """Main replay function"""
    args = parse_args()

    fixture = Path(args.fixture)
    if not fixture.exists():
        print(f"Fixture not found: {fixture}", file=sys.stderr)
        sys.exit(1)

    try:
        config = settings_from_args(args)
    except ChainIngestException as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)

    setup_logging(log_level=config.log_level, log_to_file=config.log_to_file, log_dir=config.log_dir)

    logger.info(f"Database: {config.get_db_path()}")

    store = SQLiteTransactionStore(config.get_db_path(), timeout=config.db_timeout_seconds)

    try:
        source = FixtureBlockSource.from_file(fixture)
        pipeline = BlockIngestionPipeline(store, config)
        stats = source.run(pipeline, show_progress=config.show_progress)

    except ChainIngestException as e:
        logger.error(f"Replay failed: {e}")
        sys.exit(1)

    finally:
        store.close()

    logger.info("✅ Replay completed!")
    logger.info(f"   Blocks: {stats.blocks}")
    logger.info(f"   Transactions: {stats.transactions}")
    logger.info(f"   Unresolved inputs: {stats.unresolved_inputs}")


if __name__ == '__main__':
    main()
