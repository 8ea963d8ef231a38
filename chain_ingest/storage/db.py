"""
ChainIngest - Database Storage Layer
======================================
Store persistente su SQLite: documenti JSON per blocchi e transazioni.

Last Updated: 2026-10-19
Version: 1.0.0

Features:
- Collezione blocks (documento + hash/altezza indicizzati)
- Collezione transactions (documento + txHash indicizzato)
- Bulk insert in una singola transazione SQLite
- Lookup per hash (fallback della risoluzione cross-block)

Ogni chiamata di scrittura è atomica lato SQLite (commit o rollback), ma
blocco e transazioni sono scritti con due chiamate distinte: se il bulk
insert fallisce, il documento blocco resta visibile.
Nessuna deduplicazione: righe con lo stesso txHash sono ammesse e il lookup
restituisce la più recente.
"""

import sqlite3
from pathlib import Path
from typing import Optional, Sequence, Dict, Any

from chain_ingest.constants import DEFAULT_DB_TIMEOUT_SECONDS
from chain_ingest.domain.models import (
    BlockRecord,
    StoredTransaction,
    TransactionRecord,
)
from chain_ingest.errors import (
    DatabaseError,
    DatabaseConnectionError,
    DatabaseWriteError,
    DatabaseQueryError,
)
from chain_ingest.logging_setup import get_logger
from chain_ingest.storage.base import TransactionStore
from chain_ingest.utils.serialization import serialize_to_json, deserialize_from_json
from chain_ingest.version import __version__


# ============================================================================
# MODULE LOGGER
# ============================================================================

logger = get_logger("storage")


# ============================================================================
# DATABASE SCHEMA
# ============================================================================

SCHEMA_VERSION = 1

CREATE_TABLES_SQL = """
-- Blocks collection
CREATE TABLE IF NOT EXISTS blocks (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    hash TEXT NOT NULL,
    block_height INTEGER NOT NULL,
    document TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_blocks_hash ON blocks(hash);
CREATE INDEX IF NOT EXISTS idx_blocks_height ON blocks(block_height);

-- Transactions collection
CREATE TABLE IF NOT EXISTS transactions (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    tx_hash TEXT NOT NULL,
    block_hash TEXT NOT NULL,
    document TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_tx_hash ON transactions(tx_hash);
CREATE INDEX IF NOT EXISTS idx_tx_block_hash ON transactions(block_hash);

-- Metadata table
CREATE TABLE IF NOT EXISTS metadata (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
);

INSERT OR REPLACE INTO metadata (key, value) VALUES ('schema_version', '1');
"""


# ============================================================================
# DATABASE CLASS
# ============================================================================

class SQLiteTransactionStore(TransactionStore):
    """
    Store SQLite a documenti.

    Una connessione per istanza (pipeline single-threaded).

    Attributes:
        db_path: Path database file (":memory:" ammesso)
        timeout: Timeout lock SQLite (secondi)

    Examples:
        >>> store = SQLiteTransactionStore(Path("chainingest.db"))
        >>> store.probe()
        >>> store.insert_block(block_record)
        >>> store.find_transaction_by_hash(txid)
    """

    def __init__(self, db_path: Path, timeout: float = DEFAULT_DB_TIMEOUT_SECONDS):
        self.db_path = db_path
        self.timeout = timeout
        self._connection: Optional[sqlite3.Connection] = None

    def _get_connection(self) -> sqlite3.Connection:
        """Connessione lazy + schema"""
        if self._connection is None:
            try:
                if str(self.db_path) != ":memory:":
                    Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

                connection = sqlite3.connect(str(self.db_path), timeout=self.timeout)
                connection.execute("PRAGMA journal_mode = WAL")
                connection.executescript(CREATE_TABLES_SQL)
                connection.execute(
                    "INSERT OR REPLACE INTO metadata (key, value) VALUES ('writer_version', ?)",
                    (__version__,)
                )
                connection.commit()
            except (sqlite3.Error, OSError) as e:
                raise DatabaseConnectionError(
                    f"Failed to connect to database: {e}",
                    code="DB_CONNECTION_FAILED",
                    details={"db_path": str(self.db_path)}
                )

            self._connection = connection
            logger.info(
                "Database initialized",
                extra_data={"db_path": str(self.db_path)}
            )

        return self._connection

    # ========================================================================
    # LIVENESS
    # ========================================================================

    def probe(self) -> None:
        """
        Ping del database.

        Raises:
            DatabaseConnectionError: Se database non raggiungibile
        """
        try:
            self._get_connection().execute("SELECT 1").fetchone()
        except sqlite3.Error as e:
            raise DatabaseConnectionError(
                f"Database ping failed: {e}",
                code="DB_PING_FAILED",
                details={"db_path": str(self.db_path)}
            )

        logger.debug("Database ping ok", extra_data={"db_path": str(self.db_path)})

    # ========================================================================
    # WRITE OPERATIONS
    # ========================================================================

    def insert_block(self, record: BlockRecord) -> None:
        """
        Inserisce documento blocco.

        Raises:
            DatabaseWriteError: Se insert fallisce
        """
        conn = self._get_connection()
        try:
            conn.execute(
                "INSERT INTO blocks (hash, block_height, document) VALUES (?, ?, ?)",
                (record.hash, record.height, serialize_to_json(record.to_document()))
            )
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise DatabaseWriteError(
                f"Failed to insert block: {e}",
                code="BLOCK_INSERT_FAILED",
                details={"hash": record.hash, "height": record.height}
            )

    def insert_transactions(self, records: Sequence[TransactionRecord]) -> None:
        """
        Bulk insert documenti transazione (una transazione SQLite).

        Raises:
            DatabaseWriteError: Se insert fallisce (rollback del batch)
        """
        if not records:
            return

        conn = self._get_connection()
        rows = [
            (r.tx_hash, r.block_hash, serialize_to_json(r.to_document()))
            for r in records
        ]
        try:
            conn.executemany(
                "INSERT INTO transactions (tx_hash, block_hash, document) VALUES (?, ?, ?)",
                rows
            )
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise DatabaseWriteError(
                f"Failed to insert transactions: {e}",
                code="TX_BULK_INSERT_FAILED",
                details={"count": len(rows), "block_hash": records[0].block_hash}
            )

    # ========================================================================
    # QUERY OPERATIONS
    # ========================================================================

    def find_transaction_by_hash(self, tx_hash: str) -> Optional[StoredTransaction]:
        """
        Ultimo documento tx con questo hash.

        Raises:
            DatabaseQueryError: Se query fallisce
        """
        doc = self.load_transaction_document(tx_hash)
        if doc is None:
            return None
        return StoredTransaction.from_document(doc)

    def load_transaction_document(self, tx_hash: str) -> Optional[Dict[str, Any]]:
        """Documento tx completo (input risolti inclusi)"""
        try:
            row = self._get_connection().execute(
                "SELECT document FROM transactions WHERE tx_hash = ? ORDER BY id DESC LIMIT 1",
                (tx_hash,)
            ).fetchone()
        except sqlite3.Error as e:
            raise DatabaseQueryError(
                f"Failed to load transaction: {e}",
                code="TX_QUERY_FAILED",
                details={"tx_hash": tx_hash}
            )

        if not row:
            return None
        return deserialize_from_json(row[0])

    def load_block(self, height: int) -> Optional[BlockRecord]:
        """Documento blocco per altezza (ultimo scritto)"""
        try:
            row = self._get_connection().execute(
                "SELECT document FROM blocks WHERE block_height = ? ORDER BY id DESC LIMIT 1",
                (height,)
            ).fetchone()
        except sqlite3.Error as e:
            raise DatabaseQueryError(f"Failed to load block: {e}", code="BLOCK_QUERY_FAILED")

        if not row:
            return None
        return BlockRecord.from_document(deserialize_from_json(row[0]))

    def get_block_count(self) -> int:
        try:
            return self._get_connection().execute("SELECT COUNT(*) FROM blocks").fetchone()[0]
        except sqlite3.Error as e:
            raise DatabaseQueryError(f"Failed to count blocks: {e}")

    def get_transaction_count(self) -> int:
        try:
            return self._get_connection().execute("SELECT COUNT(*) FROM transactions").fetchone()[0]
        except sqlite3.Error as e:
            raise DatabaseQueryError(f"Failed to count transactions: {e}")

    def get_metadata(self, key: str) -> Optional[str]:
        """Valore dalla tabella metadata (schema_version, writer_version)"""
        try:
            row = self._get_connection().execute(
                "SELECT value FROM metadata WHERE key = ?", (key,)
            ).fetchone()
        except sqlite3.Error as e:
            raise DatabaseQueryError(f"Failed to read metadata: {e}")

        return row[0] if row else None

    def get_latest_block_height(self) -> Optional[int]:
        """Height ultimo blocco, None se DB vuoto"""
        try:
            return self._get_connection().execute(
                "SELECT MAX(block_height) FROM blocks"
            ).fetchone()[0]
        except sqlite3.Error as e:
            raise DatabaseQueryError(f"Failed to get latest height: {e}")

    # ========================================================================
    # UTILITY
    # ========================================================================

    def close(self) -> None:
        """Chiudi connessione"""
        if self._connection is not None:
            try:
                self._connection.close()
            except sqlite3.Error as e:
                raise DatabaseError(f"Failed to close database: {e}")
            finally:
                self._connection = None

            logger.info("Database closed")

    def __repr__(self) -> str:
        return f"SQLiteTransactionStore(db_path={self.db_path})"


# ============================================================================
# EXPORT
# ============================================================================

__all__ = [
    "SQLiteTransactionStore",
    "SCHEMA_VERSION",
]
