"""SQLite-based persistent storage for sequential deployment counters."""

import logging
import sqlite3
import threading
from typing import Iterator, Optional

from .store import check_increment

logger = logging.getLogger(__name__)

# Seconds a writer waits for another process's transaction on the same file.
BUSY_TIMEOUT = 30.0


class SQLiteNonceStore:
    """SQLite-backed counter table, one row per init code hash.

    Several processes may open the same file; ``increment_nonce`` runs its
    read and write inside one ``BEGIN IMMEDIATE`` transaction, so each
    counter value is handed out once across all of them.
    """

    def __init__(self, db_path: str = "nonces.db"):
        """
        Initialize SQLite storage.

        Args:
            db_path: Path to SQLite database file. Use ":memory:" for in-memory database.
        """
        self.db_path = db_path
        self._conn: sqlite3.Connection | None = None
        self._conn_lock = threading.Lock()
        self._init_db()
        logger.info("Opened nonce store at %s", db_path)

    def _get_conn(self) -> sqlite3.Connection:
        """Get or create database connection."""
        if self._conn is None:
            # Shared between worker threads; every use goes through _conn_lock.
            # Autocommit mode, transactions are opened explicitly.
            self._conn = sqlite3.connect(
                self.db_path,
                timeout=BUSY_TIMEOUT,
                isolation_level=None,
                check_same_thread=False,
            )
            self._conn.row_factory = sqlite3.Row
        return self._conn

    def _init_db(self):
        # Note: nonce is stored as TEXT because a 32-byte counter can exceed SQLite INTEGER range
        with self._conn_lock:
            self._get_conn().execute("""
                CREATE TABLE IF NOT EXISTS nonces (
                    code_hash BLOB PRIMARY KEY,
                    nonce TEXT NOT NULL DEFAULT '0'
                )
            """)

    def _read_nonce(self, conn: sqlite3.Connection, code_hash: bytes) -> int:
        row = conn.execute(
            "SELECT nonce FROM nonces WHERE code_hash = ?", (code_hash,)
        ).fetchone()
        return int(row["nonce"]) if row else 0

    def get_nonce(self, code_hash: bytes) -> int:
        with self._conn_lock:
            return self._read_nonce(self._get_conn(), code_hash)

    def set_nonce(self, code_hash: bytes, nonce: int) -> None:
        with self._conn_lock:
            self._get_conn().execute(
                "INSERT OR REPLACE INTO nonces (code_hash, nonce) VALUES (?, ?)",
                (code_hash, str(nonce)),
            )

    def increment_nonce(self, code_hash: bytes, expected: Optional[int], max_nonce: int) -> int:
        """Advance the counter by one and return the value consumed.

        Raises:
            StaleNonce: If ``expected`` is given and the stored counter differs
            CounterOverflow: If the stored counter is already ``max_nonce``
        """
        with self._conn_lock:
            conn = self._get_conn()
            # IMMEDIATE takes the write lock up front, before the read.
            conn.execute("BEGIN IMMEDIATE")
            try:
                current = self._read_nonce(conn, code_hash)
                check_increment(code_hash, current, expected, max_nonce)
                conn.execute(
                    "INSERT OR REPLACE INTO nonces (code_hash, nonce) VALUES (?, ?)",
                    (code_hash, str(current + 1)),
                )
            except BaseException:
                conn.execute("ROLLBACK")
                raise
            conn.execute("COMMIT")
        return current

    def has_nonce(self, code_hash: bytes) -> bool:
        with self._conn_lock:
            row = self._get_conn().execute(
                "SELECT 1 FROM nonces WHERE code_hash = ?", (code_hash,)
            ).fetchone()
        return row is not None

    def iter_nonces(self) -> Iterator[tuple[bytes, int]]:
        with self._conn_lock:
            rows = self._get_conn().execute(
                "SELECT code_hash, nonce FROM nonces ORDER BY code_hash"
            ).fetchall()
        return iter([(bytes(row["code_hash"]), int(row["nonce"])) for row in rows])

    def close(self):
        """Close database connection."""
        with self._conn_lock:
            if self._conn:
                self._conn.close()
                self._conn = None

    def __len__(self) -> int:
        with self._conn_lock:
            row = self._get_conn().execute("SELECT COUNT(*) AS n FROM nonces").fetchone()
        return row["n"]
