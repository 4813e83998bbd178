"""
Warden - Database Manager
=========================

Central SQLite database manager for sessions, users and guild settings.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

import sqlite3
import threading
from pathlib import Path
from typing import Optional, List, Tuple

from warden.core.logger import logger
from warden.core.constants import DB_CONNECTION_TIMEOUT, SQLITE_BUSY_TIMEOUT

from warden.core.database.schema import SchemaMixin
from warden.core.database.sessions import SessionsMixin
from warden.core.database.users import UsersMixin
from warden.core.database.guilds import GuildsMixin


# =============================================================================
# Constants
# =============================================================================

# Path: warden/core/database/manager.py -> go up 4 levels to reach project root
DATA_DIR: Path = Path(__file__).parent.parent.parent.parent / "data"
DB_PATH: Path = DATA_DIR / "warden.db"


# =============================================================================
# Database Manager (Singleton)
# =============================================================================

class DatabaseManager(
    SchemaMixin,
    SessionsMixin,
    UsersMixin,
    GuildsMixin,
):
    """
    Centralized database manager with thread-safe operations.

    DESIGN: Singleton pattern ensures a single database connection shared
    by the bot and the API. Uses WAL mode for concurrent readers.
    All operations are thread-safe via internal locking.
    """

    _instance: Optional["DatabaseManager"] = None
    _lock: threading.Lock = threading.Lock()

    def __new__(cls, db_path: Optional[Path] = None) -> "DatabaseManager":
        """Singleton pattern - only one instance."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
                    cls._instance._initialized = False
        return cls._instance

    def __init__(self, db_path: Optional[Path] = None) -> None:
        """
        Initialize database connection and tables.

        Args:
            db_path: Database file. Only honoured on first construction.
        """
        if self._initialized:
            return

        self._db_lock: threading.Lock = threading.Lock()
        self._conn: Optional[sqlite3.Connection] = None
        self.db_path: Path = Path(db_path) if db_path is not None else DB_PATH

        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._connect()
        self._init_tables()
        self._initialized = True

        logger.tree("Database Manager Initialized", [
            ("Path", str(self.db_path)),
            ("WAL Mode", "Enabled"),
        ], emoji="🗄️")

    # =========================================================================
    # Connection Management
    # =========================================================================

    def _connect(self) -> None:
        """Establish database connection with WAL mode."""
        try:
            self._conn = sqlite3.connect(
                str(self.db_path),
                check_same_thread=False,
                timeout=DB_CONNECTION_TIMEOUT,
            )
            self._conn.execute("PRAGMA journal_mode=WAL")
            self._conn.execute("PRAGMA synchronous=NORMAL")
            self._conn.execute("PRAGMA foreign_keys=ON")
            self._conn.execute(f"PRAGMA busy_timeout={SQLITE_BUSY_TIMEOUT}")
            self._conn.row_factory = sqlite3.Row
        except sqlite3.Error as e:
            logger.error("Database Connection Failed", [("Error", str(e))])
            raise

    def _ensure_connection(self) -> sqlite3.Connection:
        """Ensure connection is valid, reconnect if needed."""
        if self._conn is None:
            self._connect()
        try:
            self._conn.execute("SELECT 1")
        except sqlite3.Error:
            self._connect()
        return self._conn

    def execute(
        self,
        query: str,
        params: Tuple = (),
        commit: bool = True
    ) -> sqlite3.Cursor:
        """Execute a query with thread safety."""
        with self._db_lock:
            conn = self._ensure_connection()
            cursor = conn.cursor()
            cursor.execute(query, params)
            if commit:
                conn.commit()
            return cursor

    def fetchone(self, query: str, params: Tuple = ()) -> Optional[sqlite3.Row]:
        """Execute query and fetch one result."""
        cursor = self.execute(query, params, commit=False)
        return cursor.fetchone()

    def fetchall(self, query: str, params: Tuple = ()) -> List[sqlite3.Row]:
        """Execute query and fetch all results."""
        cursor = self.execute(query, params, commit=False)
        return cursor.fetchall()

    def close(self) -> None:
        """Close database connection."""
        with self._db_lock:
            if self._conn:
                self._conn.close()
                self._conn = None
                logger.info("Database Connection Closed")

    # =========================================================================
    # Transaction Support
    # =========================================================================

    class Transaction:
        """
        Context manager for atomic database transactions.

        Usage:
            with db.transaction() as tx:
                tx.execute("INSERT INTO ...", (...))
                tx.execute("UPDATE ...", (...))
            # Commits on success, rolls back on exception
        """

        def __init__(self, db: "DatabaseManager"):
            self._db = db
            self._cursor: Optional[sqlite3.Cursor] = None

        def __enter__(self) -> "DatabaseManager.Transaction":
            self._db._db_lock.acquire()
            conn = self._db._ensure_connection()
            conn.execute("BEGIN IMMEDIATE")
            self._cursor = conn.cursor()
            return self

        def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
            conn = self._db._ensure_connection()
            try:
                if exc_type is None:
                    conn.commit()
                else:
                    conn.rollback()
                    logger.warning("Database Transaction Rolled Back", [
                        ("Error", str(exc_val)[:100] if exc_val else "Unknown"),
                    ])
            finally:
                self._db._db_lock.release()
            return False  # Don't suppress exceptions

        def execute(self, query: str, params: Tuple = ()) -> sqlite3.Cursor:
            """Execute a query within this transaction."""
            self._cursor.execute(query, params)
            return self._cursor

    def transaction(self) -> "DatabaseManager.Transaction":
        """Create a new transaction context manager."""
        return self.Transaction(self)


# =============================================================================
# Global Instance
# =============================================================================

def get_db() -> DatabaseManager:
    """Get the global database manager instance."""
    return DatabaseManager()


__all__ = ["DatabaseManager", "get_db", "DB_PATH", "DATA_DIR"]
