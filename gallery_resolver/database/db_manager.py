"""Database operations for Gallery Resolver."""

import logging
import os
import sqlite3
from typing import Any, List, Optional, Tuple

from gallery_resolver.database.models import AlbumRecord

logger = logging.getLogger(__name__)

GALLERY_TABLE = "gallery"


class DatabaseError(Exception):
    """Database error exception."""


class DatabaseManager:
    """Manages database operations for the gallery table."""

    def __init__(self, db_path: str = "gallery.db", dry_run: bool = False):
        """Initialize database manager.

        Args:
            db_path: Path to SQLite database file
            dry_run: If True, show SQL write operations without executing them
        """
        self.db_path = db_path
        self.conn = None
        self.cursor = None
        self.dry_run = dry_run

    def _execute(self, sql: str, params: Tuple[Any, ...] = None) -> None:
        """Execute SQL with optional dry run mode.

        Args:
            sql: SQL query to execute
            params: Query parameters
        """
        if self.dry_run:
            if params:
                sql_formatted = sql.replace("?", "%r")
                print(f"[DRY RUN] Would execute: {sql_formatted % tuple(params)}")
            else:
                print(f"[DRY RUN] Would execute: {sql}")
            return

        if not self.conn or not self.cursor:
            self.connect()

        if params:
            self.cursor.execute(sql, params)
        else:
            self.cursor.execute(sql)

    def _commit(self) -> None:
        """Commit transaction with dry run support."""
        if self.dry_run:
            print("Would commit transaction")
            return
        self.conn.commit()

    def connect(self) -> None:
        """Connect to the database."""
        try:
            self.conn = sqlite3.connect(self.db_path)
            self.cursor = self.conn.cursor()
        except sqlite3.Error as e:
            raise DatabaseError(f"Failed to connect to database: {e}") from e

    def close(self) -> None:
        """Close the connection if one is open."""
        if self.conn:
            self.conn.close()
        self.conn = None
        self.cursor = None

    def __enter__(self) -> "DatabaseManager":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    def init_database(self) -> None:
        """Create the gallery table if it does not exist."""
        try:
            self._execute(
                f"""
                CREATE TABLE IF NOT EXISTS {GALLERY_TABLE} (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    url TEXT NOT NULL,
                    carpeta TEXT NOT NULL,
                    nombre TEXT,
                    fecha TEXT,
                    formato TEXT,
                    size TEXT,
                    dimensiones TEXT
                )
            """
            )
            self._commit()
        except sqlite3.Error as e:
            raise DatabaseError(f"Failed to initialize database: {e}") from e

    def store_album(
        self,
        url: str,
        carpeta: str,
        nombre: Optional[str] = None,
        fecha: Optional[str] = None,
        formato: Optional[str] = None,
        size: Optional[str] = None,
        dimensiones: Optional[str] = None,
    ) -> Optional[int]:
        """Insert one album record.

        Returns:
            The id assigned by the database, or None in dry run mode
        """
        try:
            self._execute(
                f"""
                INSERT INTO {GALLERY_TABLE} (url, carpeta, nombre, fecha, formato, size, dimensiones)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (url, carpeta, nombre, fecha, formato, size, dimensiones),
            )
            self._commit()
        except sqlite3.Error as e:
            raise DatabaseError(f"Failed to store album: {e}") from e
        if self.dry_run:
            return None
        return self.cursor.lastrowid

    def get_all_albums(self) -> List[AlbumRecord]:
        """Read every album record ordered by id ascending.

        Raises:
            DatabaseError: If the database file is missing or the query fails
        """
        if not os.path.exists(self.db_path):
            raise DatabaseError(f"Database file not found: {self.db_path}")

        if not self.conn or not self.cursor:
            self.connect()

        try:
            self.cursor.execute(f"SELECT * FROM {GALLERY_TABLE} ORDER BY id ASC")
            columns = [description[0].lower() for description in self.cursor.description]
            rows = self.cursor.fetchall()
        except sqlite3.Error as e:
            raise DatabaseError(f"Failed to read albums: {e}") from e

        logger.debug("Read %d album records from %s", len(rows), self.db_path)
        return [AlbumRecord.from_row(row, columns) for row in rows]

    def count_albums(self) -> int:
        """Count album records."""
        if not self.conn or not self.cursor:
            self.connect()
        try:
            self.cursor.execute(f"SELECT COUNT(*) FROM {GALLERY_TABLE}")
            return self.cursor.fetchone()[0]
        except sqlite3.Error as e:
            raise DatabaseError(f"Failed to count albums: {e}") from e

    def list_tables(self) -> List[str]:
        """List all tables in the database."""
        if not self.conn or not self.cursor:
            self.connect()
        try:
            self.cursor.execute("SELECT name FROM sqlite_master WHERE type='table'")
            return [row[0] for row in self.cursor.fetchall()]
        except sqlite3.Error as e:
            raise DatabaseError(f"Failed to list tables: {e}") from e
