"""
Schema migrations for the SQLite store.

Migrations are numbered ``.sql`` files applied in filename order. Each file
holds an ``-- Up`` part and, after a ``-- Down`` marker, its rollback. Applied
files are recorded in ``_migrations``.

Each Up part runs in a single transaction together with its ``_migrations``
row, so a failing file leaves no tables behind and is retried on the next run.
"""

import logging
import sqlite3
from collections.abc import Iterator
from pathlib import Path

logger = logging.getLogger(__name__)

DOWN_MARKER = "-- Down"


def split_statements(script: str) -> Iterator[str]:
    """Yield the complete SQL statements of script, skipping comment-only text."""
    buffer = ""
    for line in script.splitlines(keepends=True):
        buffer += line
        if sqlite3.complete_statement(buffer):
            yield buffer.strip()
            buffer = ""
    if any(
        line.strip() and not line.strip().startswith("--") for line in buffer.splitlines()
    ):
        # Last statement without a terminating semicolon
        yield buffer.strip()


class SQLiteMigrator:
    def __init__(self, db_path: str, migrations_dir: str):
        self.db_path = db_path
        self.migrations_dir = Path(migrations_dir)

    def _connect(self) -> sqlite3.Connection:
        # Autocommit mode: transactions are opened and closed explicitly below
        conn = sqlite3.connect(self.db_path, isolation_level=None)
        conn.execute("PRAGMA foreign_keys = ON;")
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS _migrations (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                filename TEXT UNIQUE NOT NULL,
                applied_at DATETIME DEFAULT CURRENT_TIMESTAMP
            )
        """
        )
        return conn

    def pending(self) -> list[Path]:
        """Migration files not yet recorded as applied."""
        conn = self._connect()
        try:
            applied = {row[0] for row in conn.execute("SELECT filename FROM _migrations")}
        finally:
            conn.close()
        return [p for p in sorted(self.migrations_dir.glob("*.sql")) if p.name not in applied]

    def run_migrations(self) -> list[str]:
        """Apply all pending migrations. Returns the filenames applied."""
        applied_now: list[str] = []
        conn = self._connect()
        try:
            for path in self.pending():
                logger.info("Applying migration: %s", path.name)
                self._apply(conn, path)
                applied_now.append(path.name)
        finally:
            conn.close()

        logger.info("All migrations applied (%d new).", len(applied_now))
        return applied_now

    def _apply(self, conn: sqlite3.Connection, path: Path) -> None:
        up_script = path.read_text().split(DOWN_MARKER, 1)[0]
        conn.execute("BEGIN")
        try:
            for statement in split_statements(up_script):
                conn.execute(statement)
            conn.execute("INSERT INTO _migrations (filename) VALUES (?)", (path.name,))
            conn.execute("COMMIT")
        except sqlite3.Error as e:
            if conn.in_transaction:
                conn.execute("ROLLBACK")
            logger.error("Migration %s failed and was rolled back: %s", path.name, e)
            raise RuntimeError(f"Migration {path.name} failed: {e}") from e
