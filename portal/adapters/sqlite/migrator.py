"""
Schema migrations for the portal database.

Each `migrations/NNN_*.sql` file is applied once, in name order, and recorded
with the checksum of its Up section. An applied file whose Up section has
since changed stops the run. After migrating, the portal tables must exist.
"""

import hashlib
import logging
import sqlite3
from pathlib import Path

logger = logging.getLogger(__name__)

PORTAL_TABLES = frozenset({"communities", "members", "community_invites", "notifications"})


class MigrationError(RuntimeError):
    """Raised when a migration fails, has drifted, or leaves the schema incomplete."""


class SQLiteMigrator:
    def __init__(
        self,
        db_path: str,
        migrations_dir: str,
        required_tables: frozenset[str] = PORTAL_TABLES,
    ):
        self.db_path = db_path
        self.migrations_dir = Path(migrations_dir)
        self.required_tables = required_tables

    def _get_connection(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.execute("PRAGMA foreign_keys = ON;")
        return conn

    def _ensure_migration_table(self, conn: sqlite3.Connection) -> None:
        conn.execute("""
            CREATE TABLE IF NOT EXISTS _migrations (
                filename TEXT PRIMARY KEY,
                checksum TEXT NOT NULL,
                applied_at DATETIME DEFAULT CURRENT_TIMESTAMP
            );
        """)

    def _applied(self, conn: sqlite3.Connection) -> dict[str, str]:
        rows = conn.execute("SELECT filename, checksum FROM _migrations").fetchall()
        return {filename: checksum for filename, checksum in rows}

    def _scripts(self) -> list[Path]:
        return sorted(self.migrations_dir.glob("*.sql"))

    @staticmethod
    def _up_section(path: Path) -> str:
        # Anything after "-- Down" is the rollback and is never applied
        return path.read_text().split("-- Down")[0]

    @staticmethod
    def _checksum(script: str) -> str:
        return hashlib.sha256(script.strip().encode()).hexdigest()

    def pending(self) -> list[str]:
        """Filenames not yet applied to the database."""
        conn = self._get_connection()
        try:
            self._ensure_migration_table(conn)
            applied = self._applied(conn)
        finally:
            conn.close()
        return [p.name for p in self._scripts() if p.name not in applied]

    def run_migrations(self) -> list[str]:
        """Apply pending migrations and verify the schema. Returns the filenames applied."""
        if not self.migrations_dir.is_dir():
            raise MigrationError(f"Migrations directory not found: {self.migrations_dir}")

        conn = self._get_connection()
        applied_now: list[str] = []
        try:
            self._ensure_migration_table(conn)
            applied = self._applied(conn)

            for path in self._scripts():
                script = self._up_section(path)
                checksum = self._checksum(script)

                if path.name in applied:
                    if applied[path.name] != checksum:
                        raise MigrationError(
                            f"Migration {path.name} was modified after it was applied"
                        )
                    continue

                logger.info("Applying migration: %s", path.name)
                self._apply(conn, path.name, script, checksum)
                applied_now.append(path.name)

            self._verify_schema(conn)
        finally:
            conn.close()

        logger.info("Schema up to date (%d migrations applied this run)", len(applied_now))
        return applied_now

    def _apply(self, conn: sqlite3.Connection, filename: str, script: str, checksum: str) -> None:
        try:
            conn.executescript(script)
            conn.execute(
                "INSERT INTO _migrations (filename, checksum) VALUES (?, ?)", (filename, checksum)
            )
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise MigrationError(f"Migration {filename} failed: {e}") from e

    def _verify_schema(self, conn: sqlite3.Connection) -> None:
        rows = conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'").fetchall()
        missing = self.required_tables - {r[0] for r in rows}
        if missing:
            raise MigrationError(f"Schema is missing tables: {', '.join(sorted(missing))}")
