"""
Forward-only schema migrations.

Each `NNNN_name.sql` file in the migrations directory is applied once, in
filename order, and recorded in `schema_migrations`. Text after a
`-- Down` marker is the manual rollback and is never executed here.
"""

import logging
import sqlite3
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_MIGRATIONS_DIR = str(Path(__file__).parent / "migrations")
DOWN_MARKER = "-- Down"


def up_section(sql: str) -> str:
    return sql.split(DOWN_MARKER, 1)[0]


class SQLiteMigrator:
    def __init__(self, db_path: str, migrations_dir: str = DEFAULT_MIGRATIONS_DIR):
        self.db_path = db_path
        self.migrations_dir = Path(migrations_dir)

    def available(self) -> list[Path]:
        return sorted(self.migrations_dir.glob("*.sql"))

    def pending(self, conn: sqlite3.Connection) -> list[Path]:
        done = {row[0] for row in conn.execute("SELECT version FROM schema_migrations")}
        return [path for path in self.available() if path.name not in done]

    def run_migrations(self) -> list[str]:
        """Apply every pending migration; return the names applied by this call."""
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(self.db_path)
        try:
            conn.execute("PRAGMA foreign_keys = ON;")
            conn.execute(
                "CREATE TABLE IF NOT EXISTS schema_migrations ("
                " version TEXT PRIMARY KEY,"
                " applied_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP)"
            )
            conn.commit()

            applied: list[str] = []
            for path in self.pending(conn):
                logger.info(f"Applying migration {path.name}")
                self._apply(conn, path)
                applied.append(path.name)
            return applied
        finally:
            conn.close()

    def _apply(self, conn: sqlite3.Connection, path: Path) -> None:
        try:
            conn.executescript(up_section(path.read_text()))
            conn.execute("INSERT INTO schema_migrations (version) VALUES (?)", (path.name,))
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise RuntimeError(f"Migration {path.name} failed: {e}") from e
