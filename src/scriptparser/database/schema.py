"""Database schema definitions for the script data store.

Three tables: ``script_projects``, ``tag_types`` and ``script_data``. Items
cascade away with their project or tag type. Tag type names are unique,
which is what makes get-or-create safe under concurrent first use.
"""

from __future__ import annotations

import sqlite3
from pathlib import Path

from scriptparser.config import get_logger
from scriptparser.models import DEFAULT_TAG_DESCRIPTIONS

logger = get_logger(__name__)

SCHEMA_VERSION = 1

# Millisecond timestamps keep newest-first ordering stable for rapid inserts
NOW_SQL = "(strftime('%Y-%m-%d %H:%M:%f', 'now'))"

SCHEMA_SQL = f"""
CREATE TABLE IF NOT EXISTS schema_info (
    version INTEGER PRIMARY KEY,
    applied_at TIMESTAMP DEFAULT {NOW_SQL},
    description TEXT
);

CREATE TABLE IF NOT EXISTS script_projects (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL CHECK (length(trim(name)) > 0),
    description TEXT,
    created_at TIMESTAMP NOT NULL DEFAULT {NOW_SQL},
    updated_at TIMESTAMP NOT NULL DEFAULT {NOW_SQL}
);

CREATE TABLE IF NOT EXISTS tag_types (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL UNIQUE,
    description TEXT,
    created_at TIMESTAMP NOT NULL DEFAULT {NOW_SQL}
);

CREATE TABLE IF NOT EXISTS script_data (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    project_id INTEGER NOT NULL
        REFERENCES script_projects(id) ON DELETE CASCADE,
    tag_type_id INTEGER NOT NULL
        REFERENCES tag_types(id) ON DELETE CASCADE,
    content TEXT NOT NULL,
    summary TEXT,
    metadata_json TEXT NOT NULL DEFAULT '{{}}' CHECK (json_valid(metadata_json)),
    created_at TIMESTAMP NOT NULL DEFAULT {NOW_SQL},
    updated_at TIMESTAMP NOT NULL DEFAULT {NOW_SQL}
);

CREATE INDEX IF NOT EXISTS idx_script_data_project
    ON script_data(project_id, tag_type_id, created_at);
CREATE INDEX IF NOT EXISTS idx_script_data_tag_type
    ON script_data(tag_type_id);

CREATE TRIGGER IF NOT EXISTS script_projects_touch
AFTER UPDATE ON script_projects
FOR EACH ROW WHEN NEW.updated_at = OLD.updated_at
BEGIN
    UPDATE script_projects SET updated_at = {NOW_SQL} WHERE id = OLD.id;
END;
"""


class DatabaseSchema:
    """Creates and inspects the script data store schema."""

    def __init__(self, db_path: str | Path) -> None:
        """Initialize schema manager.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = Path(db_path)

    def create_schema(self) -> None:
        """Create tables, indexes and seed tag types if missing."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        conn = sqlite3.connect(self.db_path)
        try:
            conn.execute("PRAGMA foreign_keys = ON")
            conn.executescript(SCHEMA_SQL)
            with conn:
                conn.executemany(
                    "INSERT OR IGNORE INTO tag_types (name, description) VALUES (?, ?)",
                    [(tag.value, text) for tag, text in DEFAULT_TAG_DESCRIPTIONS.items()],
                )
                conn.execute(
                    "INSERT OR IGNORE INTO schema_info (version, description) "
                    "VALUES (?, ?)",
                    (SCHEMA_VERSION, "Initial script data schema"),
                )
        finally:
            conn.close()

        logger.info("Database schema ready", db_path=str(self.db_path))

    def get_current_version(self) -> int:
        """Get the schema version recorded in the database (0 if none)."""
        if not self.db_path.exists():
            return 0

        conn = sqlite3.connect(self.db_path)
        try:
            row = conn.execute("SELECT MAX(version) FROM schema_info").fetchone()
        except sqlite3.OperationalError:
            return 0
        finally:
            conn.close()
        return int(row[0]) if row and row[0] is not None else 0

    def validate_schema(self) -> bool:
        """Check that all expected tables exist."""
        expected = {"schema_info", "script_projects", "tag_types", "script_data"}
        conn = sqlite3.connect(self.db_path)
        try:
            rows = conn.execute(
                "SELECT name FROM sqlite_master WHERE type = 'table'"
            ).fetchall()
        finally:
            conn.close()

        missing = expected - {row[0] for row in rows}
        if missing:
            logger.error("Missing tables", tables=sorted(missing))
            return False
        return True


def create_database(db_path: str | Path) -> DatabaseSchema:
    """Create (or complete) a script data store database.

    Args:
        db_path: Path to SQLite database file

    Returns:
        DatabaseSchema instance
    """
    schema = DatabaseSchema(db_path)
    schema.create_schema()
    return schema
