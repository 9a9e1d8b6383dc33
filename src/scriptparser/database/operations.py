"""High-level facade over the script data store.

``ScriptDataStore`` owns the schema and the connection pool and delegates
to the specialized operation classes, so callers (the HTTP service, the
CLI) deal with one object.
"""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Any

from scriptparser.config import ScriptParserSettings, get_logger
from scriptparser.exceptions import DatabaseError
from scriptparser.models import (
    ClassifyResult,
    DataItem,
    Project,
    ProjectDetail,
    ProjectSummary,
    TagTypeUsage,
)

from .connection_manager import DatabaseConnectionManager
from .project_ops import ProjectOperations
from .schema import create_database
from .tag_ops import TagOperations

logger = get_logger(__name__)


class ScriptDataStore:
    """Relational store for script projects, tag types and tagged data."""

    def __init__(
        self, settings: ScriptParserSettings, db_path: Path | None = None
    ) -> None:
        """Initialize the store without touching the database.

        Args:
            settings: Configuration settings
            db_path: Database path (defaults to settings.database_path)
        """
        self.settings = settings
        self.db_path = Path(db_path or settings.database_path)
        self._connection: DatabaseConnectionManager | None = None
        self._projects: ProjectOperations | None = None
        self._tags: TagOperations | None = None

    def initialize(self) -> ScriptDataStore:
        """Create the schema if needed and open the connection pool.

        Returns:
            The store itself, ready for use

        Raises:
            DatabaseError: If the database cannot be created or opened
        """
        if self._connection is not None:
            return self

        try:
            create_database(self.db_path)
        except (OSError, sqlite3.Error) as e:
            raise DatabaseError(
                message=f"Failed to initialize database: {e}",
                hint="Check that the database directory exists and is writable",
                details={"db_path": str(self.db_path)},
            ) from e

        self._connection = DatabaseConnectionManager(self.settings, self.db_path)
        self._projects = ProjectOperations(self._connection)
        self._tags = TagOperations(self._connection)
        logger.info("Script data store ready", db_path=str(self.db_path))
        return self

    @property
    def connection(self) -> DatabaseConnectionManager:
        """The underlying connection manager."""
        if self._connection is None:
            raise DatabaseError(
                message="Script data store is not initialized",
                hint="Call initialize() before using the store",
            )
        return self._connection

    @property
    def projects(self) -> ProjectOperations:
        """Project operations."""
        if self._projects is None:
            self.initialize()
        assert self._projects is not None
        return self._projects

    @property
    def tags(self) -> TagOperations:
        """Tag and data item operations."""
        if self._tags is None:
            self.initialize()
        assert self._tags is not None
        return self._tags

    # Project operations
    def create_project(self, name: Any, description: Any = None) -> Project:
        """Create a new project."""
        return self.projects.create_project(name, description)

    def list_projects(self) -> list[ProjectSummary]:
        """List projects newest first with aggregates."""
        return self.projects.list_projects()

    def get_project(self, project_id: int) -> ProjectDetail:
        """Get a project with its items grouped by tag type."""
        return self.projects.get_project(project_id)

    def delete_project(self, project_id: int) -> None:
        """Delete a project and its items."""
        self.projects.delete_project(project_id)

    # Tag operations
    def classify(self, project_id: int, tag_type: Any, items: Any) -> ClassifyResult:
        """Store a batch of items under a tag type atomically."""
        return self.tags.classify(project_id, tag_type, items)

    def get_by_tag(self, project_id: int, tag_type: str) -> list[DataItem]:
        """Get a project's items for one tag type."""
        return self.tags.get_by_tag(project_id, tag_type)

    def list_tag_types(self) -> list[TagTypeUsage]:
        """List tag types with usage counts."""
        return self.tags.list_tag_types()

    def get_stats(self) -> dict[str, Any]:
        """Get pool statistics and the database location."""
        stats: dict[str, Any] = {"db_path": str(self.db_path)}
        if self._connection is not None:
            stats["pool"] = self._connection.get_pool_stats()
        return stats

    def close(self) -> None:
        """Close the connection pool."""
        if self._connection is not None:
            self._connection.close()
            self._connection = None
            self._projects = None
            self._tags = None

    def __enter__(self) -> ScriptDataStore:
        """Context manager entry."""
        return self.initialize()

    def __exit__(self, *args: Any) -> None:
        """Context manager exit."""
        self.close()
