"""Project-level operations for the script data store."""

from __future__ import annotations

import json
from typing import Any

from scriptparser.config import get_logger
from scriptparser.exceptions import NotFoundError, ValidationError
from scriptparser.models import (
    DataItem,
    Project,
    ProjectDetail,
    ProjectSummary,
    TagGroup,
)

from .connection_manager import DatabaseConnectionManager

logger = get_logger(__name__)

_PROJECT_COLUMNS = "id, name, description, created_at, updated_at"


def row_to_item(row: Any) -> DataItem:
    """Build a DataItem from a ``script_data`` row."""
    return DataItem(
        id=row["id"],
        content=row["content"],
        summary=row["summary"],
        metadata=json.loads(row["metadata_json"] or "{}"),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


class ProjectOperations:
    """Create, list, fetch and delete script projects."""

    def __init__(self, connection: DatabaseConnectionManager) -> None:
        """Initialize project operations.

        Args:
            connection: Pooled connection manager
        """
        self.connection = connection

    def create_project(self, name: Any, description: Any = None) -> Project:
        """Create a new project.

        Args:
            name: Project name; must be a non-blank string
            description: Optional free-form description

        Returns:
            The stored project

        Raises:
            ValidationError: If the name is missing or blank
        """
        if not isinstance(name, str) or not name.strip():
            raise ValidationError("Project name must not be empty", field="name")
        if description is not None and not isinstance(description, str):
            raise ValidationError("Description must be a string", field="description")

        with self.connection.transaction() as conn:
            cursor = conn.execute(
                "INSERT INTO script_projects (name, description) VALUES (?, ?)",
                (name, description),
            )
            row = conn.execute(
                f"SELECT {_PROJECT_COLUMNS} FROM script_projects WHERE id = ?",
                (cursor.lastrowid,),
            ).fetchone()

        project = Project.model_validate(dict(row))
        logger.info("Created project", project_id=project.id, name=project.name)
        return project

    def list_projects(self) -> list[ProjectSummary]:
        """List projects newest first with item counts and tag names."""
        with self.connection.readonly() as conn:
            rows = conn.execute(
                """
                SELECT p.id, p.name, p.description, p.created_at, p.updated_at,
                       COUNT(d.id) AS data_count,
                       json_group_array(DISTINCT t.name) AS tag_types_json
                FROM script_projects p
                LEFT JOIN script_data d ON d.project_id = p.id
                LEFT JOIN tag_types t ON t.id = d.tag_type_id
                GROUP BY p.id
                ORDER BY p.created_at DESC, p.id DESC
                """
            ).fetchall()

        projects = []
        for row in rows:
            data = dict(row)
            names = json.loads(data.pop("tag_types_json") or "[]")
            data["tag_types"] = sorted(n for n in names if n is not None)
            projects.append(ProjectSummary.model_validate(data))
        return projects

    def get_project(self, project_id: int) -> ProjectDetail:
        """Get a project with its items grouped by tag type.

        Groups are ordered by tag-type name, items newest first.

        Raises:
            NotFoundError: If the project does not exist
        """
        with self.connection.readonly() as conn:
            project_row = conn.execute(
                f"SELECT {_PROJECT_COLUMNS} FROM script_projects WHERE id = ?",
                (project_id,),
            ).fetchone()
            if project_row is None:
                raise NotFoundError(
                    f"Project {project_id} not found",
                    details={"project_id": project_id},
                )

            rows = conn.execute(
                """
                SELECT d.id, d.content, d.summary, d.metadata_json,
                       d.created_at, d.updated_at,
                       t.name AS tag_type_name,
                       t.description AS tag_type_description
                FROM script_data d
                JOIN tag_types t ON t.id = d.tag_type_id
                WHERE d.project_id = ?
                ORDER BY t.name, d.created_at DESC, d.id DESC
                """,
                (project_id,),
            ).fetchall()

        groups: dict[str, TagGroup] = {}
        for row in rows:
            name = row["tag_type_name"]
            if name not in groups:
                groups[name] = TagGroup(
                    type=name, description=row["tag_type_description"]
                )
            groups[name].items.append(row_to_item(row))

        return ProjectDetail(
            **dict(project_row),
            data_by_tag=list(groups.values()),
        )

    def delete_project(self, project_id: int) -> None:
        """Delete a project and, by cascade, all of its items.

        Raises:
            NotFoundError: If no project row was deleted
        """
        with self.connection.transaction() as conn:
            cursor = conn.execute(
                "DELETE FROM script_projects WHERE id = ?", (project_id,)
            )
            deleted = cursor.rowcount

        if deleted == 0:
            raise NotFoundError(
                f"Project {project_id} not found",
                details={"project_id": project_id},
            )
        logger.info("Deleted project", project_id=project_id)
