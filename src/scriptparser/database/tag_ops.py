"""Tag type and classified data operations."""

from __future__ import annotations

import json
import sqlite3
from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import BaseModel

from scriptparser.config import get_logger
from scriptparser.exceptions import NotFoundError, ValidationError
from scriptparser.models import ClassifyResult, DataItem, DataItemInput, TagTypeUsage

from .connection_manager import DatabaseConnectionManager
from .project_ops import row_to_item

logger = get_logger(__name__)


def _coerce_metadata(value: Any, field: str) -> dict[str, Any]:
    """Accept a JSON object (or its serialized text) without interpreting it."""
    if value is None:
        return {}
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except json.JSONDecodeError as e:
            raise ValidationError(
                f"Metadata is not valid JSON: {e.msg}", field=field
            ) from e
    if not isinstance(value, dict):
        raise ValidationError("Metadata must be a JSON object", field=field)
    try:
        json.dumps(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(
            f"Metadata is not JSON serializable: {e}", field=field
        ) from e
    return value


def validate_items(items: Any) -> list[DataItemInput]:
    """Validate a raw item batch before anything is written.

    Args:
        items: Sequence of mappings with ``content`` and optional
            ``summary`` / ``metadata``

    Returns:
        Normalized items

    Raises:
        ValidationError: On an empty batch or any malformed item
    """
    if isinstance(items, str | bytes) or not isinstance(items, Sequence):
        raise ValidationError("Items must be a list", field="items")
    if not items:
        raise ValidationError("Items must contain at least one entry", field="items")

    validated = []
    for index, raw in enumerate(items):
        prefix = f"items.{index}"
        if isinstance(raw, BaseModel):
            raw = raw.model_dump()
        if not isinstance(raw, Mapping):
            raise ValidationError("Each item must be an object", field=prefix)

        content = raw.get("content")
        if not isinstance(content, str) or not content.strip():
            raise ValidationError(
                "Item content is required", field=f"{prefix}.content"
            )
        summary = raw.get("summary")
        if summary is not None and not isinstance(summary, str):
            raise ValidationError(
                "Item summary must be a string", field=f"{prefix}.summary"
            )

        validated.append(
            DataItemInput(
                content=content,
                summary=summary,
                metadata=_coerce_metadata(raw.get("metadata"), f"{prefix}.metadata"),
            )
        )
    return validated


class TagOperations:
    """Tag type lookup and classification of data items."""

    def __init__(self, connection: DatabaseConnectionManager) -> None:
        """Initialize tag operations.

        Args:
            connection: Pooled connection manager
        """
        self.connection = connection

    @staticmethod
    def get_or_create_tag_type(conn: sqlite3.Connection, name: str) -> int:
        """Resolve a tag type name to its id, creating the row on first use.

        Relies on the unique constraint on ``tag_types.name``: a concurrent
        writer that wins the race makes our insert a no-op, and the
        following select sees its row.
        """
        conn.execute("INSERT OR IGNORE INTO tag_types (name) VALUES (?)", (name,))
        row = conn.execute("SELECT id FROM tag_types WHERE name = ?", (name,)).fetchone()
        return int(row["id"])

    def classify(
        self, project_id: int, tag_type: Any, items: Any
    ) -> ClassifyResult:
        """Store a batch of items under a tag type in one transaction.

        Args:
            project_id: Owning project
            tag_type: Tag type name; created if it does not exist yet
            items: Raw items (see ``validate_items``)

        Returns:
            Classification summary

        Raises:
            ValidationError: If the tag type or any item is invalid
            NotFoundError: If the project does not exist
        """
        if not isinstance(tag_type, str) or not tag_type.strip():
            raise ValidationError("Tag type must not be empty", field="tag_type")
        batch = validate_items(items)

        with self.connection.transaction(immediate=True) as conn:
            exists = conn.execute(
                "SELECT 1 FROM script_projects WHERE id = ?", (project_id,)
            ).fetchone()
            if exists is None:
                raise NotFoundError(
                    f"Project {project_id} not found",
                    details={"project_id": project_id},
                )

            tag_type_id = self.get_or_create_tag_type(conn, tag_type)
            conn.executemany(
                """
                INSERT INTO script_data
                    (project_id, tag_type_id, content, summary, metadata_json)
                VALUES (?, ?, ?, ?, ?)
                """,
                [
                    (
                        project_id,
                        tag_type_id,
                        item.content,
                        item.summary,
                        json.dumps(item.metadata, ensure_ascii=False),
                    )
                    for item in batch
                ],
            )
            conn.execute(
                "UPDATE script_projects SET updated_at = "
                "strftime('%Y-%m-%d %H:%M:%f', 'now') WHERE id = ?",
                (project_id,),
            )

        logger.info(
            "Classified items",
            project_id=project_id,
            tag_type=tag_type,
            count=len(batch),
        )
        return ClassifyResult(
            project_id=project_id,
            tag_type=tag_type,
            tag_type_id=tag_type_id,
            count=len(batch),
        )

    def get_by_tag(self, project_id: int, tag_type: str) -> list[DataItem]:
        """Get a project's items for one tag type, newest first.

        Unknown projects or tag types simply yield an empty list.
        """
        with self.connection.readonly() as conn:
            rows = conn.execute(
                """
                SELECT d.id, d.content, d.summary, d.metadata_json,
                       d.created_at, d.updated_at
                FROM script_data d
                JOIN tag_types t ON t.id = d.tag_type_id
                WHERE d.project_id = ? AND t.name = ?
                ORDER BY d.created_at DESC, d.id DESC
                """,
                (project_id, tag_type),
            ).fetchall()
        return [row_to_item(row) for row in rows]

    def list_tag_types(self) -> list[TagTypeUsage]:
        """List tag types by name with the number of items using each."""
        with self.connection.readonly() as conn:
            rows = conn.execute(
                """
                SELECT t.id, t.name, t.description, t.created_at,
                       COUNT(d.id) AS usage_count
                FROM tag_types t
                LEFT JOIN script_data d ON d.tag_type_id = t.id
                GROUP BY t.id
                ORDER BY t.name
                """
            ).fetchall()
        return [TagTypeUsage.model_validate(dict(row)) for row in rows]
