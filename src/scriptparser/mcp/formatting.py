"""Plain-text renderings of backend results for tool callers."""

from __future__ import annotations

import json
from typing import Any

SUMMARY_PREVIEW_CHARS = 50
ORIGINAL_TEXT_CHARS = 100
SAMPLE_ITEMS_PER_TAG = 3


def truncate(text: str, limit: int) -> str:
    """Cut text to ``limit`` characters, marking the cut with an ellipsis."""
    if len(text) <= limit:
        return text
    return text[:limit] + "..."


def _or_none(value: Any) -> str:
    return str(value) if value else "None"


def format_created_project(project: dict[str, Any]) -> str:
    return f'Created script project "{project["name"]}" (ID: {project["id"]})'


def format_project_list(projects: list[dict[str, Any]]) -> str:
    if not projects:
        return "No script projects yet"

    lines = [f"Found {len(projects)} script projects:", ""]
    for project in projects:
        tag_types = project.get("tag_types") or []
        lines.append(f"[ID: {project['id']}] {project['name']}")
        lines.append(f"   Description: {_or_none(project.get('description'))}")
        lines.append(f"   Items: {project.get('data_count', 0)}")
        lines.append(f"   Tag types: {', '.join(tag_types) or 'None'}")
    return "\n".join(lines)


def format_project_detail(project: dict[str, Any]) -> str:
    """Render a project with a few sample items per tag group."""
    lines = [
        f"Project: {project['name']}",
        f"Description: {_or_none(project.get('description'))}",
        f"Created: {project.get('created_at')}",
        "",
    ]

    groups = project.get("data_by_tag") or []
    if not groups:
        lines.append("No classified data in this project yet")
        return "\n".join(lines)

    lines.append("Classified data:")
    lines.append("")
    for group in groups:
        items = group.get("items") or []
        lines.append(f"{group['type']} ({len(items)} items):")
        for index, item in enumerate(items[:SAMPLE_ITEMS_PER_TAG], start=1):
            preview = item.get("summary") or truncate(
                item["content"], SUMMARY_PREVIEW_CHARS
            )
            lines.append(f"   {index}. {preview}")
        if len(items) > SAMPLE_ITEMS_PER_TAG:
            lines.append(f"   ... and {len(items) - SAMPLE_ITEMS_PER_TAG} more")
        lines.append("")
    return "\n".join(lines).rstrip()


def format_parse_result(project_id: int, tag_type: str, count: int) -> str:
    return "\n".join(
        [
            "Stored script content:",
            f"Tag type: {tag_type}",
            f"Items: {count}",
            f"Project ID: {project_id}",
        ]
    )


def format_tag_data(data: dict[str, Any]) -> str:
    """Render all items of one tag type, summaries first."""
    items = data.get("items") or []
    if not items:
        return f'No "{data["tag_type"]}" data in project {data["project_id"]}'

    lines = [f"{data['tag_type']} data ({len(items)} items):", ""]
    for index, item in enumerate(items, start=1):
        content = item["content"]
        summary = item.get("summary")
        lines.append(f"{index}. {summary or content}")
        if summary and summary != content:
            lines.append(f"   Original: {truncate(content, ORIGINAL_TEXT_CHARS)}")
        if item.get("metadata"):
            metadata = json.dumps(item["metadata"], ensure_ascii=False)
            lines.append(f"   Metadata: {metadata}")
        lines.append(f"   Created: {item.get('created_at')}")
        lines.append("")
    return "\n".join(lines).rstrip()


def format_tag_types(tag_types: list[dict[str, Any]]) -> str:
    if not tag_types:
        return "No tag types defined"

    lines = ["Available tag types:", ""]
    for tag_type in tag_types:
        description = tag_type.get("description") or "No description"
        lines.append(
            f"{tag_type['name']}: {description} "
            f"(used {tag_type.get('usage_count', 0)} times)"
        )
    return "\n".join(lines)


def format_deleted_project(project_id: int) -> str:
    return f"Deleted script project (ID: {project_id})"
