"""The fixed catalog of tool operations.

Each ``ToolSpec`` pairs a pydantic input model (its JSON Schema is what
clients see) with an async handler that makes exactly one backend call
and renders the outcome as text.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, Field, StrictInt, StrictStr

from scriptparser.mcp import formatting
from scriptparser.mcp.client import ScriptAPIClient
from scriptparser.models import MAX_ROW_ID, MIN_ROW_ID


class EmptyInput(BaseModel):
    """Operations that take no arguments."""


class CreateProjectInput(BaseModel):
    name: StrictStr = Field(min_length=1, description="Project name")
    description: StrictStr | None = Field(
        default=None, description="Project description"
    )


class ProjectIdInput(BaseModel):
    project_id: StrictInt = Field(
        ge=MIN_ROW_ID, le=MAX_ROW_ID, description="Project ID"
    )


class ScriptItemInput(BaseModel):
    """One already-extracted piece of script content."""

    content: StrictStr = Field(min_length=1, description="Original content")
    summary: StrictStr | None = Field(default=None, description="Short summary")
    metadata: dict[str, Any] | None = Field(
        default=None, description="Additional metadata (any JSON object)"
    )


class ParseContentInput(BaseModel):
    project_id: StrictInt = Field(
        ge=MIN_ROW_ID, le=MAX_ROW_ID, description="Project ID"
    )
    tag_type: StrictStr = Field(
        min_length=1,
        description=(
            "Tag type: character, scene, prop, plot, dialogue, action, "
            "or any new label"
        ),
    )
    items: list[ScriptItemInput] = Field(
        min_length=1, description="Items to classify under the tag type"
    )


class TagQueryInput(BaseModel):
    project_id: StrictInt = Field(
        ge=MIN_ROW_ID, le=MAX_ROW_ID, description="Project ID"
    )
    tag_type: StrictStr = Field(min_length=1, description="Tag type")


Handler = Callable[[ScriptAPIClient, Any], Awaitable[str]]


@dataclass(frozen=True)
class ToolSpec:
    """A named operation with its argument schema and handler."""

    name: str
    description: str
    input_model: type[BaseModel]
    handler: Handler

    def input_schema(self) -> dict[str, Any]:
        """JSON Schema advertised for the tool's arguments."""
        return self.input_model.model_json_schema()


async def _create_project(client: ScriptAPIClient, args: CreateProjectInput) -> str:
    project = await client.create_project(args.name, args.description)
    return formatting.format_created_project(project)


async def _list_projects(client: ScriptAPIClient, args: EmptyInput) -> str:
    return formatting.format_project_list(await client.list_projects())


async def _get_project(client: ScriptAPIClient, args: ProjectIdInput) -> str:
    return formatting.format_project_detail(await client.get_project(args.project_id))


async def _parse_content(client: ScriptAPIClient, args: ParseContentInput) -> str:
    items = [item.model_dump(exclude_none=True) for item in args.items]
    data = await client.parse_content(args.project_id, args.tag_type, items)
    return formatting.format_parse_result(
        args.project_id, args.tag_type, int(data.get("count", len(items)))
    )


async def _get_by_tag(client: ScriptAPIClient, args: TagQueryInput) -> str:
    data = await client.get_by_tag(args.project_id, args.tag_type)
    return formatting.format_tag_data(data)


async def _list_tag_types(client: ScriptAPIClient, args: EmptyInput) -> str:
    return formatting.format_tag_types(await client.list_tag_types())


async def _delete_project(client: ScriptAPIClient, args: ProjectIdInput) -> str:
    await client.delete_project(args.project_id)
    return formatting.format_deleted_project(args.project_id)


TOOLS: tuple[ToolSpec, ...] = (
    ToolSpec(
        name="create_project",
        description="Create a new script project",
        input_model=CreateProjectInput,
        handler=_create_project,
    ),
    ToolSpec(
        name="list_script_projects",
        description="List all script projects",
        input_model=EmptyInput,
        handler=_list_projects,
    ),
    ToolSpec(
        name="get_script_project",
        description="Get a script project with its classified data",
        input_model=ProjectIdInput,
        handler=_get_project,
    ),
    ToolSpec(
        name="parse_script_content",
        description=(
            "Store already-extracted script content (characters, scenes, "
            "props, ...) in a project under a tag type"
        ),
        input_model=ParseContentInput,
        handler=_parse_content,
    ),
    ToolSpec(
        name="get_script_data_by_tag",
        description="Get a project's data for one tag type",
        input_model=TagQueryInput,
        handler=_get_by_tag,
    ),
    ToolSpec(
        name="list_tag_types",
        description="List all available tag types",
        input_model=EmptyInput,
        handler=_list_tag_types,
    ),
    ToolSpec(
        name="delete_script_project",
        description="Delete a script project and all of its data",
        input_model=ProjectIdInput,
        handler=_delete_project,
    ),
)

CATALOG: dict[str, ToolSpec] = {spec.name: spec for spec in TOOLS}

# Accepted on call but not advertised
ALIASES: dict[str, str] = {"create_script_project": "create_project"}


def get_tool(name: str) -> ToolSpec | None:
    """Look up a tool by name or alias."""
    return CATALOG.get(ALIASES.get(name, name))


def tool_names() -> list[str]:
    """Names of the advertised tools, in catalog order."""
    return [spec.name for spec in TOOLS]
