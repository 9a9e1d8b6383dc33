"""Script project endpoints.

Every handler runs the blocking store call in a worker thread. Store
errors propagate to the exception handlers registered in ``app.py``.
"""

import asyncio
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Path, Request

from scriptparser.api.schemas import ParseRequest, ProjectCreateRequest
from scriptparser.config import get_logger
from scriptparser.database import ScriptDataStore
from scriptparser.models import MAX_ROW_ID, MIN_ROW_ID

logger = get_logger(__name__)
router = APIRouter()

ProjectId = Annotated[int, Path(ge=MIN_ROW_ID, le=MAX_ROW_ID)]


async def get_store(request: Request) -> ScriptDataStore:
    """Get the data store from app state."""
    store: ScriptDataStore = request.app.state.store
    return store


@router.post("")
async def create_project(
    body: ProjectCreateRequest,
    store: ScriptDataStore = Depends(get_store),
) -> dict[str, Any]:
    """Create a script project."""
    project = await asyncio.to_thread(
        store.create_project, body.name, body.description
    )
    return {
        "success": True,
        "data": project.model_dump(
            mode="json", include={"id", "name", "description"}
        ),
    }


@router.get("")
async def list_projects(
    store: ScriptDataStore = Depends(get_store),
) -> dict[str, Any]:
    """List all projects with item counts and tag types."""
    projects = await asyncio.to_thread(store.list_projects)
    return {"success": True, "data": [p.model_dump(mode="json") for p in projects]}


# Must be declared before "/{project_id}" so it is not parsed as an id
@router.get("/tag-types/list")
async def list_tag_types(
    store: ScriptDataStore = Depends(get_store),
) -> dict[str, Any]:
    """List tag types with usage counts."""
    tag_types = await asyncio.to_thread(store.list_tag_types)
    return {"success": True, "data": [t.model_dump(mode="json") for t in tag_types]}


@router.get("/{project_id}")
async def get_project(
    project_id: ProjectId,
    store: ScriptDataStore = Depends(get_store),
) -> dict[str, Any]:
    """Get a project with its items grouped by tag type."""
    project = await asyncio.to_thread(store.get_project, project_id)
    return {"success": True, "data": project.model_dump(mode="json")}


@router.post("/{project_id}/parse")
async def parse_content(
    project_id: ProjectId,
    body: ParseRequest,
    store: ScriptDataStore = Depends(get_store),
) -> dict[str, Any]:
    """Classify a batch of already-extracted items under one tag type."""
    result = await asyncio.to_thread(
        store.classify, project_id, body.tag_type, body.items
    )
    return {
        "success": True,
        "message": f"Stored {result.count} items",
        "data": result.model_dump(include={"project_id", "tag_type", "count"}),
    }


@router.get("/{project_id}/tag/{tag_type:path}")
async def get_by_tag(
    project_id: ProjectId,
    tag_type: str,
    store: ScriptDataStore = Depends(get_store),
) -> dict[str, Any]:
    """Get a project's items for one tag type."""
    items = await asyncio.to_thread(store.get_by_tag, project_id, tag_type)
    return {
        "success": True,
        "data": {
            "project_id": project_id,
            "tag_type": tag_type,
            "items": [item.model_dump(mode="json") for item in items],
        },
    }


@router.delete("/{project_id}")
async def delete_project(
    project_id: ProjectId,
    store: ScriptDataStore = Depends(get_store),
) -> dict[str, Any]:
    """Delete a project and all of its items."""
    await asyncio.to_thread(store.delete_project, project_id)
    return {"success": True, "message": "Project deleted"}
