"""End-to-end tool workflows through the HTTP service."""

import asyncio

import pytest
from mcp.shared.memory import create_connected_server_and_client_session

from scriptparser.mcp.models import ErrorKind
from scriptparser.mcp.server import create_server

pytestmark = pytest.mark.integration


def _project_id(text):
    # 'Created script project "NAME" (ID: 7)'
    return int(text.rsplit("ID: ", 1)[1].rstrip(")"))


async def test_full_project_lifecycle(dispatcher, store):
    created = await dispatcher.call(
        "create_project", {"name": "Night Shift", "description": "Pilot"}
    )
    project_id = _project_id(created.text)

    listed = await dispatcher.call("list_script_projects", {})
    assert f"[ID: {project_id}] Night Shift" in listed.text
    assert "Items: 0" in listed.text

    parsed = await dispatcher.call(
        "parse_script_content",
        {
            "project_id": project_id,
            "tag_type": "scene",
            "items": [
                {"content": "INT. HOSPITAL CORRIDOR - NIGHT", "metadata": {"a": 1}},
                {"content": "EXT. PARKING LOT - DAWN", "summary": "Parking lot"},
            ],
        },
    )
    assert parsed.success is True

    detail = await dispatcher.call("get_script_project", {"project_id": project_id})
    assert "scene (2 items):" in detail.text

    [item] = [
        i for i in store.get_by_tag(project_id, "scene") if i.summary is None
    ]
    assert item.metadata == {"a": 1}
    [group] = store.get_project(project_id).data_by_tag
    assert {"a": 1} in [i.metadata for i in group.items]

    deleted = await dispatcher.call("delete_script_project", {"project_id": project_id})
    assert deleted.success is True

    gone = await dispatcher.call("get_script_project", {"project_id": project_id})
    assert gone.error is ErrorKind.NOT_FOUND
    again = await dispatcher.call("delete_script_project", {"project_id": project_id})
    assert again.error is ErrorKind.NOT_FOUND


async def test_concurrent_parse_with_new_tag_creates_one_tag_type(dispatcher, project):
    calls = [
        dispatcher.call(
            "parse_script_content",
            {
                "project_id": project.id,
                "tag_type": "flashback",
                "items": [{"content": f"Memory {n}"}],
            },
        )
        for n in range(10)
    ]

    results = await asyncio.gather(*calls)

    assert all(r.success for r in results)
    tag_types = await dispatcher.call("list_tag_types", {})
    assert tag_types.text.count("flashback:") == 1
    assert "flashback: No description (used 10 times)" in tag_types.text


async def test_invalid_batch_writes_nothing(dispatcher, project, store):
    result = await dispatcher.call(
        "parse_script_content",
        {
            "project_id": project.id,
            "tag_type": "prop",
            "items": [{"content": "Lighter"}, {"content": " "}],
        },
    )

    assert result.error is ErrorKind.VALIDATION_ERROR
    assert result.field == "items.1.content"
    assert store.get_by_tag(project.id, "prop") == []

@pytest.mark.parametrize("tag_type", [".", "..", "act.1", "a/../b"])
async def test_dot_tag_names_round_trip(dispatcher, project, tag_type):
    stored = await dispatcher.call(
        "parse_script_content",
        {
            "project_id": project.id,
            "tag_type": tag_type,
            "items": [{"content": "Cold open"}],
        },
    )
    fetched = await dispatcher.call(
        "get_script_data_by_tag", {"project_id": project.id, "tag_type": tag_type}
    )

    assert stored.success is True
    assert fetched.success is True
    assert fetched.text.startswith(f"{tag_type} data (1 items):")
    assert "1. Cold open" in fetched.text


async def test_out_of_range_project_id_is_rejected(dispatcher):
    result = await dispatcher.call("get_script_project", {"project_id": 2**63})

    assert result.error is ErrorKind.VALIDATION_ERROR
    assert result.field == "project_id"



async def test_mcp_session_round_trip(dispatcher):
    server = create_server(dispatcher)

    async with create_connected_server_and_client_session(server) as session:
        created = await session.call_tool("create_project", {"name": "Over MCP"})
        project_id = _project_id(created.content[0].text)

        await session.call_tool(
            "parse_script_content",
            {
                "project_id": project_id,
                "tag_type": "dialogue",
                "items": [{"content": "We were never here."}],
            },
        )
        by_tag = await session.call_tool(
            "get_script_data_by_tag",
            {"project_id": project_id, "tag_type": "dialogue"},
        )
        empty = await session.call_tool(
            "get_script_data_by_tag",
            {"project_id": project_id, "tag_type": "action"},
        )

    assert by_tag.isError is False
    assert "1. We were never here." in by_tag.content[0].text
    assert empty.isError is False
    assert empty.content[0].text == f'No "action" data in project {project_id}'
