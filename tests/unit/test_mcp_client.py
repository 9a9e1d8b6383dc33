"""Tests for the async script service client."""

import json

import httpx
import pytest

from scriptparser.exceptions import NotFoundError, OperationError, ValidationError
from scriptparser.mcp.client import ScriptAPIClient
from scriptparser.mcp.models import BackendConfig


def _client(handler, **config):
    return ScriptAPIClient(
        BackendConfig(base_url="http://backend:3000", **config),
        transport=httpx.MockTransport(handler),
    )


class TestRequests:
    """Outgoing request shape."""

    async def test_api_key_header_sent_when_configured(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"success": True, "data": []})

        async with _client(handler, api_key="test-key") as client:
            await client.list_projects()

        assert seen[0].headers["X-API-Key"] == "test-key"
        assert seen[0].url == "http://backend:3000/api/scripts"

    async def test_no_api_key_header_by_default(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"success": True, "data": []})

        async with _client(handler) as client:
            await client.list_tag_types()

        assert "X-API-Key" not in seen[0].headers
        assert seen[0].url.path == "/api/scripts/tag-types/list"

    async def test_parse_posts_tag_and_items(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(
                200,
                json={
                    "success": True,
                    "message": "Stored 1 items",
                    "data": {"project_id": 3, "tag_type": "scene", "count": 1},
                },
            )

        async with _client(handler) as client:
            data = await client.parse_content(3, "scene", [{"content": "INT. LAB"}])

        assert data["count"] == 1
        assert seen[0].method == "POST"
        assert seen[0].url.path == "/api/scripts/3/parse"
        assert json.loads(seen[0].content) == {
            "tag_type": "scene",
            "items": [{"content": "INT. LAB"}],
        }

    async def test_create_omits_missing_description(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(
                200, json={"success": True, "data": {"id": 1, "name": "Pilot"}}
            )

        async with _client(handler) as client:
            await client.create_project("Pilot")

        assert json.loads(seen[0].content) == {"name": "Pilot"}

    async def test_tag_type_is_url_encoded(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(
                200,
                json={
                    "success": True,
                    "data": {"project_id": 1, "tag_type": "plot/twist", "items": []},
                },
            )

        async with _client(handler) as client:
            await client.get_by_tag(1, "plot/twist")

        assert seen[0].url.raw_path == b"/api/scripts/1/tag/plot%2Ftwist"

    @pytest.mark.parametrize(
        ("tag_type", "segment"),
        [(".", b"%2E"), ("..", b"%2E%2E"), ("v1.2", b"v1%2E2")],
    )
    async def test_dot_tag_types_stay_one_segment(self, tag_type, segment):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(
                200,
                json={
                    "success": True,
                    "data": {"project_id": 1, "tag_type": tag_type, "items": []},
                },
            )

        async with _client(handler) as client:
            await client.get_by_tag(1, tag_type)

        assert seen[0].url.raw_path == b"/api/scripts/1/tag/" + segment


class TestErrorMapping:
    """HTTP failures become scriptparser exceptions."""

    async def test_400_maps_to_validation_error(self):
        def handler(request):
            return httpx.Response(
                400,
                json={
                    "success": False,
                    "message": "Item content is required",
                    "field": "items.0.content",
                },
            )

        async with _client(handler) as client:
            with pytest.raises(ValidationError) as exc_info:
                await client.parse_content(1, "scene", [{"content": " "}])

        assert exc_info.value.message == "Item content is required"
        assert exc_info.value.field == "items.0.content"

    async def test_404_maps_to_not_found(self):
        def handler(request):
            return httpx.Response(
                404, json={"success": False, "message": "Project 9 not found"}
            )

        async with _client(handler) as client:
            with pytest.raises(NotFoundError, match="Project 9 not found"):
                await client.get_project(9)

    async def test_other_status_keeps_backend_message(self):
        def handler(request):
            return httpx.Response(
                500,
                json={
                    "success": False,
                    "message": "Timeout waiting for database connection",
                    "error": "DatabaseError",
                },
            )

        async with _client(handler) as client:
            with pytest.raises(OperationError) as exc_info:
                await client.list_projects()

        assert exc_info.value.message == "Timeout waiting for database connection"
        assert exc_info.value.status_code == 500

    async def test_status_without_body_has_generic_message(self):
        def handler(request):
            return httpx.Response(502, text="Bad gateway")

        async with _client(handler) as client:
            with pytest.raises(OperationError) as exc_info:
                await client.list_projects()

        assert exc_info.value.message == "Script service returned HTTP 502"

    async def test_network_failure_maps_to_operation_error(self):
        def handler(request):
            raise httpx.ConnectError("Connection refused", request=request)

        async with _client(handler) as client:
            with pytest.raises(OperationError) as exc_info:
                await client.list_projects()

        assert "Could not reach script service" in exc_info.value.message
        assert exc_info.value.status_code is None

    @pytest.mark.parametrize(
        "response",
        [
            httpx.Response(200, text="<html>not json</html>"),
            httpx.Response(200, json={"unexpected": True}),
            httpx.Response(200, json=["a", "list"]),
        ],
    )
    async def test_malformed_success_maps_to_operation_error(self, response):
        async with _client(lambda request: response) as client:
            with pytest.raises(OperationError, match="Unexpected response"):
                await client.list_projects()

    async def test_success_without_data_maps_to_operation_error(self):
        def handler(request):
            return httpx.Response(200, json={"success": True})

        async with _client(handler) as client:
            with pytest.raises(OperationError, match="no data"):
                await client.list_projects()

    async def test_tag_query_answered_with_other_payload(self):
        def handler(request):
            return httpx.Response(
                200,
                json={"success": True, "data": {"id": 1, "name": "Pilot"}},
            )

        async with _client(handler) as client:
            with pytest.raises(OperationError) as exc_info:
                await client.get_by_tag(1, "scene")

        assert exc_info.value.message == "Unexpected response from script service"


class TestHealth:
    """Backend health check."""

    async def test_health_ok(self):
        def handler(request):
            assert request.url.path == "/health"
            return httpx.Response(200, json={"status": "healthy"})

        async with _client(handler) as client:
            assert await client.health() == {"status": "healthy"}

    async def test_health_unreachable(self):
        def handler(request):
            raise httpx.ConnectError("Connection refused", request=request)

        async with _client(handler) as client:
            with pytest.raises(OperationError, match="Could not reach"):
                await client.health()

    async def test_health_unhealthy_status(self):
        async with _client(lambda request: httpx.Response(503)) as client:
            with pytest.raises(OperationError, match="health check failed"):
                await client.health()
