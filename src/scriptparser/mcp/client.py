"""Async HTTP client for the script service.

One ``httpx.AsyncClient`` per adapter instance; its connection pool is
bounded by ``BackendConfig.max_connections``. HTTP failures are mapped onto
the scriptparser exception hierarchy so callers never see httpx errors.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

import httpx

from scriptparser.config import get_logger
from scriptparser.exceptions import NotFoundError, OperationError, ValidationError
from scriptparser.mcp.models import BackendConfig

logger = get_logger(__name__)

SCRIPTS_PATH = "/api/scripts"


def _path_segment(value: str) -> str:
    """Encode a free-form name as one opaque URL path segment.

    Dots are escaped as well so "." and ".." reach the service verbatim
    instead of being resolved as relative path segments.
    """
    return quote(value, safe="").replace(".", "%2E")


class ScriptAPIClient:
    """Thin wrapper around the ``/api/scripts`` REST endpoints."""

    def __init__(
        self,
        config: BackendConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            config: Backend connection details
            transport: Optional transport override (e.g. an in-process app)
        """
        self.config = config
        headers = {"Accept": "application/json"}
        if config.api_key:
            headers["X-API-Key"] = config.api_key

        self._client = httpx.AsyncClient(
            base_url=config.base_url,
            headers=headers,
            timeout=httpx.Timeout(config.timeout),
            limits=httpx.Limits(max_connections=config.max_connections),
            transport=transport,
        )

    async def _request(
        self, method: str, path: str, json: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        """Send one request and return the decoded success envelope.

        Raises:
            ValidationError: On HTTP 400
            NotFoundError: On HTTP 404
            OperationError: On any other failure
        """
        logger.debug("Backend request", method=method, path=path)
        try:
            response = await self._client.request(method, path, json=json)
        except httpx.HTTPError as e:
            logger.warning(
                "Backend unreachable",
                method=method,
                path=path,
                error=str(e),
            )
            raise OperationError(
                f"Could not reach script service at {self.config.base_url}",
                hint="Check that the script service is running and api_url is set",
                details={"error": str(e) or type(e).__name__},
            ) from e

        logger.debug(
            "Backend response", method=method, path=path, status=response.status_code
        )

        try:
            body = response.json()
        except ValueError:
            body = None

        if response.is_success:
            if not isinstance(body, dict) or not body.get("success"):
                raise OperationError(
                    "Unexpected response from script service",
                    status_code=response.status_code,
                )
            return body

        status = response.status_code
        if isinstance(body, dict) and body.get("message"):
            message = str(body["message"])
        else:
            message = f"Script service returned HTTP {status}"

        if status == 400:
            field = body.get("field") if isinstance(body, dict) else None
            raise ValidationError(message, field=field)
        if status == 404:
            raise NotFoundError(message)

        details = None
        if isinstance(body, dict) and body.get("error"):
            details = {"error": body["error"]}
        raise OperationError(message, status_code=status, details=details)

    @staticmethod
    def _data(body: dict[str, Any]) -> Any:
        if "data" not in body:
            raise OperationError("Script service response has no data")
        return body["data"]

    async def create_project(
        self, name: str, description: str | None = None
    ) -> dict[str, Any]:
        """Create a project."""
        payload: dict[str, Any] = {"name": name}
        if description is not None:
            payload["description"] = description
        body = await self._request("POST", SCRIPTS_PATH, json=payload)
        data: dict[str, Any] = self._data(body)
        return data

    async def list_projects(self) -> list[dict[str, Any]]:
        """List projects with aggregates."""
        body = await self._request("GET", SCRIPTS_PATH)
        data: list[dict[str, Any]] = self._data(body)
        return data

    async def get_project(self, project_id: int) -> dict[str, Any]:
        """Get a project with grouped items."""
        body = await self._request("GET", f"{SCRIPTS_PATH}/{project_id}")
        data: dict[str, Any] = self._data(body)
        return data

    async def parse_content(
        self, project_id: int, tag_type: str, items: list[dict[str, Any]]
    ) -> dict[str, Any]:
        """Store a batch of items under a tag type."""
        body = await self._request(
            "POST",
            f"{SCRIPTS_PATH}/{project_id}/parse",
            json={"tag_type": tag_type, "items": items},
        )
        data: dict[str, Any] = self._data(body)
        return data

    async def get_by_tag(self, project_id: int, tag_type: str) -> dict[str, Any]:
        """Get a project's items for one tag type."""
        body = await self._request(
            "GET", f"{SCRIPTS_PATH}/{project_id}/tag/{_path_segment(tag_type)}"
        )
        data = self._data(body)
        if not isinstance(data, dict) or not {"tag_type", "items"} <= data.keys():
            raise OperationError("Unexpected response from script service")
        result: dict[str, Any] = data
        return result

    async def list_tag_types(self) -> list[dict[str, Any]]:
        """List tag types with usage counts."""
        body = await self._request("GET", f"{SCRIPTS_PATH}/tag-types/list")
        data: list[dict[str, Any]] = self._data(body)
        return data

    async def delete_project(self, project_id: int) -> str:
        """Delete a project; returns the service's confirmation message."""
        body = await self._request("DELETE", f"{SCRIPTS_PATH}/{project_id}")
        return str(body.get("message", ""))

    async def health(self) -> dict[str, Any]:
        """Probe the service health endpoint.

        Raises:
            OperationError: If the service is unreachable or unhealthy
        """
        try:
            response = await self._client.get("/health")
        except httpx.HTTPError as e:
            raise OperationError(
                f"Could not reach script service at {self.config.base_url}",
                details={"error": str(e) or type(e).__name__},
            ) from e
        if not response.is_success:
            raise OperationError(
                "Script service health check failed",
                status_code=response.status_code,
            )
        try:
            result: dict[str, Any] = response.json()
        except ValueError as e:
            raise OperationError("Unexpected response from script service") from e
        return result

    async def aclose(self) -> None:
        """Close the underlying connection pool."""
        await self._client.aclose()

    async def __aenter__(self) -> ScriptAPIClient:
        """Async context manager entry."""
        return self

    async def __aexit__(self, *args: Any) -> None:
        """Async context manager exit."""
        await self.aclose()
