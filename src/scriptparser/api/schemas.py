"""Pydantic schemas for HTTP request bodies.

Fields are deliberately permissive: missing or blank values are reported
by the data store as validation errors with the offending field, which
the service turns into 400 responses.
"""

from typing import Any

from pydantic import BaseModel, Field


class ProjectCreateRequest(BaseModel):
    """Project creation request."""

    name: str | None = Field(default=None, description="Project name")
    description: str | None = Field(default=None, description="Project description")


class ParseRequest(BaseModel):
    """Batch classification request."""

    tag_type: str | None = Field(
        default=None, description="Tag type to classify the items under"
    )
    items: Any = Field(
        default=None,
        description="Items to store: [{content, summary?, metadata?}]",
    )
