"""scriptparser data models.

Entities stored by the script service: projects, tag types and the data
items classified under them. Metadata is kept as an opaque JSON object;
nothing here interprets its contents.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class DefaultTagType(str, Enum):
    """Tag types seeded into every new database."""

    CHARACTER = "character"
    SCENE = "scene"
    PROP = "prop"
    PLOT = "plot"
    DIALOGUE = "dialogue"
    ACTION = "action"


# SQLite INTEGER is a signed 64-bit value; larger ids cannot name a row
MIN_ROW_ID = -(2**63)
MAX_ROW_ID = 2**63 - 1

DEFAULT_TAG_DESCRIPTIONS: dict[DefaultTagType, str] = {
    DefaultTagType.CHARACTER: "Characters and roles in the script",
    DefaultTagType.SCENE: "Scenes and locations in the script",
    DefaultTagType.PROP: "Props and objects in the script",
    DefaultTagType.PLOT: "Key plot points in the script",
    DefaultTagType.DIALOGUE: "Notable dialogue excerpts",
    DefaultTagType.ACTION: "Action descriptions",
}


class BaseEntity(BaseModel):
    """Base for rows read back from the database."""

    model_config = ConfigDict(from_attributes=True)

    id: int


class Project(BaseEntity):
    """A named container for one script's analysis results."""

    name: str
    description: str | None = None
    created_at: datetime
    updated_at: datetime


class ProjectSummary(Project):
    """Project annotated with aggregates computed at query time."""

    data_count: int = 0
    tag_types: list[str] = Field(default_factory=list)


class TagType(BaseEntity):
    """A category label data items are classified under."""

    name: str
    description: str | None = None
    created_at: datetime


class TagTypeUsage(TagType):
    """Tag type annotated with the number of items referencing it."""

    usage_count: int = 0


class DataItem(BaseEntity):
    """One piece of classified content belonging to a project and tag type."""

    content: str
    summary: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime
    updated_at: datetime


class TagGroup(BaseModel):
    """Items of one project grouped under a single tag type."""

    type: str
    description: str | None = None
    items: list[DataItem] = Field(default_factory=list)


class ProjectDetail(Project):
    """Project with its data items grouped by tag type."""

    data_by_tag: list[TagGroup] = Field(default_factory=list)


class DataItemInput(BaseModel):
    """A validated item ready to be inserted."""

    content: str
    summary: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class ClassifyResult(BaseModel):
    """Outcome of a batch classification."""

    project_id: int
    tag_type: str
    tag_type_id: int
    count: int
