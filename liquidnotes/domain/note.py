"""Note domain models."""

from datetime import datetime, timezone
from enum import Enum
from typing import Annotated

import numpy as np
from numpy.typing import NDArray
from pydantic import BaseModel, BeforeValidator, Field, PlainSerializer, field_validator


class NotePriority(str, Enum):
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    URGENT = "urgent"


class NoteTask(BaseModel):
    """A checklist item attached to a note."""

    text: str
    completed: bool = False


def nd_array_before_validator(x: list[float]) -> NDArray[np.float32]:
    return np.array(x, dtype=np.float32)


def nd_array_serializer(x: NDArray[np.float32]) -> list[float]:
    return x.tolist()  # type: ignore


NumPyArray = Annotated[
    np.ndarray,
    BeforeValidator(nd_array_before_validator),
    PlainSerializer(nd_array_serializer, return_type=list),
]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes so every comparison is between aware values."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class Note(BaseModel):
    """Represents a single note record as held by the note store.

    Attributes:
        id: Unique, stable identifier
        title: Note title
        body: Plain-text note content
        tags: Tags as entered by the user (compared case-insensitively)
        favorite: Whether the note is favorited
        archived: Archived notes never appear in search results
        system: System notes never appear in search results
        priority: One of low, normal, high, urgent
        progress: Completion ratio in [0, 1]
        due_date: Optional due timestamp
        tasks: Checklist items
        content_embedding: Averaged word-vector embedding of title and body,
            replaced wholesale on every analysis
        suggested_tags: Tags proposed by the last analysis
        tag_confidences: Confidence per suggested tag
        last_analyzed: When the last tag analysis was written back
        created: Creation timestamp
        modified: Last modification timestamp
    """

    id: str
    title: str = ""
    body: str = ""
    tags: list[str] = []
    favorite: bool = False
    archived: bool = False
    system: bool = False
    priority: NotePriority = NotePriority.NORMAL
    progress: float = Field(default=0.0, ge=0.0, le=1.0)
    due_date: datetime | None = None
    tasks: list[NoteTask] = []
    content_embedding: NumPyArray | None = None
    suggested_tags: list[str] = []
    tag_confidences: list[float] = []
    last_analyzed: datetime | None = None
    created: datetime = Field(default_factory=utc_now)
    modified: datetime = Field(default_factory=utc_now)

    model_config = {"arbitrary_types_allowed": True, "validate_assignment": True}

    @field_validator("due_date", "last_analyzed", "created", "modified")
    @classmethod
    def _attach_timezone(cls, value: datetime | None) -> datetime | None:
        return ensure_utc(value) if value is not None else None

    def touch(self) -> None:
        """Bump the modification timestamp."""
        self.modified = utc_now()
