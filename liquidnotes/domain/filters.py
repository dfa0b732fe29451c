"""Structured query domain models."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel

from liquidnotes.domain.note import NotePriority


class TagMatchMode(str, Enum):
    ALL = "all"
    ANY = "any"


class FilterDescriptor(BaseModel):
    """Parsed, structured form of a raw query string.

    Every query token lands in exactly one of these buckets, or in
    ``ParsedQuery.discarded`` when it is a recognized operator with invalid content.
    """

    required_tags: list[str] = []  # lowercased, first-seen order
    tag_mode: TagMatchMode = TagMatchMode.ALL
    require_favorite: bool = False
    require_tasks: bool = False
    require_overdue: bool = False
    priority: NotePriority | None = None
    min_progress: float | None = None
    due_before: datetime | None = None
    text_terms: list[str] = []  # AND-combined substring terms, case kept as typed
    semantic_terms: list[str] = []

    @property
    def is_semantic(self) -> bool:
        return bool(self.semantic_terms)


class ParsedQuery(BaseModel):
    """Parser output: the descriptor plus the tokens that were dropped."""

    descriptor: FilterDescriptor
    discarded: list[str] = []
