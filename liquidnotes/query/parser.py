"""Lenient parser for the note search query language."""

import logging
import math
from datetime import datetime, timezone

from liquidnotes.domain.filters import FilterDescriptor, ParsedQuery, TagMatchMode
from liquidnotes.domain.note import NotePriority

logger = logging.getLogger(__name__)

FAVORITE_KEYWORDS = {"is:fav", "is:favorite"}
HAS_TASK_KEYWORDS = {"has:task", "has:tasks"}
OVERDUE_KEYWORD = "is:overdue"
TAG_ANY_KEYWORD = "tag:any"

PRIORITY_PREFIX = "priority:"
PROGRESS_PREFIX = "progress:>"
DUE_PREFIX = "due:"
DUE_DATE_FORMAT = "%Y-%m-%d"


def parse_query(raw: str) -> ParsedQuery:
    """Parse a raw query string into a filter descriptor.

    Tokens are split on whitespace and classified in a fixed priority order, the
    first matching rule winning. Tokens that do not look like operators become
    free-text terms. Tokens that carry a known operator prefix but invalid content
    (``priority:bogus``, ``due:2024-13-40``) are dropped and reported in
    ``discarded``; they are never demoted to free text.

    Args:
        raw: Query string as typed by the user

    Returns:
        ParsedQuery with the descriptor and the discarded tokens
    """
    descriptor = FilterDescriptor()
    discarded: list[str] = []

    for token in raw.split():
        if not _classify_token(token, descriptor):
            discarded.append(token)

    if discarded:
        logger.debug(f"Discarded query tokens: {discarded}")

    return ParsedQuery(descriptor=descriptor, discarded=discarded)


def _classify_token(token: str, descriptor: FilterDescriptor) -> bool:
    """Fold one token into the descriptor. Returns False when the token is dropped."""
    lowered = token.lower()

    if token.startswith("#"):
        tag = token[1:].lower()
        if not tag:
            return False
        if tag not in descriptor.required_tags:
            descriptor.required_tags.append(tag)
        return True

    if token.startswith("~"):
        term = token[1:]
        if not term:
            return False
        descriptor.semantic_terms.append(term)
        return True

    if lowered in FAVORITE_KEYWORDS:
        descriptor.require_favorite = True
        return True

    if lowered in HAS_TASK_KEYWORDS:
        descriptor.require_tasks = True
        return True

    if lowered == OVERDUE_KEYWORD:
        descriptor.require_overdue = True
        return True

    if lowered.startswith(PRIORITY_PREFIX):
        priority = _parse_priority(lowered[len(PRIORITY_PREFIX) :])
        if priority is None:
            return False
        descriptor.priority = priority
        return True

    if lowered.startswith(PROGRESS_PREFIX):
        percent = _parse_number(token[len(PROGRESS_PREFIX) :])
        if percent is None:
            return False
        descriptor.min_progress = percent / 100.0
        return True

    if lowered.startswith(DUE_PREFIX):
        due_before = _parse_date(token[len(DUE_PREFIX) :])
        if due_before is None:
            return False
        descriptor.due_before = due_before
        return True

    if lowered == TAG_ANY_KEYWORD:
        descriptor.tag_mode = TagMatchMode.ANY
        return True

    descriptor.text_terms.append(token)
    return True


def _parse_priority(value: str) -> NotePriority | None:
    try:
        return NotePriority(value)
    except ValueError:
        return None


def _parse_number(value: str) -> float | None:
    try:
        number = float(value)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def _parse_date(value: str) -> datetime | None:
    try:
        parsed = datetime.strptime(value, DUE_DATE_FORMAT)
    except ValueError:
        return None
    return parsed.replace(tzinfo=timezone.utc)
