"""Evaluation of parsed filter descriptors against notes."""

from datetime import datetime

from liquidnotes.domain.filters import FilterDescriptor, TagMatchMode
from liquidnotes.domain.note import Note, ensure_utc, utc_now


def searchable_text(note: Note) -> str:
    """Build the lowercased haystack used for free-text matching.

    Title, body, tags and task texts joined by single spaces.
    """
    tags_joined = " ".join(note.tags)
    tasks_joined = " ".join(task.text for task in note.tasks)
    return " ".join([note.title, note.body, tags_joined, tasks_joined]).lower()


def is_searchable(note: Note) -> bool:
    """Archived and system notes never appear in any search result."""
    return not note.archived and not note.system


def matches(descriptor: FilterDescriptor, note: Note, now: datetime | None = None) -> bool:
    """Check whether a note passes every constraint in the descriptor.

    Checks run in a fixed order and stop at the first failure.

    Args:
        descriptor: Parsed query
        note: Candidate note
        now: Evaluation instant for the overdue check, defaults to the current time

    Returns:
        True if the note clears every applicable check
    """
    if not is_searchable(note):
        return False

    if descriptor.require_favorite and not note.favorite:
        return False

    if descriptor.require_tasks and not note.tasks:
        return False

    if descriptor.priority is not None and note.priority != descriptor.priority:
        return False

    if descriptor.min_progress is not None and note.progress < descriptor.min_progress:
        return False

    if descriptor.require_overdue:
        instant = ensure_utc(now) if now is not None else utc_now()
        if note.due_date is None or ensure_utc(note.due_date) > instant:
            return False

    if descriptor.due_before is not None:
        bound = ensure_utc(descriptor.due_before)
        if note.due_date is None or ensure_utc(note.due_date) > bound:
            return False

    if descriptor.required_tags and not _matches_tags(descriptor, note):
        return False

    if descriptor.text_terms:
        haystack = searchable_text(note)
        for term in descriptor.text_terms:
            if term.lower() not in haystack:
                return False

    return True


def _matches_tags(descriptor: FilterDescriptor, note: Note) -> bool:
    note_tags = {tag.lower() for tag in note.tags}
    if descriptor.tag_mode == TagMatchMode.ANY:
        return any(tag in note_tags for tag in descriptor.required_tags)
    return all(tag in note_tags for tag in descriptor.required_tags)
