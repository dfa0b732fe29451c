from typing import Callable, List, Protocol

from liquidnotes.domain.note import Note

NoteMutation = Callable[[Note], None]


class NoteStore(Protocol):
    def fetch_all_notes(self) -> List[Note]:
        """Get every note in the store, in display order."""
        ...

    def fetch_note(self, note_id: str) -> Note | None:
        """Get a note by its ID."""
        ...

    def add_note(self, note: Note) -> None:
        """Add a new note or replace an existing one."""
        ...

    def apply_mutation(self, note_id: str, mutation: NoteMutation) -> None:
        """Schedule a mutation of a note on the store's single writer.

        The mutation is a no-op if the note no longer exists when it runs.
        """
        ...
