import json
import threading
from pathlib import Path
from typing import Callable, List, Literal, TypeVar

from loguru import logger
from pydantic import BaseModel

from liquidnotes.domain.note import Note
from liquidnotes.store.base import NoteMutation, NoteStore
from liquidnotes.store.mutations import MutationChannel

T = TypeVar("T")


class SyncStatus(BaseModel):
    """Outcome of the last attempt to persist the store."""

    state: Literal["idle", "syncing", "success", "error"] = "idle"
    message: str = ""

    @classmethod
    def idle(cls) -> "SyncStatus":
        return cls(state="idle")

    @classmethod
    def syncing(cls) -> "SyncStatus":
        return cls(state="syncing")

    @classmethod
    def success(cls) -> "SyncStatus":
        return cls(state="success")

    @classmethod
    def error(cls, message: str) -> "SyncStatus":
        return cls(state="error", message=message)


class LocalNoteStore(NoteStore):
    """Local note store that keeps notes in memory and persists them to a JSON file.

    All writes run on a single ``MutationChannel`` writer thread. ``add_note`` and
    ``delete_note`` wait for the writer; ``apply_mutation`` only queues.
    """

    def __init__(
        self, filepath: str | Path | None = None, channel: MutationChannel | None = None
    ) -> None:
        """Initialize LocalNoteStore.

        Args:
            filepath: Path to notes file. If provided and exists, will auto-load.
                     If provided and doesn't exist, will save to this path on every write.
                     If not provided, keeps notes in memory only.
            channel: Writer channel to serialize mutations on. A private, started
                     channel is created when omitted.
        """
        self._filepath = str(filepath) if filepath else None
        self._lock = threading.Lock()
        self._owns_channel = channel is None
        self._channel = channel or MutationChannel()
        if not self._channel.is_running:
            self._channel.start()
        self.sync_status = SyncStatus.idle()

        if self._filepath and Path(self._filepath).exists():
            with open(self._filepath, "r") as f:
                data = json.load(f)
            self._notes = {
                note_data["id"]: Note(**note_data) for note_data in data["notes"]
            }
        else:
            self._notes = {}

    @classmethod
    def from_data(
        cls,
        notes: List[Note] | None = None,
        channel: MutationChannel | None = None,
    ) -> "LocalNoteStore":
        """Create LocalNoteStore from provided notes (useful for testing).

        Args:
            notes: Notes in display order
            channel: Writer channel, see ``__init__``

        Returns:
            LocalNoteStore instance with provided data
        """
        instance = cls(filepath=None, channel=channel)
        instance._notes = {note.id: note for note in notes or []}
        return instance

    @property
    def channel(self) -> MutationChannel:
        return self._channel

    def fetch_all_notes(self) -> List[Note]:
        """Get every note in the store, in insertion order."""
        with self._lock:
            return list(self._notes.values())

    def fetch_note(self, note_id: str) -> Note | None:
        """Get a note by its ID."""
        with self._lock:
            return self._notes.get(note_id)

    def add_note(self, note: Note) -> None:
        """Add a new note or replace an existing one, waiting for the write."""

        def write() -> None:
            with self._lock:
                self._notes[note.id] = note
            self.persist_changes()

        self._run_on_writer(write)

    def delete_note(self, note_id: str) -> None:
        """Delete a note, waiting for the write. Unknown IDs are ignored."""

        def write() -> None:
            with self._lock:
                removed = self._notes.pop(note_id, None)
            if removed is not None:
                self.persist_changes()

        self._run_on_writer(write)

    def apply_mutation(self, note_id: str, mutation: NoteMutation) -> None:
        """Queue a mutation of a note on the writer thread.

        If the note was deleted before the mutation runs, the mutation is dropped.
        """

        def write() -> None:
            note = self.fetch_note(note_id)
            if note is None:
                logger.debug(f"Dropping mutation for deleted note {note_id}")
                return
            mutation(note)
            note.touch()
            self.persist_changes()

        self._channel.submit(write)

    def persist_changes(self) -> None:
        """Write the store to disk, recording the outcome in ``sync_status``.

        A failed write is not retried and leaves the in-memory notes untouched.
        """
        if not self._filepath:
            return

        self.sync_status = SyncStatus.syncing()
        try:
            self.save()
        except OSError as e:
            logger.error(f"Saving notes to {self._filepath} failed: {e}")
            self.sync_status = SyncStatus.error(str(e))
        else:
            self.sync_status = SyncStatus.success()

    def save(self, filepath: str | None = None) -> None:
        """Save the notes to a JSON file.

        Args:
            filepath: Path to save to. If not provided, uses the filepath from initialization.
        """
        save_path = filepath or self._filepath
        if not save_path:
            raise ValueError(
                "No filepath provided and no default filepath set during initialization"
            )

        with self._lock:
            data = {"notes": [note.model_dump(mode="json") for note in self._notes.values()]}
        with open(save_path, "w") as f:
            json.dump(data, f)

    def flush(self, timeout: float | None = None) -> bool:
        """Wait for every queued mutation to be applied."""
        return self._channel.flush(timeout)

    def close(self) -> None:
        """Apply pending mutations and stop the writer if this store owns it."""
        if self._owns_channel:
            self._channel.stop()

    def _run_on_writer(self, write: Callable[[], T]) -> T:
        if self._channel.is_writer_thread():
            return write()
        if not self._channel.is_running:
            raise RuntimeError("Note store is closed")

        done = threading.Event()
        outcome: dict = {}

        def job() -> None:
            try:
                outcome["result"] = write()
            except Exception as e:
                outcome["error"] = e
            finally:
                done.set()

        self._channel.submit(job)
        done.wait()
        if "error" in outcome:
            raise outcome["error"]
        return outcome["result"]
