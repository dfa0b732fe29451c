from tests.fakes.fake_clock import FakeClock
from tests.fakes.fake_note_store import FakeNoteStore
from tests.fakes.fake_word_vectors import FakeWordVectors

__all__ = ["FakeClock", "FakeNoteStore", "FakeWordVectors"]
