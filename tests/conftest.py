from datetime import datetime, timezone

import pytest

from liquidnotes.domain.note import Note
from liquidnotes.embedders.engine import EmbeddingEngine
from liquidnotes.search.cache import QueryCache
from liquidnotes.search.orchestrator import SearchOrchestrator
from tests.fakes import FakeClock, FakeWordVectors

FIXED_NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def word_vectors() -> FakeWordVectors:
    return FakeWordVectors(
        {
            "budget": [1.0, 0.0, 0.0],
            "meeting": [0.8, 0.2, 0.0],
            "finance": [0.9, 0.1, 0.0],
            "grocery": [0.0, 1.0, 0.0],
            "list": [0.0, 0.9, 0.1],
            "milk": [0.1, 1.0, 0.0],
            "travel": [0.0, 0.0, 1.0],
        }
    )


@pytest.fixture
def engine(word_vectors: FakeWordVectors) -> EmbeddingEngine:
    return EmbeddingEngine.from_model(word_vectors)


@pytest.fixture
def budget_note() -> Note:
    return Note(
        id="A",
        title="Budget Meeting",
        body="Discuss quarterly numbers with finance",
        tags=["work"],
        favorite=True,
    )


@pytest.fixture
def grocery_note() -> Note:
    return Note(id="B", title="Grocery List", body="milk eggs bread", tags=["home"])


@pytest.fixture
def sample_notes(budget_note: Note, grocery_note: Note) -> list[Note]:
    return [budget_note, grocery_note]


@pytest.fixture
def embedded_notes(engine: EmbeddingEngine, sample_notes: list[Note]) -> list[Note]:
    """Sample notes with their content embeddings filled in."""
    for note in sample_notes:
        note.content_embedding = engine.embed(f"{note.title} {note.body}")
    return sample_notes


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def orchestrator(engine: EmbeddingEngine, fake_clock: FakeClock) -> SearchOrchestrator:
    """Orchestrator with a manually advanced cache clock and a fixed evaluation instant."""
    return SearchOrchestrator(
        engine=engine,
        cache=QueryCache(clock=fake_clock),
        now=lambda: FIXED_NOW,
    )
