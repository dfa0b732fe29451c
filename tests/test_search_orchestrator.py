from datetime import datetime

import pytest

from liquidnotes.domain.filters import FilterDescriptor
from liquidnotes.domain.note import Note
from liquidnotes.embedders.engine import EmbeddingEngine
from liquidnotes.query.predicate import matches
from liquidnotes.search.cache import QueryCache
from liquidnotes.search.orchestrator import SearchOrchestrator
from tests.conftest import FIXED_NOW
from tests.fakes import FakeClock


def ids(notes: list[Note]) -> list[str]:
    return [note.id for note in notes]


class CountingPredicate:
    def __init__(self) -> None:
        self.calls = 0

    def __call__(self, descriptor: FilterDescriptor, note: Note, now: datetime) -> bool:
        self.calls += 1
        return matches(descriptor, note, now)


@pytest.fixture
def counting_predicate() -> CountingPredicate:
    return CountingPredicate()


@pytest.fixture
def counting_orchestrator(
    engine: EmbeddingEngine, fake_clock: FakeClock, counting_predicate: CountingPredicate
) -> SearchOrchestrator:
    return SearchOrchestrator(
        engine=engine,
        cache=QueryCache(clock=fake_clock),
        predicate=counting_predicate,
        now=lambda: FIXED_NOW,
    )


def test_tag_and_favorite_query(orchestrator: SearchOrchestrator, sample_notes: list[Note]) -> None:
    assert ids(orchestrator.search("#work is:fav", sample_notes)) == ["A"]


def test_free_text_query(orchestrator: SearchOrchestrator, sample_notes: list[Note]) -> None:
    assert ids(orchestrator.search("budget", sample_notes)) == ["A"]


def test_any_tag_query_keeps_input_order(
    orchestrator: SearchOrchestrator, sample_notes: list[Note], fake_clock: FakeClock
) -> None:
    assert ids(orchestrator.search("tag:any #work #home", sample_notes)) == ["A", "B"]
    fake_clock.advance(1.0)
    assert ids(orchestrator.search("tag:any #work #home", sample_notes[::-1])) == ["B", "A"]


def test_all_tags_query(orchestrator: SearchOrchestrator, sample_notes: list[Note]) -> None:
    assert orchestrator.search("#work #home", sample_notes) == []


@pytest.mark.parametrize("query", ["", "   ", "\t\n"])
def test_blank_query_returns_visible_notes(
    counting_orchestrator: SearchOrchestrator,
    counting_predicate: CountingPredicate,
    sample_notes: list[Note],
    query: str,
) -> None:
    """Test that blank queries skip parsing and caching and hide archived/system notes."""
    archived = Note(id="C", title="Old", archived=True)
    system = Note(id="D", title="Welcome", system=True)
    notes = [archived, *sample_notes, system]

    assert ids(counting_orchestrator.search(query, notes)) == ["A", "B"]
    assert counting_predicate.calls == 0
    assert len(counting_orchestrator.cache) == 0


def test_repeated_query_within_window_uses_cache(
    counting_orchestrator: SearchOrchestrator,
    counting_predicate: CountingPredicate,
    fake_clock: FakeClock,
    sample_notes: list[Note],
) -> None:
    """Test that the predicate is not re-run for a cached query."""
    first = counting_orchestrator.search("budget", sample_notes)
    calls_after_first = counting_predicate.calls
    fake_clock.advance(0.2)
    second = counting_orchestrator.search("budget", sample_notes)

    assert calls_after_first == len(sample_notes)
    assert counting_predicate.calls == calls_after_first
    assert ids(first) == ids(second) == ["A"]


def test_query_after_window_is_reevaluated(
    counting_orchestrator: SearchOrchestrator,
    counting_predicate: CountingPredicate,
    fake_clock: FakeClock,
    sample_notes: list[Note],
) -> None:
    counting_orchestrator.search("budget", sample_notes)
    fake_clock.advance(0.5)
    counting_orchestrator.search("budget", sample_notes)

    assert counting_predicate.calls == 2 * len(sample_notes)


def test_cached_ids_missing_from_input_are_skipped(
    orchestrator: SearchOrchestrator, sample_notes: list[Note]
) -> None:
    orchestrator.search("tag:any #work #home", sample_notes)

    assert ids(orchestrator.search("tag:any #work #home", sample_notes[1:])) == ["B"]


def test_clear_cache_forces_reevaluation(
    counting_orchestrator: SearchOrchestrator,
    counting_predicate: CountingPredicate,
    sample_notes: list[Note],
) -> None:
    counting_orchestrator.search("budget", sample_notes)
    counting_orchestrator.clear_cache()
    counting_orchestrator.search("budget", sample_notes)

    assert counting_predicate.calls == 2 * len(sample_notes)


def test_only_invalid_operators_match_nothing(orchestrator: SearchOrchestrator) -> None:
    """Test that a dropped due: token is not matched as literal text."""
    note = Note(id="N", title="Reminder", body="written due:2024-13-40 here")

    assert orchestrator.search("due:2024-13-40", [note]) == []


def test_invalid_operator_next_to_valid_terms_is_ignored(
    orchestrator: SearchOrchestrator, sample_notes: list[Note]
) -> None:
    assert ids(orchestrator.search("budget priority:critical", sample_notes)) == ["A"]


def test_semantic_term_routes_to_semantic_search(
    counting_orchestrator: SearchOrchestrator,
    counting_predicate: CountingPredicate,
    embedded_notes: list[Note],
) -> None:
    """Test that ~terms rank by similarity and bypass the predicate and cache."""
    results = counting_orchestrator.search("~finance", embedded_notes)

    assert ids(results) == ["A"]
    assert counting_predicate.calls == 0
    assert len(counting_orchestrator.cache) == 0


def test_semantic_search_ignores_lexical_filters(
    orchestrator: SearchOrchestrator, embedded_notes: list[Note]
) -> None:
    """Test that a semantic query is never combined with lexical filters."""
    assert ids(orchestrator.search("#home ~budget", embedded_notes)) == ["A"]


def test_semantic_mode_uses_text_terms(
    orchestrator: SearchOrchestrator, embedded_notes: list[Note]
) -> None:
    orchestrator.semantic_search_enabled = True

    assert ids(orchestrator.search("milk", embedded_notes)) == ["B"]


def test_semantic_mode_without_terms_falls_back_to_lexical(
    orchestrator: SearchOrchestrator, embedded_notes: list[Note]
) -> None:
    orchestrator.semantic_search_enabled = True

    assert ids(orchestrator.search("is:fav", embedded_notes)) == ["A"]


def test_semantic_results_exclude_archived_and_system(
    orchestrator: SearchOrchestrator, engine: EmbeddingEngine
) -> None:
    vector = engine.embed("budget")
    notes = [
        Note(id="archived", archived=True, content_embedding=vector),
        Note(id="system", system=True, content_embedding=vector),
        Note(id="visible", content_embedding=vector),
    ]

    assert ids(orchestrator.search("~budget", notes)) == ["visible"]


def test_semantic_search_without_model_returns_nothing(
    embedded_notes: list[Note], fake_clock: FakeClock
) -> None:
    orchestrator = SearchOrchestrator(engine=EmbeddingEngine(), cache=QueryCache(clock=fake_clock))

    assert orchestrator.search("~budget", embedded_notes) == []


def test_semantic_search_scores(
    orchestrator: SearchOrchestrator, embedded_notes: list[Note]
) -> None:
    scored = orchestrator.semantic_search("grocery", embedded_notes)

    assert [note.id for note, _ in scored] == ["B"]
    assert scored[0][1] > 0.9


def test_find_similar(orchestrator: SearchOrchestrator, engine: EmbeddingEngine) -> None:
    """Test that similar notes exclude the note itself and keep the top three."""
    reference = Note(id="ref", content_embedding=engine.embed("budget"))
    notes = [
        reference,
        Note(id="s1", content_embedding=engine.embed("finance")),
        Note(id="s2", content_embedding=engine.embed("budget")),
        Note(id="s3", content_embedding=engine.embed("meeting")),
        Note(id="s4", content_embedding=engine.embed("meeting finance")),
        Note(id="unrelated", content_embedding=engine.embed("travel")),
        Note(id="no-embedding"),
    ]

    assert ids(orchestrator.find_similar(reference, notes)) == ["s2", "s1", "s4"]


def test_find_similar_without_embedding(
    orchestrator: SearchOrchestrator, embedded_notes: list[Note]
) -> None:
    assert orchestrator.find_similar(Note(id="x"), embedded_notes) == []


def test_similar_notes_threshold_is_adjustable(
    orchestrator: SearchOrchestrator, engine: EmbeddingEngine
) -> None:
    reference = Note(id="ref", content_embedding=engine.embed("budget"))
    notes = [Note(id="list", content_embedding=engine.embed("grocery list budget"))]

    assert orchestrator.similar_notes(reference, notes) == []
    assert ids([n for n, _ in orchestrator.similar_notes(reference, notes, threshold=0.2)]) == [
        "list"
    ]
