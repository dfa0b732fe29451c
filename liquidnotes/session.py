from concurrent.futures import Executor, Future
from typing import Sequence

from liquidnotes.analysis.pipeline import AnalysisPipeline
from liquidnotes.analysis.tagging import random_confidences
from liquidnotes.config import Settings, settings
from liquidnotes.domain.note import Note
from liquidnotes.embedders.engine import EmbeddingEngine, ModelLoader
from liquidnotes.embedders.word_vectors import WordVectors
from liquidnotes.search.cache import QueryCache
from liquidnotes.search.orchestrator import SearchOrchestrator
from liquidnotes.store.base import NoteStore


class NotesSession:
    """Search and analysis services sharing one embedding engine and one store."""

    def __init__(
        self, *, store: NoteStore, orchestrator: SearchOrchestrator, pipeline: AnalysisPipeline
    ) -> None:
        self.store = store
        self.orchestrator = orchestrator
        self.pipeline = pipeline

    @property
    def engine(self) -> EmbeddingEngine:
        return self.orchestrator.engine

    def search(self, query: str, notes: Sequence[Note] | None = None) -> list[Note]:
        """Search the given notes, or every note in the store."""
        if notes is None:
            notes = self.store.fetch_all_notes()
        return self.orchestrator.search(query, notes)

    def add_note(self, note: Note) -> None:
        """Create a note and drop cached results so it shows up in the next search."""
        self.store.add_note(note)
        self.orchestrator.clear_cache()

    def analyze(self, note: Note) -> list[Future]:
        return self.pipeline.analyze(note)

    def find_similar(self, note: Note, notes: Sequence[Note] | None = None) -> list[Note]:
        if notes is None:
            notes = self.store.fetch_all_notes()
        return self.orchestrator.find_similar(note, notes)

    def close(self) -> None:
        self.pipeline.shutdown(wait=True)


def create_session(
    *,
    store: NoteStore,
    config: Settings = settings,
    model_loader: ModelLoader | None = None,
    executor: Executor | None = None,
) -> NotesSession:
    """Create a search session.

    Starts loading the word-vector model in the background; semantic search
    returns nothing until it is available.

    Args:
        store: Note store results are written back to
        config: Thresholds, cache and analysis settings
        model_loader: Loads the word-vector model, defaults to the configured vector file
        executor: Worker pool for note analysis
    """
    def load_configured_vectors() -> WordVectors:
        return WordVectors.load(config.word_vectors_path)

    engine = EmbeddingEngine(loader=model_loader or load_configured_vectors)
    engine.start_loading()

    orchestrator = SearchOrchestrator(
        engine=engine,
        cache=QueryCache(
            throttle_seconds=config.query_throttle_seconds,
            max_entries=config.query_cache_max_entries,
        ),
        semantic_search_enabled=config.semantic_search_enabled,
        semantic_threshold=config.semantic_search_threshold,
        similar_threshold=config.similar_notes_threshold,
        similar_limit=config.similar_notes_limit,
        suggestion_threshold=config.suggestion_threshold,
    )
    pipeline = AnalysisPipeline(
        engine=engine,
        store=store,
        executor=executor,
        confidence_generator=random_confidences(
            config.tag_confidence_min, config.tag_confidence_max
        ),
        max_suggested_tags=config.max_suggested_tags,
    )
    return NotesSession(store=store, orchestrator=orchestrator, pipeline=pipeline)
