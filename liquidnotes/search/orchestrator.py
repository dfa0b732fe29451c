"""Public entry point for searching notes."""

import logging
from datetime import datetime
from typing import Callable, Sequence

from liquidnotes.domain.filters import FilterDescriptor
from liquidnotes.domain.note import Note, utc_now
from liquidnotes.embedders.engine import EmbeddingEngine
from liquidnotes.query.parser import parse_query
from liquidnotes.query.predicate import is_searchable, matches
from liquidnotes.search.cache import QueryCache

logger = logging.getLogger(__name__)

SEMANTIC_SEARCH_THRESHOLD = 0.3
SIMILAR_NOTES_THRESHOLD = 0.6
SIMILAR_NOTES_LIMIT = 3
SUGGESTION_THRESHOLD = 0.5

Predicate = Callable[[FilterDescriptor, Note, datetime], bool]


class SearchOrchestrator:
    """Routes a query to lexical or semantic search and returns ordered notes.

    A query is either fully semantic or fully lexical, never both. Any ``~term``
    token, or the semantic-mode flag, makes it semantic. Lexical results are
    cached per raw query string; semantic results are never cached.
    """

    def __init__(
        self,
        *,
        engine: EmbeddingEngine,
        cache: QueryCache | None = None,
        predicate: Predicate = matches,
        semantic_search_enabled: bool = False,
        semantic_threshold: float = SEMANTIC_SEARCH_THRESHOLD,
        similar_threshold: float = SIMILAR_NOTES_THRESHOLD,
        similar_limit: int = SIMILAR_NOTES_LIMIT,
        suggestion_threshold: float = SUGGESTION_THRESHOLD,
        now: Callable[[], datetime] = utc_now,
    ):
        """Initialize the orchestrator.

        Args:
            engine: Embedding engine used for semantic search and similar notes
            cache: Lexical result cache owned by this orchestrator
            predicate: Filter evaluator applied to each candidate note
            semantic_search_enabled: Route every non-blank query to semantic search
            semantic_threshold: Minimum similarity for semantic search hits
            similar_threshold: Minimum similarity for ``find_similar``
            similar_limit: Maximum number of notes returned by ``find_similar``
            suggestion_threshold: Default minimum similarity for ``similar_notes``
            now: Clock for overdue checks
        """
        self.engine = engine
        self.cache = cache if cache is not None else QueryCache()
        self.predicate = predicate
        self.semantic_search_enabled = semantic_search_enabled
        self.semantic_threshold = semantic_threshold
        self.similar_threshold = similar_threshold
        self.similar_limit = similar_limit
        self.suggestion_threshold = suggestion_threshold
        self._now = now

    def search(self, query: str, notes: Sequence[Note]) -> list[Note]:
        """Search notes with a raw query string.

        A blank query returns every searchable note. A query made only of
        invalid operator tokens matches nothing.

        Args:
            query: Raw query, possibly containing operator tokens
            notes: Candidate notes in the caller's preferred order

        Returns:
            Matching notes; input order for lexical results, descending similarity
            for semantic results
        """
        if not query.strip():
            return [note for note in notes if is_searchable(note)]

        parsed = parse_query(query)
        descriptor = parsed.descriptor

        if parsed.discarded and len(parsed.discarded) == len(query.split()):
            # only invalid operators, nothing left to match on
            return []

        if descriptor.semantic_terms or self.semantic_search_enabled:
            terms = descriptor.semantic_terms or descriptor.text_terms
            search_text = " ".join(terms)
            if search_text:
                return [note for note, _ in self.semantic_search(search_text, notes)]

        return self._lexical_search(query, descriptor, notes)

    def semantic_search(self, query_text: str, notes: Sequence[Note]) -> list[tuple[Note, float]]:
        """Rank notes by similarity to free text.

        Returns an empty list when the text cannot be embedded.
        """
        query_vector = self.engine.embed(query_text)
        if query_vector is None:
            logger.debug(f"No embedding for semantic query '{query_text}'")
            return []

        ranked = self.engine.rank(query_vector, notes, self.semantic_threshold)
        return [(note, score) for note, score in ranked if is_searchable(note)]

    def find_similar(self, note: Note, notes: Sequence[Note]) -> list[Note]:
        """Get the notes most similar to the given note, for linking suggestions."""
        similar = self.similar_notes(note, notes, threshold=self.similar_threshold)
        return [candidate for candidate, _ in similar[: self.similar_limit]]

    def similar_notes(
        self, note: Note, notes: Sequence[Note], threshold: float | None = None
    ) -> list[tuple[Note, float]]:
        """Score other notes against the given note's embedding.

        Args:
            note: Reference note; returns nothing if it has no embedding
            notes: Candidate notes, the reference note itself is skipped
            threshold: Minimum similarity (inclusive), defaults to the suggestion threshold

        Returns:
            (note, score) pairs sorted by descending score
        """
        if note.content_embedding is None:
            return []

        candidates = [
            candidate for candidate in notes if candidate.id != note.id and is_searchable(candidate)
        ]
        return self.engine.rank(
            note.content_embedding,
            candidates,
            self.suggestion_threshold if threshold is None else threshold,
            inclusive=True,
        )

    def clear_cache(self) -> None:
        """Forget cached lexical results, e.g. after notes were created."""
        self.cache.clear()

    def _lexical_search(
        self, query: str, descriptor: FilterDescriptor, notes: Sequence[Note]
    ) -> list[Note]:
        def compute() -> list[str]:
            now = self._now()
            return [note.id for note in notes if self.predicate(descriptor, note, now)]

        note_ids = self.cache.lookup_or_compute(query, compute)

        notes_by_id = {note.id: note for note in notes}
        return [notes_by_id[note_id] for note_id in note_ids if note_id in notes_by_id]
