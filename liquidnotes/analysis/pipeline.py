"""Background analysis of notes: suggested tags and content embeddings."""

import logging
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from datetime import datetime
from typing import Callable

import numpy as np

from liquidnotes.analysis.tagging import (
    ConfidenceGenerator,
    extract_entities,
    extract_plain_text,
    random_confidences,
)
from liquidnotes.domain.note import Note, utc_now
from liquidnotes.embedders.engine import EmbeddingEngine
from liquidnotes.store.base import NoteMutation, NoteStore

logger = logging.getLogger(__name__)

DEFAULT_MAX_SUGGESTED_TAGS = 5


class AnalysisPipeline:
    """Derives suggested tags and an embedding for notes off the calling thread.

    Results are never written to a note directly. Each job hands a mutation to
    ``store.apply_mutation`` which applies it on the store's single writer; if the
    note was deleted in the meantime the result is dropped there. Re-analyzing a
    note while an earlier analysis is in flight is allowed and the last write-back wins.
    """

    def __init__(
        self,
        *,
        engine: EmbeddingEngine,
        store: NoteStore,
        executor: Executor | None = None,
        confidence_generator: ConfidenceGenerator | None = None,
        max_suggested_tags: int = DEFAULT_MAX_SUGGESTED_TAGS,
        clock: Callable[[], datetime] = utc_now,
    ):
        """Initialize the pipeline.

        Args:
            engine: Embedding engine used for content embeddings
            store: Note store whose writer applies the results
            executor: Worker pool for the analysis jobs, a private thread pool by default
            confidence_generator: Produces the per-tag confidences
            max_suggested_tags: Maximum number of tags to suggest per note
            clock: Timestamp source for ``last_analyzed``
        """
        self.engine = engine
        self.store = store
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(thread_name_prefix="note-analysis")
        self.confidence_generator = confidence_generator or random_confidences()
        self.max_suggested_tags = max_suggested_tags
        self._clock = clock

    def analyze(self, note: Note) -> list[Future]:
        """Start tag suggestion and embedding for a note without waiting for them.

        Args:
            note: Note to analyze; only its ID and current text are captured

        Returns:
            Futures of the two background jobs, for callers that want to wait
        """
        note_id = note.id
        tag_text = extract_plain_text(note)
        embedding_text = f"{note.title} {note.body}"

        return [
            self._executor.submit(self._run_job, "tags", note_id, self._suggest_tags, tag_text),
            self._executor.submit(self._run_job, "embedding", note_id, self._embed, embedding_text),
        ]

    def shutdown(self, wait: bool = True) -> None:
        """Stop the worker pool if this pipeline created it."""
        if self._owns_executor:
            self._executor.shutdown(wait=wait)

    def _run_job(
        self, kind: str, note_id: str, job: Callable[[str], NoteMutation], text: str
    ) -> None:
        try:
            mutation = job(text)
        except Exception:
            logger.exception(f"Analysis ({kind}) failed for note {note_id}")
            return
        self.store.apply_mutation(note_id, mutation)

    def _suggest_tags(self, text: str) -> NoteMutation:
        tags = extract_entities(text, limit=self.max_suggested_tags)
        confidences = self.confidence_generator(tags)
        analyzed_at = self._clock()

        def apply(note: Note) -> None:
            existing = set(note.tags)
            kept = [(tag, c) for tag, c in zip(tags, confidences) if tag not in existing]
            note.suggested_tags = [tag for tag, _ in kept]
            note.tag_confidences = [c for _, c in kept]
            note.last_analyzed = analyzed_at

        return apply

    def _embed(self, text: str) -> NoteMutation:
        embedding = self.engine.embed(text)

        def apply(note: Note) -> None:
            note.content_embedding = None if embedding is None else np.array(embedding)

        return apply
