"""Averaged word-vector embeddings and cosine-similarity ranking."""

import logging
import threading
from typing import Callable, Sequence

import numpy as np

from liquidnotes.domain.note import Note
from liquidnotes.embedders.base import WordVectorModel

logger = logging.getLogger(__name__)

MIN_WORD_LENGTH = 3

ModelLoader = Callable[[], WordVectorModel]


class EmbeddingEngine:
    """Turns free text into averaged word-vector embeddings and ranks notes by them.

    The word-vector model is loaded once on a background thread. Until it is
    available every ``embed`` call returns None instead of blocking. After loading
    the model is read-only and safe to share between worker threads.
    """

    def __init__(self, loader: ModelLoader | None = None) -> None:
        """Initialize the engine.

        Args:
            loader: Zero-argument callable returning the word-vector model. Called
                once, off the calling thread, by ``start_loading``.
        """
        self._loader = loader
        self._model: WordVectorModel | None = None
        self._loaded = threading.Event()
        self._load_thread: threading.Thread | None = None

    @classmethod
    def from_model(cls, model: WordVectorModel) -> "EmbeddingEngine":
        """Create an engine around an already loaded model (useful for testing)."""
        instance = cls()
        instance._model = model
        instance._loaded.set()
        return instance

    @property
    def is_loaded(self) -> bool:
        return self._model is not None

    def start_loading(self) -> None:
        """Load the model in the background. Calling it again is a no-op."""
        if self._load_thread is not None or self._loaded.is_set():
            return
        if self._loader is None:
            # nothing to load, release waiters right away
            self._loaded.set()
            return

        self._load_thread = threading.Thread(
            target=self._load, name="word-vector-loader", daemon=True
        )
        self._load_thread.start()

    def wait_until_loaded(self, timeout: float | None = None) -> bool:
        """Block until loading finished (successfully or not). Returns ``is_loaded``."""
        self._loaded.wait(timeout)
        return self.is_loaded

    def _load(self) -> None:
        try:
            self._model = self._loader()  # type: ignore[misc]
            logger.info(f"Word-vector model loaded (dim={self._model.dimension})")
        except Exception as e:
            logger.error(f"Failed to load word-vector model: {e}")
        finally:
            self._loaded.set()

    def embed(self, text: str) -> np.ndarray | None:
        """Embed text as the mean of its word vectors.

        Words shorter than three characters are ignored, as are words the model
        does not know.

        Args:
            text: Free text to embed

        Returns:
            The averaged vector, or None when the model is not loaded yet or no
            word could be resolved
        """
        model = self._model
        if model is None:
            return None

        total: np.ndarray | None = None
        count = 0
        for word in text.lower().split():
            if len(word) < MIN_WORD_LENGTH:
                continue
            vector = model.vector(word)
            if vector is None:
                continue
            vector = np.asarray(vector, dtype=np.float64)
            total = vector.copy() if total is None else total + vector
            count += 1

        if total is None or count == 0:
            return None

        return (total / count).astype(np.float32)

    @staticmethod
    def similarity(a: np.ndarray, b: np.ndarray) -> float:
        """Cosine similarity in [-1, 1].

        Returns 0.0 when either vector has zero magnitude or their dimensions differ.
        """
        a = np.asarray(a, dtype=np.float64)
        b = np.asarray(b, dtype=np.float64)
        if a.shape != b.shape:
            return 0.0

        norm_a = np.linalg.norm(a)
        norm_b = np.linalg.norm(b)
        if norm_a == 0 or norm_b == 0:
            return 0.0

        score = float(np.dot(a, b) / (norm_a * norm_b))
        return max(-1.0, min(1.0, score))

    def rank(
        self,
        query_vector: np.ndarray,
        candidates: Sequence[Note],
        threshold: float,
        *,
        inclusive: bool = False,
    ) -> list[tuple[Note, float]]:
        """Rank notes by similarity of their stored embedding to a query vector.

        Notes without an embedding are skipped. Equal scores keep their input order.

        Args:
            query_vector: Vector to compare against
            candidates: Notes to score
            threshold: Minimum score to keep
            inclusive: Keep scores equal to the threshold as well

        Returns:
            (note, score) pairs sorted by descending score
        """
        results = []
        for note in candidates:
            if note.content_embedding is None:
                continue
            score = self.similarity(query_vector, note.content_embedding)
            if score > threshold or (inclusive and score == threshold):
                results.append((note, score))

        # sorted() is stable, also with reverse=True
        return sorted(results, key=lambda x: x[1], reverse=True)
