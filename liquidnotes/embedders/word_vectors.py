"""Pretrained word-vector table loaded from a text vector file."""

import logging
from pathlib import Path

import numpy as np

logger = logging.getLogger(__name__)


class WordVectors:
    """In-memory word-vector model.

    Reads the plain text format shared by GloVe and word2vec: one word per line
    followed by its components, separated by whitespace. A leading
    ``<count> <dimension>`` header line is skipped when present.
    """

    def __init__(self, vectors: dict[str, np.ndarray], dimension: int) -> None:
        self._vectors = vectors
        self.dimension = dimension

    @classmethod
    def load(cls, filepath: str | Path) -> "WordVectors":
        """Load word vectors from disk.

        Args:
            filepath: Path to the text vector file

        Returns:
            WordVectors with every well-formed row of the file
        """
        vectors: dict[str, np.ndarray] = {}
        dimension = 0

        with open(filepath, "r", encoding="utf-8") as f:
            for line_number, line in enumerate(f):
                parts = line.rstrip().split(" ")
                if line_number == 0 and len(parts) == 2 and all(p.isdigit() for p in parts):
                    continue
                if len(parts) < 2:
                    continue

                word, components = parts[0], parts[1:]
                if not dimension:
                    dimension = len(components)
                if len(components) != dimension:
                    logger.warning(
                        f"Skipping vector for '{word}' on line {line_number + 1}: "
                        f"expected {dimension} components, got {len(components)}"
                    )
                    continue

                vectors[word.lower()] = np.array(components, dtype=np.float32)

        logger.info(f"Loaded {len(vectors)} word vectors (dim={dimension}) from {filepath}")
        return cls(vectors, dimension)

    @classmethod
    def from_data(cls, vectors: dict[str, list[float]]) -> "WordVectors":
        """Create WordVectors from a plain mapping (useful for testing)."""
        arrays = {word.lower(): np.array(v, dtype=np.float32) for word, v in vectors.items()}
        dimension = len(next(iter(arrays.values()))) if arrays else 0
        return cls(arrays, dimension)

    def vector(self, word: str) -> np.ndarray | None:
        return self._vectors.get(word)

    def __len__(self) -> int:
        return len(self._vectors)

    def __contains__(self, word: str) -> bool:
        return word in self._vectors
