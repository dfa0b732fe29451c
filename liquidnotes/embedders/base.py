from typing import Protocol

import numpy as np


class WordVectorModel(Protocol):
    dimension: int

    def vector(self, word: str) -> np.ndarray | None:
        """Get the vector for a single lowercase word, or None if it is unknown."""
        ...
