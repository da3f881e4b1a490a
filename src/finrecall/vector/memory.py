"""In-process vector index for the ephemeral memory store."""

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

import numpy as np


@dataclass
class IndexedDocument:
    """A document held by :class:`InMemoryVectorIndex`."""

    content: str
    metadata: dict[str, Any] = field(default_factory=dict)


DocumentFilter = Callable[[IndexedDocument], bool]


class InMemoryVectorIndex:
    """Append-only cosine-similarity index held in process memory.

    The index has no delete primitive. Rows are only ever appended, so row
    ``i`` of the matrix always belongs to document ``i``. Not thread-safe;
    share it across coroutines on one event loop only.
    """

    def __init__(self) -> None:
        self._documents: list[IndexedDocument] = []
        self._matrix: np.ndarray | None = None

    def __len__(self) -> int:
        return len(self._documents)

    def add(self, vectors: list[list[float]], documents: list[IndexedDocument]) -> None:
        """Append documents and their embeddings.

        Args:
            vectors: One embedding per document
            documents: Documents to index

        Raises:
            ValueError: On a count or dimension mismatch
        """
        if len(vectors) != len(documents):
            raise ValueError(f"Got {len(vectors)} vectors for {len(documents)} documents")
        if not documents:
            return

        rows = np.asarray(vectors, dtype="float32")
        if rows.ndim != 2:
            raise ValueError("Embeddings must all have the same dimension")
        if self._matrix is not None and rows.shape[1] != self._matrix.shape[1]:
            msg = (
                f"Embedding dimension {rows.shape[1]} does not match "
                f"index dimension {self._matrix.shape[1]}"
            )
            raise ValueError(msg)

        self._matrix = rows if self._matrix is None else np.vstack([self._matrix, rows])
        self._documents.extend(documents)

    def similarity_search(
        self,
        query_vector: list[float],
        k: int,
        predicate: DocumentFilter | None = None,
    ) -> list[tuple[IndexedDocument, float]]:
        """Return the ``k`` most similar documents that pass ``predicate``.

        Scores are cosine similarities clamped into [0, 1].
        """
        if self._matrix is None or k <= 0:
            return []

        query = np.asarray(query_vector, dtype="float32")
        norms = np.linalg.norm(self._matrix, axis=1) * np.linalg.norm(query)
        with np.errstate(divide="ignore", invalid="ignore"):
            scores = np.where(norms > 0, self._matrix @ query / norms, 0.0)
        scores = np.clip(scores, 0.0, 1.0)

        candidates = [
            i for i, doc in enumerate(self._documents) if predicate is None or predicate(doc)
        ]
        candidates.sort(key=lambda i: scores[i], reverse=True)

        return [(self._documents[i], float(scores[i])) for i in candidates[:k]]

    def documents(self, predicate: DocumentFilter | None = None) -> list[IndexedDocument]:
        """Return every indexed document passing ``predicate``."""
        return [doc for doc in self._documents if predicate is None or predicate(doc)]
