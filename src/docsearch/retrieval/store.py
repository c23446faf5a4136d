"""
In-memory vector store.

Holds two parallel mappings keyed by chunk id: one to the embedding vector,
one to the chunk text. Every mutation and every snapshot runs under a single
lock, so the two mappings always have identical key sets from any reader's
point of view.
"""

import logging
import threading
from typing import Dict, Iterable, List, Tuple

from ..core.config import DEFAULT_DIMENSION
from ..core.exceptions import EmbeddingDimensionError

logger = logging.getLogger(__name__)

# (chunk_id, vector, text)
StoreEntry = Tuple[str, List[float], str]


class InMemoryVectorStore:
    """
    Thread-safe in-memory store of chunk vectors and texts.

    Not persisted: contents live for the lifetime of the object.
    """

    def __init__(self, dimension: int = DEFAULT_DIMENSION):
        """
        Initialize the vector store.

        Args:
            dimension: Required length of every stored vector
        """
        if dimension < 1:
            raise ValueError("dimension must be positive")
        self.dimension = dimension
        self._vectors: Dict[str, List[float]] = {}
        self._texts: Dict[str, str] = {}
        self._lock = threading.RLock()

    def _check_dimension(self, chunk_id: str, vector: List[float]) -> None:
        if len(vector) != self.dimension:
            raise EmbeddingDimensionError(
                f"Vector for {chunk_id} has dimension {len(vector)}, "
                f"store expects {self.dimension}",
                expected=self.dimension,
                actual=len(vector),
            )

    def insert(self, chunk_id: str, vector: List[float], text: str) -> None:
        """
        Add or overwrite the (vector, text) pair for chunk_id.

        Raises:
            EmbeddingDimensionError: If the vector length is wrong
        """
        self._check_dimension(chunk_id, vector)
        with self._lock:
            self._vectors[chunk_id] = list(vector)
            self._texts[chunk_id] = text

    def insert_many(self, entries: Iterable[StoreEntry]) -> int:
        """
        Insert a batch atomically.

        All vectors are validated before anything is written, so a bad entry
        leaves the store untouched.

        Returns:
            Number of entries written
        """
        batch = list(entries)
        for chunk_id, vector, _ in batch:
            self._check_dimension(chunk_id, vector)

        with self._lock:
            for chunk_id, vector, text in batch:
                self._vectors[chunk_id] = list(vector)
                self._texts[chunk_id] = text
        return len(batch)

    def replace(self, stale_ids: Iterable[str], entries: Iterable[StoreEntry]) -> int:
        """
        Delete stale_ids and insert entries in one lock scope.

        Readers see either the old set or the new one, never the gap between.

        Returns:
            Number of entries written
        """
        batch = list(entries)
        for chunk_id, vector, _ in batch:
            self._check_dimension(chunk_id, vector)

        with self._lock:
            self.delete(stale_ids)
            return self.insert_many(batch)

    def delete(self, chunk_ids: Iterable[str]) -> int:
        """
        Remove chunk ids from both mappings.

        Unknown ids are ignored.

        Returns:
            Number of entries removed
        """
        removed = 0
        with self._lock:
            for chunk_id in chunk_ids:
                if chunk_id in self._vectors:
                    del self._vectors[chunk_id]
                    del self._texts[chunk_id]
                    removed += 1
        return removed

    def clear(self) -> None:
        """Remove all entries."""
        with self._lock:
            removed = len(self._vectors)
            self._vectors.clear()
            self._texts.clear()
        logger.debug(f"Cleared {removed} entries from vector store")

    def count(self) -> int:
        """Number of stored chunk ids."""
        with self._lock:
            return len(self._vectors)

    def get_text(self, chunk_id: str) -> str:
        """Stored text for chunk_id; raises KeyError if absent."""
        with self._lock:
            return self._texts[chunk_id]

    def __contains__(self, chunk_id: str) -> bool:
        with self._lock:
            return chunk_id in self._vectors

    def __len__(self) -> int:
        return self.count()

    def all_entries(self) -> List[StoreEntry]:
        """
        Snapshot of every (chunk_id, vector, text) entry.

        The list is built under the lock; later mutations do not affect it.
        Order is unspecified.
        """
        with self._lock:
            return [
                (chunk_id, vector, self._texts[chunk_id])
                for chunk_id, vector in self._vectors.items()
            ]
