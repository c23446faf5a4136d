"""
Retrieval Search - Rank stored chunks against a query vector.

Implements:
- Cosine similarity scoring
- Top-K retrieval over a full store snapshot
- Deterministic ordering with chunk_id tie-breaks
"""

import logging
import math
import time
import uuid
from typing import Optional, Sequence

from ..contracts.retrieval_contracts import (
    RetrievalHit,
    RetrievalPolicy,
    RetrievalResult,
)
from ..core.utils import CHUNK_ID_SEPARATOR
from .store import StoreEntry

logger = logging.getLogger(__name__)


def dot_product(vec_a: Sequence[float], vec_b: Sequence[float]) -> float:
    """
    Dot product of two equal-length vectors.

    For unit vectors this is their cosine similarity.

    Raises:
        ValueError: If vectors have different dimensions
    """
    if len(vec_a) != len(vec_b):
        raise ValueError(f"Vector dimensions must match: {len(vec_a)} != {len(vec_b)}")
    return sum(a * b for a, b in zip(vec_a, vec_b))


def cosine_similarity(vec_a: Sequence[float], vec_b: Sequence[float]) -> float:
    """
    Compute cosine similarity between two vectors.

    Args:
        vec_a: First vector
        vec_b: Second vector

    Returns:
        Cosine similarity score between -1 and 1; 0.0 if either is a zero vector

    Raises:
        ValueError: If vectors have different dimensions or are empty
    """
    if not vec_a or not vec_b:
        raise ValueError("Vectors cannot be empty")

    dot = dot_product(vec_a, vec_b)
    magnitude_a = math.sqrt(sum(a * a for a in vec_a))
    magnitude_b = math.sqrt(sum(b * b for b in vec_b))

    if magnitude_a == 0 or magnitude_b == 0:
        return 0.0

    return dot / (magnitude_a * magnitude_b)


def document_from_chunk_id(chunk_id: str) -> str:
    """Document name part of a ``<document>_chunk_<i>`` key."""
    head, sep, _ = chunk_id.rpartition(CHUNK_ID_SEPARATOR)
    return head if sep else chunk_id


def rank_entries(
    query_vector: Sequence[float],
    entries: Sequence[StoreEntry],
    query_text: str = "",
    policy: Optional[RetrievalPolicy] = None,
) -> RetrievalResult:
    """
    Score every entry against the query and keep the top-K.

    Both the query and the stored vectors are unit-normalized, so the score
    is the plain dot product.

    Args:
        query_vector: Embedding of the query
        entries: Store snapshot of (chunk_id, vector, text)
        query_text: Query text as asked (for the result and logging)
        policy: Retrieval policy (top_k)

    Returns:
        RetrievalResult with hits ranked by score descending, then chunk_id
    """
    start_time = time.time()
    policy = policy or RetrievalPolicy()
    retrieval_id = str(uuid.uuid4())

    scored = [
        (dot_product(query_vector, vector), chunk_id, text)
        for chunk_id, vector, text in entries
    ]
    scored.sort(key=lambda x: (-x[0], x[1]))

    hits = [
        RetrievalHit(
            rank=rank,
            score=score,
            chunk_id=chunk_id,
            text=text,
            document=document_from_chunk_id(chunk_id),
        )
        for rank, (score, chunk_id, text) in enumerate(scored[:policy.top_k], start=1)
    ]

    execution_ms = int((time.time() - start_time) * 1000)

    logger.info(
        f"Retrieved {len(hits)} chunks from {len(entries)} candidates "
        f"in {execution_ms}ms (query: {query_text[:50]})",
        extra={"retrieval_id": retrieval_id},
    )

    return RetrievalResult(
        retrieval_id=retrieval_id,
        query_text=query_text,
        hits=hits,
        total_candidates=len(entries),
        execution_ms=execution_ms,
    )
