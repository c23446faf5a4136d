"""
Embedder - Model-free text embeddings via feature hashing.

Text is normalized, split into overlapping character trigrams, and each
trigram is hashed (32-bit FNV-1a) into one of ``dimension`` buckets. The
bucket counts are L2-normalized into a unit vector. Hash collisions simply
add into the same bucket.

No vocabulary, no model files, no network: identical text always yields an
identical vector for a given dimension.
"""

import logging
import math
import re
from concurrent.futures import ThreadPoolExecutor
from typing import List, Sequence

from ..core.config import DEFAULT_DIMENSION

logger = logging.getLogger(__name__)

FNV_OFFSET_BASIS = 2166136261
FNV_PRIME = 16777619
UINT32_MASK = 0xFFFFFFFF

NGRAM_SIZE = 3

_NON_ALNUM_RE = re.compile(r"[^a-z0-9\s]")
_WHITESPACE_RE = re.compile(r"\s+")


def normalize_text(text: str) -> str:
    """
    Normalize text for hashing.

    Lowercases, replaces everything except [a-z0-9] and whitespace with a
    space, collapses whitespace runs and trims.

    Example:
        >>> normalize_text("  Hello, World!  ")
        'hello world'
    """
    lowered = text.lower()
    cleaned = _NON_ALNUM_RE.sub(" ", lowered)
    return _WHITESPACE_RE.sub(" ", cleaned).strip()


def char_ngrams(text: str, n: int = NGRAM_SIZE) -> List[str]:
    """Overlapping character n-grams with stride 1; empty if len(text) < n."""
    return [text[i:i + n] for i in range(len(text) - n + 1)]


def fnv1a_32(value: str) -> int:
    """
    32-bit FNV-1a hash over the UTF-16 code units of ``value``.

    Normalized text is pure ASCII, so code units and code points coincide.

    Example:
        >>> fnv1a_32("")
        2166136261
        >>> fnv1a_32("a")
        3826002220
    """
    h = FNV_OFFSET_BASIS
    for ch in value:
        h ^= ord(ch)
        h = (h * FNV_PRIME) & UINT32_MASK
    return h


def l2_norm(vector: Sequence[float]) -> float:
    return math.sqrt(sum(v * v for v in vector))


class HashingEmbedder:
    """
    Hashed bag-of-trigrams embedder.

    Example:
        >>> embedder = HashingEmbedder(dimension=512)
        >>> vec = embedder.embed("The cat sat.")
        >>> len(vec)
        512
    """

    def __init__(self, dimension: int = DEFAULT_DIMENSION):
        """
        Initialize the embedder.

        Args:
            dimension: Number of hash buckets (vector length)
        """
        if dimension < 1:
            raise ValueError("dimension must be positive")
        self.dimension = dimension

    def embed(self, text: str) -> List[float]:
        """
        Embed text as a unit vector.

        Text that normalizes to fewer than three characters has no trigrams
        and yields the zero vector.

        Args:
            text: Text to embed

        Returns:
            List of ``dimension`` floats with Euclidean norm 1 (or all zeros)
        """
        counts = [0.0] * self.dimension
        for trigram in char_ngrams(normalize_text(text or "")):
            counts[fnv1a_32(trigram) % self.dimension] += 1.0

        norm = l2_norm(counts) or 1.0
        return [c / norm for c in counts]

    def embed_many(self, texts: Sequence[str], max_workers: int = 1) -> List[List[float]]:
        """
        Embed a batch of texts, preserving input order.

        Args:
            texts: Texts to embed
            max_workers: Worker threads; 1 embeds sequentially

        Returns:
            One vector per input text
        """
        if max_workers < 1:
            raise ValueError("max_workers must be positive")

        if max_workers == 1 or len(texts) < 2:
            return [self.embed(t) for t in texts]

        with ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="embed",
        ) as executor:
            vectors = list(executor.map(self.embed, texts))

        logger.debug(f"Embedded {len(texts)} texts with {max_workers} workers")
        return vectors
