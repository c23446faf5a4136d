"""
Retrieval module for offline document search.

This module provides:
- Chunking: Split documents into sentence-aligned units
- Embedding: Hash character trigrams into fixed-width unit vectors
- Storage: Thread-safe in-memory vector store
- Search: Rank stored chunks by cosine similarity
- Engine: Ingestion and query orchestration
"""

from .answer import format_answer
from .chunker import Chunker, chunk_text, split_sentences
from .embedder import HashingEmbedder, fnv1a_32, normalize_text
from .engine import RetrievalEngine
from .search import cosine_similarity, dot_product, rank_entries
from .store import InMemoryVectorStore

__all__ = [
    "Chunker",
    "chunk_text",
    "split_sentences",
    "HashingEmbedder",
    "fnv1a_32",
    "normalize_text",
    "InMemoryVectorStore",
    "cosine_similarity",
    "dot_product",
    "rank_entries",
    "RetrievalEngine",
    "format_answer",
]
