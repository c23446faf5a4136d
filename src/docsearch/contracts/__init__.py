"""
Data contracts for docsearch.
"""

from .retrieval_contracts import (
    NO_DOCUMENTS_MESSAGE,
    ChunkingPolicy,
    RetrievalPolicy,
    ParsedDocument,
    RetrievalHit,
    RetrievalResult,
    IngestionOutcome,
    IngestionReport,
)

__all__ = [
    "NO_DOCUMENTS_MESSAGE",
    "ChunkingPolicy",
    "RetrievalPolicy",
    "ParsedDocument",
    "RetrievalHit",
    "RetrievalResult",
    "IngestionOutcome",
    "IngestionReport",
]
