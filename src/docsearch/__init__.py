"""
docsearch - local, offline document retrieval.

Documents are split into sentence-aligned chunks, embedded with hashed
character trigrams, and kept in an in-memory vector store. Queries return
the stored passages with the highest cosine similarity. No models, no
network.

Example:
    >>> from docsearch import RetrievalEngine, format_answer
    >>> engine = RetrievalEngine()
    >>> engine.initialize()
    >>> report = engine.ingest_documents([("notes.txt", "The cat sat. It was warm.")])
    >>> print(format_answer(engine.query("Where did the cat sit?")))
"""

from .contracts import (
    NO_DOCUMENTS_MESSAGE,
    IngestionOutcome,
    IngestionReport,
    ParsedDocument,
    RetrievalHit,
    RetrievalResult,
)
from .core import (
    ConfigError,
    EmbeddingDimensionError,
    EmptyContentError,
    EngineConfig,
    NotInitializedError,
    RetrievalError,
)
from .core.logging import configure_logging
from .retrieval import (
    HashingEmbedder,
    InMemoryVectorStore,
    RetrievalEngine,
    chunk_text,
    format_answer,
)
from .sources import load_text_document

__version__ = "0.1.0"

__all__ = [
    "RetrievalEngine",
    "EngineConfig",
    "HashingEmbedder",
    "InMemoryVectorStore",
    "chunk_text",
    "format_answer",
    "load_text_document",
    "configure_logging",
    "NO_DOCUMENTS_MESSAGE",
    "ParsedDocument",
    "RetrievalHit",
    "RetrievalResult",
    "IngestionOutcome",
    "IngestionReport",
    "RetrievalError",
    "NotInitializedError",
    "EmptyContentError",
    "EmbeddingDimensionError",
    "ConfigError",
]
