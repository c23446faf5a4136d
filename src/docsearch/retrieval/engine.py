"""
Retrieval Engine - Ingest documents and answer queries over them.

The engine owns one HashingEmbedder and one InMemoryVectorStore. It is an
ordinary object: construct it once, pass it to whatever needs it, and drop
it when done. Nothing here is module-level state.

Workflow:
1. Ingest: chunk document text, embed each chunk, store under
   ``<document>_chunk_<i>``
2. Query: embed the question, score every stored chunk, return the top-K
"""

import dataclasses
import logging
import threading
import time
import uuid
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple, Union

from ..contracts.retrieval_contracts import (
    ChunkingPolicy,
    IngestionOutcome,
    IngestionReport,
    ParsedDocument,
    RetrievalPolicy,
    RetrievalResult,
)
from ..core.config import EngineConfig
from ..core.exceptions import EmptyContentError, NotInitializedError
from ..core.utils import compute_content_hash, make_chunk_id
from .chunker import Chunker
from .embedder import HashingEmbedder
from .search import rank_entries
from .store import InMemoryVectorStore, StoreEntry

logger = logging.getLogger(__name__)

DocumentInput = Union[ParsedDocument, Tuple[str, str]]


class RetrievalEngine:
    """
    Offline document retrieval over hashed trigram embeddings.

    The engine starts uninitialized. ``initialize()`` creates the embedder
    and store; calling it again is a no-op. ``add_document`` and the ingest
    methods initialize on demand, while ``query`` and ``clear_documents``
    raise NotInitializedError until initialization has happened.

    Example:
        >>> engine = RetrievalEngine()
        >>> engine.initialize()
        >>> engine.ingest_document("a.txt", "The cat sat. It was warm.")
        1
        >>> result = engine.query("cat")
        >>> result.hits[0].text
        'The cat sat. It was warm.'
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        """
        Initialize the engine (without creating the store).

        Args:
            config: Engine configuration (uses defaults if not provided)
        """
        self.config = config or EngineConfig()
        self.chunker = Chunker(ChunkingPolicy(max_chunk_size=self.config.max_chunk_size))
        self.retrieval_policy = RetrievalPolicy(top_k=self.config.top_k)

        self._embedder: Optional[HashingEmbedder] = None
        self._store: Optional[InMemoryVectorStore] = None
        # document name -> chunk ids currently in the store for it
        self._documents: Dict[str, Set[str]] = {}
        self._lock = threading.RLock()

    @property
    def is_initialized(self) -> bool:
        return self._store is not None

    @property
    def dimension(self) -> int:
        return self.config.dimension

    def initialize(self) -> None:
        """Create the embedder and the empty store. Idempotent."""
        with self._lock:
            if self.is_initialized:
                return
            self._embedder = HashingEmbedder(self.config.dimension)
            self._store = InMemoryVectorStore(self.config.dimension)
            logger.info(
                f"Retrieval engine initialized (dimension={self.config.dimension}, "
                f"max_chunk_size={self.config.max_chunk_size}, top_k={self.config.top_k})"
            )

    def _require_initialized(self, operation: str) -> None:
        if not self.is_initialized:
            raise NotInitializedError(
                f"Retrieval engine not initialized; call initialize() before {operation}()"
            )

    def _components(self) -> Tuple[HashingEmbedder, InMemoryVectorStore]:
        """The current (embedder, store) pair, read together."""
        with self._lock:
            return self._embedder, self._store

    # =========================================================================
    # Ingestion
    # =========================================================================

    def add_document(self, name: str, chunks: Sequence[str]) -> int:
        """
        Embed and store pre-chunked document text.

        Chunk ``i`` is stored as ``<name>_chunk_<i>``. Re-adding a document
        overwrites chunk by chunk; by default, chunks beyond the new chunk
        count from an earlier, longer version stay in the store. With
        ``replace_on_reupload`` every earlier chunk of the document is removed
        first.

        Args:
            name: Document name
            chunks: Ordered chunk texts

        Returns:
            Number of chunks stored
        """
        if not self.is_initialized:
            self.initialize()

        texts = list(chunks)

        while True:
            embedder, store = self._components()
            vectors = embedder.embed_many(texts, max_workers=self.config.embed_workers)
            entries = [
                (make_chunk_id(name, i), vector, text)
                for i, (text, vector) in enumerate(zip(texts, vectors))
            ]

            with self._lock:
                if store is self._store:
                    self._store_entries(name, entries)
                    break

            # set_dimension swapped the store while we were embedding
            logger.debug(
                "Embedding dimension changed during ingestion; re-embedding",
                extra={"document": name},
            )

        logger.debug(f"Stored {len(entries)} chunks", extra={"document": name})
        return len(entries)

    def _store_entries(self, name: str, entries: List[StoreEntry]) -> None:
        # Caller holds self._lock.
        new_ids = {chunk_id for chunk_id, _, _ in entries}
        previous = self._documents.get(name, set())

        if self.config.replace_on_reupload and previous:
            stale = previous - new_ids
            self._store.replace(stale, entries)
            known = new_ids
            if stale:
                logger.info(
                    f"Replaced document {name}: dropped {len(stale)} stale chunk(s)",
                    extra={"document": name},
                )
        else:
            self._store.insert_many(entries)
            known = previous | new_ids
            if previous - new_ids:
                logger.debug(
                    f"Document {name} re-added with fewer chunks; "
                    f"{len(previous - new_ids)} earlier chunk(s) remain",
                    extra={"document": name},
                )

        if known:
            self._documents[name] = known
        else:
            self._documents.pop(name, None)

    def ingest_document(self, name: str, text: str) -> int:
        """
        Chunk, embed and store a document's full text.

        Args:
            name: Document name
            text: Decoded plain text

        Returns:
            Number of chunks stored

        Raises:
            EmptyContentError: If the text yields no chunks
        """
        chunks = self.chunker.chunk(text or "", source_id=name)
        if not chunks:
            raise EmptyContentError(f"Document {name} has no text content", document=name)
        return self.add_document(name, chunks)

    def ingest_documents(self, documents: Iterable[DocumentInput]) -> IngestionReport:
        """
        Ingest a batch of documents, isolating failures per document.

        Args:
            documents: ParsedDocument objects or (name, text) pairs

        Returns:
            IngestionReport listing which documents succeeded and which
            failed and why
        """
        start_time = time.time()
        report = IngestionReport()

        for doc in documents:
            name = getattr(doc, "file_name", None)
            content_hash = None
            try:
                if isinstance(doc, ParsedDocument):
                    text = doc.content
                else:
                    name, text = doc
                content_hash = compute_content_hash(text or "")
                chunk_count = self.ingest_document(name, text)
            except Exception as e:
                if name is None:
                    name = repr(doc)
                if isinstance(e, EmptyContentError):
                    logger.warning(f"Skipping document: {e}", extra={"document": name})
                else:
                    logger.error(f"Error ingesting document: {e}", extra={"document": name})
                report.outcomes.append(IngestionOutcome(
                    document=name,
                    success=False,
                    content_sha256=content_hash,
                    error_type=type(e).__name__,
                    error_message=str(e),
                ))
                continue

            report.outcomes.append(IngestionOutcome(
                document=name,
                success=True,
                chunk_count=chunk_count,
                content_sha256=content_hash,
            ))

        logger.info(
            f"Ingested {len(report.succeeded)} document(s), "
            f"{len(report.failed)} failed, {report.total_chunks} chunks "
            f"in {round(time.time() - start_time, 3)}s"
        )
        return report

    # =========================================================================
    # Query
    # =========================================================================

    def query(self, question: str, top_k: Optional[int] = None) -> RetrievalResult:
        """
        Return the stored passages most similar to the question.

        Args:
            question: Free-text question
            top_k: Override for the configured number of hits

        Returns:
            RetrievalResult with ranked hits, or the no-documents sentinel
            when the store is empty

        Raises:
            NotInitializedError: If the engine was never initialized
        """
        self._require_initialized("query")

        # Score against one consistent pair even if set_dimension runs meanwhile
        embedder, store = self._components()
        entries = store.all_entries()
        if not entries:
            logger.info("Query on empty store; returning no-documents result")
            return RetrievalResult.empty_store(str(uuid.uuid4()), question)

        policy = self.retrieval_policy
        if top_k is not None:
            if top_k < 1:
                raise ValueError("top_k must be positive")
            policy = dataclasses.replace(policy, top_k=top_k)

        query_vector = embedder.embed(question)
        return rank_entries(query_vector, entries, query_text=question, policy=policy)

    # =========================================================================
    # Maintenance
    # =========================================================================

    def clear_documents(self) -> None:
        """
        Remove every stored chunk.

        Raises:
            NotInitializedError: If the engine was never initialized
        """
        self._require_initialized("clear_documents")
        with self._lock:
            self._store.clear()
            self._documents.clear()
        logger.info("Cleared all documents")

    def remove_document(self, name: str) -> int:
        """
        Remove every chunk stored for one document.

        Returns:
            Number of chunks removed (0 for an unknown name)
        """
        self._require_initialized("remove_document")
        with self._lock:
            chunk_ids = self._documents.pop(name, set())
            removed = self._store.delete(chunk_ids)
        logger.info(f"Removed {removed} chunk(s)", extra={"document": name})
        return removed

    def list_documents(self) -> List[str]:
        """Names of documents with at least one stored chunk, sorted."""
        with self._lock:
            return sorted(self._documents)

    def get_document_count(self) -> int:
        """Number of indexed chunks (not documents)."""
        if not self.is_initialized:
            return 0
        return self._store.count()

    def set_dimension(self, dimension: int) -> None:
        """
        Change the embedding dimension.

        Vectors of different dimensions cannot be compared, so an initialized
        engine discards its whole store and starts empty.
        """
        new_config = dataclasses.replace(self.config, dimension=dimension)
        with self._lock:
            if dimension == self.config.dimension:
                return
            dropped = self.get_document_count()
            self.config = new_config
            if self.is_initialized:
                self._embedder = HashingEmbedder(dimension)
                self._store = InMemoryVectorStore(dimension)
                self._documents.clear()
                logger.warning(
                    f"Embedding dimension changed to {dimension}; "
                    f"discarded {dropped} stored chunk(s)"
                )
