"""
Retrieval Contracts - data models for chunking, ingestion and retrieval.

These models define the policies the retrieval engine runs under and the
records it hands back to callers: parsed documents, ingestion reports and
ranked retrieval results.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..core.config import DEFAULT_MAX_CHUNK_SIZE, DEFAULT_TOP_K


NO_DOCUMENTS_MESSAGE = (
    "Please upload some documents first so I can answer your questions "
    "based on their content."
)


@dataclass
class ChunkingPolicy:
    """
    Policy for chunking documents into searchable units.

    Attributes:
        max_chunk_size: Maximum chunk length in characters; a single sentence
            longer than this becomes its own oversized chunk
        version: Policy version identifier
    """
    max_chunk_size: int = DEFAULT_MAX_CHUNK_SIZE
    version: str = "1.0"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "max_chunk_size": self.max_chunk_size,
            "version": self.version,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ChunkingPolicy":
        """Create from dictionary."""
        return cls(
            max_chunk_size=data.get("max_chunk_size", DEFAULT_MAX_CHUNK_SIZE),
            version=data.get("version", "1.0"),
        )


@dataclass
class RetrievalPolicy:
    """
    Policy for retrieval scoring.

    Hits are scored by dot product of unit vectors and tie-broken by
    chunk_id; only the cut-off is configurable.

    Attributes:
        top_k: Number of hits returned per query
        version: Policy version identifier
    """
    top_k: int = DEFAULT_TOP_K
    version: str = "1.0"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "top_k": self.top_k,
            "version": self.version,
        }


@dataclass
class ParsedDocument:
    """
    A document as handed over by the file-decoding layer.

    Attributes:
        file_name: Display name, used as the document identity
        content: Decoded plain text (empty if decoding failed)
        file_type: Lower-cased extension including the dot, e.g. ".txt"
    """
    file_name: str
    content: str
    file_type: str = ""


@dataclass
class RetrievalHit:
    """
    A single ranked passage.

    Attributes:
        rank: 1-based position in the result
        score: Cosine similarity against the query
        chunk_id: Store key of the chunk
        text: Stored chunk text, exactly as indexed
        document: Name of the owning document
    """
    rank: int
    score: float
    chunk_id: str
    text: str
    document: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "rank": self.rank,
            "score": self.score,
            "chunk_id": self.chunk_id,
            "text": self.text,
            "document": self.document,
        }


@dataclass
class RetrievalResult:
    """
    Result of a query.

    When the store holds nothing, ``no_documents`` is True, ``hits`` is empty
    and ``message`` carries the user-facing prompt to upload documents.

    Attributes:
        retrieval_id: Unique identifier for this query
        query_text: The question as asked
        hits: Ranked hits, best first
        total_candidates: Number of stored chunks scanned
        execution_ms: Time taken in milliseconds
        no_documents: True for the empty-store sentinel
        message: User-facing message for the sentinel
    """
    retrieval_id: str
    query_text: str
    hits: List[RetrievalHit] = field(default_factory=list)
    total_candidates: int = 0
    execution_ms: int = 0
    no_documents: bool = False
    message: Optional[str] = None

    @classmethod
    def empty_store(cls, retrieval_id: str, query_text: str) -> "RetrievalResult":
        """Build the no-documents sentinel."""
        return cls(
            retrieval_id=retrieval_id,
            query_text=query_text,
            no_documents=True,
            message=NO_DOCUMENTS_MESSAGE,
        )

    @property
    def passages(self) -> List[str]:
        """Hit texts in rank order."""
        return [hit.text for hit in self.hits]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "retrieval_id": self.retrieval_id,
            "query_text": self.query_text,
            "hits": [h.to_dict() for h in self.hits],
            "total_candidates": self.total_candidates,
            "execution_ms": self.execution_ms,
            "no_documents": self.no_documents,
            "message": self.message,
        }


@dataclass
class IngestionOutcome:
    """
    Outcome of ingesting one document.

    Attributes:
        document: Document name
        success: Whether the document was indexed
        chunk_count: Number of chunks stored
        content_sha256: SHA256 of the decoded content
        error_type: Exception class name on failure
        error_message: Exception message on failure
    """
    document: str
    success: bool
    chunk_count: int = 0
    content_sha256: Optional[str] = None
    error_type: Optional[str] = None
    error_message: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "document": self.document,
            "success": self.success,
            "chunk_count": self.chunk_count,
            "content_sha256": self.content_sha256,
            "error_type": self.error_type,
            "error_message": self.error_message,
        }


@dataclass
class IngestionReport:
    """Aggregate of per-document ingestion outcomes for a batch."""
    outcomes: List[IngestionOutcome] = field(default_factory=list)

    @property
    def succeeded(self) -> List[IngestionOutcome]:
        return [o for o in self.outcomes if o.success]

    @property
    def failed(self) -> List[IngestionOutcome]:
        return [o for o in self.outcomes if not o.success]

    @property
    def total_chunks(self) -> int:
        return sum(o.chunk_count for o in self.succeeded)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "succeeded": len(self.succeeded),
            "failed": len(self.failed),
            "total_chunks": self.total_chunks,
            "outcomes": [o.to_dict() for o in self.outcomes],
        }
