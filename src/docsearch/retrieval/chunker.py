"""
Chunker - Split documents into searchable units for retrieval.

Chunks are built from whole sentences:
- A sentence ends at a run of '.', '!', '?' or newline characters
- Sentences are packed greedily up to the maximum chunk size
- A sentence longer than the maximum is never cut; it becomes its own chunk
"""

import logging
import re
from typing import List, Optional

from ..contracts.retrieval_contracts import ChunkingPolicy
from ..core.config import DEFAULT_MAX_CHUNK_SIZE

logger = logging.getLogger(__name__)

# A sentence is any run of non-terminators followed by its terminator run;
# trailing text without a terminator forms the last sentence.
SENTENCE_RE = re.compile(r"[^.!?\n]*[.!?\n]+|[^.!?\n]+")


def split_sentences(text: str) -> List[str]:
    """
    Split text into sentences, keeping terminators attached.

    Concatenating the result reproduces ``text`` exactly.

    Example:
        >>> split_sentences("Hi. How are you?\\nFine")
        ['Hi.', ' How are you?\\n', 'Fine']
    """
    if not text:
        return []
    return SENTENCE_RE.findall(text)


def chunk_text(text: str, max_chunk_size: int = DEFAULT_MAX_CHUNK_SIZE) -> List[str]:
    """
    Split text into sentence-aligned chunks of at most max_chunk_size chars.

    Args:
        text: Text content to chunk
        max_chunk_size: Maximum chunk length in characters

    Returns:
        Ordered list of trimmed, non-empty chunks; empty if the text is
        empty or whitespace only
    """
    if max_chunk_size <= 0:
        raise ValueError("max_chunk_size must be positive")

    if not text or not text.strip():
        return []

    chunks: List[str] = []
    current = ""

    for sentence in split_sentences(text):
        if current and len(current) + len(sentence) > max_chunk_size:
            if current.strip():
                chunks.append(current.strip())
            current = sentence
        else:
            current += sentence

    if current.strip():
        chunks.append(current.strip())

    return chunks


class Chunker:
    """
    Chunks text content using a ChunkingPolicy.

    Example:
        >>> chunker = Chunker(ChunkingPolicy(max_chunk_size=400))
        >>> chunks = chunker.chunk("Long document text...", source_id="notes.txt")
    """

    def __init__(self, policy: Optional[ChunkingPolicy] = None):
        """
        Initialize the chunker.

        Args:
            policy: Chunking policy (uses default if not provided)
        """
        self.policy = policy or ChunkingPolicy()
        if self.policy.max_chunk_size <= 0:
            raise ValueError("max_chunk_size must be positive")

    def chunk(self, content: str, source_id: Optional[str] = None) -> List[str]:
        """
        Split content into chunks.

        Args:
            content: Text content to chunk
            source_id: Document name, used for logging only

        Returns:
            Ordered list of chunk texts
        """
        chunks = chunk_text(content, max_chunk_size=self.policy.max_chunk_size)

        oversized = sum(1 for c in chunks if len(c) > self.policy.max_chunk_size)
        if oversized:
            logger.debug(
                f"Source {source_id} has {oversized} chunk(s) over "
                f"{self.policy.max_chunk_size} chars (single long sentences)"
            )

        logger.debug(f"Created {len(chunks)} chunks from source {source_id}")
        return chunks
