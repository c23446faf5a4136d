"""
Core Utilities - Shared helpers for contracts and retrieval.
"""

import hashlib

CHUNK_ID_SEPARATOR = "_chunk_"


def compute_content_hash(content: str) -> str:
    """
    Compute SHA256 hash of text content.

    Args:
        content: Text content to hash

    Returns:
        Hex-encoded SHA256 hash (64 characters)

    Example:
        >>> compute_content_hash("Hello, World!")
        'dffd6021bb2bd5b0af676290809ec3a53191dd81c7f70a4b28688a362182986f'
    """
    return hashlib.sha256(content.encode()).hexdigest()


def make_chunk_id(document: str, chunk_index: int) -> str:
    """
    Build the store key for a chunk: ``<document>_chunk_<index>``.

    Example:
        >>> make_chunk_id("a.txt", 0)
        'a.txt_chunk_0'
    """
    if chunk_index < 0:
        raise ValueError("chunk_index must be non-negative")
    return f"{document}{CHUNK_ID_SEPARATOR}{chunk_index}"
