"""
Custom exceptions for the docsearch retrieval engine.
"""


class RetrievalError(Exception):
    """Base exception for all docsearch errors."""
    pass


class NotInitializedError(RetrievalError):
    """
    Operation issued before the engine finished setup.

    Raised when:
    - query() is called on an engine that was never initialized
    - clear_documents() is called on an engine that was never initialized

    Recoverable: call initialize() and retry.
    """
    pass


class EmptyContentError(RetrievalError):
    """
    A document produced no usable text.

    Raised when:
    - Decoded content is empty or whitespace only
    - Chunking yields no chunks

    Batch ingestion records this per document and continues.
    """

    def __init__(self, message: str, document: str = None):
        super().__init__(message)
        self.document = document


class EmbeddingDimensionError(RetrievalError):
    """
    Vector length does not match the store dimension.

    Raised when:
    - A vector of the wrong length is inserted into a vector store
    - An embedder and a store disagree on dimension
    """

    def __init__(self, message: str, expected: int = None, actual: int = None):
        super().__init__(message)
        self.expected = expected
        self.actual = actual


class ConfigError(RetrievalError):
    """
    Error in engine configuration.

    Raised when:
    - Configuration file is missing or invalid
    - Configuration values are out of valid range
    """
    pass
