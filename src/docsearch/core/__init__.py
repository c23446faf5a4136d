"""
Core subpackage for docsearch.

Contains configuration, exceptions, and logging utilities.
"""

from .config import EngineConfig
from .exceptions import (
    RetrievalError,
    NotInitializedError,
    EmptyContentError,
    EmbeddingDimensionError,
    ConfigError,
)

__all__ = [
    # Config
    "EngineConfig",
    # Exceptions
    "RetrievalError",
    "NotInitializedError",
    "EmptyContentError",
    "EmbeddingDimensionError",
    "ConfigError",
]
