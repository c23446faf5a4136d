"""
Document sources: decode files into text for ingestion.
"""

from .text_loader import TEXT_EXTENSIONS, load_text_document, load_text_documents

__all__ = [
    "TEXT_EXTENSIONS",
    "load_text_document",
    "load_text_documents",
]
