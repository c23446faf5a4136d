"""
Plain-text document loading.

Decodes text-format files into ParsedDocument records for ingestion. Binary
formats (PDF, Office) are not decoded here; they load with empty content,
which ingestion reports as an empty document.
"""

import logging
from pathlib import Path
from typing import Iterable, List, Union

from ..contracts.retrieval_contracts import ParsedDocument

logger = logging.getLogger(__name__)

TEXT_EXTENSIONS = (".txt", ".md", ".json", ".csv", ".log")


def load_text_document(path: Union[str, Path]) -> ParsedDocument:
    """
    Load a file as a ParsedDocument named after the file.

    A read or decode failure, or an unsupported extension, gives a document
    with empty content rather than an exception, so one bad file never stops
    a batch.

    Args:
        path: File to load

    Returns:
        ParsedDocument with UTF-8 decoded content (possibly empty)
    """
    file_path = Path(path)
    file_type = file_path.suffix.lower()
    content = ""

    if file_type not in TEXT_EXTENSIONS:
        logger.warning(
            f"Unsupported file type {file_type or '(none)'}; loading empty content",
            extra={"document": file_path.name},
        )
    else:
        try:
            content = file_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Error reading file: {e}", extra={"document": file_path.name})

    return ParsedDocument(
        file_name=file_path.name,
        content=content,
        file_type=file_type,
    )


def load_text_documents(paths: Iterable[Union[str, Path]]) -> List[ParsedDocument]:
    """Load several files; see load_text_document."""
    return [load_text_document(p) for p in paths]
