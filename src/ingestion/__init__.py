"""
Document ingestion module.

Components:
- extract_text: Read text from PDF, plain text and Markdown uploads
- DocumentIndexer: Chunk, embed and store documents; re-index and delete them
"""

from .text_extractor import (
    SUPPORTED_CONTENT_TYPES,
    UnsupportedContentTypeError,
    extract_text,
    is_supported,
)
from .document_indexer import DocumentIndexer, IndexingResult

__all__ = [
    "SUPPORTED_CONTENT_TYPES",
    "UnsupportedContentTypeError",
    "extract_text",
    "is_supported",
    "DocumentIndexer",
    "IndexingResult",
]
