"""
Text extraction for uploaded documents.

Supports plain text, Markdown and PDF (via pypdf). PDF pages are joined with
a blank line so page breaks become paragraph boundaries for the chunker.
"""

import io
import logging

from pypdf import PdfReader

logger = logging.getLogger(__name__)

SUPPORTED_CONTENT_TYPES = (
    "application/pdf",
    "text/plain",
    "text/markdown",
)

CONTENT_TYPES_BY_SUFFIX = {
    ".pdf": "application/pdf",
    ".txt": "text/plain",
    ".md": "text/markdown",
    ".markdown": "text/markdown",
}


class UnsupportedContentTypeError(ValueError):
    """Raised for content types the extractor cannot read."""

    def __init__(self, content_type: str):
        self.content_type = content_type
        super().__init__(
            f"Content type '{content_type}' is not supported. "
            f"Supported types: {', '.join(SUPPORTED_CONTENT_TYPES)}"
        )


def is_supported(content_type: str) -> bool:
    return (content_type or "").lower() in SUPPORTED_CONTENT_TYPES


def extract_text(data: bytes, content_type: str) -> str:
    """
    Extract raw text from document bytes.

    Raises:
        UnsupportedContentTypeError: If the content type is not supported
    """
    content_type = (content_type or "").lower()

    if content_type == "application/pdf":
        return _extract_from_pdf(data)
    if content_type in ("text/plain", "text/markdown"):
        return data.decode("utf-8", errors="replace")

    raise UnsupportedContentTypeError(content_type)


def _extract_from_pdf(data: bytes) -> str:
    reader = PdfReader(io.BytesIO(data))
    pages = []
    for page in reader.pages:
        pages.append(page.extract_text() or "")

    logger.debug(f"Extracted {len(pages)} PDF pages")
    return "\n\n".join(pages)
