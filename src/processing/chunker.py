"""
Text chunking for document ingestion.
Splits cleaned document text into ordered, size-bounded passages for embedding.

Strategies:
- FIXED: paragraph-aware accumulation up to chunk_size, with a character overlap
  carried into the next chunk (cut at a word boundary when possible)
- SENTENCE: sentence accumulation up to chunk_size, with a one-sentence overlap
- PARAGRAPH: one chunk per blank-line separated paragraph, no size bound

A single paragraph or sentence larger than chunk_size is kept whole.
"""

import logging
import re
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional, Union

from ..config import get_section, load_config

logger = logging.getLogger(__name__)

DEFAULT_SEPARATOR_PATTERN = r"\n\n|\r\n\r\n"

_SENTENCE_SPLIT = re.compile(r"(?<=[.!?])\s+")
_PARAGRAPH_SPLIT = re.compile(r"\n\n|\r\n\r\n")


class ChunkingStrategy(str, Enum):
    """Supported chunking strategies."""
    FIXED = "fixed"
    SENTENCE = "sentence"
    PARAGRAPH = "paragraph"


class InvalidChunkingStrategyError(ValueError):
    """Raised when a chunking strategy name is not recognised."""

    def __init__(self, value):
        self.value = value
        valid = ", ".join(s.name.capitalize() for s in ChunkingStrategy)
        super().__init__(f"Invalid chunking strategy '{value}'. Valid values: {valid}")


def parse_chunking_strategy(value: Union[str, ChunkingStrategy]) -> ChunkingStrategy:
    """
    Resolve a strategy from an enum member or a case-insensitive name.

    Raises:
        InvalidChunkingStrategyError: If the name matches no strategy
    """
    if isinstance(value, ChunkingStrategy):
        return value
    if isinstance(value, str):
        try:
            return ChunkingStrategy(value.strip().lower())
        except ValueError:
            pass
    raise InvalidChunkingStrategyError(value)


@dataclass
class ChunkingOptions:
    """Options for a single chunking run."""
    strategy: ChunkingStrategy = ChunkingStrategy.FIXED
    chunk_size: int = 1000
    chunk_overlap: int = 200  # FIXED strategy only
    separator_pattern: str = DEFAULT_SEPARATOR_PATTERN

    def __post_init__(self):
        self.strategy = parse_chunking_strategy(self.strategy)
        if self.chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {self.chunk_size}")
        if not 0 <= self.chunk_overlap < self.chunk_size:
            raise ValueError(
                f"chunk_overlap must be in [0, chunk_size), got {self.chunk_overlap} "
                f"with chunk_size={self.chunk_size}"
            )

    @classmethod
    def from_config(cls, config: Optional[dict] = None) -> "ChunkingOptions":
        """Build default options from the document_processing config section."""
        section = get_section(config, "document_processing")
        strategy_name = section.get("default_chunking_strategy", ChunkingStrategy.FIXED.value)
        try:
            strategy = parse_chunking_strategy(strategy_name)
        except InvalidChunkingStrategyError:
            logger.warning(f"Unknown default_chunking_strategy '{strategy_name}' in config - using fixed")
            strategy = ChunkingStrategy.FIXED

        return cls(
            strategy=strategy,
            chunk_size=section.get("chunk_size", 1000),
            chunk_overlap=section.get("chunk_overlap", 200),
            separator_pattern=section.get("separator_pattern", DEFAULT_SEPARATOR_PATTERN),
        )

    def __repr__(self):
        return (
            f"ChunkingOptions(strategy={self.strategy.value}, size={self.chunk_size}, "
            f"overlap={self.chunk_overlap})"
        )


@dataclass
class DocumentChunk:
    """A contiguous span of a document's cleaned text."""
    document_id: str
    chunk_index: int
    content: str
    start_position: int
    end_position: int
    tags: list[str] = field(default_factory=list)
    metadata: dict = field(default_factory=dict)
    embedding: Optional[list[float]] = None  # filled in at indexing time
    id: str = ""

    def __post_init__(self):
        # Derived from (document, index) so re-chunking yields the same IDs
        if not self.id:
            self.id = str(uuid.uuid5(uuid.NAMESPACE_OID, f"{self.document_id}:{self.chunk_index}"))


def clean_text(text: str) -> str:
    """Collapse horizontal whitespace, normalize line endings, cap blank lines at one."""
    text = re.sub(r"[ \t]+", " ", text)
    text = re.sub(r"\r\n|\r", "\n", text)
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


def _overlap_text(text: str, overlap_size: int) -> str:
    """Tail of text used to seed the next chunk, cut at a word boundary when one is near."""
    if len(text) <= overlap_size:
        return text

    start = len(text) - overlap_size
    space = text.find(" ", start)
    if start < space < len(text) - 10:
        return text[space + 1:]

    return text[start:]


def _chunk_fixed(document_id: str, text: str, options: ChunkingOptions) -> list[DocumentChunk]:
    segments = [s for s in re.split(options.separator_pattern, text) if s and s.strip()]

    chunks = []
    buffer = ""
    position = 0
    chunk_start = 0

    for segment in segments:
        if buffer and len(buffer) + len(segment) > options.chunk_size:
            chunks.append(DocumentChunk(
                document_id=document_id,
                chunk_index=len(chunks),
                content=buffer.strip(),
                start_position=chunk_start,
                end_position=position,
            ))
            overlap = _overlap_text(buffer, options.chunk_overlap) if options.chunk_overlap else ""
            buffer = overlap
            chunk_start = position - len(overlap)

        buffer += segment + "\n"
        position += len(segment) + 2  # blank-line separator

    if buffer.strip():
        chunks.append(DocumentChunk(
            document_id=document_id,
            chunk_index=len(chunks),
            content=buffer.strip(),
            start_position=chunk_start,
            end_position=position,
        ))

    return chunks


def _chunk_by_sentence(document_id: str, text: str, options: ChunkingOptions) -> list[DocumentChunk]:
    sentences = [s.strip() for s in _SENTENCE_SPLIT.split(text)]
    sentences = [s for s in sentences if s]

    chunks = []
    buffer = ""
    position = 0
    chunk_start = 0
    last_sentence = ""

    for sentence in sentences:
        if buffer and len(buffer) + len(sentence) + 1 > options.chunk_size:
            chunks.append(DocumentChunk(
                document_id=document_id,
                chunk_index=len(chunks),
                content=buffer.strip(),
                start_position=chunk_start,
                end_position=position,
            ))
            # Carry the previous sentence over for continuity
            buffer = last_sentence + " "
            chunk_start = position - len(last_sentence) - 1

        last_sentence = sentence
        buffer += sentence + " "
        position += len(sentence) + 1

    if buffer.strip():
        chunks.append(DocumentChunk(
            document_id=document_id,
            chunk_index=len(chunks),
            content=buffer.strip(),
            start_position=chunk_start,
            end_position=position,
        ))

    return chunks


def _chunk_by_paragraph(document_id: str, text: str, options: ChunkingOptions) -> list[DocumentChunk]:
    paragraphs = [p.strip() for p in _PARAGRAPH_SPLIT.split(text)]
    paragraphs = [p for p in paragraphs if p]

    chunks = []
    position = 0
    for i, paragraph in enumerate(paragraphs):
        chunks.append(DocumentChunk(
            document_id=document_id,
            chunk_index=i,
            content=paragraph,
            start_position=position,
            end_position=position + len(paragraph),
        ))
        position += len(paragraph) + 2

    return chunks


_STRATEGIES: dict[ChunkingStrategy, Callable[[str, str, ChunkingOptions], list[DocumentChunk]]] = {
    ChunkingStrategy.FIXED: _chunk_fixed,
    ChunkingStrategy.SENTENCE: _chunk_by_sentence,
    ChunkingStrategy.PARAGRAPH: _chunk_by_paragraph,
}


def chunk_text(
    document_id: str,
    text: str,
    options: Optional[ChunkingOptions] = None,
    tags: Optional[list[str]] = None,
) -> list[DocumentChunk]:
    """
    Split document text into chunks.

    Args:
        document_id: Parent document ID stamped on every chunk
        text: Raw extracted text (cleaned before splitting)
        options: Chunking options (default: FIXED, 1000/200)
        tags: Document tags copied onto every chunk

    Returns:
        Ordered list of DocumentChunk; empty if the text has no content
    """
    options = options or ChunkingOptions()

    text = clean_text(text or "")
    if not text:
        return []

    chunks = _STRATEGIES[options.strategy](document_id, text, options)
    for chunk in chunks:
        chunk.tags = list(tags or [])

    logger.debug(
        f"Created {len(chunks)} chunks (strategy={options.strategy.value}) "
        f"from text of length {len(text)}"
    )
    return chunks


class DocumentChunker:
    """
    Chunker bound to the configured default options.

    Usage:
        chunker = DocumentChunker()
        chunks = chunker.chunk_document(doc_id, text, strategy="sentence")
    """

    def __init__(self, options: Optional[ChunkingOptions] = None, config: Optional[dict] = None):
        """
        Args:
            options: Default options; read from config when omitted
            config: Parsed config dict (default: config/config.yaml)
        """
        if options is None:
            options = ChunkingOptions.from_config(config if config is not None else load_config())
        self.options = options

    def resolve_options(self, strategy: Optional[Union[str, ChunkingStrategy]] = None) -> ChunkingOptions:
        """Default options, with the strategy replaced when one is given."""
        if strategy is None:
            return self.options
        return ChunkingOptions(
            strategy=parse_chunking_strategy(strategy),
            chunk_size=self.options.chunk_size,
            chunk_overlap=self.options.chunk_overlap,
            separator_pattern=self.options.separator_pattern,
        )

    def chunk_document(
        self,
        document_id: str,
        text: str,
        strategy: Optional[Union[str, ChunkingStrategy]] = None,
        tags: Optional[list[str]] = None,
    ) -> list[DocumentChunk]:
        """Chunk a document, validating a per-call strategy before any work."""
        options = self.resolve_options(strategy)
        return chunk_text(document_id, text, options, tags=tags)

    def get_chunking_stats(self, text: str, strategy: Optional[Union[str, ChunkingStrategy]] = None) -> dict:
        """
        Get statistics about how a text would be chunked.

        Returns:
            Dictionary with chunk count and length distribution
        """
        options = self.resolve_options(strategy)
        chunks = chunk_text("preview", text, options)
        lengths = [len(c.content) for c in chunks]

        return {
            "strategy": options.strategy.value,
            "chunk_size": options.chunk_size,
            "chunk_overlap": options.chunk_overlap,
            "cleaned_chars": len(clean_text(text or "")),
            "chunk_count": len(chunks),
            "avg_chunk_chars": sum(lengths) / len(lengths) if lengths else 0,
            "min_chunk_chars": min(lengths, default=0),
            "max_chunk_chars": max(lengths, default=0),
        }
