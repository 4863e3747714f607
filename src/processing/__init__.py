"""Document processing module for text cleaning and chunking."""

from .chunker import (
    ChunkingOptions,
    ChunkingStrategy,
    DocumentChunk,
    DocumentChunker,
    InvalidChunkingStrategyError,
    chunk_text,
    clean_text,
    parse_chunking_strategy,
)

__all__ = [
    "ChunkingOptions",
    "ChunkingStrategy",
    "DocumentChunk",
    "DocumentChunker",
    "InvalidChunkingStrategyError",
    "chunk_text",
    "clean_text",
    "parse_chunking_strategy",
]
