#!/usr/bin/env python3
"""
Preview how a document would be chunked by each strategy.

Usage:
    python scripts/chunk_preview.py FILE
    python scripts/chunk_preview.py FILE --strategy sentence --show 3
"""

import argparse
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from src.config import load_config
from src.ingestion.text_extractor import CONTENT_TYPES_BY_SUFFIX, extract_text
from src.processing import ChunkingStrategy, DocumentChunker


def main():
    parser = argparse.ArgumentParser(description="Preview document chunking")
    parser.add_argument("file", help="Document to chunk (.txt, .md, .pdf)")
    parser.add_argument("--strategy", help="Only preview this strategy")
    parser.add_argument("--show", type=int, default=2, help="Number of chunks to print per strategy")
    parser.add_argument("--config", help="Path to config.yaml")
    args = parser.parse_args()

    path = Path(args.file)
    content_type = CONTENT_TYPES_BY_SUFFIX.get(path.suffix.lower(), "text/plain")
    text = extract_text(path.read_bytes(), content_type)

    chunker = DocumentChunker(config=load_config(args.config))
    strategies = [args.strategy] if args.strategy else [s.value for s in ChunkingStrategy]

    for strategy in strategies:
        stats = chunker.get_chunking_stats(text, strategy)
        print("=" * 70)
        print(f"{stats['strategy'].upper()} (size={stats['chunk_size']}, overlap={stats['chunk_overlap']})")
        print("=" * 70)
        print(f"  Chunks: {stats['chunk_count']}")
        print(f"  Avg chars: {stats['avg_chunk_chars']:.0f} "
              f"(min {stats['min_chunk_chars']}, max {stats['max_chunk_chars']})")

        for chunk in chunker.chunk_document("preview", text, strategy)[:args.show]:
            print(f"\n  --- Chunk {chunk.chunk_index} [{chunk.start_position}:{chunk.end_position}] ---")
            print(f"  {chunk.content[:200]}")
        print()


if __name__ == "__main__":
    main()
