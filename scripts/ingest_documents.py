#!/usr/bin/env python3
"""
Document Ingestion CLI - Chunk, embed and index documents for retrieval.

Usage:
    python scripts/ingest_documents.py --dir docs/                      # Index every supported file
    python scripts/ingest_documents.py --file handbook.pdf --tags hr    # Index a single file
    python scripts/ingest_documents.py --file notes.md --strategy sentence
    python scripts/ingest_documents.py --stats                          # Show store statistics

Re-running on the same file replaces its chunks (document IDs are derived from the path).
"""

import argparse
import logging
import sys
import uuid
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv
load_dotenv()

from src.config import load_config
from src.ingestion import DocumentIndexer, UnsupportedContentTypeError
from src.ingestion.text_extractor import CONTENT_TYPES_BY_SUFFIX
from src.processing import DocumentChunker, InvalidChunkingStrategyError
from src.retrieval import (
    EmbeddingService, EmbeddingConfig,
    VectorStore, VectorStoreConfig,
    BM25Index, BM25Config,
)


def setup_logging(verbose: bool = False):
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
    )


def document_id_for(path: Path) -> str:
    """Stable document ID for a file path."""
    return str(uuid.uuid5(uuid.NAMESPACE_URL, str(path.resolve())))


def index_files(indexer: DocumentIndexer, files: list[Path], tags: list[str], strategy):
    """Index files, replacing any chunks from a previous run."""
    total_chunks = 0
    failed = []

    for path in files:
        doc_id = document_id_for(path)
        try:
            indexer.delete_document(doc_id)
            result = indexer.index_file(path, doc_id, tags=tags, strategy=strategy)
        except (UnsupportedContentTypeError, ValueError) as e:
            failed.append((path.name, str(e)))
            continue

        total_chunks += result.chunk_count
        print(f"  {path.name}: {result.chunk_count} chunks ({result.processing_time_ms:.0f}ms)")

    print(f"\n{'='*60}")
    print("INDEXING SUMMARY")
    print(f"{'='*60}")
    print(f"  Indexed: {len(files) - len(failed)} files")
    print(f"  Failed:  {len(failed)} files")
    print(f"  Chunks:  {total_chunks}")

    for name, error in failed:
        print(f"  - {name}: {error}")


def show_stats(vector_store: VectorStore, bm25_index: BM25Index):
    """Show store statistics."""
    vs = vector_store.get_stats()
    bm = bm25_index.get_stats()

    print(f"\n{'='*60}")
    print("STORE STATISTICS")
    print(f"{'='*60}")
    print(f"  Vector store: {vs['chunk_count']} chunks in '{vs['collection_name']}'")
    print(f"  BM25 index:   {bm['chunk_count']} chunks ({bm['index_path']})")


def main():
    parser = argparse.ArgumentParser(description="Document Ingestion CLI")
    parser.add_argument("--dir", help="Directory of documents to index")
    parser.add_argument("--file", help="Single document to index")
    parser.add_argument("--tags", nargs="*", default=[], help="Tags attached to every chunk")
    parser.add_argument("--strategy", help="Chunking strategy: fixed, sentence or paragraph")
    parser.add_argument("--config", help="Path to config.yaml")
    parser.add_argument("--stats", action="store_true", help="Show statistics only")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")

    args = parser.parse_args()
    setup_logging(args.verbose)

    config = load_config(args.config)
    chunker = DocumentChunker(config=config)

    if args.strategy:
        try:
            chunker.resolve_options(args.strategy)
        except InvalidChunkingStrategyError as e:
            parser.error(str(e))

    vector_store = VectorStore(VectorStoreConfig.from_config(config))
    bm25_index = BM25Index(BM25Config.from_config(config))
    bm25_index.load()

    if args.stats:
        show_stats(vector_store, bm25_index)
        return

    if args.file:
        files = [Path(args.file)]
    elif args.dir:
        files = sorted(
            p for p in Path(args.dir).rglob("*")
            if p.is_file() and p.suffix.lower() in CONTENT_TYPES_BY_SUFFIX
        )
    else:
        parser.error("one of --file, --dir or --stats is required")

    indexer = DocumentIndexer(
        embedding_service=EmbeddingService(EmbeddingConfig.from_config(config)),
        vector_store=vector_store,
        keyword_index=bm25_index,
        chunker=chunker,
    )

    print(f"\nIndexing {len(files)} files...")
    index_files(indexer, files, args.tags, args.strategy)
    bm25_index.save()

    show_stats(vector_store, bm25_index)


if __name__ == "__main__":
    main()
