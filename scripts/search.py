#!/usr/bin/env python3
"""
Search CLI - Compare semantic, hybrid and re-ranked retrieval.

Usage:
    python scripts/search.py "query"
    python scripts/search.py "query" --hybrid --rerank
    python scripts/search.py "query" --no-hybrid
    python scripts/search.py "query" --tags finance --top-k 3
    python scripts/search.py "query" --compare
"""

import argparse
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

# Load environment variables
from dotenv import load_dotenv
load_dotenv()

from src.config import load_config
from src.retrieval import (
    EmbeddingService, EmbeddingConfig,
    VectorStore, VectorStoreConfig,
    BM25Index, BM25Config,
    Retriever, SearchConfig,
)

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)


def init_retriever(config: dict) -> Retriever:
    """Initialize the retriever with all components."""
    bm25_index = BM25Index(BM25Config.from_config(config))
    bm25_index.load()

    return Retriever(
        embedding_service=EmbeddingService(EmbeddingConfig.from_config(config)),
        vector_store=VectorStore(VectorStoreConfig.from_config(config)),
        keyword_index=bm25_index,
        config=SearchConfig.from_config(config),
    )


def print_results(results, title: str):
    """Print search results."""
    print(f"\n{'='*70}")
    print(f"{title}")
    print(f"{'='*70}\n")

    if not results:
        print("No relevant context found.\n")
        return

    for i, r in enumerate(results, 1):
        print(f"[{i}] Score: {r.score:.6f} | {r.file_name} #{r.chunk_index}")
        print(f"    Text: {r.content[:150]}...")
        print()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Search indexed documents")
    parser.add_argument("query", type=str, help="Search query")
    parser.add_argument("--top-k", type=int, default=5, help="Number of results")
    parser.add_argument("--document", help="Restrict to a document ID")
    parser.add_argument("--tags", nargs="*", help="Restrict to chunks with any of these tags")
    parser.add_argument("--hybrid", action=argparse.BooleanOptionalAction, default=None,
                        help="Force hybrid search on (--no-hybrid forces it off)")
    parser.add_argument("--rerank", action=argparse.BooleanOptionalAction, default=None,
                        help="Force MMR re-ranking on (--no-rerank forces it off)")
    parser.add_argument("--compare", action="store_true", help="Compare all modes")
    parser.add_argument("--config", help="Path to config.yaml")
    return parser


def main():
    args = build_parser().parse_args()
    retriever = init_retriever(load_config(args.config))

    print(f"\nQuery: {args.query}")

    if args.compare:
        modes = [
            ("SEMANTIC SEARCH (Vector Only)", False, False),
            ("HYBRID SEARCH (RRF Fusion)", True, False),
            ("SEMANTIC + MMR RE-RANKING", False, True),
            ("HYBRID + MMR RE-RANKING", True, True),
        ]
        for title, hybrid, rerank in modes:
            results = retriever.retrieve(
                args.query, args.top_k, args.document, args.tags,
                use_hybrid_search=hybrid, use_reranking=rerank,
            )
            print_results(results, title)
    else:
        results = retriever.retrieve(
            args.query, args.top_k, args.document, args.tags,
            use_hybrid_search=args.hybrid, use_reranking=args.rerank,
        )
        print_results(results, "SEARCH RESULTS")


if __name__ == "__main__":
    main()
