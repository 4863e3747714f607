"""Tests for the BM25 keyword index."""

from src.processing.chunker import DocumentChunk
from src.retrieval.bm25_index import KEYWORD_PLACEHOLDER_SCORE, BM25Config, BM25Index


def chunk(document_id, index, content, tags=None):
    return DocumentChunk(
        document_id=document_id,
        chunk_index=index,
        content=content,
        start_position=0,
        end_position=len(content),
        tags=tags or [],
        metadata={"file_name": f"{document_id}.txt"},
    )


CORPUS = [
    chunk("policy", 0, "Customers may request a refund within thirty days.", ["finance"]),
    chunk("policy", 1, "Shipping is free for orders over fifty dollars.", ["logistics"]),
    chunk("handbook", 0, "Employees accrue vacation days every month.", ["hr"]),
    chunk("handbook", 1, "Expense reports are due at the end of the month.", ["finance"]),
    chunk("faq", 0, "Refund requests are processed by the billing team.", ["support"]),
]


def build_index(config=None):
    index = BM25Index(config or BM25Config())
    index.add_chunks(CORPUS)
    return index


class TestKeywordSearch:
    def test_finds_matching_chunks_with_placeholder_score(self):
        results = build_index().keyword_search("refund", top_k=10)

        assert {r.chunk_id for r in results} == {CORPUS[0].id, CORPUS[4].id}
        assert all(r.score == KEYWORD_PLACEHOLDER_SCORE for r in results)
        assert results[0].file_name in ("policy.txt", "faq.txt")

    def test_no_match_returns_empty(self):
        assert build_index().keyword_search("zeppelin", top_k=10) == []

    def test_empty_index_and_empty_query(self):
        assert BM25Index().keyword_search("refund") == []
        assert build_index().keyword_search("?!", top_k=5) == []

    def test_single_chunk_corpus_still_matches(self):
        """With one chunk every term's IDF is negative; the match must still be returned."""
        index = BM25Index()
        only = chunk("policy", 0, "Customers may request a refund within thirty days.")
        index.add_chunks([only])

        assert [r.chunk_id for r in index.keyword_search("refund")] == [only.id]
        assert index.keyword_search("shipping") == []

    def test_term_in_every_chunk_still_matches(self):
        chunks = [
            chunk("a", 0, "The refund desk opens at nine."),
            chunk("b", 0, "Ask the refund desk about invoices."),
            chunk("c", 0, "A refund takes five days."),
        ]
        index = BM25Index()
        index.add_chunks(chunks)

        results = index.keyword_search("refund", top_k=10)

        assert {r.chunk_id for r in results} == {c.id for c in chunks}

    def test_common_and_rare_terms_rank_rare_match_first(self):
        chunks = [
            chunk("a", 0, "The refund desk opens at nine."),
            chunk("b", 0, "Ask the refund desk about invoices."),
            chunk("c", 0, "A refund takes five days."),
        ]
        index = BM25Index()
        index.add_chunks(chunks)

        results = index.keyword_search("refund invoices", top_k=10)

        assert results[0].chunk_id == chunks[1].id
        assert len(results) == 3

    def test_respects_top_k(self):
        assert len(build_index().keyword_search("refund", top_k=1)) == 1

    def test_document_filter(self):
        results = build_index().keyword_search("refund", top_k=10, document_id="faq")
        assert [r.chunk_id for r in results] == [CORPUS[4].id]

    def test_tag_filter_matches_any_tag(self):
        index = build_index()

        assert [r.chunk_id for r in index.keyword_search("refund", tags=["finance"])] == [CORPUS[0].id]
        assert len(index.keyword_search("refund", tags=["finance", "support"])) == 2
        assert index.keyword_search("refund", tags=["hr"]) == []


class TestMaintenance:
    def test_add_replaces_same_chunk_id(self):
        index = build_index()
        updated = chunk("policy", 0, "Returns are accepted for store credit only.", ["finance"])

        index.add_chunks([updated])

        assert index.count == len(CORPUS)
        assert [r.chunk_id for r in index.keyword_search("refund")] == [CORPUS[4].id]

    def test_delete_document(self):
        index = build_index()

        index.delete_document_chunks("faq")

        assert index.count == len(CORPUS) - 1
        assert [r.chunk_id for r in index.keyword_search("refund")] == [CORPUS[0].id]

    def test_delete_unknown_document_is_noop(self):
        index = build_index()
        index.delete_document_chunks("missing")
        assert index.count == len(CORPUS)

    def test_save_and_load(self, tmp_path):
        config = BM25Config(index_path=str(tmp_path / "bm25" / "index.pkl"))
        build_index(config).save()

        loaded = BM25Index(BM25Config(index_path=config.index_path))

        assert loaded.load() is True
        assert loaded.is_built
        assert loaded.count == len(CORPUS)
        assert {r.chunk_id for r in loaded.keyword_search("refund")} == {CORPUS[0].id, CORPUS[4].id}

    def test_load_missing_file(self, tmp_path):
        index = BM25Index(BM25Config(index_path=str(tmp_path / "none.pkl")))
        assert index.load() is False
        assert not index.is_built

    def test_stats(self):
        stats = build_index().get_stats()
        assert stats["chunk_count"] == len(CORPUS)
        assert stats["is_built"] is True
