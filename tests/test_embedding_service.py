"""Tests for the embedding service against a stub OpenAI-style client."""

from types import SimpleNamespace

import pytest

from src.retrieval.embedding_service import EmbeddingConfig, EmbeddingService


class StubEmbeddings:
    """Mimics client.embeddings.create, returning items out of order."""

    def __init__(self):
        self.requests = []

    def create(self, **kwargs):
        self.requests.append(kwargs)
        inputs = kwargs["input"]
        if isinstance(inputs, str):
            inputs = [inputs]
        data = [SimpleNamespace(index=i, embedding=[float(len(t)), float(i)]) for i, t in enumerate(inputs)]
        return SimpleNamespace(data=list(reversed(data)))


@pytest.fixture
def stub_client():
    return SimpleNamespace(embeddings=StubEmbeddings())


class TestEmbeddingService:
    def test_embed_sends_model_and_dimensions(self, stub_client):
        service = EmbeddingService(EmbeddingConfig(model="m", dimension=2), client=stub_client)

        assert service.embed("hello\nworld") == [11.0, 0.0]
        request = stub_client.embeddings.requests[0]
        assert request == {"model": "m", "input": "hello world", "dimensions": 2}

    def test_dimensions_can_be_omitted(self, stub_client):
        service = EmbeddingService(EmbeddingConfig(send_dimensions=False), client=stub_client)
        service.embed("hello")
        assert "dimensions" not in stub_client.embeddings.requests[0]

    def test_blank_text_gives_zero_vector_without_request(self, stub_client):
        service = EmbeddingService(EmbeddingConfig(dimension=3), client=stub_client)

        assert service.embed("  \n ") == [0.0, 0.0, 0.0]
        assert stub_client.embeddings.requests == []

    def test_batch_preserves_order_across_batches(self, stub_client):
        service = EmbeddingService(EmbeddingConfig(batch_size=2), client=stub_client)

        embeddings = service.embed_batch(["a", "bb", "ccc"])

        assert [e[0] for e in embeddings] == [1.0, 2.0, 3.0]
        assert len(stub_client.embeddings.requests) == 2

    def test_unavailable_without_api_key(self, monkeypatch):
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        service = EmbeddingService(EmbeddingConfig())

        assert not service.is_available
        with pytest.raises(RuntimeError):
            service.embed("query")

    def test_client_errors_propagate(self):
        def fail(**kwargs):
            raise TimeoutError("upstream timed out")

        client = SimpleNamespace(embeddings=SimpleNamespace(create=fail))
        service = EmbeddingService(client=client)

        with pytest.raises(TimeoutError):
            service.embed_batch(["text"])

    def test_from_config(self):
        config = EmbeddingConfig.from_config({"embedding": {"model": "nomic-embed-text", "dimension": 768}})
        assert config.model == "nomic-embed-text"
        assert config.dimension == 768
        assert config.batch_size == 64
