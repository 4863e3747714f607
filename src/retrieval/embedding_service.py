"""
Embedding Service - Generate embeddings through an OpenAI-compatible API.

Works with OpenAI directly, or with any server exposing the OpenAI embeddings
endpoint (Ollama, Azure OpenAI proxies, vLLM) via EMBEDDING_BASE_URL.
"""

import os
import logging
from typing import Optional
from dataclasses import dataclass

from ..config import get_section

logger = logging.getLogger(__name__)


@dataclass
class EmbeddingConfig:
    """Configuration for embedding service."""
    model: str = "text-embedding-3-small"
    dimension: int = 1536
    batch_size: int = 64
    send_dimensions: bool = True  # some OpenAI-compatible servers reject the parameter
    api_key: Optional[str] = None
    base_url: Optional[str] = None

    @classmethod
    def from_config(cls, config: Optional[dict] = None) -> "EmbeddingConfig":
        section = get_section(config, "embedding")
        return cls(
            model=section.get("model", cls.model),
            dimension=section.get("dimension", cls.dimension),
            batch_size=section.get("batch_size", cls.batch_size),
            send_dimensions=section.get("send_dimensions", cls.send_dimensions),
            base_url=section.get("base_url"),
        )


class EmbeddingService:
    """
    Generate embeddings for queries and chunks.

    Usage:
        service = EmbeddingService()
        embedding = service.embed("What is the refund policy?")
        embeddings = service.embed_batch(["text1", "text2", ...])
    """

    def __init__(self, config: Optional[EmbeddingConfig] = None, client=None):
        self.config = config or EmbeddingConfig()
        self._client = client
        if self._client is None:
            self._init_client()

    def _init_client(self):
        """Initialize the OpenAI client from config or environment."""
        try:
            from openai import OpenAI
        except ImportError:
            logger.error("openai package not installed. Run: pip install openai")
            raise

        api_key = self.config.api_key or os.getenv("OPENAI_API_KEY")
        base_url = self.config.base_url or os.getenv("EMBEDDING_BASE_URL")
        if not api_key:
            logger.warning("OPENAI_API_KEY not set - embedding service unavailable")
            return

        self._client = OpenAI(api_key=api_key, base_url=base_url) if base_url else OpenAI(api_key=api_key)
        logger.info(f"EmbeddingService initialized: model={self.config.model}, dim={self.config.dimension}")

    @property
    def is_available(self) -> bool:
        """Check if embedding service is available."""
        return self._client is not None

    def _create(self, inputs):
        kwargs = {"model": self.config.model, "input": inputs}
        if self.config.send_dimensions:
            kwargs["dimensions"] = self.config.dimension
        return self._client.embeddings.create(**kwargs)

    def embed(self, text: str) -> list[float]:
        """
        Generate embedding for a single text.

        Raises:
            RuntimeError: If no API client is configured
        """
        if not self._client:
            raise RuntimeError("Embedding service not available - check OPENAI_API_KEY")

        text = text.replace("\n", " ").strip()
        if not text:
            return [0.0] * self.config.dimension

        try:
            response = self._create(text)
            return response.data[0].embedding
        except Exception as e:
            logger.error(f"Embedding failed: {e}")
            raise

    def embed_batch(self, texts: list[str]) -> list[list[float]]:
        """
        Generate embeddings for multiple texts in batches, preserving order.

        Raises:
            RuntimeError: If no API client is configured
        """
        if not self._client:
            raise RuntimeError("Embedding service not available - check OPENAI_API_KEY")

        embeddings = []
        batch_size = self.config.batch_size
        total_batches = (len(texts) + batch_size - 1) // batch_size

        for i in range(0, len(texts), batch_size):
            batch = texts[i:i + batch_size]
            batch_num = i // batch_size + 1
            cleaned = [t.replace("\n", " ").strip() or " " for t in batch]

            try:
                response = self._create(cleaned)
            except Exception as e:
                logger.error(f"Batch embedding failed at batch {batch_num}: {e}")
                raise

            ordered = sorted(response.data, key=lambda d: d.index)
            embeddings.extend(d.embedding for d in ordered)
            logger.debug(f"Embedded batch {batch_num}/{total_batches} ({len(embeddings)}/{len(texts)} texts)")

        return embeddings
