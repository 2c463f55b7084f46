"""
Embeddings Module - Single Responsibility: Generate text embeddings.

It has ONE job: convert text to vector embeddings.

SOLID PRINCIPLE: Single Responsibility
- This module ONLY handles embedding generation
- No database logic, no document handling
- Easy to swap for different embedding providers
"""

from __future__ import annotations

import hashlib
import os
import re

import numpy as np
from openai import OpenAI

from rag_qa_pipeline.core.protocols import EmbeddingProvider

DEFAULT_DIMENSIONS = 384

_TOKEN_RE = re.compile(r"\w+")


class OpenAIEmbeddings:
    """
    OpenAI-based embedding provider.

    Uses text-embedding-3-small by default. The text-embedding-3 models
    accept a ``dimensions`` argument, so the output can be shortened to
    match an existing collection (384 for collections built with MiniLM).
    """

    _MODEL_DIMS = {
        "text-embedding-3-small": 1536,
        "text-embedding-3-large": 3072,
        "text-embedding-ada-002": 1536,
    }

    def __init__(
        self,
        model: str = "text-embedding-3-small",
        api_key: str | None = None,
        dimensions: int | None = None,
        timeout: float = 30.0,
    ):
        self.model = model
        self._requested_dims = dimensions
        self._client = OpenAI(
            api_key=api_key or os.environ.get("OPENAI_API_KEY"),
            timeout=timeout,
        )

    @property
    def dimensions(self) -> int:
        """Return embedding dimensions for the model."""
        if self._requested_dims is not None:
            return self._requested_dims
        return self._MODEL_DIMS.get(self.model, 1536)

    def _create(self, payload: str | list[str]):
        kwargs = {}
        if self._requested_dims is not None:
            kwargs["dimensions"] = self._requested_dims
        return self._client.embeddings.create(input=payload, model=self.model, **kwargs)

    def embed(self, text: str) -> np.ndarray:
        """Generate embedding for a single text."""
        response = self._create(text)
        return np.array(response.data[0].embedding, dtype=np.float32)

    def embed_batch(self, texts: list[str]) -> list[np.ndarray]:
        """Generate embeddings for multiple texts efficiently."""
        if not texts:
            return []

        response = self._create(texts)
        return [
            np.array(item.embedding, dtype=np.float32)
            for item in response.data
        ]


class MockEmbeddings:
    """
    Mock embedding provider for testing without API calls.

    Hashed bag-of-words: every lowercase token is hashed to a signed
    bucket, and the bucket counts are L2-normalised. Identical texts get
    identical unit vectors (cosine 1.0), texts sharing words score higher
    than unrelated ones, and an empty text maps to the zero vector.
    NOT for production use - only for testing/development.
    """

    def __init__(self, dimensions: int = DEFAULT_DIMENSIONS):
        self._dimensions = dimensions

    @property
    def dimensions(self) -> int:
        return self._dimensions

    def embed(self, text: str) -> np.ndarray:
        """Generate deterministic pseudo-embedding from token hashes."""
        vector = np.zeros(self._dimensions, dtype=np.float32)
        for token in _TOKEN_RE.findall(text.lower()):
            h = hashlib.sha256(token.encode()).digest()
            bucket = int.from_bytes(h[:4], "little") % self._dimensions
            vector[bucket] += 1.0 if h[4] & 1 else -1.0

        norm = np.linalg.norm(vector)
        if norm == 0:
            return vector
        return vector / norm

    def embed_batch(self, texts: list[str]) -> list[np.ndarray]:
        """Generate embeddings for multiple texts."""
        return [self.embed(text) for text in texts]


def get_embedding_provider(
    provider: str | None = None,
    dimensions: int | None = None,
    model: str | None = None,
) -> EmbeddingProvider:
    """
    Factory function to get the appropriate embedding provider.

    Args:
        provider: "mock", "openai" or "local" (default: RAG_EMBEDDINGS env var,
            falling back to "mock")
        dimensions: Vector length (default: RAG_EMBEDDING_DIM env var or 384)
        model: Model name override (default: RAG_EMBEDDING_MODEL env var)
    """
    provider = (provider or os.environ.get("RAG_EMBEDDINGS", "mock")).lower()
    explicit_dimensions = dimensions is not None or "RAG_EMBEDDING_DIM" in os.environ
    if dimensions is None:
        dimensions = int(os.environ.get("RAG_EMBEDDING_DIM", DEFAULT_DIMENSIONS))
    model = model or os.environ.get("RAG_EMBEDDING_MODEL")

    if provider == "mock":
        return MockEmbeddings(dimensions=dimensions)
    if provider == "openai":
        return OpenAIEmbeddings(
            model=model or "text-embedding-3-small",
            dimensions=dimensions,
        )
    if provider == "local":
        from rag_qa_pipeline.embeddings.local_embeddings import (
            SentenceTransformerEmbeddings,
        )

        embeddings = SentenceTransformerEmbeddings(model_name=model or "all-MiniLM-L6-v2")
        # the model fixes its own width
        if explicit_dimensions and embeddings.dimensions != dimensions:
            raise ValueError(
                f"Local model {embeddings.model_name!r} produces {embeddings.dimensions}-dimensional "
                f"vectors, but {dimensions} were requested"
            )
        return embeddings

    raise ValueError(
        f"Unknown embedding provider {provider!r}; expected 'mock', 'openai' or 'local'"
    )
