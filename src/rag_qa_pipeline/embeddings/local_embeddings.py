"""
Local embedding provider backed by sentence-transformers.

all-MiniLM-L6-v2 produces 384-dimensional vectors and runs on CPU, so a
collection can be built and queried without any API key.
"""

from __future__ import annotations

import logging

import numpy as np

# Optional: sentence-transformers pulls in torch, so it lives in the "local" extra
try:
    from sentence_transformers import SentenceTransformer

    SENTENCE_TRANSFORMERS_AVAILABLE = True
except ImportError:
    SENTENCE_TRANSFORMERS_AVAILABLE = False

logger = logging.getLogger(__name__)


class SentenceTransformerEmbeddings:
    """Embedding provider running a sentence-transformers model in-process."""

    def __init__(
        self,
        model_name: str = "all-MiniLM-L6-v2",
        device: str = "cpu",
        normalize: bool = True,
    ):
        if not SENTENCE_TRANSFORMERS_AVAILABLE:
            raise ImportError(
                "sentence-transformers not available. "
                "Install with: pip install 'rag-qa-pipeline[local]'"
            )

        self.model_name = model_name
        self.normalize = normalize
        self._model = SentenceTransformer(model_name, device=device)
        logger.info(f"Loaded embedding model {model_name} on {device}")

    @property
    def dimensions(self) -> int:
        return self._model.get_sentence_embedding_dimension()

    def embed(self, text: str) -> np.ndarray:
        """Generate embedding for a single text."""
        return self.embed_batch([text])[0]

    def embed_batch(self, texts: list[str]) -> list[np.ndarray]:
        """Generate embeddings for multiple texts."""
        if not texts:
            return []

        vectors = self._model.encode(
            texts,
            convert_to_numpy=True,
            normalize_embeddings=self.normalize,
        )
        return [np.asarray(v, dtype=np.float32) for v in vectors]
