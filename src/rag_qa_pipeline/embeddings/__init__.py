"""
Embeddings module - text embedding generation.

1. Protocol (EmbeddingProvider) defines the interface
2. Production implementations (OpenAIEmbeddings, SentenceTransformerEmbeddings)
3. Test double (MockEmbeddings) for fast testing
4. Factory function (get_embedding_provider)
"""

from rag_qa_pipeline.core.protocols import EmbeddingProvider
from rag_qa_pipeline.embeddings.openai_embeddings import (
    DEFAULT_DIMENSIONS,
    OpenAIEmbeddings,
    MockEmbeddings,
    get_embedding_provider,
)
from rag_qa_pipeline.embeddings.local_embeddings import (
    SENTENCE_TRANSFORMERS_AVAILABLE,
    SentenceTransformerEmbeddings,
)

__all__ = [
    "DEFAULT_DIMENSIONS",
    "EmbeddingProvider",
    "OpenAIEmbeddings",
    "MockEmbeddings",
    "SentenceTransformerEmbeddings",
    "SENTENCE_TRANSFORMERS_AVAILABLE",
    "get_embedding_provider",
]
