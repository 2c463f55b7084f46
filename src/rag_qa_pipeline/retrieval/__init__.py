"""
Retrieval module - vector similarity search for RAG.

This module provides:
- Document: The search-result model, plus ranking helpers
- VectorStoreConfig: Configuration for stores
- PgVectorStore: PostgreSQL production store
- InMemoryVectorStore: Testing/development store
- get_vector_store(): Factory function
- DocumentRepository: embed + store + search orchestration

ARCHITECTURE:
-------------
1. Protocol defines the contract (in core.protocols)
2. Multiple implementations (PgVectorStore, InMemoryVectorStore)
3. Factory function for instantiation
4. DocumentRepository composes an EmbeddingProvider with a VectorStore
"""

# Document model
from rag_qa_pipeline.retrieval.document import (
    Document,
    rank_by_score,
    filter_by_threshold,
)

# Store implementations and factory
from rag_qa_pipeline.retrieval.store import (
    VectorStoreConfig,
    PgVectorStore,
    InMemoryVectorStore,
    get_vector_store,
    PGVECTOR_AVAILABLE,
)

# Repository
from rag_qa_pipeline.retrieval.repository import (
    RepositoryConfig,
    DocumentRepository,
)

# Seed data
from rag_qa_pipeline.retrieval.seeds import (
    get_sample_documents,
    seed_repository,
)

__all__ = [
    # Document
    "Document",
    "rank_by_score",
    "filter_by_threshold",
    # Config
    "VectorStoreConfig",
    "RepositoryConfig",
    # Implementations
    "PgVectorStore",
    "InMemoryVectorStore",
    "PGVECTOR_AVAILABLE",
    # Factory
    "get_vector_store",
    # Repository
    "DocumentRepository",
    # Seeds
    "get_sample_documents",
    "seed_repository",
]
