"""
Core module - shared protocols, types and error kinds for the entire system.

This module provides the foundational contracts that enable:
- Dependency injection throughout the codebase
- Easy testing with mock implementations
- Clear separation of concerns

USAGE:
------
from rag_qa_pipeline.core import VectorStore, EmbeddingProvider

class MyVectorStore:
    '''Implements VectorStore protocol.'''
    ...
"""

from rag_qa_pipeline.core.protocols import (
    # Protocols
    EmbeddingProvider,
    VectorStore,
    CompletionProvider,
    # Data classes / enums
    CollectionSchema,
    VectorRecord,
    SearchHit,
    Metric,
    ConsistencyLevel,
    # Field names
    ID_FIELD,
    CONTENT_FIELD,
    VECTOR_FIELD,
)
from rag_qa_pipeline.core.errors import (
    PipelineError,
    ConnectionFailure,
    SchemaFailure,
    EmbeddingFailure,
    SearchFailure,
    InsertFailure,
)

__all__ = [
    # Protocols
    "EmbeddingProvider",
    "VectorStore",
    "CompletionProvider",
    # Data classes / enums
    "CollectionSchema",
    "VectorRecord",
    "SearchHit",
    "Metric",
    "ConsistencyLevel",
    # Field names
    "ID_FIELD",
    "CONTENT_FIELD",
    "VECTOR_FIELD",
    # Errors
    "PipelineError",
    "ConnectionFailure",
    "SchemaFailure",
    "EmbeddingFailure",
    "SearchFailure",
    "InsertFailure",
]
