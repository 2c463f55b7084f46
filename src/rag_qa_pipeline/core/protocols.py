"""
Core protocols defining contracts for the entire system.

All infrastructure components implement these protocols,
enabling dependency injection and easy testing.

PATTERN:
- Protocol defines the contract
- Multiple implementations possible
- Factory functions for instantiation
- Test doubles for fast unit tests

The pipeline only ever talks to these three collaborators:

    EmbeddingProvider   text -> fixed-length vector
    VectorStore         persists (id, content, vector), ranked search
    CompletionProvider  prompt -> generated text (optional capability)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol, Sequence, runtime_checkable

import numpy as np


# ---------------------------------------------------------------------------
# EMBEDDING PROVIDER PROTOCOL
# ---------------------------------------------------------------------------


@runtime_checkable
class EmbeddingProvider(Protocol):
    """
    Contract for embedding generation.

    Implementations:
    - OpenAIEmbeddings (hosted)
    - SentenceTransformerEmbeddings (local model)
    - MockEmbeddings (testing)
    """

    @property
    def dimensions(self) -> int:
        """Length of every vector this provider returns."""
        ...

    def embed(self, text: str) -> np.ndarray:
        """Generate embedding for a single text."""
        ...

    def embed_batch(self, texts: list[str]) -> list[np.ndarray]:
        """Generate embeddings for multiple texts."""
        ...


# ---------------------------------------------------------------------------
# VECTOR STORE PROTOCOL
# ---------------------------------------------------------------------------

ID_FIELD = "id"
CONTENT_FIELD = "content"
VECTOR_FIELD = "vector"


class Metric(str, Enum):
    """Similarity metrics. Scores are always "higher is more similar"."""

    COSINE = "cosine"
    INNER_PRODUCT = "ip"
    L2 = "l2"


class ConsistencyLevel(str, Enum):
    """Read consistency requested for a search."""

    STRONG = "strong"
    BOUNDED = "bounded"
    SESSION = "session"
    EVENTUALLY = "eventually"


@dataclass(frozen=True)
class CollectionSchema:
    """Schema of a document collection: id (primary key), content, vector."""

    name: str
    dimension: int
    max_id_length: int = 100
    max_content_length: int = 65535


@dataclass(frozen=True)
class VectorRecord:
    """A row to insert: the stored form of a document."""

    id: str
    content: str
    vector: np.ndarray = field(repr=False, compare=False)


@dataclass(frozen=True)
class SearchHit:
    """A raw row returned by a store search."""

    id: str
    score: float
    fields: dict[str, Any] = field(default_factory=dict)


@runtime_checkable
class VectorStore(Protocol):
    """
    Contract for vector similarity search.

    Implementations:
    - PgVectorStore (production with PostgreSQL)
    - InMemoryVectorStore (testing/development)
    """

    def connect(self) -> None:
        """Establish connection to the store."""
        ...

    def close(self) -> None:
        """Close connection to the store."""
        ...

    def ensure_collection(self, schema: CollectionSchema) -> None:
        """Create the collection if absent. No-op when it already matches."""
        ...

    def create_index(
        self,
        collection: str,
        field_name: str,
        metric: Metric,
        index_type: str,
        params: dict[str, Any] | None = None,
    ) -> None:
        """Build a similarity index over the vector field if absent."""
        ...

    def load_collection(self, collection: str) -> None:
        """Bring the collection into a query-ready state."""
        ...

    def insert(self, collection: str, records: Sequence[VectorRecord]) -> None:
        """Insert records. An existing id is overwritten."""
        ...

    def search(
        self,
        collection: str,
        query_vector: np.ndarray,
        top_k: int,
        output_fields: Sequence[str] = (ID_FIELD, CONTENT_FIELD),
        metric: Metric = Metric.COSINE,
        consistency: ConsistencyLevel = ConsistencyLevel.STRONG,
        params: dict[str, Any] | None = None,
    ) -> list[SearchHit]:
        """Top-K nearest neighbours, ordered by descending similarity."""
        ...

    def row_count(self, collection: str) -> int:
        """Number of rows in the collection."""
        ...


# ---------------------------------------------------------------------------
# COMPLETION PROVIDER PROTOCOL
# ---------------------------------------------------------------------------


@runtime_checkable
class CompletionProvider(Protocol):
    """
    Contract for text generation.

    Implementations:
    - OpenAICompletionProvider (production)

    Absence is a valid configuration: the answer engine holds
    ``CompletionProvider | None`` and falls back to a mock answer.
    """

    def generate(self, prompt: str) -> str:
        """Return a completion for the prompt."""
        ...
