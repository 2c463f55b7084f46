"""
Document repository - bridges text documents to vector storage.

The repository owns the two collaborators a document passes through on
its way in and out of storage:

    add_document(id, content)
        EmbeddingProvider.embed(content) -> VectorStore.insert(...)

    search_similar_documents(query, top_k)
        EmbeddingProvider.embed(query) -> VectorStore.search(...) -> [Document]

It holds the single store handle for the process. Every store call goes
through one lock, so the repository can be shared by concurrent callers
without relying on the store client's own thread-safety. Embedding runs
outside the lock.

Whatever the store or embedder raises is translated into the error kinds
in core.errors (ConnectionFailure, SchemaFailure, EmbeddingFailure,
SearchFailure, InsertFailure).
"""

from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass, field
from typing import Any, Iterable

import numpy as np

from rag_qa_pipeline.core.errors import (
    ConnectionFailure,
    EmbeddingFailure,
    InsertFailure,
    SchemaFailure,
    SearchFailure,
)
from rag_qa_pipeline.core.protocols import (
    CONTENT_FIELD,
    ID_FIELD,
    VECTOR_FIELD,
    CollectionSchema,
    ConsistencyLevel,
    EmbeddingProvider,
    Metric,
    VectorRecord,
    VectorStore,
)
from rag_qa_pipeline.retrieval.document import Document, rank_by_score

logger = logging.getLogger(__name__)

# Index build / search tuning per index type. ivfflat trains its lists from the
# rows present at build time, so it only suits a collection loaded before
# initialize(); hnsw needs no training and is the default.
_INDEX_DEFAULTS = {
    "ivfflat": ({"lists": 128}, {"probes": 10}),
    "hnsw": ({"m": 16, "ef_construction": 64}, {"ef_search": 40}),
}


# ---------------------------------------------------------------------------
# CONFIGURATION
# ---------------------------------------------------------------------------


@dataclass
class RepositoryConfig:
    """Collection layout and search settings for the repository."""

    collection_name: str = "documents"
    metric: Metric = Metric.COSINE
    index_type: str = "hnsw"
    index_params: dict[str, Any] = field(default_factory=lambda: dict(_INDEX_DEFAULTS["hnsw"][0]))
    search_params: dict[str, Any] = field(default_factory=lambda: dict(_INDEX_DEFAULTS["hnsw"][1]))
    consistency: ConsistencyLevel = ConsistencyLevel.STRONG
    max_id_length: int = 100

    @classmethod
    def from_env(cls) -> "RepositoryConfig":
        """Load config from environment variables."""
        index_type = os.environ.get("RAG_INDEX_TYPE", "hnsw").lower()
        if index_type not in _INDEX_DEFAULTS:
            raise ValueError(f"RAG_INDEX_TYPE must be one of {sorted(_INDEX_DEFAULTS)}")
        index_params, search_params = _INDEX_DEFAULTS[index_type]

        return cls(
            collection_name=os.environ.get("RAG_COLLECTION", "documents"),
            metric=Metric(os.environ.get("RAG_METRIC", "cosine").lower()),
            index_type=index_type,
            index_params=dict(index_params),
            search_params=dict(search_params),
        )


# ---------------------------------------------------------------------------
# REPOSITORY
# ---------------------------------------------------------------------------


class DocumentRepository:
    """
    Document add/search/count on top of an embedder and a vector store.

    Dependencies are INJECTED, not created internally.
    This enables testing with InMemoryVectorStore and MockEmbeddings.

    Duplicate ids are upserts: adding an id that already exists replaces
    its content and vector, and the row count does not change.
    """

    def __init__(
        self,
        store: VectorStore,
        embeddings: EmbeddingProvider,
        config: RepositoryConfig | None = None,
    ):
        self.config = config or RepositoryConfig()
        self._store = store
        self._embeddings = embeddings
        self._lock = threading.Lock()
        self._connected = False
        self._initialized = False

    @property
    def schema(self) -> CollectionSchema:
        return CollectionSchema(
            name=self.config.collection_name,
            dimension=self._embeddings.dimensions,
            max_id_length=self.config.max_id_length,
        )

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    # -- lifecycle ----------------------------------------------------------

    def initialize(self) -> None:
        """
        Connect, ensure the collection and its index exist, and load it.

        Raises:
            ConnectionFailure: the store could not be reached
            SchemaFailure: collection, index or load step was rejected
        """
        with self._lock:
            if self._initialized:
                return

            if not self._connected:
                try:
                    self._store.connect()
                except Exception as e:
                    logger.error(f"Failed to connect to vector store: {e}")
                    raise ConnectionFailure(f"Failed to connect to vector store: {e}") from e
                self._connected = True
                logger.info("Connected to vector store")

            schema = self.schema
            try:
                self._store.ensure_collection(schema)
                self._store.create_index(
                    schema.name,
                    VECTOR_FIELD,
                    self.config.metric,
                    self.config.index_type,
                    self.config.index_params,
                )
                self._store.load_collection(schema.name)
            except SchemaFailure:
                raise
            except Exception as e:
                logger.error(f"Failed to prepare collection '{schema.name}': {e}")
                raise SchemaFailure(f"Failed to prepare collection '{schema.name}': {e}") from e

            self._initialized = True
            logger.info(f"Collection '{schema.name}' ready (dim={schema.dimension})")

    def close(self) -> None:
        """Release the store connection. Safe to call any number of times."""
        with self._lock:
            if not self._connected:
                return
            try:
                self._store.close()
                logger.info("Closed vector store connection")
            except Exception as e:
                logger.warning(f"Error closing vector store: {e}")
            finally:
                self._connected = False
                self._initialized = False

    def __enter__(self) -> "DocumentRepository":
        self.initialize()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # -- helpers ------------------------------------------------------------

    def _require_initialized(self) -> None:
        if not self._initialized:
            raise ConnectionFailure("DocumentRepository is not initialized; call initialize() first")

    def _validate_id(self, document_id: str) -> None:
        if not document_id:
            raise ValueError("Document id must not be empty")
        if len(document_id) > self.config.max_id_length:
            raise ValueError(
                f"Document id '{document_id[:20]}...' exceeds {self.config.max_id_length} characters"
            )

    def _check_vector(self, vector: Any, what: str, document_id: str | None = None) -> np.ndarray:
        vector = np.asarray(vector, dtype=np.float32)
        expected = self._embeddings.dimensions
        if vector.shape != (expected,):
            raise EmbeddingFailure(
                f"Embedding for {what} has shape {vector.shape}, expected ({expected},)",
                document_id=document_id,
            )
        return vector

    # -- operations ---------------------------------------------------------

    def add_document(self, document_id: str, content: str) -> None:
        """
        Embed and store one document.

        Raises:
            ValueError: empty or over-long id
            EmbeddingFailure: the embedder failed for this document
            InsertFailure: the store rejected the row
        """
        self._validate_id(document_id)
        self._require_initialized()

        try:
            vector = self._embeddings.embed(content)
        except Exception as e:
            logger.error(f"Error embedding document with ID: {document_id}: {e}")
            raise EmbeddingFailure(
                f"Failed to embed document '{document_id}': {e}", document_id=document_id
            ) from e
        vector = self._check_vector(vector, f"document '{document_id}'", document_id)

        record = VectorRecord(id=document_id, content=content, vector=vector)
        with self._lock:
            try:
                self._store.insert(self.config.collection_name, [record])
            except Exception as e:
                logger.error(f"Error adding document with ID: {document_id}: {e}")
                raise InsertFailure(
                    f"Failed to insert document '{document_id}': {e}", document_id=document_id
                ) from e

        logger.debug(f"Added document with ID: {document_id}")

    def add_documents(self, documents: Iterable[tuple[str, str]]) -> int:
        """
        Embed and store many ``(id, content)`` pairs with one batch
        embedding call and one insert.

        Returns:
            Number of documents written
        """
        pairs = list(documents)
        if not pairs:
            return 0
        for document_id, _ in pairs:
            self._validate_id(document_id)
        self._require_initialized()

        try:
            vectors = self._embeddings.embed_batch([content for _, content in pairs])
        except Exception as e:
            logger.error(f"Error embedding batch of {len(pairs)} documents: {e}")
            raise EmbeddingFailure(f"Failed to embed batch of {len(pairs)} documents: {e}") from e
        if len(vectors) != len(pairs):
            raise EmbeddingFailure(
                f"Embedder returned {len(vectors)} vectors for {len(pairs)} documents"
            )

        records = [
            VectorRecord(
                id=document_id,
                content=content,
                vector=self._check_vector(vector, f"document '{document_id}'", document_id),
            )
            for (document_id, content), vector in zip(pairs, vectors)
        ]

        with self._lock:
            try:
                self._store.insert(self.config.collection_name, records)
            except Exception as e:
                logger.error(f"Error inserting batch of {len(records)} documents: {e}")
                raise InsertFailure(f"Failed to insert batch of {len(records)} documents: {e}") from e

        logger.info(f"Added {len(records)} documents")
        return len(records)

    def search_similar_documents(self, query: str, top_k: int) -> list[Document]:
        """
        Find the ``top_k`` stored documents most similar to ``query``.

        Results are ranked by descending score here rather than trusting
        the store's ordering. An empty collection gives an empty list.

        Raises:
            ValueError: top_k < 1
            EmbeddingFailure: the query could not be embedded
            SearchFailure: the store search failed
        """
        if top_k < 1:
            raise ValueError(f"top_k must be at least 1, got {top_k}")
        self._require_initialized()

        try:
            query_vector = self._embeddings.embed(query)
        except Exception as e:
            logger.error(f"Error embedding query: {e}")
            raise EmbeddingFailure(f"Failed to embed query: {e}") from e
        query_vector = self._check_vector(query_vector, "query")

        with self._lock:
            try:
                hits = self._store.search(
                    self.config.collection_name,
                    query_vector,
                    top_k,
                    output_fields=[ID_FIELD, CONTENT_FIELD],
                    metric=self.config.metric,
                    consistency=self.config.consistency,
                    params=self.config.search_params,
                )
                documents = [
                    Document(
                        id=hit.id,
                        content=hit.fields.get(CONTENT_FIELD) or "",
                        score=float(hit.score),
                    )
                    for hit in hits
                ]
            except Exception as e:
                logger.error(f"Error searching for similar documents: {e}")
                raise SearchFailure(f"Error searching for similar documents: {e}") from e

        ranked = rank_by_score(documents)
        logger.debug(f"Found {len(ranked)} similar documents for query: {query!r}")
        return ranked

    def get_document_count(self) -> int:
        """
        Current number of stored documents.

        Used for status display, so it never raises: any failure
        (including not being initialized) reports 0.
        """
        if not self._initialized:
            logger.warning("Could not get document count: repository not initialized")
            return 0

        with self._lock:
            try:
                count = int(self._store.row_count(self.config.collection_name))
            except Exception as e:
                logger.warning(f"Could not get document count: {e}")
                return 0
        return max(count, 0)
