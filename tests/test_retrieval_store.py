"""
Unit Tests for Retrieval Store

Tests the vector store protocol and InMemoryVectorStore behavior.

PATTERNS:
---------
1. Test through the protocol interface
2. Hand-built vectors, no embedder involved
3. Verify search behavior and ranking
"""

import pytest
import numpy as np

from rag_qa_pipeline.core import (
    CollectionSchema,
    Metric,
    SchemaFailure,
    SearchHit,
    VectorRecord,
    VectorStore,
)
from rag_qa_pipeline.retrieval.store import (
    InMemoryVectorStore,
    PgVectorStore,
    get_vector_store,
)


# ---------------------------------------------------------------------------
# FIXTURES
# ---------------------------------------------------------------------------


@pytest.fixture
def schema():
    return CollectionSchema(name="documents", dimension=3)


@pytest.fixture
def store(schema):
    """An empty, ready collection."""
    store = InMemoryVectorStore()
    store.connect()
    store.ensure_collection(schema)
    store.create_index("documents", "vector", Metric.COSINE, "ivfflat", {"lists": 128})
    store.load_collection("documents")
    return store


@pytest.fixture
def store_with_docs(store):
    """Create a store with test documents."""
    store.insert("documents", [
        VectorRecord("java-001", "Java is a language", np.array([1.0, 0.0, 0.0])),
        VectorRecord("java-002", "Java runs on the JVM", np.array([0.9, 0.1, 0.0])),
        VectorRecord("docker-001", "Docker builds containers", np.array([0.0, 0.0, 1.0])),
    ])
    return store


# ---------------------------------------------------------------------------
# BASIC OPERATIONS
# ---------------------------------------------------------------------------


class TestInMemoryVectorStore:
    """Test InMemoryVectorStore basic operations."""

    def test_insert_and_count(self, store_with_docs):
        """Inserted records should be counted."""
        assert store_with_docs.row_count("documents") == 3

    def test_search_returns_hits(self, store_with_docs):
        """Search should return SearchHit rows with requested fields."""
        results = store_with_docs.search("documents", np.array([1.0, 0.0, 0.0]), top_k=2)

        assert len(results) == 2
        assert isinstance(results[0], SearchHit)
        assert results[0].id == "java-001"
        assert results[0].fields == {"id": "java-001", "content": "Java is a language"}
        assert results[0].score == pytest.approx(1.0)

    def test_search_respects_top_k(self, store_with_docs):
        """Search should respect top_k."""
        results = store_with_docs.search("documents", np.array([0.0, 1.0, 0.0]), top_k=1)

        assert len(results) == 1

    def test_search_empty_collection(self, store):
        """Search on empty collection should return empty list."""
        assert store.search("documents", np.array([1.0, 0.0, 0.0]), top_k=5) == []

    def test_search_id_only(self, store_with_docs):
        """Requesting only the id should leave content out of the fields."""
        results = store_with_docs.search(
            "documents", np.array([1.0, 0.0, 0.0]), top_k=1, output_fields=["id"]
        )

        assert results[0].fields == {"id": "java-001"}

    def test_search_rejects_vector_output_field(self, store_with_docs):
        """The vector itself is not a returnable field."""
        with pytest.raises(ValueError):
            store_with_docs.search(
                "documents", np.array([1.0, 0.0, 0.0]), top_k=1, output_fields=["vector"]
            )

    def test_duplicate_id_overwrites(self, store):
        """Inserting an existing id replaces the row."""
        store.insert("documents", [VectorRecord("a", "old", np.array([1.0, 0.0, 0.0]))])
        store.insert("documents", [VectorRecord("a", "new", np.array([0.0, 1.0, 0.0]))])

        assert store.row_count("documents") == 1
        hit = store.search("documents", np.array([0.0, 1.0, 0.0]), top_k=1)[0]
        assert hit.fields["content"] == "new"

    def test_insert_wrong_dimension(self, store):
        """Vectors must match the collection dimension."""
        with pytest.raises(ValueError, match="dimension"):
            store.insert("documents", [VectorRecord("a", "x", np.array([1.0, 0.0]))])

    def test_unknown_collection(self):
        """Operations on a missing collection should fail."""
        store = InMemoryVectorStore()

        with pytest.raises(ValueError, match="does not exist"):
            store.row_count("missing")


# ---------------------------------------------------------------------------
# COLLECTION LIFECYCLE
# ---------------------------------------------------------------------------


class TestCollectionLifecycle:
    """ensure_collection is idempotent but refuses a different dimension."""

    def test_ensure_collection_idempotent(self, store_with_docs, schema):
        store_with_docs.ensure_collection(schema)

        assert store_with_docs.row_count("documents") == 3

    def test_ensure_collection_dimension_mismatch(self, store):
        with pytest.raises(SchemaFailure):
            store.ensure_collection(CollectionSchema(name="documents", dimension=384))

    def test_create_index_on_non_vector_field(self, store):
        with pytest.raises(ValueError):
            store.create_index("documents", "content", Metric.COSINE, "ivfflat")


# ---------------------------------------------------------------------------
# SEARCH RANKING
# ---------------------------------------------------------------------------


class TestSearchRanking:
    """Test that search results are properly ranked."""

    def test_results_descending(self, store_with_docs):
        """Scores should never increase down the list."""
        results = store_with_docs.search("documents", np.array([0.7, 0.0, 0.7]), top_k=3)
        scores = [r.score for r in results]

        assert scores == sorted(scores, reverse=True)

    def test_relevant_docs_ranked_higher(self, store_with_docs):
        """Java documents should rank ahead of the Docker one for a Java vector."""
        results = store_with_docs.search("documents", np.array([1.0, 0.05, 0.0]), top_k=3)

        assert [r.id for r in results][-1] == "docker-001"

    def test_inner_product_metric(self, store_with_docs):
        results = store_with_docs.search(
            "documents", np.array([2.0, 0.0, 0.0]), top_k=1, metric=Metric.INNER_PRODUCT
        )

        assert results[0].id == "java-001"
        assert results[0].score == pytest.approx(2.0)

    def test_l2_metric_scores_are_negated_distances(self, store_with_docs):
        results = store_with_docs.search(
            "documents", np.array([1.0, 0.0, 0.0]), top_k=3, metric=Metric.L2
        )

        assert results[0].id == "java-001"
        assert results[0].score == pytest.approx(0.0)
        assert all(r.score <= 0 for r in results)

    def test_zero_query_vector_scores_zero(self, store_with_docs):
        """A zero query vector has no direction: cosine is reported as 0."""
        results = store_with_docs.search("documents", np.zeros(3), top_k=3)

        assert all(r.score == 0.0 for r in results)


# ---------------------------------------------------------------------------
# FACTORY FUNCTION
# ---------------------------------------------------------------------------


class TestGetVectorStore:
    """Test the get_vector_store factory function."""

    def test_returns_in_memory_by_default(self, monkeypatch):
        monkeypatch.delenv("RAG_VECTOR_STORE", raising=False)

        assert isinstance(get_vector_store(), InMemoryVectorStore)

    def test_env_selects_postgres(self, monkeypatch):
        monkeypatch.setenv("RAG_VECTOR_STORE", "postgres")
        monkeypatch.setenv("DATABASE_URL", "postgresql://test@localhost/test")

        store = get_vector_store()

        assert isinstance(store, PgVectorStore)
        assert store.config.connection_string == "postgresql://test@localhost/test"

    def test_explicit_flag_wins_over_env(self, monkeypatch):
        monkeypatch.setenv("RAG_VECTOR_STORE", "postgres")

        assert isinstance(get_vector_store(use_postgres=False), InMemoryVectorStore)


# ---------------------------------------------------------------------------
# PROTOCOL COMPLIANCE
# ---------------------------------------------------------------------------


class TestProtocolCompliance:
    """Both stores implement the VectorStore protocol."""

    def test_in_memory_is_vector_store(self):
        assert isinstance(InMemoryVectorStore(), VectorStore)

    def test_pgvector_is_vector_store(self):
        assert isinstance(PgVectorStore(), VectorStore)
