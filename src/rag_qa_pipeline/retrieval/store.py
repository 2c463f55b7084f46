"""
Vector store implementations following the gold standard pattern.

Pattern: Protocol -> Production impl -> Test double -> Factory

This module contains:
1. VectorStoreConfig - Configuration dataclass
2. PgVectorStore - PostgreSQL with pgvector (production)
3. InMemoryVectorStore - In-memory store (testing/development)
4. get_vector_store() - Factory function

Stores work on vectors only. Turning text into vectors is the
DocumentRepository's job, so a store never holds an embedder.
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from typing import Any, Sequence

import numpy as np

from rag_qa_pipeline.core.errors import SchemaFailure
from rag_qa_pipeline.core.protocols import (
    CONTENT_FIELD,
    ID_FIELD,
    VECTOR_FIELD,
    CollectionSchema,
    ConsistencyLevel,
    Metric,
    SearchHit,
    VectorRecord,
)

# Optional: Only import psycopg if available (for local dev without postgres)
try:
    import psycopg
    from pgvector.psycopg import register_vector

    PGVECTOR_AVAILABLE = True
except ImportError:
    PGVECTOR_AVAILABLE = False

logger = logging.getLogger(__name__)

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_RETURNABLE_FIELDS = (ID_FIELD, CONTENT_FIELD)


def _check_identifier(name: str) -> str:
    """Collection and field names are interpolated into SQL, so restrict them."""
    if not _IDENTIFIER_RE.match(name):
        raise ValueError(f"Invalid identifier: {name!r}")
    return name


def _check_output_fields(output_fields: Sequence[str]) -> list[str]:
    fields = [ID_FIELD] + [f for f in output_fields if f != ID_FIELD]
    unknown = [f for f in fields if f not in _RETURNABLE_FIELDS]
    if unknown:
        raise ValueError(f"Unsupported output fields: {unknown}")
    return fields


# ---------------------------------------------------------------------------
# CONFIGURATION
# ---------------------------------------------------------------------------


@dataclass
class VectorStoreConfig:
    """Configuration for the vector store."""

    connection_string: str = "postgresql://localhost/rag_qa"
    connect_timeout: int = 10  # seconds

    @classmethod
    def from_env(cls) -> "VectorStoreConfig":
        """Load config from environment variables."""
        return cls(
            connection_string=os.environ.get("DATABASE_URL", "postgresql://localhost/rag_qa"),
            connect_timeout=int(os.environ.get("RAG_DB_CONNECT_TIMEOUT", "10")),
        )


# ---------------------------------------------------------------------------
# PGVECTOR STORE (Production)
# ---------------------------------------------------------------------------


class PgVectorStore:
    """
    PostgreSQL vector store using pgvector.

    A collection is a table (id VARCHAR primary key, content, vector).
    Scores are converted from pgvector distances so that higher is
    always more similar:

        cosine  <=>  score = 1 - distance
        ip      <#>  score = -distance   (pgvector returns the negated product)
        l2      <->  score = -distance

    Postgres reads committed data on every autocommit query, so every
    search already has strong (read-your-writes) consistency.
    """

    _DISTANCE_OPS = {
        Metric.COSINE: "<=>",
        Metric.INNER_PRODUCT: "<#>",
        Metric.L2: "<->",
    }
    _OPCLASSES = {
        Metric.COSINE: "vector_cosine_ops",
        Metric.INNER_PRODUCT: "vector_ip_ops",
        Metric.L2: "vector_l2_ops",
    }
    _INDEX_PARAMS = {
        "hnsw": {"m", "ef_construction"},
        "ivfflat": {"lists"},
    }
    _SEARCH_SETTINGS = {
        "probes": "ivfflat.probes",
        "ef_search": "hnsw.ef_search",
    }

    def __init__(self, config: VectorStoreConfig | None = None):
        self.config = config or VectorStoreConfig()
        self._conn = None

    def connect(self) -> None:
        """Establish database connection."""
        if not PGVECTOR_AVAILABLE:
            raise ImportError(
                "pgvector not available. Install with: pip install pgvector psycopg[binary]"
            )
        if self._conn is not None:
            return

        self._conn = psycopg.connect(
            self.config.connection_string,
            autocommit=True,
            connect_timeout=self.config.connect_timeout,
        )
        self._conn.execute("CREATE EXTENSION IF NOT EXISTS vector")
        register_vector(self._conn)
        logger.info("Connected to PostgreSQL vector store")

    def close(self) -> None:
        """Close database connection."""
        if self._conn:
            self._conn.close()
            self._conn = None
            logger.info("Closed PostgreSQL connection")

    def _require_conn(self):
        if self._conn is None:
            raise RuntimeError("PgVectorStore is not connected; call connect() first")
        return self._conn

    def _existing_dimension(self, name: str) -> int | None:
        """Dimension of an existing collection's vector column, or None if absent."""
        # pgvector stores the declared dimension as the column's type modifier
        row = self._require_conn().execute(
            """
            SELECT atttypmod FROM pg_attribute
            WHERE attrelid = to_regclass(%s) AND attname = %s AND NOT attisdropped
            """,
            (name, VECTOR_FIELD),
        ).fetchone()
        return row[0] if row else None

    def ensure_collection(self, schema: CollectionSchema) -> None:
        """Create the collection table if it does not exist."""
        conn = self._require_conn()
        name = _check_identifier(schema.name)

        existing = self._existing_dimension(name)
        if existing is not None:
            if existing != schema.dimension:
                raise SchemaFailure(
                    f"Collection '{name}' has vector dimension {existing}, "
                    f"expected {schema.dimension}"
                )
            logger.info(f"Collection '{name}' already exists")
            return

        conn.execute(
            f"""
            CREATE TABLE IF NOT EXISTS {name} (
                {ID_FIELD} VARCHAR({schema.max_id_length}) PRIMARY KEY,
                {CONTENT_FIELD} VARCHAR({schema.max_content_length}) NOT NULL,
                {VECTOR_FIELD} vector({schema.dimension}) NOT NULL
            )
            """
        )
        logger.info(f"Created collection '{name}' (dim={schema.dimension})")

    def create_index(
        self,
        collection: str,
        field_name: str,
        metric: Metric,
        index_type: str,
        params: dict[str, Any] | None = None,
    ) -> None:
        """Create an HNSW or IVFFlat index over the vector column."""
        conn = self._require_conn()
        collection = _check_identifier(collection)
        field_name = _check_identifier(field_name)
        metric = Metric(metric)

        index_type = index_type.lower()
        if index_type not in self._INDEX_PARAMS:
            raise ValueError(f"Unsupported index type: {index_type!r}")

        params = params or {}
        unknown = set(params) - self._INDEX_PARAMS[index_type]
        if unknown:
            raise ValueError(f"Unsupported {index_type} parameters: {sorted(unknown)}")

        with_clause = ""
        if params:
            settings = ", ".join(f"{k} = {int(v)}" for k, v in params.items())
            with_clause = f" WITH ({settings})"

        conn.execute(
            f"""
            CREATE INDEX IF NOT EXISTS {collection}_{field_name}_idx
            ON {collection}
            USING {index_type} ({field_name} {self._OPCLASSES[metric]}){with_clause}
            """
        )
        logger.info(f"Vector index ready on {collection}.{field_name} ({index_type}, {metric.value})")

    def load_collection(self, collection: str) -> None:
        """No-op: Postgres tables are queryable as soon as they exist."""
        _check_identifier(collection)
        self._require_conn()

    def insert(self, collection: str, records: Sequence[VectorRecord]) -> None:
        """Upsert records in one transaction."""
        conn = self._require_conn()
        collection = _check_identifier(collection)
        if not records:
            return

        with conn.transaction():
            with conn.cursor() as cur:
                cur.executemany(
                    f"""
                    INSERT INTO {collection} ({ID_FIELD}, {CONTENT_FIELD}, {VECTOR_FIELD})
                    VALUES (%s, %s, %s)
                    ON CONFLICT ({ID_FIELD}) DO UPDATE SET
                        {CONTENT_FIELD} = EXCLUDED.{CONTENT_FIELD},
                        {VECTOR_FIELD} = EXCLUDED.{VECTOR_FIELD}
                    """,
                    [
                        (r.id, r.content, np.asarray(r.vector, dtype=np.float32))
                        for r in records
                    ],
                )

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
        """Search for the nearest vectors."""
        conn = self._require_conn()
        collection = _check_identifier(collection)
        metric = Metric(metric)
        fields = _check_output_fields(output_fields)

        if ConsistencyLevel(consistency) is not ConsistencyLevel.STRONG:
            logger.debug(f"Consistency {consistency} requested; Postgres reads are always strong")

        for key, value in (params or {}).items():
            setting = self._SEARCH_SETTINGS.get(key)
            if setting is None:
                raise ValueError(f"Unsupported search parameter: {key!r}")
            conn.execute(f"SET {setting} = {int(value)}")

        op = self._DISTANCE_OPS[metric]
        rows = conn.execute(
            f"""
            SELECT {', '.join(fields)}, {VECTOR_FIELD} {op} %s AS distance
            FROM {collection}
            ORDER BY distance
            LIMIT %s
            """,
            (np.asarray(query_vector, dtype=np.float32), top_k),
        ).fetchall()

        hits = []
        for row in rows:
            values = dict(zip(fields, row[:-1]))
            distance = float(row[-1])
            score = 1.0 - distance if metric is Metric.COSINE else -distance
            hits.append(SearchHit(id=values[ID_FIELD], score=score, fields=values))
        return hits

    def row_count(self, collection: str) -> int:
        """Count rows in the collection table."""
        collection = _check_identifier(collection)
        row = self._require_conn().execute(f"SELECT count(*) FROM {collection}").fetchone()
        return int(row[0]) if row else 0


# ---------------------------------------------------------------------------
# IN-MEMORY STORE (Testing/Development)
# ---------------------------------------------------------------------------


class InMemoryVectorStore:
    """
    In-memory vector store for development/testing.

    Implements the same interface as PgVectorStore but doesn't require Postgres.
    Search is an exact scan, so results are exact nearest neighbours.
    """

    def __init__(self):
        self._schemas: dict[str, CollectionSchema] = {}
        self._records: dict[str, dict[str, VectorRecord]] = {}
        self._indexes: dict[str, Metric] = {}

    def connect(self) -> None:
        """No-op for in-memory store."""
        pass

    def close(self) -> None:
        """No-op for in-memory store."""
        pass

    def ensure_collection(self, schema: CollectionSchema) -> None:
        existing = self._schemas.get(schema.name)
        if existing is not None:
            if existing.dimension != schema.dimension:
                raise SchemaFailure(
                    f"Collection '{schema.name}' has vector dimension "
                    f"{existing.dimension}, expected {schema.dimension}"
                )
            return
        self._schemas[schema.name] = schema
        self._records[schema.name] = {}

    def create_index(
        self,
        collection: str,
        field_name: str,
        metric: Metric,
        index_type: str,
        params: dict[str, Any] | None = None,
    ) -> None:
        """Record the metric; the scan itself needs no index."""
        self._schema(collection)
        if field_name != VECTOR_FIELD:
            raise ValueError(f"Cannot index non-vector field {field_name!r}")
        self._indexes.setdefault(collection, Metric(metric))

    def load_collection(self, collection: str) -> None:
        self._schema(collection)

    def _schema(self, collection: str) -> CollectionSchema:
        try:
            return self._schemas[collection]
        except KeyError:
            raise ValueError(f"Collection '{collection}' does not exist") from None

    def insert(self, collection: str, records: Sequence[VectorRecord]) -> None:
        """Insert records; an existing id is replaced."""
        schema = self._schema(collection)
        for r in records:
            if len(r.vector) != schema.dimension:
                raise ValueError(
                    f"Vector for '{r.id}' has dimension {len(r.vector)}, "
                    f"expected {schema.dimension}"
                )
        rows = self._records[collection]
        for r in records:
            rows[r.id] = r

    @staticmethod
    def _score(query: np.ndarray, vector: np.ndarray, metric: Metric) -> float:
        if metric is Metric.COSINE:
            denom = np.linalg.norm(query) * np.linalg.norm(vector)
            if denom == 0:
                return 0.0
            return float(np.dot(query, vector) / denom)
        if metric is Metric.INNER_PRODUCT:
            return float(np.dot(query, vector))
        return -float(np.linalg.norm(query - vector))

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
        """Search using an exact scan."""
        self._schema(collection)
        metric = Metric(metric)
        fields = _check_output_fields(output_fields)
        query = np.asarray(query_vector, dtype=np.float32)

        scored = [
            (r, self._score(query, np.asarray(r.vector, dtype=np.float32), metric))
            for r in self._records[collection].values()
        ]
        scored.sort(key=lambda x: x[1], reverse=True)

        return [
            SearchHit(
                id=r.id,
                score=score,
                fields={f: getattr(r, f) for f in fields},
            )
            for r, score in scored[:top_k]
        ]

    def row_count(self, collection: str) -> int:
        self._schema(collection)
        return len(self._records[collection])


# ---------------------------------------------------------------------------
# FACTORY FUNCTION
# ---------------------------------------------------------------------------


def get_vector_store(
    use_postgres: bool | None = None,
    config: VectorStoreConfig | None = None,
) -> PgVectorStore | InMemoryVectorStore:
    """
    Factory function to get the appropriate vector store.

    Args:
        use_postgres: Use PostgreSQL store (default: RAG_VECTOR_STORE env var
            equals "postgres")
        config: Store configuration (loaded from env if not provided)

    Returns:
        VectorStore implementation
    """
    if use_postgres is None:
        use_postgres = os.environ.get("RAG_VECTOR_STORE", "memory").lower() == "postgres"

    if use_postgres:
        return PgVectorStore(config or VectorStoreConfig.from_env())
    return InMemoryVectorStore()
