"""
Error kinds for the retrieval layer.

Store and embedder clients fail with whatever exception their library
raises (psycopg.OperationalError, openai.APIError, ...). The repository
translates those into this small closed set so callers can branch on
the kind instead of matching message strings.

    PipelineError
      ConnectionFailure   store unreachable
      SchemaFailure       collection/index creation rejected
      EmbeddingFailure    embedder call failed or returned a bad vector
      SearchFailure       similarity search failed
      InsertFailure       insert rejected

The original exception is always chained (``raise ... from e``).
"""

from __future__ import annotations


class PipelineError(Exception):
    """Base class for all retrieval-layer failures."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def kind(self) -> str:
        """Stable name of the failure kind (e.g. "SearchFailure")."""
        return type(self).__name__


class ConnectionFailure(PipelineError):
    """The vector store could not be reached."""


class SchemaFailure(PipelineError):
    """The collection, its index, or its load step was rejected."""


class EmbeddingFailure(PipelineError):
    """The embedder failed or produced a vector of the wrong dimension."""

    def __init__(self, message: str, document_id: str | None = None):
        super().__init__(message)
        self.document_id = document_id


class SearchFailure(PipelineError):
    """A similarity search against the store failed."""


class InsertFailure(PipelineError):
    """The store rejected an insert."""

    def __init__(self, message: str, document_id: str | None = None):
        super().__init__(message)
        self.document_id = document_id
