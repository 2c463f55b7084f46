"""
Sample knowledge base seed data.

A handful of short documents about programming and retrieval topics,
enough to try the pipeline end to end. In production, documents would
come from a proper ingestion pipeline.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from rag_qa_pipeline.retrieval.repository import DocumentRepository


def get_sample_documents() -> list[tuple[str, str]]:
    """
    Get ``(id, content)`` pairs for the sample knowledge base.
    """
    return [
        (
            "doc_java",
            "Java is a high-level, object-oriented programming language used for "
            "building enterprise applications, Android apps and web services.",
        ),
        (
            "doc_python",
            "Python is a high-level programming language known for its readable "
            "syntax. It is widely used for data analysis, machine learning, "
            "automation and web development.",
        ),
        (
            "doc_vector_db",
            "A vector database stores numerical embeddings of data and supports "
            "similarity search, returning the stored items closest to a query vector.",
        ),
        (
            "doc_embeddings",
            "Embeddings are fixed-length numeric vectors that represent the meaning "
            "of text. Texts with similar meaning have embeddings with high cosine "
            "similarity.",
        ),
        (
            "doc_rag",
            "Retrieval-augmented generation (RAG) answers a question by first "
            "retrieving relevant documents and then asking a language model to "
            "answer using only that retrieved context.",
        ),
        (
            "doc_pgvector",
            "pgvector is a PostgreSQL extension that adds a vector column type and "
            "HNSW and IVFFlat indexes for approximate nearest neighbour search.",
        ),
        (
            "doc_docker",
            "Docker packages an application and its dependencies into a container "
            "image that runs the same way on any machine with a container runtime.",
        ),
        (
            "doc_llm",
            "Large language models generate text by predicting the next token. "
            "Given a prompt with context, they can summarise, answer questions and "
            "follow instructions.",
        ),
    ]


def seed_repository(repository: DocumentRepository) -> int:
    """
    Ingest the sample documents into an initialized repository.

    Returns:
        Number of documents written
    """
    return repository.add_documents(get_sample_documents())
