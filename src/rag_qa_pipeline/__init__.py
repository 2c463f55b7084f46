"""
rag_qa_pipeline - retrieval-augmented question answering.

Documents are embedded and stored in a vector store; questions are
answered from the most similar documents, by a language model when one
is configured and by a deterministic summary otherwise.

    from rag_qa_pipeline import DocumentRepository, AnswerEngine
    from rag_qa_pipeline.embeddings import MockEmbeddings
    from rag_qa_pipeline.retrieval import InMemoryVectorStore

    repo = DocumentRepository(InMemoryVectorStore(), MockEmbeddings())
    repo.initialize()
    repo.add_document("doc-1", "Java is a programming language")
    print(AnswerEngine(repo).answer("Java is a programming language"))
"""

from rag_qa_pipeline.retrieval import Document, DocumentRepository, RepositoryConfig
from rag_qa_pipeline.generation import (
    AnswerEngine,
    AnswerEngineConfig,
    SystemInfo,
    build_answer_engine,
)

__version__ = "0.1.0"

__all__ = [
    "Document",
    "DocumentRepository",
    "RepositoryConfig",
    "AnswerEngine",
    "AnswerEngineConfig",
    "SystemInfo",
    "build_answer_engine",
]
