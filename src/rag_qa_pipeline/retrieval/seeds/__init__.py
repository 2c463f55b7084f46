"""
Seed data for the retrieval system.

This package contains externalized knowledge base content.
Separating data from infrastructure enables:
- Content updates without code changes
- Easy testing with controlled data
"""

from rag_qa_pipeline.retrieval.seeds.sample_documents import (
    get_sample_documents,
    seed_repository,
)

__all__ = ["get_sample_documents", "seed_repository"]
