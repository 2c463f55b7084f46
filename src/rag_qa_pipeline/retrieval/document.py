"""
Document model for the retrieval system.

Single responsibility: Define the search-result value the rest of the
pipeline consumes, plus the ranking helpers that operate on it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable


@dataclass(frozen=True)
class Document:
    """
    A document returned by a similarity search.

    Identity is the id alone: the same stored document found by two
    different queries compares equal even though the scores differ.
    """
    id: str
    content: str = field(compare=False)
    score: float = field(default=0.0, compare=False)

    def __post_init__(self):
        if not self.id:
            raise ValueError("Document id must not be empty")

    def __str__(self) -> str:
        content = self.content
        if len(content) > 50:
            content = content[:50] + "..."
        return f"Document{{id='{self.id}', content='{content}', score={self.score:.3f}}}"

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "content": self.content,
            "score": self.score,
        }


def rank_by_score(docs: Iterable[Document]) -> list[Document]:
    """Sort by descending score. Ties keep their incoming order."""
    return sorted(docs, key=lambda d: d.score, reverse=True)


def filter_by_threshold(docs: Iterable[Document], threshold: float) -> list[Document]:
    """Keep documents scoring at least ``threshold``, in their given order."""
    return [d for d in docs if d.score >= threshold]
