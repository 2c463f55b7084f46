"""
Unit Tests for the Document model and ranking helpers.
"""

import pytest

from rag_qa_pipeline.retrieval.document import (
    Document,
    filter_by_threshold,
    rank_by_score,
)


class TestDocument:
    """Identity, display and serialization."""

    def test_equality_is_by_id(self):
        a = Document(id="doc-1", content="Java", score=0.9)
        b = Document(id="doc-1", content="Different text", score=0.1)

        assert a == b
        assert hash(a) == hash(b)

    def test_different_ids_differ(self):
        assert Document(id="a", content="x") != Document(id="b", content="x")

    def test_default_score(self):
        assert Document(id="a", content="x").score == 0.0

    def test_empty_id_rejected(self):
        with pytest.raises(ValueError):
            Document(id="", content="x")

    def test_frozen(self):
        doc = Document(id="a", content="x")

        with pytest.raises(Exception):
            doc.score = 1.0

    def test_str_short_content(self):
        doc = Document(id="doc-1", content="Java is a language", score=0.91234)

        assert str(doc) == "Document{id='doc-1', content='Java is a language', score=0.912}"

    def test_str_truncates_long_content(self):
        doc = Document(id="doc-1", content="x" * 80, score=0.5)

        assert f"content='{'x' * 50}...'" in str(doc)

    def test_str_exactly_fifty_chars_not_truncated(self):
        doc = Document(id="doc-1", content="y" * 50)

        assert "..." not in str(doc)

    def test_to_dict(self):
        doc = Document(id="doc-1", content="Java", score=0.75)

        assert doc.to_dict() == {"id": "doc-1", "content": "Java", "score": 0.75}


class TestRanking:
    """rank_by_score / filter_by_threshold."""

    def test_rank_descending(self):
        docs = [
            Document(id="a", content="", score=0.2),
            Document(id="b", content="", score=0.9),
            Document(id="c", content="", score=0.5),
        ]

        assert [d.id for d in rank_by_score(docs)] == ["b", "c", "a"]

    def test_rank_ties_keep_order(self):
        docs = [
            Document(id="a", content="", score=0.5),
            Document(id="b", content="", score=0.5),
        ]

        assert [d.id for d in rank_by_score(docs)] == ["a", "b"]

    def test_filter_is_inclusive(self):
        docs = [
            Document(id="a", content="", score=0.7),
            Document(id="b", content="", score=0.69),
        ]

        assert [d.id for d in filter_by_threshold(docs, 0.7)] == ["a"]

    def test_filter_preserves_order(self):
        docs = [
            Document(id="a", content="", score=0.8),
            Document(id="b", content="", score=0.95),
            Document(id="c", content="", score=0.1),
        ]

        assert [d.id for d in filter_by_threshold(docs, 0.5)] == ["a", "b"]
