"""
End-to-end smoke tests: sample knowledge base, in-memory store, mock
embeddings, with and without a completion provider.

No network or database required.
"""

import pytest

from rag_qa_pipeline import AnswerEngine, AnswerEngineConfig, DocumentRepository
from rag_qa_pipeline.embeddings import MockEmbeddings
from rag_qa_pipeline.generation import (
    LOW_RELEVANCE_MESSAGE,
    MOCK_ANSWER_HEADER,
    NO_RESULTS_MESSAGE,
)
from rag_qa_pipeline.retrieval import (
    InMemoryVectorStore,
    get_sample_documents,
    seed_repository,
)


@pytest.fixture
def repository():
    with DocumentRepository(InMemoryVectorStore(), MockEmbeddings()) as repo:
        yield repo


@pytest.fixture
def seeded(repository):
    seed_repository(repository)
    return repository


class TestPipelineSmoke:

    def test_seed_loads_all_samples(self, seeded):
        assert seeded.get_document_count() == len(get_sample_documents()) == 8

    def test_seeding_twice_keeps_count(self, seeded):
        seed_repository(seeded)

        assert seeded.get_document_count() == 8

    def test_sample_ids_unique(self):
        ids = [doc_id for doc_id, _ in get_sample_documents()]

        assert len(ids) == len(set(ids))

    def test_question_matching_a_document_gets_mock_answer(self, seeded):
        doc_id, content = get_sample_documents()[0]

        answer = AnswerEngine(seeded).answer(content)

        assert answer.startswith(MOCK_ANSWER_HEADER)
        assert f"1. {content} (Similarity: 1.00)" in answer

    def test_every_sample_retrieves_itself(self, seeded):
        for doc_id, content in get_sample_documents():
            assert seeded.search_similar_documents(content, 3)[0].id == doc_id

    def test_unrelated_question(self, seeded):
        assert AnswerEngine(seeded).answer("zebra quokka") == LOW_RELEVANCE_MESSAGE

    def test_empty_store(self, repository):
        assert AnswerEngine(repository).answer("What is Java?") == NO_RESULTS_MESSAGE

    def test_llm_receives_retrieved_context(self, seeded):
        prompts = []

        class EchoProvider:
            def generate(self, prompt):
                prompts.append(prompt)
                return "generated"

        _, content = get_sample_documents()[2]
        engine = AnswerEngine(seeded, EchoProvider(), AnswerEngineConfig(top_k=3))

        assert engine.answer(content) == "generated"
        assert f"Document: {content}" in prompts[0]

    def test_system_info(self, seeded):
        info = AnswerEngine(seeded).get_system_info()

        assert info.document_count == 8
        assert info.llm_available is False
        assert "- Documents in database: 8" in info.render()
