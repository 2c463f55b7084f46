"""
Answer engine - question in, answer string out.

ALGORITHM:
----------
1. Retrieve the top_k most similar documents for the question
2. No candidates                -> NO_RESULTS_MESSAGE
3. Keep candidates scoring >= similarity_threshold (order preserved)
4. Nothing left                 -> LOW_RELEVANCE_MESSAGE
5. Completion provider present  -> prompt with the relevant context,
                                   reply returned verbatim
6. No provider, or it failed    -> deterministic mock answer
7. Retrieval raised             -> ERROR_MESSAGE

answer() never raises. Retrieval failures and provider failures are
logged and turned into one of the fixed strings above.

The engine keeps no state between calls beyond its collaborators.
"""

from __future__ import annotations

import logging
import math
import os
from dataclasses import dataclass
from typing import TYPE_CHECKING, Sequence

from rag_qa_pipeline.generation.completion import get_completion_provider
from rag_qa_pipeline.generation.prompts import build_prompt, format_mock_answer
from rag_qa_pipeline.observability import get_config as get_tracing_config
from rag_qa_pipeline.observability import get_tracer
from rag_qa_pipeline.observability.attributes import (
    GEN_AI_COMPLETION,
    GEN_AI_PROMPT,
    GEN_AI_REQUEST_MODEL,
    GEN_AI_SYSTEM,
    RAG_ANSWER_PATH,
    RAG_CANDIDATE_COUNT,
    RAG_ERROR_KIND,
    RAG_QUESTION,
    RAG_RELEVANT_COUNT,
    RAG_RELEVANT_DOC_IDS,
    RAG_TOP_SCORE,
    answer_attributes,
)
from rag_qa_pipeline.retrieval.document import Document, filter_by_threshold

if TYPE_CHECKING:
    from rag_qa_pipeline.core.protocols import CompletionProvider
    from rag_qa_pipeline.observability.tracer import SpanProtocol
    from rag_qa_pipeline.retrieval.repository import DocumentRepository

logger = logging.getLogger(__name__)

NO_RESULTS_MESSAGE = "I couldn't find any relevant information to answer your question."

LOW_RELEVANCE_MESSAGE = (
    "I found some documents, but they don't seem closely related to your question. "
    "Could you try rephrasing?"
)

ERROR_MESSAGE = "I encountered an error while processing your question. Please try again."


# ---------------------------------------------------------------------------
# CONFIGURATION
# ---------------------------------------------------------------------------


@dataclass
class AnswerEngineConfig:
    """Retrieval settings for the answer engine.

    Environment Variables:
        RAG_TOP_K: Candidates retrieved per question (default: 3)
        RAG_SIMILARITY_THRESHOLD: Minimum score for a relevant candidate (default: 0.7)
    """

    top_k: int = 3
    similarity_threshold: float = 0.7

    def __post_init__(self):
        if self.top_k < 1:
            raise ValueError(f"top_k must be at least 1, got {self.top_k}")
        if not math.isfinite(self.similarity_threshold):
            raise ValueError("similarity_threshold must be a finite number")

    @classmethod
    def from_env(cls) -> "AnswerEngineConfig":
        """Load config from environment variables."""
        return cls(
            top_k=int(os.environ.get("RAG_TOP_K", "3")),
            similarity_threshold=float(os.environ.get("RAG_SIMILARITY_THRESHOLD", "0.7")),
        )


@dataclass(frozen=True)
class SystemInfo:
    """Status snapshot reported by AnswerEngine.get_system_info()."""

    document_count: int
    llm_available: bool
    top_k: int
    similarity_threshold: float

    def render(self) -> str:
        return (
            "RAG System Status:\n"
            f"- Documents in database: {self.document_count}\n"
            f"- LLM available: {'Yes' if self.llm_available else 'No'}\n"
            f"- Top-K retrieval: {self.top_k}\n"
            f"- Similarity threshold: {self.similarity_threshold:.2f}"
        )

    def __str__(self) -> str:
        return self.render()


# ---------------------------------------------------------------------------
# ENGINE
# ---------------------------------------------------------------------------


class AnswerEngine:
    """
    Retrieval-augmented answering with graceful degradation.

    Args:
        repository: Initialized DocumentRepository (shared, not owned)
        completion_provider: Optional model; None selects mock answers
        config: top_k / threshold settings (defaults if not provided)
    """

    def __init__(
        self,
        repository: DocumentRepository,
        completion_provider: CompletionProvider | None = None,
        config: AnswerEngineConfig | None = None,
    ):
        self.config = config or AnswerEngineConfig()
        self._repository = repository
        self._completion_provider = completion_provider

    @property
    def llm_available(self) -> bool:
        return self._completion_provider is not None

    def answer(self, question: str) -> str:
        """Answer ``question`` from the stored documents. Never raises."""
        try:
            if not isinstance(question, str):
                question = str(question)

            with get_tracer().start_span(
                "rag.answer",
                attributes=answer_attributes(self.config.top_k, self.config.similarity_threshold),
            ) as span:
                return self._answer(question, span)
        except Exception:
            logger.error("Error answering question", exc_info=True)
            return ERROR_MESSAGE

    def _answer(self, question: str, span: SpanProtocol) -> str:
        capture = get_tracing_config().capture_llm_content
        if capture:
            span.set_attribute(RAG_QUESTION, question)

        try:
            candidates = self._repository.search_similar_documents(question, self.config.top_k)
        except Exception as e:
            logger.error(f"Error answering question: {question!r}", exc_info=True)
            span.record_exception(e)
            span.set_attribute(RAG_ERROR_KIND, getattr(e, "kind", type(e).__name__))
            span.set_attribute(RAG_ANSWER_PATH, "error")
            span.set_status("error", str(e))
            return ERROR_MESSAGE

        span.set_attribute(RAG_CANDIDATE_COUNT, len(candidates))
        if not candidates:
            span.set_attribute(RAG_ANSWER_PATH, "no_results")
            return NO_RESULTS_MESSAGE

        span.set_attribute(RAG_TOP_SCORE, max(d.score for d in candidates))
        relevant = filter_by_threshold(candidates, self.config.similarity_threshold)
        span.set_attribute(RAG_RELEVANT_COUNT, len(relevant))
        if not relevant:
            logger.debug(
                f"All {len(candidates)} candidates below threshold "
                f"{self.config.similarity_threshold}"
            )
            span.set_attribute(RAG_ANSWER_PATH, "low_relevance")
            return LOW_RELEVANCE_MESSAGE

        span.set_attribute(RAG_RELEVANT_DOC_IDS, [d.id for d in relevant])

        if self._completion_provider is not None:
            generated = self._generate(question, relevant, span, capture)
            if generated is not None:
                span.set_attribute(RAG_ANSWER_PATH, "llm")
                return generated

        span.set_attribute(RAG_ANSWER_PATH, "mock")
        return format_mock_answer(relevant)

    def _generate(
        self,
        question: str,
        documents: Sequence[Document],
        span: SpanProtocol,
        capture: bool,
    ) -> str | None:
        """Model answer, or None if the provider failed or replied with nothing."""
        provider = self._completion_provider
        system = getattr(provider, "system", None)
        if system:
            span.set_attribute(GEN_AI_SYSTEM, system)
        model = getattr(provider, "model", None)
        if model:
            span.set_attribute(GEN_AI_REQUEST_MODEL, model)

        prompt = build_prompt(question, documents)
        if capture:
            span.set_attribute(GEN_AI_PROMPT, prompt)

        try:
            response = provider.generate(prompt)
        except Exception as e:
            logger.warning(f"Error generating answer with LLM, using mock answer: {e}")
            span.record_exception(e)
            return None

        if not isinstance(response, str) or not response.strip():
            logger.warning("LLM returned an empty answer, using mock answer")
            return None

        if capture:
            span.set_attribute(GEN_AI_COMPLETION, response)
        logger.debug(f"Generated answer for question: {question!r}")
        return response

    def get_system_info(self) -> SystemInfo:
        """Document count, model availability and retrieval settings. Never raises."""
        try:
            count = int(self._repository.get_document_count())
        except Exception as e:
            logger.warning(f"Could not get document count: {e}")
            count = 0

        return SystemInfo(
            document_count=max(count, 0),
            llm_available=self.llm_available,
            top_k=self.config.top_k,
            similarity_threshold=self.config.similarity_threshold,
        )


def build_answer_engine(
    repository: DocumentRepository,
    config: AnswerEngineConfig | None = None,
) -> AnswerEngine:
    """
    Factory: wire an AnswerEngine with the environment's completion provider.

    The provider lookup happens here, once, not on every answer.
    """
    return AnswerEngine(
        repository,
        completion_provider=get_completion_provider(),
        config=config or AnswerEngineConfig.from_env(),
    )
