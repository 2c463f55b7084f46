"""
Semantic Conventions for Span Attributes

OpenTelemetry GenAI keys plus a ``rag.*`` namespace for the answer
pipeline.

Reference: https://opentelemetry.io/docs/specs/semconv/gen-ai/
"""

# ---------------------------------------------------------------------------
# GENAI NAMESPACE (OTel standard)
# ---------------------------------------------------------------------------

GEN_AI_SYSTEM = "gen_ai.system"  # "openai"
GEN_AI_REQUEST_MODEL = "gen_ai.request.model"  # "gpt-3.5-turbo"
GEN_AI_PROMPT = "gen_ai.prompt"  # only with PHOENIX_CAPTURE_LLM_CONTENT
GEN_AI_COMPLETION = "gen_ai.completion"  # only with PHOENIX_CAPTURE_LLM_CONTENT


# ---------------------------------------------------------------------------
# RAG NAMESPACE (custom)
# ---------------------------------------------------------------------------

RAG_QUESTION = "rag.question"  # only with PHOENIX_CAPTURE_LLM_CONTENT
RAG_TOP_K = "rag.top_k"
RAG_SIMILARITY_THRESHOLD = "rag.similarity_threshold"
RAG_CANDIDATE_COUNT = "rag.candidate_count"
RAG_RELEVANT_COUNT = "rag.relevant_count"
RAG_RELEVANT_DOC_IDS = "rag.relevant_doc_ids"
RAG_TOP_SCORE = "rag.top_score"
RAG_ANSWER_PATH = "rag.answer_path"  # see ANSWER_PATHS
RAG_ERROR_KIND = "rag.error_kind"  # PipelineError.kind or exception class name

ANSWER_PATHS = ("llm", "mock", "no_results", "low_relevance", "error")


def answer_attributes(top_k: int, similarity_threshold: float) -> dict:
    """Attributes set when an answer span starts."""
    return {
        RAG_TOP_K: top_k,
        RAG_SIMILARITY_THRESHOLD: similarity_threshold,
    }
