"""
Observability Module - Phoenix + OpenTelemetry Integration

Traces answer-engine runs with Arize Phoenix, and auto-instruments the
OpenAI client through OpenInference so embedding and completion calls
show up as child spans.

USAGE:
------
# At application startup:
from rag_qa_pipeline.observability import init_phoenix

init_phoenix()  # Exports spans to Phoenix if PHOENIX_ENABLED=true

# In code that needs tracing:
from rag_qa_pipeline.observability import get_tracer

with get_tracer().start_span("rag.answer") as span:
    span.set_attribute("rag.candidate_count", 3)
"""

from __future__ import annotations

import logging

from rag_qa_pipeline.observability.config import (
    TracingConfig,
    get_config,
    reset_config,
)
from rag_qa_pipeline.observability.tracer import (
    TracerProtocol,
    SpanProtocol,
    NoOpTracer,
    NoOpSpan,
    get_tracer,
    reset_tracer,
)
from rag_qa_pipeline.observability.attributes import (
    GEN_AI_SYSTEM,
    GEN_AI_REQUEST_MODEL,
    GEN_AI_PROMPT,
    GEN_AI_COMPLETION,
    RAG_QUESTION,
    RAG_TOP_K,
    RAG_SIMILARITY_THRESHOLD,
    RAG_CANDIDATE_COUNT,
    RAG_RELEVANT_COUNT,
    RAG_RELEVANT_DOC_IDS,
    RAG_TOP_SCORE,
    RAG_ANSWER_PATH,
    RAG_ERROR_KIND,
    ANSWER_PATHS,
    answer_attributes,
)

logger = logging.getLogger(__name__)

_phoenix_initialized = False


def _instrument_openai() -> bool:
    """Register the OpenInference OpenAI instrumentor if it is installed."""
    try:
        from openinference.instrumentation.openai import OpenAIInstrumentor
    except ImportError:
        logger.debug("OpenAI instrumentor not available")
        return False

    OpenAIInstrumentor().instrument()
    logger.info("Registered OpenAI instrumentor")
    return True


def init_phoenix(config: TracingConfig | None = None) -> bool:
    """
    Initialize Phoenix tracing.

    Call once at application startup. Installs an OpenTelemetry tracer
    provider exporting to Phoenix and instruments the OpenAI client.

    Args:
        config: Optional config (uses env vars if not provided)

    Returns:
        True if Phoenix was initialized, False if disabled or unavailable
    """
    global _phoenix_initialized
    if _phoenix_initialized:
        return True

    config = config or get_config()
    if not config.enabled:
        logger.debug("Phoenix tracing disabled")
        return False

    try:
        from phoenix.otel import register
    except ImportError as e:
        logger.warning(f"Phoenix not installed, tracing disabled: {e}")
        return False

    kwargs = {"project_name": config.project_name}
    if config.collector_endpoint:
        kwargs["endpoint"] = config.collector_endpoint
        logger.info(f"Phoenix exporting to: {config.collector_endpoint}")

    try:
        register(**kwargs)
    except Exception as e:
        logger.error(f"Failed to initialize Phoenix: {e}")
        return False

    _instrument_openai()
    reset_tracer()
    _phoenix_initialized = True
    return True


def shutdown_phoenix() -> None:
    """Flush and shut down the tracer provider."""
    global _phoenix_initialized

    if not _phoenix_initialized:
        return

    try:
        from opentelemetry import trace

        provider = trace.get_tracer_provider()
        if hasattr(provider, "shutdown"):
            provider.shutdown()
    except Exception as e:
        logger.warning(f"Error shutting down Phoenix: {e}")

    reset_tracer()
    reset_config()
    _phoenix_initialized = False


__all__ = [
    # Initialization
    "init_phoenix",
    "shutdown_phoenix",
    # Config
    "TracingConfig",
    "get_config",
    "reset_config",
    # Tracer
    "TracerProtocol",
    "SpanProtocol",
    "NoOpTracer",
    "NoOpSpan",
    "get_tracer",
    "reset_tracer",
    # Attributes
    "GEN_AI_SYSTEM",
    "GEN_AI_REQUEST_MODEL",
    "GEN_AI_PROMPT",
    "GEN_AI_COMPLETION",
    "RAG_QUESTION",
    "RAG_TOP_K",
    "RAG_SIMILARITY_THRESHOLD",
    "RAG_CANDIDATE_COUNT",
    "RAG_RELEVANT_COUNT",
    "RAG_RELEVANT_DOC_IDS",
    "RAG_TOP_SCORE",
    "RAG_ANSWER_PATH",
    "RAG_ERROR_KIND",
    "ANSWER_PATHS",
    "answer_attributes",
]
