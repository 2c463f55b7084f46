"""
Generation module - turns retrieved documents into an answer.

- AnswerEngine: retrieval, threshold filtering, LLM or mock answer
- OpenAICompletionProvider / get_completion_provider(): optional model
- build_prompt / format_mock_answer: pure formatting
"""

from rag_qa_pipeline.generation.completion import (
    CompletionConfig,
    OpenAICompletionProvider,
    get_completion_provider,
)
from rag_qa_pipeline.generation.prompts import (
    build_prompt,
    format_context,
    format_mock_answer,
    ANSWER_INSTRUCTION,
    MOCK_ANSWER_HEADER,
    MOCK_ANSWER_NOTE,
)
from rag_qa_pipeline.generation.engine import (
    AnswerEngine,
    AnswerEngineConfig,
    SystemInfo,
    build_answer_engine,
    NO_RESULTS_MESSAGE,
    LOW_RELEVANCE_MESSAGE,
    ERROR_MESSAGE,
)

__all__ = [
    # Completion
    "CompletionConfig",
    "OpenAICompletionProvider",
    "get_completion_provider",
    # Prompts
    "build_prompt",
    "format_context",
    "format_mock_answer",
    "ANSWER_INSTRUCTION",
    "MOCK_ANSWER_HEADER",
    "MOCK_ANSWER_NOTE",
    # Engine
    "AnswerEngine",
    "AnswerEngineConfig",
    "SystemInfo",
    "build_answer_engine",
    "NO_RESULTS_MESSAGE",
    "LOW_RELEVANCE_MESSAGE",
    "ERROR_MESSAGE",
]
