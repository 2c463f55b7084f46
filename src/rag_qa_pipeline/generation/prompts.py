"""
Prompt and fallback-answer formatting.

Both functions are pure: given the same question and documents they
return the same string, which keeps the answer engine easy to test.
"""

from __future__ import annotations

from typing import Sequence

from rag_qa_pipeline.retrieval.document import Document

ANSWER_INSTRUCTION = (
    "Based on the following context, please answer the question. "
    "If the context doesn't contain enough information to answer the question, "
    "please say so clearly."
)

PROMPT_TEMPLATE = """{instruction}

Context:
{context}

Question: {question}

Answer:"""

MOCK_ANSWER_HEADER = "Based on the retrieved documents, here's what I found:"

MOCK_ANSWER_NOTE = (
    "Note: This is a mock response. Set OPENAI_API_KEY environment variable "
    "to use GPT for better answers."
)


def format_context(documents: Sequence[Document]) -> str:
    """One ``Document: ...`` paragraph per document, separated by blank lines."""
    return "\n\n".join(f"Document: {doc.content}" for doc in documents)


def build_prompt(question: str, documents: Sequence[Document]) -> str:
    """Build the single prompt sent to the completion provider."""
    return PROMPT_TEMPLATE.format(
        instruction=ANSWER_INSTRUCTION,
        context=format_context(documents),
        question=question,
    )


def format_mock_answer(documents: Sequence[Document]) -> str:
    """
    Deterministic answer used when no model is available.

    Example:
        Based on the retrieved documents, here's what I found:

        1. Java is a language (Similarity: 0.92)

        Note: This is a mock response. ...
    """
    lines = [
        f"{i}. {doc.content} (Similarity: {doc.score:.2f})"
        for i, doc in enumerate(documents, start=1)
    ]
    return f"{MOCK_ANSWER_HEADER}\n\n" + "\n".join(lines) + f"\n\n{MOCK_ANSWER_NOTE}"
