"""
Completion providers - prompt in, text out.

A completion provider is an optional capability. get_completion_provider()
decides once, from OPENAI_API_KEY, whether one exists; the answer engine
just holds ``CompletionProvider | None``.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from openai import OpenAI

from rag_qa_pipeline.core.protocols import CompletionProvider

logger = logging.getLogger(__name__)


@dataclass
class CompletionConfig:
    """Settings for the OpenAI chat model."""

    model: str = "gpt-3.5-turbo"
    temperature: float = 0.7
    max_tokens: int = 500
    timeout: float = 60.0  # seconds

    @classmethod
    def from_env(cls) -> "CompletionConfig":
        """Load config from environment variables."""
        return cls(
            model=os.environ.get("RAG_LLM_MODEL", "gpt-3.5-turbo"),
            temperature=float(os.environ.get("RAG_LLM_TEMPERATURE", "0.7")),
            max_tokens=int(os.environ.get("RAG_LLM_MAX_TOKENS", "500")),
            timeout=float(os.environ.get("RAG_LLM_TIMEOUT", "60")),
        )


class OpenAICompletionProvider:
    """
    Chat-completion provider backed by the OpenAI API.

    The whole prompt is sent as a single user message.
    """

    system = "openai"

    def __init__(self, api_key: str, config: CompletionConfig | None = None):
        self.config = config or CompletionConfig()
        self._client = OpenAI(api_key=api_key, timeout=self.config.timeout)

    @property
    def model(self) -> str:
        return self.config.model

    def generate(self, prompt: str) -> str:
        """Return the model's reply to ``prompt``."""
        response = self._client.chat.completions.create(
            model=self.config.model,
            messages=[{"role": "user", "content": prompt}],
            temperature=self.config.temperature,
            max_tokens=self.config.max_tokens,
        )
        return response.choices[0].message.content or ""


def get_completion_provider(
    api_key: str | None = None,
    config: CompletionConfig | None = None,
) -> CompletionProvider | None:
    """
    Factory function for the completion provider.

    Args:
        api_key: OpenAI key (default: OPENAI_API_KEY env var)
        config: Model settings (loaded from env if not provided)

    Returns:
        OpenAICompletionProvider, or None when no key is configured
    """
    api_key = api_key or os.environ.get("OPENAI_API_KEY")
    if not api_key:
        logger.warning("OPENAI_API_KEY not found. Using mock responses.")
        return None

    config = config or CompletionConfig.from_env()
    logger.info(f"Using OpenAI model {config.model} for answers")
    return OpenAICompletionProvider(api_key, config)
