"""
Phoenix/OpenTelemetry Configuration

Loads tracing settings from environment variables.
Supports graceful degradation when Phoenix is not installed.
"""

import os
from dataclasses import dataclass

_TRUTHY = ("true", "1", "yes")


@dataclass
class TracingConfig:
    """Configuration for Phoenix tracing.

    Environment Variables:
        PHOENIX_ENABLED: Enable Phoenix tracing (default: false)
        PHOENIX_PROJECT_NAME: Project name in Phoenix UI (default: rag-qa-pipeline)
        PHOENIX_COLLECTOR_ENDPOINT: Collector endpoint (optional, Phoenix default if empty)
        PHOENIX_CAPTURE_LLM_CONTENT: Record questions and answers on spans (default: false)

    Questions and document text can contain private data, so content
    capture is opt-in.
    """

    enabled: bool = False
    project_name: str = "rag-qa-pipeline"
    collector_endpoint: str | None = None
    capture_llm_content: bool = False

    @classmethod
    def from_env(cls) -> "TracingConfig":
        """Load config from environment variables."""
        return cls(
            enabled=os.environ.get("PHOENIX_ENABLED", "false").lower() in _TRUTHY,
            project_name=os.environ.get("PHOENIX_PROJECT_NAME", "rag-qa-pipeline"),
            collector_endpoint=os.environ.get("PHOENIX_COLLECTOR_ENDPOINT") or None,
            capture_llm_content=os.environ.get("PHOENIX_CAPTURE_LLM_CONTENT", "false").lower() in _TRUTHY,
        )


# Global config singleton
_config: TracingConfig | None = None


def get_config() -> TracingConfig:
    """Get the global tracing config (lazy-loaded from env)."""
    global _config
    if _config is None:
        _config = TracingConfig.from_env()
    return _config


def reset_config() -> None:
    """Reset config (useful for testing)."""
    global _config
    _config = None
