"""
CLI module - unified command-line interface.

Provides entry points for:
- Adding documents and loading the sample knowledge base
- Asking single questions or running an interactive loop
- Showing system status
"""

from rag_qa_pipeline.cli.commands import (
    main,
    run_info_cli,
    run_add_cli,
    run_load_samples_cli,
    run_ask_cli,
    run_chat_cli,
)

__all__ = [
    "main",
    "run_info_cli",
    "run_add_cli",
    "run_load_samples_cli",
    "run_ask_cli",
    "run_chat_cli",
]
