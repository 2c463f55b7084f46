"""
CLI commands - entry points for the question-answering pipeline.

Each command follows a consistent pattern:
1. Parse arguments
2. Load environment and configure logging
3. Open the pipeline (store + embedder + repository + engine)
4. Do the work and print results
5. Close the pipeline and return an exit code

CLI commands are thin wrappers: all behaviour lives in the repository
and the answer engine.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from contextlib import contextmanager
from typing import Iterator

from dotenv import load_dotenv

from rag_qa_pipeline.core.errors import PipelineError
from rag_qa_pipeline.embeddings import get_embedding_provider
from rag_qa_pipeline.generation.engine import AnswerEngine, build_answer_engine
from rag_qa_pipeline.observability import init_phoenix, shutdown_phoenix
from rag_qa_pipeline.retrieval.repository import DocumentRepository, RepositoryConfig
from rag_qa_pipeline.retrieval.seeds import seed_repository
from rag_qa_pipeline.retrieval.store import get_vector_store

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_INTERRUPTED = 130


def _load_env() -> None:
    """Load environment variables from a .env file, if present."""
    load_dotenv()


def _configure_logging(level: str | None) -> None:
    level = (level or os.environ.get("RAG_LOG_LEVEL", "WARNING")).upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _add_pipeline_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--store",
        choices=["memory", "postgres"],
        default=None,
        help="Vector store backend (default: RAG_VECTOR_STORE or memory)",
    )
    parser.add_argument(
        "--embeddings",
        choices=["mock", "openai", "local"],
        default=None,
        help="Embedding provider (default: RAG_EMBEDDINGS or mock)",
    )
    parser.add_argument(
        "--load-samples",
        action="store_true",
        help="Ingest the bundled sample documents before running",
    )
    parser.add_argument("--log-level", default=None, help="Logging level (default: RAG_LOG_LEVEL or WARNING)")


@contextmanager
def _open_pipeline(args: argparse.Namespace) -> Iterator[tuple[DocumentRepository, AnswerEngine]]:
    """Build, initialize and finally close the repository and engine."""
    use_postgres = None if args.store is None else args.store == "postgres"
    repository = DocumentRepository(
        get_vector_store(use_postgres=use_postgres),
        get_embedding_provider(args.embeddings),
        RepositoryConfig.from_env(),
    )
    init_phoenix()
    try:
        repository.initialize()
        if args.load_samples:
            count = seed_repository(repository)
            print(f"Loaded {count} sample documents")
        yield repository, build_answer_engine(repository)
    finally:
        repository.close()
        shutdown_phoenix()


def _uses_postgres(args: argparse.Namespace) -> bool:
    if args.store is not None:
        return args.store == "postgres"
    return os.environ.get("RAG_VECTOR_STORE", "memory").lower() == "postgres"


def _run(parser: argparse.ArgumentParser, work, persistent: bool = False) -> int:
    """
    Parse args, run ``work(args, repository, engine)`` inside an open pipeline.

    ``persistent`` commands only write documents, so they refuse the
    in-memory store, which is discarded when the command exits.
    """
    _add_pipeline_args(parser)
    args = parser.parse_args()
    _configure_logging(args.log_level)

    if persistent and not _uses_postgres(args):
        print(
            "Error: the in-memory store does not persist documents; "
            "use --store postgres or set RAG_VECTOR_STORE=postgres",
            file=sys.stderr,
        )
        return EXIT_ERROR

    try:
        with _open_pipeline(args) as (repository, engine):
            return work(args, repository, engine)
    except (PipelineError, ValueError, ImportError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR


def run_info_cli() -> int:
    """CLI entry point: print system status."""
    parser = argparse.ArgumentParser(prog="rag-qa info", description="Show system status")

    def work(args, repository, engine):
        print(engine.get_system_info().render())
        return EXIT_OK

    return _run(parser, work)


def run_add_cli() -> int:
    """CLI entry point: add one document."""
    parser = argparse.ArgumentParser(prog="rag-qa add", description="Add a document")
    parser.add_argument("id", help="Unique document id")
    parser.add_argument("content", help="Document text")

    def work(args, repository, engine):
        repository.add_document(args.id, args.content)
        print(f"Added document '{args.id}'")
        return EXIT_OK

    return _run(parser, work, persistent=True)


def run_load_samples_cli() -> int:
    """CLI entry point: ingest the sample knowledge base."""
    parser = argparse.ArgumentParser(prog="rag-qa load-samples", description="Load sample documents")

    def work(args, repository, engine):
        if not args.load_samples:
            count = seed_repository(repository)
            print(f"Loaded {count} sample documents")
        print(f"Documents in database: {repository.get_document_count()}")
        return EXIT_OK

    return _run(parser, work, persistent=True)


def run_ask_cli() -> int:
    """CLI entry point: answer one question."""
    parser = argparse.ArgumentParser(prog="rag-qa ask", description="Answer a question")
    parser.add_argument("question", help="Question to answer")

    def work(args, repository, engine):
        print(engine.answer(args.question))
        return EXIT_OK

    return _run(parser, work)


def run_chat_cli() -> int:
    """CLI entry point: interactive question loop."""
    parser = argparse.ArgumentParser(prog="rag-qa chat", description="Interactive Q&A")

    def work(args, repository, engine):
        print("RAG Question Answering. Type 'info' for status, 'quit' to exit.")
        while True:
            try:
                question = input("\nQuestion: ").strip()
            except EOFError:
                break
            if not question:
                continue
            if question.lower() in ("quit", "exit"):
                break
            if question.lower() == "info":
                print(engine.get_system_info().render())
                continue
            print(f"\nAnswer: {engine.answer(question)}")
        print("Goodbye!")
        return EXIT_OK

    return _run(parser, work)


def main() -> int:
    """
    Main CLI entry point with subcommands.

    Usage:
        rag-qa info            # Show system status
        rag-qa add ID TEXT     # Add a document
        rag-qa load-samples    # Ingest sample documents
        rag-qa ask QUESTION    # Answer one question
        rag-qa chat            # Interactive loop
    """
    _load_env()

    parser = argparse.ArgumentParser(
        description="Retrieval-augmented question answering",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  info          Show document count, model availability and settings
  add           Add a document (id and text)
  load-samples  Ingest the bundled sample documents
  ask           Answer one question
  chat          Interactive question loop

Examples:
  rag-qa ask "What is pgvector?" --load-samples
  rag-qa chat --store postgres --embeddings local
        """,
    )

    parser.add_argument(
        "command",
        choices=["info", "add", "load-samples", "ask", "chat"],
        help="Command to run",
    )

    # Parse just the command first
    args, remaining = parser.parse_known_args()

    commands = {
        "info": run_info_cli,
        "add": run_add_cli,
        "load-samples": run_load_samples_cli,
        "ask": run_ask_cli,
        "chat": run_chat_cli,
    }

    # Re-inject remaining args for the subcommand
    sys.argv = [sys.argv[0]] + remaining

    try:
        return commands[args.command]()
    except KeyboardInterrupt:
        print("\nInterrupted")
        return EXIT_INTERRUPTED


if __name__ == "__main__":
    sys.exit(main())
