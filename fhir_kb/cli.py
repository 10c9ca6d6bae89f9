"""Command line entry point: build the index or query it."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from langchain_core.embeddings import Embeddings

from .builder import build_index
from .config import Settings
from .embedder import Embedder
from .errors import EmbeddingError, IndexFormatError, KnowledgeBaseError
from .injector import build_prompt_injection
from .knowledge import detect_topics
from .loader import load_index
from .retriever import Retriever
from .utils import shorten


def make_embeddings(settings: Settings) -> Embeddings:
    """Create the embeddings client used for indexing and querying."""
    from langchain_community.embeddings import OllamaEmbeddings

    return OllamaEmbeddings(model=settings.embed_model, base_url=settings.ollama_base_url)


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="fhir-kb", description="FHIR IG knowledge index")
    parser.add_argument("--index", help="Index file path (default: $FHIR_KB_INDEX_PATH)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    commands = parser.add_subparsers(dest="command")

    commands.add_parser("build", help="Fetch, chunk, embed and write the index")

    search = commands.add_parser("search", help="Query the index")
    search.add_argument("query", help="Free-text query")
    search.add_argument("-k", "--top-k", type=int, help="Number of chunks to return")
    return parser


def run_build(settings: Settings) -> int:
    print("=" * 60)
    print("FHIR IG Indexer")
    print("=" * 60)
    print(f"Output file:      {settings.index_path}")
    print(f"Embedding model:  {settings.embed_model}")
    print(f"Ollama base URL:  {settings.ollama_base_url}")
    print(f"Max chunk length: {settings.max_len}")
    print(f"Chunk overlap:    {settings.overlap}")
    print("=" * 60)

    embedder = Embedder(make_embeddings(settings), model=settings.embed_model)
    try:
        report = build_index(
            settings.index_path,
            embedder,
            max_len=settings.max_len,
            overlap=settings.overlap,
            min_length=settings.min_chunk_len,
            fetch_timeout=settings.fetch_timeout,
            fetch_delay=settings.fetch_delay,
            embed_delay=settings.embed_delay,
            retry_policy=settings.retry_policy(),
        )
    except OSError as e:
        print(f"\nError writing index: {e}", file=sys.stderr)
        return 1

    print(f"Index available at: {report.output_path}")
    return 0


def run_search(settings: Settings, query: str, top_k: Optional[int]) -> int:
    try:
        kb_index = load_index(settings.index_path)
    except (FileNotFoundError, IndexFormatError) as e:
        print(f"Error: {e}", file=sys.stderr)
        print("Run `fhir-kb build` first or set FHIR_KB_INDEX_PATH", file=sys.stderr)
        return 1

    print(f"Index version: {kb_index.version}, chunks: {len(kb_index)}, dimensions: {kb_index.dimension}")
    detected = detect_topics(query)
    print(f"Trigger-phrase topics: {', '.join(detected) or '-'}")
    print()

    retriever = Retriever(
        kb_index,
        Embedder(make_embeddings(settings), model=settings.embed_model),
        expert_cap=settings.expert_cap,
    )
    k = settings.top_k if top_k is None else top_k
    try:
        results = retriever.retrieve(query, k=k, timeout=settings.query_timeout)
    except EmbeddingError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"Top {k} results:")
    print()
    for rank, chunk in enumerate(results, start=1):
        print(f"[{rank}] Score: {chunk.score:.4f} ({chunk.kind.value})")
        print(f"    Topic:  {chunk.topic}")
        print(f"    Source: {chunk.source}")
        print(f"    Text:   {shorten(chunk.content.strip(), 150)}")
        print()

    injection = build_prompt_injection(results)
    if injection:
        print("=" * 60)
        print(injection.strip())
        print("=" * 60)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = _parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    settings = Settings.from_env()
    if args.index:
        settings = settings.model_copy(update={"index_path": args.index})

    try:
        if args.command == "search":
            return run_search(settings, args.query, args.top_k)
        return run_build(settings)
    except KnowledgeBaseError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
