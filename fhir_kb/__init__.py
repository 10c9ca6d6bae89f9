"""FHIR KB - FHIR Implementation Guide knowledge index for prompt enrichment."""

from .builder import RetryPolicy, build_index
from .embedder import Embedder
from .injector import build_prompt_injection
from .loader import KnowledgeIndex, load_index
from .retriever import Retriever, retrieve_context
from .schemas import Chunk, ChunkKind, IndexDocument, ScoredChunk, Topic

__version__ = "0.1.0"

__all__ = [
    "build_index",
    "RetryPolicy",
    "Embedder",
    "load_index",
    "KnowledgeIndex",
    "Retriever",
    "retrieve_context",
    "build_prompt_injection",
    "Chunk",
    "ChunkKind",
    "IndexDocument",
    "ScoredChunk",
    "Topic",
]
