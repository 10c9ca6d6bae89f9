"""Query-time retrieval with expert-priority blending."""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

import faiss
import numpy as np
from pydantic import BaseModel, Field

from .embedder import Embedder
from .errors import DimensionMismatchError, EmbeddingError
from .injector import format_context
from .loader import KnowledgeIndex
from .schemas import ChunkKind, ScoredChunk
from .utils import unique

logger = logging.getLogger(__name__)

DEFAULT_TOP_K = 5
DEFAULT_EXPERT_CAP = 2

# Similarity assigned when either vector has zero norm
ZERO_VECTOR_SCORE = -1.0


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Cosine similarity of two vectors, clipped to [-1, 1].

    Raises:
        DimensionMismatchError: If the vectors differ in length
    """
    if len(a) != len(b):
        raise DimensionMismatchError(len(a), len(b))
    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    norm_a = float(np.linalg.norm(va))
    norm_b = float(np.linalg.norm(vb))
    if norm_a == 0.0 or norm_b == 0.0:
        return ZERO_VECTOR_SCORE
    value = float(np.dot(va, vb)) / (norm_a * norm_b)
    return max(-1.0, min(1.0, value))


def blend(scored: Sequence[ScoredChunk], k: int, expert_cap: int = DEFAULT_EXPERT_CAP) -> List[ScoredChunk]:
    """
    Select up to ``k`` chunks, reserving room for the best expert chunks.

    ``scored`` must be sorted by descending score. The top ``expert_cap``
    expert chunks are taken first, the remaining slots go to the best fetched
    chunks, and if fetched chunks run out further expert chunks fill in. The
    selection is returned sorted by descending score.
    """
    if k <= 0:
        return []

    experts = [chunk for chunk in scored if chunk.kind is ChunkKind.EXPERT]
    fetched = [chunk for chunk in scored if chunk.kind is ChunkKind.FETCHED]

    reserved = experts[: max(min(expert_cap, k), 0)]
    selected = reserved + fetched[: k - len(reserved)]
    if len(selected) < k:
        selected += experts[len(reserved) : len(reserved) + k - len(selected)]

    return sorted(selected, key=lambda chunk: chunk.score, reverse=True)


class Retriever:
    """
    Scores a query against every indexed chunk and blends the top results.

    The index is never mutated, so one instance can serve concurrent callers.
    """

    def __init__(self, index: KnowledgeIndex, embedder: Embedder, expert_cap: int = DEFAULT_EXPERT_CAP):
        self.index = index
        self.embedder = embedder
        self.expert_cap = expert_cap

    def score(self, query_vector: Sequence[float]) -> List[ScoredChunk]:
        """
        Score every chunk against a query vector, best first.

        Raises:
            DimensionMismatchError: If the query and index dimensions differ
        """
        if not self.index.chunks:
            return []
        dimension = self.index.dimension
        if len(query_vector) != dimension:
            raise DimensionMismatchError(dimension, len(query_vector))

        total = len(self.index.chunks)
        scores = np.full(total, ZERO_VECTOR_SCORE, dtype=np.float64)

        query = np.array([query_vector], dtype="float32")
        if float(np.linalg.norm(query)) > 0.0:
            faiss.normalize_L2(query)
            found_scores, found_rows = self.index.index.search(query, total)
            for row, value in zip(found_rows[0], found_scores[0]):
                if row < 0:
                    continue
                scores[row] = max(-1.0, min(1.0, float(value)))
            scores[self.index.zero_rows] = ZERO_VECTOR_SCORE

        order = sorted(range(total), key=lambda row: (-scores[row], row))
        return [
            ScoredChunk(
                content=self.index.chunks[row].content,
                source=self.index.chunks[row].source,
                topic=self.index.chunks[row].topic,
                kind=self.index.chunks[row].kind,
                score=float(scores[row]),
            )
            for row in order
        ]

    def retrieve(self, query: str, k: int = DEFAULT_TOP_K, timeout: Optional[float] = None) -> List[ScoredChunk]:
        """
        Return up to ``k`` relevant chunks for a free-text query.

        An empty index yields an empty list without calling the embedder.

        Raises:
            EmbeddingError: If the query cannot be embedded (including timeouts)
            DimensionMismatchError: If the embedder and index disagree on dimensionality
        """
        if not self.index.chunks or k <= 0:
            return []
        query_vector = self.embedder.embed(query, timeout=timeout)
        return blend(self.score(query_vector), k, self.expert_cap)


class RetrievedContext(BaseModel):
    """Retrieval result shaped for prompt injection."""
    context: str = ""
    sources: List[str] = Field(default_factory=list)
    topics: List[str] = Field(default_factory=list)
    chunks: List[ScoredChunk] = Field(default_factory=list)


def retrieve_context(
    retriever: Retriever,
    query: str,
    k: int = DEFAULT_TOP_K,
    timeout: Optional[float] = None,
) -> RetrievedContext:
    """
    Retrieve context for a query, degrading to an empty result on embedding failure.

    Dimension mismatches are configuration errors and still propagate.
    """
    try:
        chunks = retriever.retrieve(query, k=k, timeout=timeout)
    except EmbeddingError as exc:
        logger.error("Retrieval failed, continuing without context: %s", exc)
        return RetrievedContext()

    if not chunks:
        return RetrievedContext()

    topics = unique(chunk.topic for chunk in chunks)
    expert_used = sum(1 for chunk in chunks if chunk.kind is ChunkKind.EXPERT)
    logger.info(
        "Retrieved %d chunks (%d expert, %d fetched) from topics: %s",
        len(chunks),
        expert_used,
        len(chunks) - expert_used,
        ", ".join(topics),
    )
    logger.info(
        "Top scores: %s",
        ", ".join(f"{chunk.score:.3f}[{chunk.kind.value}]" for chunk in chunks[:3]),
    )

    return RetrievedContext(
        context=format_context(chunks),
        sources=unique(chunk.source for chunk in chunks),
        topics=topics,
        chunks=chunks,
    )
