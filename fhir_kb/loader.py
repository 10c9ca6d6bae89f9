"""Load the knowledge index from disk."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

import faiss
import numpy as np
from pydantic import ValidationError

from .errors import IndexFormatError
from .schemas import Chunk, ChunkKind, IndexDocument

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class KnowledgeIndex:
    """
    In-memory, read-only knowledge index.

    ``index`` searches the L2-normalised embeddings row-aligned with ``chunks``;
    ``zero_rows`` flags chunks whose stored embedding has zero norm.
    """
    document: IndexDocument
    chunks: List[Chunk]
    zero_rows: Optional[np.ndarray]
    index: Optional[faiss.Index]

    @property
    def dimension(self) -> Optional[int]:
        return self.document.dimension

    @property
    def version(self) -> str:
        return self.document.version

    def __len__(self) -> int:
        return len(self.chunks)

    def count(self, kind: ChunkKind) -> int:
        return sum(1 for chunk in self.chunks if chunk.kind is kind)

    @classmethod
    def from_document(cls, document: IndexDocument) -> "KnowledgeIndex":
        """Build the searchable structure for a validated document."""
        chunks = list(document.chunks)
        if not chunks:
            return cls(document=document, chunks=chunks, zero_rows=None, index=None)

        vectors = np.array([chunk.embedding for chunk in chunks], dtype="float32")
        zero_rows = np.linalg.norm(vectors, axis=1) == 0
        faiss.normalize_L2(vectors)

        index = faiss.IndexFlatIP(vectors.shape[1])
        index.add(vectors)
        return cls(document=document, chunks=chunks, zero_rows=zero_rows, index=index)


def parse_index(data: object) -> IndexDocument:
    """
    Validate raw JSON data as an index document.

    Raises:
        IndexFormatError: If fields are missing or embeddings are inconsistent
    """
    try:
        return IndexDocument.model_validate(data)
    except ValidationError as exc:
        raise IndexFormatError(f"Invalid index document: {exc}") from exc


def load_index(index_path: str) -> KnowledgeIndex:
    """
    Load a knowledge index from disk.

    Args:
        index_path: Path to the JSON index written by ``build_index``

    Returns:
        KnowledgeIndex ready for retrieval

    Raises:
        FileNotFoundError: If the file is missing
        IndexFormatError: If the file is not a valid index
    """
    path = Path(index_path)
    if not path.exists():
        raise FileNotFoundError(f"Index file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as exc:
            raise IndexFormatError(f"Index file is not valid JSON: {path}") from exc

    knowledge_index = KnowledgeIndex.from_document(parse_index(data))
    logger.info(
        "Loaded %d chunks (%d expert, %d fetched) v%s",
        len(knowledge_index),
        knowledge_index.count(ChunkKind.EXPERT),
        knowledge_index.count(ChunkKind.FETCHED),
        knowledge_index.version,
    )
    return knowledge_index
