"""Data schemas for FHIR KB."""

from __future__ import annotations

from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class ChunkKind(str, Enum):
    """Provenance class of a chunk; expert chunks win retrieval priority."""
    EXPERT = "expert"
    FETCHED = "fetched"


class EntityUsage(BaseModel):
    """A FHIR resource (or mechanism) a workflow requires, with a usage note."""
    model_config = ConfigDict(frozen=True)

    resource: str
    usage: str


class Topic(BaseModel):
    """A curated FHIR Implementation Guide topic."""
    model_config = ConfigDict(frozen=True)

    key: str
    name: str
    trigger_phrases: List[str] = Field(default_factory=list)
    workflow: str
    entities: List[EntityUsage] = Field(default_factory=list)
    anti_patterns: List[str] = Field(default_factory=list)
    key_operations: List[str] = Field(default_factory=list)
    visual_requirements: List[str] = Field(default_factory=list)


class SourceRef(BaseModel):
    """A reference document to fetch for a topic."""
    model_config = ConfigDict(frozen=True)

    url: str
    topic: str


class ChunkDraft(BaseModel):
    """A chunk before it has been embedded."""
    content: str
    source: str
    topic: str
    kind: ChunkKind = ChunkKind.FETCHED


class Chunk(ChunkDraft):
    """An embedded chunk as stored in the index."""
    model_config = ConfigDict(frozen=True)

    embedding: List[float]

    @field_validator("embedding")
    @classmethod
    def _embedding_not_empty(cls, value: List[float]) -> List[float]:
        if not value:
            raise ValueError("embedding must not be empty")
        return value

    @property
    def dimension(self) -> int:
        return len(self.embedding)


class ScoredChunk(BaseModel):
    """A chunk returned by the retriever, with its similarity score."""
    content: str
    source: str
    topic: str
    kind: ChunkKind
    score: float


class IndexDocument(BaseModel):
    """The persisted index: a versioned, timestamped list of chunks."""
    model_config = ConfigDict(populate_by_name=True)

    version: str
    created_at: str = Field(alias="createdAt")
    chunks: List[Chunk]

    @model_validator(mode="after")
    def _uniform_dimension(self) -> "IndexDocument":
        dims = {chunk.dimension for chunk in self.chunks}
        if len(dims) > 1:
            raise ValueError(f"chunks have mixed embedding dimensions: {sorted(dims)}")
        return self

    @property
    def dimension(self) -> Optional[int]:
        if not self.chunks:
            return None
        return self.chunks[0].dimension


class BuildReport(BaseModel):
    """Summary of an indexing run."""
    version: str
    created_at: str
    output_path: str
    expert_count: int
    fetched_count: int
    chunk_count: int
    per_topic: Dict[str, Dict[str, int]] = Field(default_factory=dict)
    failed_sources: List[str] = Field(default_factory=list)
    embedding_failures: int = 0
    file_size_bytes: int = 0
