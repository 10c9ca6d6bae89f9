"""Tests for FHIR KB schemas."""

import pytest
from pydantic import ValidationError

from fhir_kb.schemas import BuildReport, Chunk, ChunkKind, IndexDocument


def _chunk(embedding, kind=ChunkKind.FETCHED):
    return Chunk(
        content="Sample chunk text",
        source="https://build.fhir.org/ig/HL7/davinci-pas/index.html",
        topic="pas",
        kind=kind,
        embedding=embedding,
    )


def test_chunk_creation():
    """Test creating Chunk."""
    chunk = _chunk([0.1, 0.2, 0.3], kind=ChunkKind.EXPERT)

    assert chunk.topic == "pas"
    assert chunk.kind is ChunkKind.EXPERT
    assert chunk.dimension == 3


def test_chunk_rejects_empty_embedding():
    with pytest.raises(ValidationError):
        _chunk([])


def test_chunk_kind_parses_from_string():
    chunk = Chunk.model_validate(
        {"content": "x", "source": "expert:pas", "topic": "pas", "kind": "expert", "embedding": [1.0]}
    )
    assert chunk.kind is ChunkKind.EXPERT


def test_index_document_uses_created_at_alias():
    """Test IndexDocument serializes createdAt."""
    document = IndexDocument(version="2.0", created_at="2024-01-01T12:00:00Z", chunks=[_chunk([1.0, 0.0])])
    data = document.model_dump(mode="json", by_alias=True)

    assert data["createdAt"] == "2024-01-01T12:00:00Z"
    assert "created_at" not in data
    assert data["chunks"][0]["kind"] == "fetched"
    assert IndexDocument.model_validate(data).created_at == "2024-01-01T12:00:00Z"


def test_index_document_rejects_mixed_dimensions():
    with pytest.raises(ValidationError):
        IndexDocument(
            version="2.0",
            created_at="2024-01-01T12:00:00Z",
            chunks=[_chunk([1.0, 0.0]), _chunk([1.0, 0.0, 0.0])],
        )


def test_index_document_empty_dimension():
    document = IndexDocument(version="2.0", created_at="2024-01-01T12:00:00Z", chunks=[])
    assert document.dimension is None


def test_build_report_defaults():
    """Test BuildReport with default failure fields."""
    report = BuildReport(
        version="2.0",
        created_at="2024-01-01T12:00:00Z",
        output_path="kb/ig-index.json",
        expert_count=11,
        fetched_count=40,
        chunk_count=51,
    )

    assert report.failed_sources == []
    assert report.embedding_failures == 0
    assert report.per_topic == {}
