"""Tests for similarity scoring and expert-priority retrieval."""

import logging

import pytest

from fhir_kb.embedder import Embedder
from fhir_kb.errors import DimensionMismatchError, EmbeddingError
from fhir_kb.retriever import ZERO_VECTOR_SCORE, Retriever, blend, cosine_similarity, retrieve_context
from fhir_kb.schemas import ChunkKind, ScoredChunk

from helpers import FakeEmbeddings, FlakyEmbeddings, SlowEmbeddings, make_index, unit_vector

EXPERT = ChunkKind.EXPERT
FETCHED = ChunkKind.FETCHED
QUERY = "payer to payer exchange"


def _retriever(entries, expert_cap=2, embeddings=None):
    embeddings = embeddings or FakeEmbeddings({QUERY: [1.0, 0.0]})
    return Retriever(make_index(entries), Embedder(embeddings), expert_cap=expert_cap)


def _scored(kind, score, name=None):
    return ScoredChunk(content=name or f"{kind.value}-{score}", source="s", topic="pdex", kind=kind, score=score)


def test_cosine_similarity_basics():
    a = [0.3, -1.2, 4.0]
    b = [2.0, 0.5, -0.1]
    assert cosine_similarity(a, a) == pytest.approx(1.0)
    assert cosine_similarity(a, b) == pytest.approx(cosine_similarity(b, a))
    assert cosine_similarity([1.0, 0.0], [-1.0, 0.0]) == pytest.approx(-1.0)
    assert cosine_similarity([1.0, 0.0], [0.0, 1.0]) == pytest.approx(0.0)


def test_cosine_similarity_zero_vector():
    assert cosine_similarity([0.0, 0.0], [1.0, 0.0]) == ZERO_VECTOR_SCORE
    assert cosine_similarity([1.0, 0.0], [0.0, 0.0]) == ZERO_VECTOR_SCORE


def test_cosine_similarity_dimension_mismatch():
    with pytest.raises(DimensionMismatchError):
        cosine_similarity([1.0, 0.0], [1.0, 0.0, 0.0])


def test_expert_priority_blend():
    """A low-scoring expert chunk still makes the cut ahead of weaker fetched ones."""
    retriever = _retriever(
        [("expert", EXPERT, unit_vector(0.40))]
        + [(f"fetched {s}", FETCHED, unit_vector(s)) for s in (0.95, 0.90, 0.85, 0.80, 0.75)],
        expert_cap=2,
    )

    results = retriever.retrieve(QUERY, k=3)

    assert [r.content for r in results] == ["fetched 0.95", "fetched 0.9", "expert"]
    assert [r.kind for r in results] == [FETCHED, FETCHED, EXPERT]
    assert [r.score for r in results] == pytest.approx([0.95, 0.90, 0.40], abs=1e-5)


def test_blend_reserves_expert_slots():
    scored = [
        _scored(FETCHED, 0.9),
        _scored(FETCHED, 0.8),
        _scored(FETCHED, 0.75),
        _scored(FETCHED, 0.7),
        _scored(FETCHED, 0.65),
        _scored(EXPERT, 0.5),
        _scored(EXPERT, 0.45),
        _scored(EXPERT, 0.1),
    ]

    selected = blend(scored, k=5, expert_cap=2)

    assert len(selected) == 5
    assert [chunk.content for chunk in selected] == [
        "fetched-0.9",
        "fetched-0.8",
        "fetched-0.75",
        "expert-0.5",
        "expert-0.45",
    ]


def test_blend_backfills_with_experts():
    scored = [_scored(EXPERT, 0.6), _scored(EXPERT, 0.5), _scored(EXPERT, 0.4), _scored(FETCHED, 0.3)]

    selected = blend(scored, k=4, expert_cap=1)

    assert [chunk.score for chunk in selected] == [0.6, 0.5, 0.4, 0.3]


def test_blend_length_is_min_of_k_and_total():
    scored = [_scored(FETCHED, 0.3), _scored(EXPERT, 0.2)]
    assert len(blend(scored, k=5)) == 2
    assert blend(scored, k=0) == []


def test_blend_selects_only_experts_when_k_is_small():
    scored = [_scored(FETCHED, 0.9), _scored(EXPERT, 0.2), _scored(EXPERT, 0.1)]
    assert [chunk.kind for chunk in blend(scored, k=1, expert_cap=2)] == [EXPERT]


def test_results_sorted_by_score():
    retriever = _retriever([(f"c{i}", FETCHED, unit_vector(i / 10)) for i in range(10)])
    scores = [r.score for r in retriever.retrieve(QUERY, k=5)]
    assert scores == sorted(scores, reverse=True)
    assert len(scores) == 5


def test_zero_vector_chunk_scores_lowest():
    retriever = _retriever([("zero", FETCHED, [0.0, 0.0]), ("negative", FETCHED, unit_vector(-0.5))])

    results = retriever.retrieve(QUERY, k=2)

    assert [r.content for r in results] == ["negative", "zero"]
    assert results[-1].score == ZERO_VECTOR_SCORE


def test_zero_query_vector():
    embeddings = FakeEmbeddings({QUERY: [0.0, 0.0]})
    retriever = _retriever([("a", FETCHED, unit_vector(0.5))], embeddings=embeddings)
    assert [r.score for r in retriever.retrieve(QUERY, k=1)] == [ZERO_VECTOR_SCORE]


def test_empty_index_skips_embedding():
    embeddings = FakeEmbeddings()
    retriever = _retriever([], embeddings=embeddings)

    assert retriever.retrieve(QUERY) == []
    assert embeddings.calls == []


def test_non_positive_k():
    embeddings = FakeEmbeddings({QUERY: [1.0, 0.0]})
    retriever = _retriever([("a", FETCHED, unit_vector(0.5))], embeddings=embeddings)
    assert retriever.retrieve(QUERY, k=0) == []
    assert embeddings.calls == []


def test_dimension_mismatch_raises():
    embeddings = FakeEmbeddings({QUERY: [1.0, 0.0, 0.0]})
    retriever = _retriever([("a", FETCHED, unit_vector(0.5))], embeddings=embeddings)
    with pytest.raises(DimensionMismatchError):
        retriever.retrieve(QUERY)


def test_embedding_failure_propagates():
    retriever = _retriever([("a", FETCHED, unit_vector(0.5))], embeddings=FlakyEmbeddings(failures=1))
    with pytest.raises(EmbeddingError):
        retriever.retrieve(QUERY)


def test_retrieve_context(caplog):
    retriever = _retriever(
        [
            ("Expert PDex block.", EXPERT, unit_vector(0.5)),
            ("Fetched PDex page text.", FETCHED, unit_vector(0.9)),
        ]
    )

    with caplog.at_level(logging.INFO, logger="fhir_kb.retriever"):
        result = retrieve_context(retriever, QUERY, k=2)

    assert result.context == "Fetched PDex page text.\n\nExpert PDex block."
    assert result.topics == ["pdex"]
    assert result.sources == ["https://example.org/1", "expert:pdex"]
    assert len(result.chunks) == 2
    assert "1 expert, 1 fetched" in caplog.text


def test_retrieve_context_degrades_on_embedding_failure(caplog):
    retriever = _retriever([("a", FETCHED, unit_vector(0.5))], embeddings=FlakyEmbeddings(failures=1))

    result = retrieve_context(retriever, QUERY)

    assert result.context == ""
    assert result.chunks == []
    assert "continuing without context" in caplog.text


def test_retrieve_context_degrades_on_timeout():
    retriever = _retriever([("a", FETCHED, unit_vector(0.5))], embeddings=SlowEmbeddings(delay=0.5))
    assert retrieve_context(retriever, QUERY, timeout=0.05).chunks == []


def test_retrieve_context_propagates_dimension_mismatch():
    embeddings = FakeEmbeddings({QUERY: [1.0]})
    retriever = _retriever([("a", FETCHED, unit_vector(0.5))], embeddings=embeddings)
    with pytest.raises(DimensionMismatchError):
        retrieve_context(retriever, QUERY)
