"""Tests for building and writing the index."""

import json
import os

import pytest

from fhir_kb.builder import (
    INDEX_FILE_MODE,
    INDEX_FORMAT_VERSION,
    RetryPolicy,
    build_expert_drafts,
    build_index,
    collect_fetched_drafts,
    count_by_topic,
    embed_drafts,
    embed_with_retry,
)
from fhir_kb.embedder import Embedder
from fhir_kb.errors import EmbeddingError
from fhir_kb.knowledge import TOPICS, get_topic
from fhir_kb.loader import load_index
from fhir_kb.schemas import ChunkDraft, ChunkKind, SourceRef

from helpers import FakeEmbeddings, FakeSession, FlakyEmbeddings, hash_vector, make_text

PAS_BASE = "https://build.fhir.org/ig/HL7/davinci-pas"
PAS_SOURCES = [
    SourceRef(url=f"{PAS_BASE}/index.html", topic="pas"),
    SourceRef(url=f"{PAS_BASE}/usecases.html", topic="pas"),
    SourceRef(url=f"{PAS_BASE}/specification.html", topic="pas"),
]


def _pas_session():
    page = f"<html><body><p>{make_text(15)}</p></body></html>"
    return FakeSession(
        {
            PAS_SOURCES[0].url: (200, page),
            PAS_SOURCES[1].url: (500, "Internal Server Error"),
            PAS_SOURCES[2].url: (200, page),
        }
    )


class DriftingEmbeddings(FakeEmbeddings):
    """Switches to a smaller vector size after ``switch_after`` calls."""

    def __init__(self, switch_after: int):
        super().__init__()
        self.switch_after = switch_after

    def embed_query(self, text):
        vector = super().embed_query(text)
        if len(self.calls) > self.switch_after:
            return vector[:4]
        return vector


def _build(tmp_path, embedder, session=None, name="ig-index.json", **kwargs):
    kwargs.setdefault("topics", [get_topic("pas")])
    kwargs.setdefault("sources", PAS_SOURCES)
    return build_index(
        str(tmp_path / name),
        embedder,
        session=session if session is not None else _pas_session(),
        fetch_delay=0,
        embed_delay=0,
        sleep=lambda _: None,
        **kwargs,
    )


def test_retry_policy_delays():
    policy = RetryPolicy(max_attempts=5, initial_delay=1.0, backoff=2.0, max_delay=5.0)
    assert list(policy.delays()) == [1.0, 2.0, 4.0, 5.0]
    assert list(RetryPolicy(max_attempts=1).delays()) == []


def test_embed_with_retry_recovers(no_sleep):
    embedder = Embedder(FlakyEmbeddings(failures=2))
    vector = embed_with_retry(embedder, "text", sleep=no_sleep.append)
    assert vector == hash_vector("text")
    assert no_sleep == [1.0, 2.0]


def test_embed_with_retry_gives_up(no_sleep):
    embedder = Embedder(FlakyEmbeddings(failures=5))
    with pytest.raises(EmbeddingError, match="after 3 attempt"):
        embed_with_retry(embedder, "text", sleep=no_sleep.append)
    assert len(no_sleep) == 2


def test_build_expert_drafts():
    drafts = build_expert_drafts(TOPICS)
    assert len(drafts) == len(TOPICS)
    assert all(draft.kind is ChunkKind.EXPERT for draft in drafts)
    assert drafts[0].source == f"expert:{TOPICS[0].key}"
    assert drafts[0].content.startswith(f"[FHIR IG: {TOPICS[0].name}]")


def test_collect_fetched_drafts_reports_failures(no_sleep):
    drafts, failed = collect_fetched_drafts(PAS_SOURCES, session=_pas_session(), delay=0.1, sleep=no_sleep.append)

    assert failed == [PAS_SOURCES[1].url]
    assert {draft.source for draft in drafts} == {PAS_SOURCES[0].url, PAS_SOURCES[2].url}
    assert no_sleep == [0.1, 0.1]


def test_embed_drafts_skips_failures():
    drafts = [
        ChunkDraft(content="good text", source="a", topic="pas"),
        ChunkDraft(content="bad text", source="b", topic="pas"),
        ChunkDraft(content="more good text", source="c", topic="pas"),
    ]
    embedder = Embedder(FlakyEmbeddings(poison="bad"))

    chunks, failures = embed_drafts(drafts, embedder, policy=RetryPolicy(max_attempts=2), delay=0, sleep=lambda _: None)

    assert failures == 1
    assert [chunk.source for chunk in chunks] == ["a", "c"]


def test_embed_drafts_skips_dimension_drift():
    drafts = [ChunkDraft(content=f"text {i}", source=str(i), topic="pas") for i in range(4)]

    chunks, failures = embed_drafts(drafts, Embedder(DriftingEmbeddings(switch_after=2)), delay=0)

    assert failures == 2
    assert {chunk.dimension for chunk in chunks} == {8}


def test_build_with_one_failed_source(tmp_path):
    """A 500 on one of three sources still yields expert and fetched chunks."""
    report = _build(tmp_path, Embedder(FakeEmbeddings()))

    assert report.failed_sources == [PAS_SOURCES[1].url]
    assert report.expert_count == 1
    assert report.fetched_count == 4
    assert report.chunk_count == 5
    assert report.per_topic == {"pas": {"expert": 1, "fetched": 4}}

    index = load_index(report.output_path)
    assert len(index) == 5
    assert index.count(ChunkKind.EXPERT) == 1
    sources = {chunk.source for chunk in index.chunks}
    assert PAS_SOURCES[1].url not in sources
    assert "expert:pas" in sources


def test_build_writes_expected_json(tmp_path):
    report = _build(tmp_path, Embedder(FakeEmbeddings()))

    with open(report.output_path, encoding="utf-8") as f:
        data = json.load(f)

    assert data["version"] == INDEX_FORMAT_VERSION
    assert data["createdAt"] == report.created_at
    assert data["createdAt"].endswith("Z")
    assert set(data["chunks"][0]) == {"content", "source", "topic", "kind", "embedding"}
    assert data["chunks"][0]["kind"] == "expert"
    assert report.file_size_bytes == os.path.getsize(report.output_path)


def test_index_file_is_readable_by_others(tmp_path):
    report = _build(tmp_path, Embedder(FakeEmbeddings()))
    assert os.stat(report.output_path).st_mode & 0o777 == INDEX_FILE_MODE


def test_build_when_every_embedding_fails(tmp_path):
    embedder = Embedder(FlakyEmbeddings(failures=10 ** 6))

    report = _build(tmp_path, embedder, retry_policy=RetryPolicy(max_attempts=2))

    assert report.chunk_count == 0
    assert report.embedding_failures == 5
    index = load_index(report.output_path)
    assert len(index) == 0
    assert index.dimension is None


def test_rebuild_replaces_index(tmp_path):
    embedder = Embedder(FakeEmbeddings())
    first = _build(tmp_path, embedder)
    first_chunks = load_index(first.output_path).chunks

    second = _build(tmp_path, embedder)
    second_chunks = load_index(second.output_path).chunks

    assert first.output_path == second.output_path
    assert first_chunks == second_chunks
    assert [name for name in os.listdir(tmp_path)] == ["ig-index.json"]


def test_build_write_failure_raises(tmp_path):
    target = tmp_path / "taken"
    target.mkdir()

    with pytest.raises(OSError):
        _build(tmp_path, Embedder(FakeEmbeddings()), name="taken")

    assert os.listdir(tmp_path) == ["taken"]


def test_count_by_topic(tmp_path):
    report = _build(
        tmp_path,
        Embedder(FakeEmbeddings()),
        topics=[get_topic("pas"), get_topic("crd")],
    )
    counts = count_by_topic(load_index(report.output_path).chunks)
    assert counts == {"pas": {"expert": 1, "fetched": 4}, "crd": {"expert": 1, "fetched": 0}}
