"""Tests for sentence-aware chunking."""

from fhir_kb.chunker import chunk_text, split_sentences
from fhir_kb.schemas import ChunkKind

from helpers import make_sentence, make_text


def _contents(text, **kwargs):
    return [draft.content for draft in chunk_text(text, source="src", topic="pdex", **kwargs)]


def test_split_sentences():
    assert split_sentences("One. Two!  Three?\nFour") == ["One.", "Two!", "Three?", "Four"]
    assert split_sentences("   ") == []


def test_empty_text_yields_nothing():
    assert chunk_text("", source="src", topic="pdex") == []


def test_short_text_below_minimum_is_dropped():
    assert _contents("Too short to keep.") == []


def test_single_chunk_when_text_fits():
    text = make_text(5)
    assert _contents(text) == [text]


def test_three_chunks_with_exact_overlap(scenario_a_text):
    """3000 chars at 1200/200 split into three chunks sharing 200-char overlaps."""
    assert len(scenario_a_text) == 3000

    chunks = _contents(scenario_a_text, max_len=1200, overlap=200)

    assert len(chunks) == 3
    assert [len(chunk) for chunk in chunks] == [1110, 1109, 1181]
    for i in range(len(chunks) - 1):
        assert chunks[i][-200:] == chunks[i + 1][:200]
    assert chunks[0].startswith(make_sentence(0))
    assert chunks[-1].endswith(make_sentence(28, 172))


def test_chunks_respect_max_len():
    chunks = _contents(make_text(60, length=90), max_len=500, overlap=50)
    assert len(chunks) > 1
    assert all(len(chunk) <= 500 for chunk in chunks)


def test_oversized_sentence_becomes_its_own_chunk():
    long_sentence = make_sentence(1, 700)
    text = " ".join([make_sentence(0, 150), long_sentence, make_sentence(2, 150)])

    chunks = _contents(text, max_len=500, overlap=0)

    assert chunks == [make_sentence(0, 150), long_sentence, make_sentence(2, 150)]


def test_zero_overlap_has_no_seed():
    chunks = _contents(make_text(12), max_len=500, overlap=0)
    assert all(chunk.startswith("Sentence") for chunk in chunks)


def test_chunk_metadata():
    drafts = chunk_text(make_text(3), source="https://example.org/page", topic="crd")
    assert len(drafts) == 1
    assert drafts[0].source == "https://example.org/page"
    assert drafts[0].topic == "crd"
    assert drafts[0].kind is ChunkKind.FETCHED


def test_chunking_is_deterministic(scenario_a_text):
    assert _contents(scenario_a_text) == _contents(scenario_a_text)
