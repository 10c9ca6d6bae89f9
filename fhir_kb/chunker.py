"""Split plain text into bounded, overlapping chunks."""

from __future__ import annotations

import re
from typing import List

from .schemas import ChunkDraft, ChunkKind

DEFAULT_MAX_LEN = 1200
DEFAULT_OVERLAP = 200
DEFAULT_MIN_LENGTH = 100

# Approximate: abbreviations and decimals are split like any other boundary
_SENTENCE_BOUNDARY_RE = re.compile(r"(?<=[.!?])\s+")


def split_sentences(text: str) -> List[str]:
    """Split text on terminal punctuation followed by whitespace."""
    return [piece for piece in _SENTENCE_BOUNDARY_RE.split(text.strip()) if piece]


def chunk_text(
    text: str,
    source: str,
    topic: str,
    max_len: int = DEFAULT_MAX_LEN,
    overlap: int = DEFAULT_OVERLAP,
    min_length: int = DEFAULT_MIN_LENGTH,
) -> List[ChunkDraft]:
    """
    Accumulate sentences into chunks of at most ``max_len`` characters.

    When the next sentence would overflow the buffer, the buffer is closed and
    a new one starts with its last ``overlap`` characters followed by that
    sentence. Closed buffers whose trimmed length does not exceed
    ``min_length`` are discarded. A sentence longer than ``max_len`` becomes a
    chunk of its own instead of being cut.

    Emitted content is the buffer verbatim, so for consecutive chunks
    ``chunks[i].content[-overlap:]`` is a prefix of ``chunks[i + 1].content``.

    Args:
        text: Plain text (already stripped of markup)
        source: Provenance of the text, usually its URL
        topic: Topic key the text belongs to
        max_len: Target maximum chunk length in characters
        overlap: Characters carried over from the previous chunk
        min_length: Chunks at or below this trimmed length are dropped

    Returns:
        Ordered list of fetched-kind chunk drafts
    """
    drafts: List[ChunkDraft] = []

    def emit(buffer: str) -> None:
        if len(buffer.strip()) > min_length:
            drafts.append(
                ChunkDraft(content=buffer, source=source, topic=topic, kind=ChunkKind.FETCHED)
            )

    buffer = ""
    for sentence in split_sentences(text):
        if buffer and len(buffer) + 1 + len(sentence) > max_len:
            emit(buffer)
            seed = buffer[-overlap:] if overlap > 0 else ""
            buffer = f"{seed} {sentence}" if seed else sentence
        elif buffer:
            buffer = f"{buffer} {sentence}"
        else:
            buffer = sentence

    if buffer:
        emit(buffer)

    return drafts
