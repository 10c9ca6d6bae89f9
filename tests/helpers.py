"""Fakes and builders shared by the tests."""

import hashlib
import math
import threading
import time
from typing import Dict, List, Optional, Sequence, Tuple

import requests
from langchain_core.embeddings import Embeddings

from fhir_kb.loader import KnowledgeIndex
from fhir_kb.schemas import Chunk, ChunkKind, IndexDocument


def hash_vector(text: str, dim: int = 8) -> List[float]:
    """Deterministic non-zero vector for a text."""
    digest = hashlib.sha1(text.encode("utf-8")).digest()
    return [byte / 255.0 + 0.01 for byte in digest[:dim]]


def unit_vector(score: float) -> List[float]:
    """2-d unit vector whose cosine with [1, 0] equals ``score``."""
    return [score, math.sqrt(max(0.0, 1.0 - score * score))]


def make_sentence(index: int, length: int = 100) -> str:
    """A sentence of exactly ``length`` characters ending with a period."""
    body = f"Sentence {index:02d} describes the payer exchange workflow" + " detail" * 200
    text = body[: length - 1]
    if text.endswith(" "):
        text = text[:-1] + "s"
    return text + "."


def make_text(count: int, length: int = 100) -> str:
    return " ".join(make_sentence(i, length) for i in range(count))


class FakeEmbeddings(Embeddings):
    """Embeddings client with fixed vectors for known texts."""

    def __init__(self, vectors: Optional[Dict[str, List[float]]] = None, dim: int = 8):
        self.vectors = vectors or {}
        self.dim = dim
        self.calls: List[str] = []

    def embed_query(self, text: str) -> List[float]:
        self.calls.append(text)
        if text in self.vectors:
            return list(self.vectors[text])
        return hash_vector(text, self.dim)

    def embed_documents(self, texts: List[str]) -> List[List[float]]:
        return [self.embed_query(text) for text in texts]


class FlakyEmbeddings(FakeEmbeddings):
    """Fails the first ``failures`` calls, or every call for texts containing ``poison``."""

    def __init__(self, failures: int = 0, poison: Optional[str] = None, dim: int = 8):
        super().__init__(dim=dim)
        self.failures = failures
        self.poison = poison

    def embed_query(self, text: str) -> List[float]:
        if self.failures > 0:
            self.failures -= 1
            raise RuntimeError("429 rate limited")
        if self.poison and self.poison in text:
            raise RuntimeError("provider error")
        return super().embed_query(text)


class SlowEmbeddings(FakeEmbeddings):
    def __init__(self, delay: float):
        super().__init__()
        self.delay = delay

    def embed_query(self, text: str) -> List[float]:
        time.sleep(self.delay)
        return super().embed_query(text)


class FakeResponse:
    def __init__(self, status_code: int, text: str = ""):
        self.status_code = status_code
        self.text = text

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 400


class FakeSession:
    """Stands in for requests.Session; unknown URLs raise a connection error."""

    def __init__(self, pages: Optional[Dict[str, Tuple[int, str]]] = None):
        self.pages = pages or {}
        self.requested: List[str] = []

    def get(self, url: str, timeout: float = None) -> FakeResponse:
        self.requested.append(url)
        if url not in self.pages:
            raise requests.ConnectionError(f"cannot reach {url}")
        status, body = self.pages[url]
        return FakeResponse(status, body)


def make_index(entries: Sequence[Tuple[str, ChunkKind, List[float]]], topic: str = "pdex") -> KnowledgeIndex:
    """Build an in-memory index from (content, kind, embedding) triples."""
    chunks = [
        Chunk(
            content=content,
            source=f"expert:{topic}" if kind is ChunkKind.EXPERT else f"https://example.org/{i}",
            topic=topic,
            kind=kind,
            embedding=embedding,
        )
        for i, (content, kind, embedding) in enumerate(entries)
    ]
    document = IndexDocument(version="2.0", created_at="2024-01-01T00:00:00Z", chunks=chunks)
    return KnowledgeIndex.from_document(document)


class HangingEmbeddings(FakeEmbeddings):
    """Blocks on texts starting with ``hang`` until ``release`` is set."""

    def __init__(self):
        super().__init__()
        self.release = threading.Event()

    def embed_query(self, text: str) -> List[float]:
        if text.startswith("hang"):
            self.release.wait(timeout=10)
        return super().embed_query(text)
