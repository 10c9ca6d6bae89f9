"""Embedding provider boundary."""

from __future__ import annotations

import math
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from typing import List, Optional

from langchain_core.embeddings import Embeddings

from .errors import EmbeddingError, EmbeddingTimeoutError


class Embedder:
    """
    Turn text into a fixed-length vector through a LangChain embeddings client.

    The same call is used for chunks at index time and for queries at
    retrieval time, so both sides live in one vector space. Swapping the
    client or model requires rebuilding the index.

    No retries happen here; see ``builder.embed_with_retry``.
    """

    def __init__(self, client: Embeddings, model: str = "", timeout: Optional[float] = None):
        self.client = client
        self.model = model
        self.timeout = timeout

    @property
    def name(self) -> str:
        """Model name for messages, falling back to the client class."""
        return self.model or type(self.client).__name__

    def embed(self, text: str, timeout: Optional[float] = None) -> List[float]:
        """
        Embed a single text.

        Args:
            text: Text to embed
            timeout: Seconds to wait for the provider; overrides the instance default

        Raises:
            EmbeddingTimeoutError: If the provider does not answer in time
            EmbeddingError: If the provider fails or returns an unusable vector
        """
        timeout = timeout if timeout is not None else self.timeout
        if timeout is None:
            vector = self._call(text)
        else:
            vector = self._call_with_timeout(text, timeout)

        if not vector:
            raise EmbeddingError(f"Embedding model {self.name} returned an empty vector")
        if not all(math.isfinite(value) for value in vector):
            raise EmbeddingError(f"Embedding model {self.name} returned non-finite values")
        return vector

    def _call_with_timeout(self, text: str, timeout: float) -> List[float]:
        # One worker per call: a hung provider call holds only its own thread
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="embed")
        try:
            future = executor.submit(self._call, text)
            try:
                return future.result(timeout=timeout)
            except FutureTimeout as exc:
                raise EmbeddingTimeoutError(
                    f"Embedding model {self.name} timed out after {timeout}s"
                ) from exc
        finally:
            executor.shutdown(wait=False)

    def _call(self, text: str) -> List[float]:
        try:
            return [float(value) for value in self.client.embed_query(text)]
        except Exception as exc:
            raise EmbeddingError(f"Embedding request to {self.name} failed: {exc}") from exc
