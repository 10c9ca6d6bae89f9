"""Exception types for FHIR KB."""

from __future__ import annotations


class KnowledgeBaseError(Exception):
    """Base class for knowledge base errors."""
    pass


class FetchError(KnowledgeBaseError):
    """Raised when a reference document cannot be fetched."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"Fetch failed for {url}: {reason}")
        self.url = url
        self.reason = reason


class EmbeddingError(KnowledgeBaseError):
    """Raised when the embedding provider fails or returns no vector."""
    pass


class EmbeddingTimeoutError(EmbeddingError):
    """Raised when an embedding call exceeds its timeout."""
    pass


class DimensionMismatchError(KnowledgeBaseError):
    """Raised when vectors of different dimensionality are compared.

    This means the embedding model or provider changed without a reindex.
    """

    def __init__(self, expected: int, actual: int):
        super().__init__(
            f"Embedding dimensionality mismatch: expected {expected}, got {actual}. "
            "Rebuild the index with the current embedding model."
        )
        self.expected = expected
        self.actual = actual


class IndexFormatError(KnowledgeBaseError):
    """Raised when an index file is missing fields or is inconsistent."""
    pass


class UnknownTopicError(KeyError):
    """Raised when a topic key is not defined in the knowledge base."""
    pass
