"""Runtime settings read from the environment."""

from __future__ import annotations

import os
from typing import Mapping, Optional

from pydantic import BaseModel

from .builder import DEFAULT_EMBED_DELAY, DEFAULT_FETCH_DELAY, RetryPolicy
from .chunker import DEFAULT_MAX_LEN, DEFAULT_MIN_LENGTH, DEFAULT_OVERLAP
from .fetcher import DEFAULT_TIMEOUT
from .retriever import DEFAULT_EXPERT_CAP, DEFAULT_TOP_K


class Settings(BaseModel):
    """Indexing and retrieval settings."""
    index_path: str = "./kb/ig-index.json"
    embed_model: str = "nomic-embed-text"
    ollama_base_url: str = "http://localhost:11434"

    max_len: int = DEFAULT_MAX_LEN
    overlap: int = DEFAULT_OVERLAP
    min_chunk_len: int = DEFAULT_MIN_LENGTH

    fetch_timeout: float = DEFAULT_TIMEOUT
    fetch_delay: float = DEFAULT_FETCH_DELAY
    embed_delay: float = DEFAULT_EMBED_DELAY
    embed_max_attempts: int = 3

    top_k: int = DEFAULT_TOP_K
    expert_cap: int = DEFAULT_EXPERT_CAP
    query_timeout: Optional[float] = 10.0

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from environment variables, keeping defaults for unset ones."""
        env = os.environ if environ is None else environ
        names = {
            "index_path": "FHIR_KB_INDEX_PATH",
            "embed_model": "EMBED_MODEL",
            "ollama_base_url": "OLLAMA_BASE_URL",
            "max_len": "MAX_LEN",
            "overlap": "OVERLAP",
            "min_chunk_len": "MIN_CHUNK_LEN",
            "fetch_timeout": "FETCH_TIMEOUT",
            "fetch_delay": "FETCH_DELAY",
            "embed_delay": "EMBED_DELAY",
            "embed_max_attempts": "EMBED_MAX_ATTEMPTS",
            "top_k": "TOP_K",
            "expert_cap": "EXPERT_CAP",
            "query_timeout": "QUERY_TIMEOUT",
        }
        values = {field: env[var] for field, var in names.items() if env.get(var)}
        return cls(**values)

    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(max_attempts=self.embed_max_attempts)
