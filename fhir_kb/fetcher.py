"""Fetch reference documents and reduce them to chunked plain text."""

from __future__ import annotations

import logging
from typing import List, Optional

import requests

from .chunker import DEFAULT_MAX_LEN, DEFAULT_MIN_LENGTH, DEFAULT_OVERLAP, chunk_text
from .errors import FetchError
from .schemas import ChunkDraft
from .utils import html_to_text

logger = logging.getLogger(__name__)

USER_AGENT = "FHIR-KB-Indexer/2.0"
DEFAULT_TIMEOUT = 20.0


def make_session(user_agent: str = USER_AGENT) -> requests.Session:
    """Create an HTTP session that identifies the indexer."""
    session = requests.Session()
    session.headers.update({"User-Agent": user_agent})
    return session


def fetch_text(
    url: str,
    session: Optional[requests.Session] = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> str:
    """
    Fetch a URL and return its plain text.

    Raises:
        FetchError: On network failure or a non-success HTTP status
    """
    session = session or make_session()
    try:
        response = session.get(url, timeout=timeout)
    except requests.RequestException as exc:
        raise FetchError(url, str(exc)) from exc

    if not response.ok:
        raise FetchError(url, f"HTTP {response.status_code}")

    return html_to_text(response.text)


def fetch_and_chunk(
    url: str,
    topic: str,
    session: Optional[requests.Session] = None,
    timeout: float = DEFAULT_TIMEOUT,
    max_len: int = DEFAULT_MAX_LEN,
    overlap: int = DEFAULT_OVERLAP,
    min_length: int = DEFAULT_MIN_LENGTH,
) -> List[ChunkDraft]:
    """Fetch a reference document and chunk it; failures yield no chunks."""
    try:
        text = fetch_text(url, session=session, timeout=timeout)
    except FetchError as exc:
        logger.warning("Skipping source %s: %s", url, exc.reason)
        return []

    chunks = chunk_text(
        text,
        source=url,
        topic=topic,
        max_len=max_len,
        overlap=overlap,
        min_length=min_length,
    )
    logger.info("Fetched %s: %d chars, %d chunks", url, len(text), len(chunks))
    return chunks
