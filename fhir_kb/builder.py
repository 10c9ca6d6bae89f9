"""Build the knowledge index from curated topics and fetched IG pages."""

from __future__ import annotations

import json
import os
import tempfile
import time
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

import requests
from pydantic import BaseModel
from tqdm import tqdm

from .chunker import DEFAULT_MAX_LEN, DEFAULT_MIN_LENGTH, DEFAULT_OVERLAP
from .embedder import Embedder
from .errors import EmbeddingError
from .fetcher import DEFAULT_TIMEOUT, fetch_and_chunk, make_session
from .knowledge import TOPICS, build_expert_chunk
from .schemas import BuildReport, Chunk, ChunkDraft, ChunkKind, IndexDocument, SourceRef, Topic
from .sources import IG_SOURCES

INDEX_FORMAT_VERSION = "2.0"
DEFAULT_FETCH_DELAY = 0.1
DEFAULT_EMBED_DELAY = 0.05
INDEX_FILE_MODE = 0o644


class RetryPolicy(BaseModel):
    """Bounded retry schedule for embedding calls."""
    max_attempts: int = 3
    initial_delay: float = 1.0
    backoff: float = 2.0
    max_delay: float = 10.0

    def delays(self) -> Iterator[float]:
        """Yield the wait before each retry (one fewer than max_attempts)."""
        delay = self.initial_delay
        for _ in range(max(self.max_attempts - 1, 0)):
            yield min(delay, self.max_delay)
            delay *= self.backoff


def embed_with_retry(
    embedder: Embedder,
    text: str,
    policy: Optional[RetryPolicy] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> List[float]:
    """
    Embed text, retrying provider failures on the policy's backoff schedule.

    Raises:
        EmbeddingError: After the last attempt fails
    """
    policy = policy or RetryPolicy()
    delays = policy.delays()
    attempt = 0
    while True:
        attempt += 1
        try:
            return embedder.embed(text)
        except EmbeddingError as exc:
            delay = next(delays, None)
            if delay is None:
                raise EmbeddingError(f"Embedding failed after {attempt} attempt(s): {exc}") from exc
            sleep(delay)


def build_expert_drafts(topics: Iterable[Topic]) -> List[ChunkDraft]:
    """One expert chunk per topic."""
    return [
        ChunkDraft(
            content=build_expert_chunk(topic),
            source=f"expert:{topic.key}",
            topic=topic.key,
            kind=ChunkKind.EXPERT,
        )
        for topic in topics
    ]


def collect_fetched_drafts(
    sources: Sequence[SourceRef],
    session: Optional[requests.Session] = None,
    timeout: float = DEFAULT_TIMEOUT,
    max_len: int = DEFAULT_MAX_LEN,
    overlap: int = DEFAULT_OVERLAP,
    min_length: int = DEFAULT_MIN_LENGTH,
    delay: float = DEFAULT_FETCH_DELAY,
    sleep: Callable[[float], None] = time.sleep,
) -> Tuple[List[ChunkDraft], List[str]]:
    """
    Fetch and chunk every source.

    Returns:
        (drafts, urls_that_yielded_nothing)
    """
    session = session or make_session()
    drafts: List[ChunkDraft] = []
    failed: List[str] = []

    progress = tqdm(sources, desc="Fetching sources")
    for index, source in enumerate(progress):
        progress.set_postfix_str(source.topic)
        if index and delay:
            sleep(delay)
        chunks = fetch_and_chunk(
            source.url,
            source.topic,
            session=session,
            timeout=timeout,
            max_len=max_len,
            overlap=overlap,
            min_length=min_length,
        )
        if not chunks:
            failed.append(source.url)
            tqdm.write(f"[WARN] no chunks from: {source.url}")
            continue
        drafts.extend(chunks)

    return drafts, failed


def embed_drafts(
    drafts: Sequence[ChunkDraft],
    embedder: Embedder,
    policy: Optional[RetryPolicy] = None,
    delay: float = DEFAULT_EMBED_DELAY,
    sleep: Callable[[float], None] = time.sleep,
) -> Tuple[List[Chunk], int]:
    """
    Embed drafts one at a time; failures are skipped and counted.

    A vector whose length differs from the first accepted vector is treated
    as a failure so the result always has uniform dimensionality.

    Returns:
        (embedded_chunks, failure_count)
    """
    chunks: List[Chunk] = []
    failures = 0
    dimension: Optional[int] = None

    with tqdm(total=len(drafts), desc="Embedding chunks") as progress:
        for index, draft in enumerate(drafts):
            if index and delay:
                sleep(delay)
            try:
                vector = embed_with_retry(embedder, draft.content, policy=policy, sleep=sleep)
            except EmbeddingError as exc:
                failures += 1
                tqdm.write(f"[WARN] embedding failed; skipped chunk: {draft.source} ({exc})")
                progress.update(1)
                continue

            if dimension is None:
                dimension = len(vector)
            elif len(vector) != dimension:
                failures += 1
                tqdm.write(
                    f"[WARN] embedding dimension {len(vector)} != {dimension}; skipped chunk: {draft.source}"
                )
                progress.update(1)
                continue

            chunks.append(Chunk(**draft.model_dump(), embedding=vector))
            progress.update(1)

    return chunks, failures


def write_index(document: IndexDocument, output_path: str) -> int:
    """
    Write the index as one JSON document, replacing any previous file.

    The document is written to a temporary file in the same directory and
    moved over the target, so readers never see a partial index.

    Returns:
        Size of the written file in bytes
    """
    out_dir = os.path.dirname(os.path.abspath(output_path))
    os.makedirs(out_dir, exist_ok=True)

    fd, tmp_path = tempfile.mkstemp(prefix=".index-", suffix=".json", dir=out_dir)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            json.dump(document.model_dump(mode="json", by_alias=True), handle, ensure_ascii=False)
        os.chmod(tmp_path, INDEX_FILE_MODE)
        os.replace(tmp_path, output_path)
    except BaseException:
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise

    return os.path.getsize(output_path)


def count_by_topic(chunks: Iterable[Chunk]) -> Dict[str, Dict[str, int]]:
    """Chunk counts per topic, split by kind."""
    counts: Dict[str, Dict[str, int]] = {}
    for chunk in chunks:
        entry = counts.setdefault(chunk.topic, {kind.value: 0 for kind in ChunkKind})
        entry[chunk.kind.value] += 1
    return counts


def build_index(
    output_path: str,
    embedder: Embedder,
    topics: Sequence[Topic] = TOPICS,
    sources: Sequence[SourceRef] = IG_SOURCES,
    session: Optional[requests.Session] = None,
    max_len: int = DEFAULT_MAX_LEN,
    overlap: int = DEFAULT_OVERLAP,
    min_length: int = DEFAULT_MIN_LENGTH,
    fetch_timeout: float = DEFAULT_TIMEOUT,
    fetch_delay: float = DEFAULT_FETCH_DELAY,
    embed_delay: float = DEFAULT_EMBED_DELAY,
    retry_policy: Optional[RetryPolicy] = None,
    sleep: Callable[[float], None] = time.sleep,
    version: str = INDEX_FORMAT_VERSION,
) -> BuildReport:
    """
    Build the knowledge index and write it to ``output_path``.

    Args:
        output_path: Target JSON file (replaced wholesale)
        embedder: Embedding boundary used for every chunk
        topics: Curated topics; each yields one expert chunk
        sources: Reference pages to fetch and chunk
        session: HTTP session for fetching (created if omitted)
        max_len: Target maximum chunk length
        overlap: Chunk overlap in characters
        min_length: Minimum trimmed chunk length kept
        fetch_timeout: Per-request timeout in seconds
        fetch_delay: Pause between fetches
        embed_delay: Pause between embedding calls
        retry_policy: Retry schedule for embedding failures
        sleep: Sleep function (injectable for tests)
        version: Index format version tag

    Returns:
        BuildReport with counts and output details

    Raises:
        OSError: If the index file cannot be written
    """
    start_time = time.perf_counter()

    print("Step 1: Adding expert knowledge chunks...")
    drafts = build_expert_drafts(topics)
    print(f"  expert chunks: {len(drafts)}")

    print("Step 2: Fetching supplemental IG content...")
    fetched, failed_sources = collect_fetched_drafts(
        sources,
        session=session,
        timeout=fetch_timeout,
        max_len=max_len,
        overlap=overlap,
        min_length=min_length,
        delay=fetch_delay,
        sleep=sleep,
    )
    drafts.extend(fetched)
    print(
        "Scan summary: "
        f"total={len(drafts)}, expert={len(drafts) - len(fetched)}, fetched={len(fetched)}, "
        f"failed_sources={len(failed_sources)}"
    )

    print("Step 3: Embedding chunks...")
    chunks, failures = embed_drafts(
        drafts,
        embedder,
        policy=retry_policy,
        delay=embed_delay,
        sleep=sleep,
    )
    if failures:
        tqdm.write(f"[WARN] embedding failures: {failures} chunk(s) skipped.")

    created_at = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
    document = IndexDocument(version=version, created_at=created_at, chunks=chunks)

    print("Step 4: Writing index...")
    size = write_index(document, output_path)

    per_topic = count_by_topic(chunks)
    expert_count = sum(1 for chunk in chunks if chunk.kind is ChunkKind.EXPERT)
    report = BuildReport(
        version=version,
        created_at=created_at,
        output_path=output_path,
        expert_count=expert_count,
        fetched_count=len(chunks) - expert_count,
        chunk_count=len(chunks),
        per_topic=per_topic,
        failed_sources=failed_sources,
        embedding_failures=failures,
        file_size_bytes=size,
    )

    print("Chunks by topic:")
    for topic_key, counts in per_topic.items():
        print(
            f"  {topic_key}: {counts['expert']} expert + {counts['fetched']} fetched "
            f"= {counts['expert'] + counts['fetched']} total"
        )
    elapsed = time.perf_counter() - start_time
    print(
        "Build summary: "
        f"chunks={report.chunk_count}, expert={report.expert_count}, fetched={report.fetched_count}, "
        f"embedding_failures={failures}"
    )
    print(f"Build summary: duration={elapsed:.1f}s, size={size / 1024 / 1024:.2f} MB, output={output_path}")

    return report
