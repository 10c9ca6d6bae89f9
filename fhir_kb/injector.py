"""Format retrieved chunks and expert quibbles for prompt injection."""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence

from .knowledge import get_quibbles
from .schemas import ScoredChunk
from .utils import bullet_list, unique

QUIBBLES_PER_TOPIC = 2


def format_context(chunks: Sequence[ScoredChunk]) -> str:
    """Chunk contents in order, separated by blank lines."""
    return "\n\n".join(chunk.content.strip() for chunk in chunks)


def collect_quibbles(topics: Iterable[str], per_topic: int = QUIBBLES_PER_TOPIC) -> List[str]:
    """The first ``per_topic`` quibbles of each topic, deduplicated."""
    quibbles: List[str] = []
    for topic in unique(topics):
        quibbles.extend(get_quibbles(topic)[:per_topic])
    return unique(quibbles)


def build_quibbles_section(topics: Iterable[str], per_topic: int = QUIBBLES_PER_TOPIC) -> str:
    quibbles = collect_quibbles(topics, per_topic=per_topic)
    if not quibbles:
        return ""
    return (
        "\n\nTHE QUIBBLER - Expert-level details FHIR specialists will notice:\n"
        f"{bullet_list(quibbles, marker='•')}\n\n"
        "Incorporate these if they fit naturally. They demonstrate deep domain expertise.\n"
    )


def build_topic_quibbles(topic: str) -> str:
    """Every quibble for one topic as a standalone section."""
    quibbles = get_quibbles(topic)
    if not quibbles:
        return ""
    return (
        "\n\nTHE QUIBBLER - Expert-level details that FHIR specialists will notice:\n"
        f"{bullet_list(quibbles, marker='•')}\n\n"
        "Consider incorporating these details if they fit naturally in the diagram. "
        "These are not required but demonstrate deep domain knowledge.\n"
    )


def build_prompt_injection(chunks: Sequence[ScoredChunk], topics: Optional[Iterable[str]] = None) -> str:
    """
    Build the context block injected into a generation prompt.

    Args:
        chunks: Retrieved chunks, in the order they should appear
        topics: Topics whose quibbles to attach; defaults to the chunks' topics

    Returns:
        The injected text, or an empty string when there are no chunks
    """
    if not chunks:
        return ""

    topic_keys = unique(topics if topics is not None else (chunk.topic for chunk in chunks))
    return (
        "\n\nFHIR IMPLEMENTATION GUIDE CONTEXT (from official HL7 specifications):\n"
        "The following is authoritative content from the relevant FHIR Implementation Guides "
        f"({', '.join(topic_keys).upper()}).\n"
        "Use this information to ensure accuracy in your diagram:\n\n"
        "---\n"
        f"{format_context(chunks)}\n"
        "---\n\n"
        "IMPORTANT: Base your diagram on the workflow, resources, and operations described above. "
        "This is the source of truth for FHIR accuracy.\n"
        f"{build_quibbles_section(topic_keys)}"
    )
