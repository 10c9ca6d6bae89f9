"""Utility functions for text handling."""

from __future__ import annotations

from typing import Iterable, List

from bs4 import BeautifulSoup

# Elements whose content is page chrome rather than guide text
_STRIP_TAGS = ["script", "style", "nav", "header", "footer", "aside"]


def normalize_text(text: str) -> str:
    """Normalize whitespace in text."""
    return " ".join(text.replace("\u00a0", " ").split())


def html_to_text(html: str) -> str:
    """Reduce an HTML page to plain text."""
    soup = BeautifulSoup(html, "html.parser")
    for element in soup(_STRIP_TAGS):
        element.decompose()
    return normalize_text(soup.get_text(" "))


def bullet_list(items: Iterable[str], marker: str = "-") -> str:
    """Render items as a bulleted list, one per line."""
    return "\n".join(f"{marker} {item}" for item in items)


def unique(items: Iterable[str]) -> List[str]:
    """Deduplicate while keeping first-seen order."""
    seen = set()
    result: List[str] = []
    for item in items:
        if item in seen:
            continue
        seen.add(item)
        result.append(item)
    return result


def shorten(text: str, limit: int = 200) -> str:
    """Truncate text to limit with ellipsis."""
    if len(text) <= limit:
        return text
    return text[:limit].rstrip() + "..."
