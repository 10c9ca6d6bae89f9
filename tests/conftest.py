"""Shared test fixtures for FHIR KB."""

from typing import List

import pytest

from fhir_kb.embedder import Embedder

from helpers import FakeEmbeddings, make_sentence


@pytest.fixture
def no_sleep() -> List[float]:
    """Collects requested sleeps; pass ``no_sleep.append`` as the sleep function."""
    return []


@pytest.fixture
def fake_embedder() -> Embedder:
    return Embedder(FakeEmbeddings(), model="fake")


@pytest.fixture
def scenario_a_text() -> str:
    """3000 characters: 28 sentences of 100 chars and one of 172."""
    sentences = [make_sentence(i) for i in range(28)] + [make_sentence(28, 172)]
    return " ".join(sentences)
