"""Tests for fetching and chunking reference pages."""

import pytest

from fhir_kb.errors import FetchError
from fhir_kb.fetcher import USER_AGENT, fetch_and_chunk, fetch_text, make_session

from helpers import FakeSession, make_text

URL = "https://build.fhir.org/ig/HL7/davinci-epdx/index.html"


def test_make_session_sets_user_agent():
    session = make_session()
    assert session.headers["User-Agent"] == USER_AGENT


def test_fetch_text_returns_plain_text():
    session = FakeSession({URL: (200, "<html><nav>menu</nav><p>Payer &amp; member</p></html>")})
    assert fetch_text(URL, session=session) == "Payer & member"
    assert session.requested == [URL]


def test_fetch_text_raises_on_http_error():
    session = FakeSession({URL: (500, "Internal Server Error")})
    with pytest.raises(FetchError) as exc_info:
        fetch_text(URL, session=session)
    assert exc_info.value.url == URL
    assert exc_info.value.reason == "HTTP 500"


def test_fetch_text_raises_on_network_error():
    with pytest.raises(FetchError):
        fetch_text(URL, session=FakeSession())


def test_fetch_and_chunk_soft_fails():
    assert fetch_and_chunk(URL, "pdex", session=FakeSession({URL: (404, "")})) == []
    assert fetch_and_chunk(URL, "pdex", session=FakeSession()) == []


def test_fetch_and_chunk_splits_page(scenario_a_text):
    session = FakeSession({URL: (200, f"<html><body><p>{scenario_a_text}</p></body></html>")})

    drafts = fetch_and_chunk(URL, "pdex", session=session, max_len=1200, overlap=200)

    assert len(drafts) == 3
    assert all(draft.source == URL and draft.topic == "pdex" for draft in drafts)
    assert drafts[0].content[-200:] == drafts[1].content[:200]


def test_fetch_and_chunk_drops_tiny_pages():
    session = FakeSession({URL: (200, "<p>Redirecting.</p>")})
    assert fetch_and_chunk(URL, "pdex", session=session) == []


def test_fetch_and_chunk_passes_chunk_settings():
    session = FakeSession({URL: (200, f"<p>{make_text(20)}</p>")})
    drafts = fetch_and_chunk(URL, "pdex", session=session, max_len=400, overlap=0)
    assert len(drafts) == 7
    assert all(len(draft.content) <= 400 for draft in drafts)
