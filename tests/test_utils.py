"""Tests for FHIR KB utilities."""

from fhir_kb.utils import bullet_list, html_to_text, normalize_text, shorten, unique


def test_normalize_text():
    """Test text normalization."""
    assert normalize_text("  hello   world  ") == "hello world"
    assert normalize_text("hello\u00a0world") == "hello world"
    assert normalize_text("line1\nline2") == "line1 line2"


def test_html_to_text_strips_chrome_blocks():
    html = (
        "<html><head><style>p { color: red; }</style><script>var x = 1;</script></head>"
        "<body><nav>Home | Profiles</nav><header>Banner</header>"
        "<p>Prior authorization uses <b>Claim</b> resources.</p>"
        "<aside>Sidebar</aside><footer>Footer</footer></body></html>"
    )
    assert html_to_text(html) == "Prior authorization uses Claim resources."


def test_html_to_text_decodes_entities():
    assert html_to_text("<p>A&nbsp;&lt;B&gt; &quot;C&quot; &#39;D&#39; &amp; E</p>") == "A <B> \"C\" 'D' & E"


def test_html_to_text_decodes_amp_last():
    assert html_to_text("&amp;lt;") == "&lt;"


def test_html_to_text_keeps_attributes_out_of_text():
    assert html_to_text('<p title="a > b">Claim resources are used.</p>') == "Claim resources are used."


def test_html_to_text_decodes_numeric_and_named_entities():
    assert html_to_text("<p>Payer&#8217;s data &mdash; here</p>") == "Payer’s data — here"


def test_html_to_text_collapses_whitespace():
    assert html_to_text("<div>\n  one\t\t<br/>two  </div>") == "one two"


def test_bullet_list():
    assert bullet_list(["a", "b"]) == "- a\n- b"
    assert bullet_list(["a"], marker="•") == "• a"
    assert bullet_list([]) == ""


def test_unique_keeps_order():
    assert unique(["pas", "crd", "pas", "dtr", "crd"]) == ["pas", "crd", "dtr"]


def test_shorten():
    assert shorten("short", 10) == "short"
    assert shorten("a" * 20, 10) == "a" * 10 + "..."
