"""Tests for the site model and retry policy."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from kroki_embed.core.models import (
    Document,
    DocumentKind,
    KrokiSettings,
    OutputFormat,
    RetryPolicy,
    Site,
)
from kroki_embed.pipeline import is_embeddable


class TestOutputFormat:
    @pytest.mark.parametrize(
        "suffix, expected",
        [
            (".html", OutputFormat.HTML),
            (".HTM", OutputFormat.HTML),
            ("xml", OutputFormat.XML),
            (".json", OutputFormat.JSON),
            (".css", OutputFormat.OTHER),
            ("", OutputFormat.OTHER),
        ],
    )
    def test_from_suffix(self, suffix, expected):
        assert OutputFormat.from_suffix(suffix) == expected


class TestDocument:
    def test_defaults(self):
        doc = Document(name="index.html")
        assert doc.output_format == OutputFormat.HTML
        assert doc.kind == DocumentKind.PAGE
        assert doc.writable is True
        assert doc.content == ""

    def test_from_path(self, tmp_path):
        sub = tmp_path / "guide"
        sub.mkdir()
        page = sub / "intro.html"
        page.write_text("<p>hi</p>", encoding="utf-8")

        doc = Document.from_path(page, root=tmp_path)
        assert doc.name == "guide/intro.html"
        assert doc.content == "<p>hi</p>"
        assert doc.output_format == OutputFormat.HTML
        assert doc.path == page

    def test_from_path_feed(self, tmp_path):
        feed = tmp_path / "feed.xml"
        feed.write_text("<feed/>", encoding="utf-8")
        doc = Document.from_path(feed, kind=DocumentKind.DOCUMENT, writable=False)
        assert doc.name == "feed.xml"
        assert doc.output_format == OutputFormat.XML
        assert not doc.writable

    def test_content_must_be_text(self):
        doc = Document(name="a.html")
        with pytest.raises(ValidationError):
            doc.content = None


class TestIsEmbeddable:
    def test_html_page(self):
        assert is_embeddable(Document(name="a.html", writable=False))

    def test_writable_document(self):
        doc = Document(name="post.html", kind=DocumentKind.DOCUMENT, writable=True)
        assert is_embeddable(doc)

    def test_unwritten_document(self):
        doc = Document(name="draft.html", kind=DocumentKind.DOCUMENT, writable=False)
        assert not is_embeddable(doc)

    def test_non_html_page(self):
        assert not is_embeddable(Document(name="feed.xml", output_format=OutputFormat.XML))


class TestSite:
    def test_empty(self):
        site = Site()
        assert site.config == {}
        assert site.documents == []
        assert site.source is None


class TestRetryPolicy:
    def test_exponential_without_jitter(self):
        policy = RetryPolicy(randomness=0)
        assert policy.delay(0) == pytest.approx(0.1)
        assert policy.delay(1) == pytest.approx(0.2)
        assert policy.delay(2) == pytest.approx(0.4)

    def test_jitter_bounds(self):
        policy = RetryPolicy()
        assert policy.delay(1, rng=lambda: 0.0) == pytest.approx(0.1)
        assert policy.delay(1, rng=lambda: 0.5) == pytest.approx(0.2)
        assert policy.delay(1, rng=lambda: 1.0) == pytest.approx(0.3)

    def test_random_delay_within_range(self):
        policy = RetryPolicy()
        for attempt in range(4):
            base = 0.1 * 2 ** attempt
            delay = policy.delay(attempt)
            assert base * 0.5 <= delay <= base * 1.5

    def test_zero_interval(self):
        assert RetryPolicy(interval=0).delay(3) == 0


class TestKrokiSettings:
    def test_frozen(self):
        settings = KrokiSettings()
        with pytest.raises(ValidationError):
            settings.url = "https://other.example"

    def test_url_whitespace_stripped(self):
        assert KrokiSettings(url="  https://kroki.io ").url == "https://kroki.io"

    @pytest.mark.parametrize("url", ["https://kroki.test/", "https://kroki.test//"])
    def test_url_trailing_slash_stripped(self, url):
        assert KrokiSettings(url=url).url == "https://kroki.test"

    def test_url_path_prefix_kept(self):
        assert KrokiSettings(url="https://tools.test/kroki/").url == "https://tools.test/kroki"
