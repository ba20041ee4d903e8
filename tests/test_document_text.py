"""Tests for document_text module."""
import pytest

from auto_bookmarks.document_text import (
    build_clustering_text,
    build_search_text,
    extract_hostname,
)
from auto_bookmarks.models import Bookmark, BookmarkMetadata, Folder


class TestExtractHostname:
    def test_strips_www(self):
        assert extract_hostname("https://www.example.com/path") == "example.com"

    def test_keeps_subdomain(self):
        assert extract_hostname("https://doc.rust-lang.org/book/") == "doc.rust-lang.org"

    @pytest.mark.parametrize("url", ["", None, "not a url", "example.com", "http://[::1"])
    def test_malformed_returns_none(self, url):
        assert extract_hostname(url) is None


class TestSearchText:
    def test_folder_uses_name(self):
        assert build_search_text(Folder(id="f", name="Rust Projects")) == "Rust Projects"

    def test_title_repeated_three_times(self):
        bookmark = Bookmark(id="1", title="Rust", url="https://example.com")
        assert build_search_text(bookmark) == "Rust Rust Rust example.com"

    def test_weighted_fields(self):
        bookmark = Bookmark(
            id="1",
            title="Rust Guide",
            url="https://www.rust-lang.org",
            description="Learn Rust",
            tags=["systems"],
            metadata=BookmarkMetadata(
                title="The Rust Book",
                keywords=["rust", "book"],
                og_site_name="RustLang",
            ),
        )
        text = build_search_text(bookmark)
        assert text.count("Rust Guide") == 3
        assert text.count("The Rust Book") == 2
        assert text.count("rust book") == 2
        assert text.count("systems") == 2
        assert "Learn Rust" in text
        assert "RustLang" in text
        assert text.endswith("rust-lang.org")

    def test_metadata_title_equal_to_title_not_repeated(self):
        bookmark = Bookmark(
            id="1", title="Rust", url="https://example.com",
            metadata=BookmarkMetadata(title="Rust", og_title="Rust"),
        )
        assert build_search_text(bookmark).count("Rust") == 3

    def test_malformed_url_skips_hostname(self):
        bookmark = Bookmark(id="1", title="Broken", url="not a url")
        assert build_search_text(bookmark) == "Broken Broken Broken"

    def test_missing_fields(self):
        assert build_search_text(Bookmark(id="1", title="", url="")) == ""


class TestClusteringText:
    def test_normalized_and_weighted(self, crawler_bookmark):
        text = build_clustering_text(crawler_bookmark)
        assert text == (
            "github crawl4ai github crawl4ai github crawl4ai "
            "web crawler for llms github com"
        )

    def test_metadata_and_tags(self):
        bookmark = Bookmark(
            id="1",
            title="Notes",
            url="not a url",
            tags=["ml"],
            metadata=BookmarkMetadata(description="Deep learning", keywords=["ai"], og_site_name="Site"),
        )
        assert build_clustering_text(bookmark) == "notes notes notes deep learning ai ai site ml ml"

    def test_empty_bookmark(self):
        assert build_clustering_text(Bookmark(id="1", title="", url="")) == ""
