"""Tests for search module."""
import math
import pytest

from auto_bookmarks.models import Bookmark, Folder, ItemKind
from auto_bookmarks.search import (
    BM25SearchEngine,
    INFIX_MATCH_WEIGHT,
    PREFIX_MATCH_WEIGHT,
    SUFFIX_MATCH_WEIGHT,
    _Document,
)


@pytest.fixture
def engine():
    return BM25SearchEngine()


@pytest.fixture
def rust_bookmark():
    return Bookmark(
        id="rust",
        title="Rust Programming Guide",
        url="https://doc.rust-lang.org/book/",
        tags=["rust", "systems"],
    )


class TestBasicSearch:
    def test_single_bookmark_match(self, engine, rust_bookmark):
        engine.set_data([rust_bookmark], [])
        results = engine.search("rust")
        assert len(results) == 1
        assert results[0].item is rust_bookmark
        assert results[0].kind == ItemKind.BOOKMARK
        assert results[0].score > 0

    def test_no_match_returns_empty(self, engine, rust_bookmark):
        engine.set_data([rust_bookmark], [])
        assert engine.search("xyz123") == []

    @pytest.mark.parametrize("query", ["", "   ", "\t\n"])
    def test_blank_query_returns_empty(self, engine, rust_bookmark, query):
        engine.set_data([rust_bookmark], [])
        assert engine.search(query) == []

    def test_empty_corpus_returns_empty(self, engine):
        assert engine.search("rust") == []
        engine.set_data([], [])
        assert engine.search("rust") == []

    def test_corpus_without_tokens(self, engine):
        engine.set_data([], [Folder(id="f1", name="AI"), Folder(id="f2", name="Go")])
        assert engine.search("golang") == []

        engine.set_data([Bookmark(id="x", title="", url="")], [])
        assert engine.search("rust") == []

    def test_finds_by_title(self, engine, sample_bookmarks, sample_folders):
        engine.set_data(sample_bookmarks, sample_folders)
        results = engine.search("sqlite")
        assert results[0].item.url == "https://sqlite.org/guide"

    def test_finds_by_hostname(self, engine, sample_bookmarks, sample_folders):
        engine.set_data(sample_bookmarks, sample_folders)
        results = engine.search("stackoverflow")
        assert any(r.item.id == "7" for r in results)

    def test_finds_folders(self, engine, sample_bookmarks, sample_folders):
        engine.set_data(sample_bookmarks, sample_folders)
        results = engine.search("tutorials")
        assert results[0].kind == ItemKind.FOLDER
        assert results[0].item.name == "Tutorials"

    def test_respects_limit(self, engine, sample_bookmarks, sample_folders):
        engine.set_data(sample_bookmarks, sample_folders)
        assert len(engine.search("com", limit=2)) <= 2

    def test_sorted_descending(self, engine, sample_bookmarks, sample_folders):
        engine.set_data(sample_bookmarks, sample_folders)
        scores = [r.score for r in engine.search("example board")]
        assert scores == sorted(scores, reverse=True)

    def test_scores_positive(self, engine, sample_bookmarks, sample_folders):
        engine.set_data(sample_bookmarks, sample_folders)
        assert all(r.score > 0 for r in engine.search("python docs work"))

    def test_ranked_by_relevance(self, engine, sample_bookmarks, sample_folders):
        engine.set_data(sample_bookmarks, sample_folders)
        results = engine.search("jira board")
        assert results[0].item.url == "https://jira.example.com/board"

    def test_set_data_replaces_corpus(self, engine, rust_bookmark, sample_bookmarks):
        engine.set_data([rust_bookmark], [])
        assert engine.search("rust")
        engine.set_data(sample_bookmarks, [])
        assert engine.search("rust") == []

    def test_to_dict(self, engine, rust_bookmark):
        engine.set_data([rust_bookmark], [])
        data = engine.search("rust")[0].to_dict()
        assert data["kind"] == "bookmark"
        assert data["item"]["id"] == "rust"
        assert data["score"] > 0


class TestOrdering:
    def test_ties_keep_insertion_order(self, engine):
        a = Bookmark(id="a", title="Rust Notes", url="https://example.com")
        b = Bookmark(id="b", title="Rust Notes", url="https://example.com")
        engine.set_data([a, b], [])
        assert [r.item.id for r in engine.search("rust")] == ["a", "b"]

        engine.set_data([b, a], [])
        assert [r.item.id for r in engine.search("rust")] == ["b", "a"]

    def test_bookmarks_before_folders_on_tie(self, engine):
        bookmark = Bookmark(id="a", title="Rust", url="")
        folder = Folder(id="f", name="Rust")
        engine.set_data([bookmark], [folder])
        results = engine.search("zzz rust")
        # The bookmark text is "Rust Rust Rust" but tokens are deduplicated,
        # so both documents have the same token list and score.
        assert results[0].score == pytest.approx(results[1].score)
        assert [r.kind for r in results] == [ItemKind.BOOKMARK, ItemKind.FOLDER]


class TestFuzzyMatching:
    def test_prefix_of_longer_word(self, engine):
        bookmark = Bookmark(id="c", title="Crawl4AI", url="https://github.com/unclecode/crawl4ai")
        engine.set_data([bookmark], [])
        assert engine.search("crawl")[0].item is bookmark

    def test_exact_match_weight(self, engine):
        doc = _Document(item=None, tokens=["rust"], words=["rust"])
        assert engine._term_frequency("rust", doc) == (1.0, 1.0)

    def test_prefix_weight(self, engine):
        doc = _Document(item=None, tokens=[], words=["crawl4ai"])
        assert engine._term_frequency("crawl4", doc) == (0.5, PREFIX_MATCH_WEIGHT)

    def test_suffix_weight(self, engine):
        doc = _Document(item=None, tokens=[], words=["crawl4ai"])
        assert engine._term_frequency("awl4ai", doc) == (0.5, SUFFIX_MATCH_WEIGHT)

    def test_infix_weight(self, engine):
        doc = _Document(item=None, tokens=[], words=["crawl4ai"])
        assert engine._term_frequency("awl4a", doc) == (0.5, INFIX_MATCH_WEIGHT)

    def test_fuzzy_matches_accumulate(self, engine):
        doc = _Document(item=None, tokens=[], words=["crawl4ai", "crawl4ai.com"])
        tf, _ = engine._term_frequency("awl4a", doc)
        assert tf == 1.0

    def test_no_match(self, engine):
        doc = _Document(item=None, tokens=[], words=["rust"])
        assert engine._term_frequency("python", doc)[0] == 0


class TestScoring:
    def test_single_document_score(self, engine):
        # One document, one query token that only it contains:
        # idf = ln(1 + 0.5 / 1.5), tf = 1 and docLen == avgDocLen
        folder = Folder(id="f", name="abc")
        engine.set_data([], [folder])
        results = engine.search("abc")
        expected = math.log(1 + 0.5 / 1.5) * (1 * 2.5) / (1 + 1.5)
        assert results[0].score == pytest.approx(expected)

    def test_idf_counts_fuzzy_containment(self, engine):
        docs = [
            _Document(item=None, tokens=["rust"], words=["rust"]),
            _Document(item=None, tokens=[], words=["trusty"]),
            _Document(item=None, tokens=[], words=["python"]),
        ]
        assert engine._idf("rust", docs) == pytest.approx(math.log(1 + 1.5 / 2.5))

    def test_malformed_url_does_not_break_scoring(self, engine):
        bookmark = Bookmark(id="x", title="Broken Link", url="http://[::1")
        engine.set_data([bookmark], [])
        assert engine.search("broken")[0].item is bookmark

    def test_custom_parameters(self):
        engine = BM25SearchEngine(k1=1.2, b=0.5)
        assert engine.k1 == 1.2
        assert engine.b == 0.5
