"""Tests for config module."""
import pytest

from auto_bookmarks.config import ClusteringConfig, Config, SearchConfig


class TestConfig:
    def test_default_values(self, monkeypatch):
        for name in [
            "BOOKMARKS_BM25_K1", "BOOKMARKS_BM25_B", "BOOKMARKS_SEARCH_LIMIT",
            "BOOKMARKS_SIMILARITY_THRESHOLD", "BOOKMARKS_MAX_CLUSTER_SIZE",
            "BOOKMARKS_TIMEOUT", "BOOKMARKS_MAX_CONTENT",
        ]:
            monkeypatch.delenv(name, raising=False)

        config = Config()
        assert config.search.k1 == 1.5
        assert config.search.b == 0.75
        assert config.search.default_limit == 10
        assert config.clustering.similarity_threshold == 0.25
        assert config.clustering.max_cluster_size == 50
        assert config.enrichment.request_timeout == 10.0
        assert config.enrichment.max_content_length == 50000
        assert config.state_db_path is None
        assert config.chrome_profile == "Default"
        assert config.auto_organize is True

    def test_dataclass_defaults(self):
        assert SearchConfig().k1 == 1.5
        assert ClusteringConfig().similarity_threshold == 0.25

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("BOOKMARKS_BM25_K1", "1.2")
        monkeypatch.setenv("BOOKMARKS_SIMILARITY_THRESHOLD", "0.4")
        monkeypatch.setenv("BOOKMARKS_MAX_CLUSTER_SIZE", "20")
        monkeypatch.setenv("BOOKMARKS_STATE_DB", "/tmp/test.db")

        config = Config.from_env()
        assert config.search.k1 == 1.2
        assert config.clustering.similarity_threshold == 0.4
        assert config.clustering.max_cluster_size == 20
        assert str(config.state_db_path) == "/tmp/test.db"

    def test_chrome_profile_from_env(self, monkeypatch):
        monkeypatch.setenv("BOOKMARKS_CHROME_PROFILE", "Profile 1")
        config = Config.from_env()
        assert config.chrome_profile == "Profile 1"

    @pytest.mark.parametrize("value,expected", [
        ("false", False), ("0", False), ("no", False), ("true", True), ("1", True),
    ])
    def test_auto_organize_from_env(self, monkeypatch, value, expected):
        monkeypatch.setenv("BOOKMARKS_AUTO_ORGANIZE", value)
        assert Config.from_env().auto_organize is expected
