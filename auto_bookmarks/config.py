"""Configuration for the auto-organizing bookmarks server."""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class SearchConfig:
    """Configuration for BM25 ranking."""
    k1: float = 1.5  # Term frequency saturation
    b: float = 0.75  # Document length normalization
    default_limit: int = 10

    @classmethod
    def from_env(cls) -> "SearchConfig":
        """Create config from environment variables."""
        return cls(
            k1=float(os.environ.get("BOOKMARKS_BM25_K1", "1.5")),
            b=float(os.environ.get("BOOKMARKS_BM25_B", "0.75")),
            default_limit=int(os.environ.get("BOOKMARKS_SEARCH_LIMIT", "10")),
        )


@dataclass
class ClusteringConfig:
    """Configuration for automatic folder clustering."""
    similarity_threshold: float = 0.25
    max_cluster_size: int = 50  # Soft cap, clusters above it are flagged
    label_title_words: int = 3  # Words of the title used for fallback labels

    @classmethod
    def from_env(cls) -> "ClusteringConfig":
        """Create config from environment variables."""
        return cls(
            similarity_threshold=float(os.environ.get("BOOKMARKS_SIMILARITY_THRESHOLD", "0.25")),
            max_cluster_size=int(os.environ.get("BOOKMARKS_MAX_CLUSTER_SIZE", "50")),
            label_title_words=int(os.environ.get("BOOKMARKS_LABEL_WORDS", "3")),
        )


@dataclass
class EnrichmentConfig:
    """Configuration for page metadata fetching."""
    request_timeout: float = 10.0  # Seconds
    max_content_length: int = 50000  # Max chars of HTML inspected for metadata

    @classmethod
    def from_env(cls) -> "EnrichmentConfig":
        """Create config from environment variables."""
        return cls(
            request_timeout=float(os.environ.get("BOOKMARKS_TIMEOUT", "10.0")),
            max_content_length=int(os.environ.get("BOOKMARKS_MAX_CONTENT", "50000")),
        )


@dataclass
class Config:
    """Main configuration for the auto-bookmarks server."""
    search: SearchConfig = field(default_factory=SearchConfig.from_env)
    clustering: ClusteringConfig = field(default_factory=ClusteringConfig.from_env)
    enrichment: EnrichmentConfig = field(default_factory=EnrichmentConfig.from_env)
    state_db_path: Optional[Path] = None  # None = use default
    chrome_profile: str = "Default"  # Chrome profile name
    auto_organize: bool = True  # Cluster new bookmarks into folders

    @classmethod
    def from_env(cls) -> "Config":
        """Create config from environment variables."""
        db_path_str = os.environ.get("BOOKMARKS_STATE_DB")
        db_path = Path(db_path_str) if db_path_str else None

        return cls(
            search=SearchConfig.from_env(),
            clustering=ClusteringConfig.from_env(),
            enrichment=EnrichmentConfig.from_env(),
            state_db_path=db_path,
            chrome_profile=os.environ.get("BOOKMARKS_CHROME_PROFILE", "Default"),
            auto_organize=_env_bool("BOOKMARKS_AUTO_ORGANIZE", True),
        )


# Global config instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get the global config instance.

    Returns:
        Config loaded from environment
    """
    global _config

    if _config is None:
        _config = Config.from_env()

    return _config
