"""Shared fixtures for tests."""
import json
import pytest
from pathlib import Path

from auto_bookmarks.models import Bookmark, Folder


SAMPLE_BOOKMARKS = {
    "checksum": "test",
    "roots": {
        "bookmark_bar": {
            "children": [
                {
                    "id": "1",
                    "name": "Python Docs",
                    "type": "url",
                    "url": "https://docs.python.org"
                },
                {
                    "id": "2",
                    "name": "Work",
                    "type": "folder",
                    "children": [
                        {
                            "id": "3",
                            "name": "Jira Board",
                            "type": "url",
                            "url": "https://jira.example.com/board"
                        },
                        {
                            "id": "4",
                            "name": "Confluence",
                            "type": "url",
                            "url": "https://confluence.example.com"
                        }
                    ]
                },
                {
                    "id": "5",
                    "name": "Tutorials",
                    "type": "folder",
                    "children": [
                        {
                            "id": "6",
                            "name": "SQLite Guide",
                            "type": "url",
                            "url": "https://sqlite.org/guide"
                        }
                    ]
                }
            ],
            "id": "0",
            "name": "Bookmarks Bar",
            "type": "folder"
        },
        "other": {
            "children": [
                {
                    "id": "7",
                    "name": "Stack Overflow",
                    "type": "url",
                    "url": "https://stackoverflow.com"
                }
            ],
            "id": "100",
            "name": "Other Bookmarks",
            "type": "folder"
        },
        "synced": {
            "children": [],
            "id": "200",
            "name": "Mobile Bookmarks",
            "type": "folder"
        }
    },
    "version": 1
}


@pytest.fixture
def sample_bookmarks_path(tmp_path):
    """Create a temporary bookmarks file with sample data."""
    bookmarks_file = tmp_path / "Bookmarks"
    bookmarks_file.write_text(json.dumps(SAMPLE_BOOKMARKS, indent=3))
    return bookmarks_file


@pytest.fixture
def sample_bookmarks():
    """Return sample bookmarks as read_chrome_items returns them."""
    return [
        Bookmark(id="1", url="https://docs.python.org", title="Python Docs"),
        Bookmark(id="3", url="https://jira.example.com/board", title="Jira Board", folder_id="2"),
        Bookmark(id="4", url="https://confluence.example.com", title="Confluence", folder_id="2"),
        Bookmark(id="6", url="https://sqlite.org/guide", title="SQLite Guide", folder_id="5"),
        Bookmark(id="7", url="https://stackoverflow.com", title="Stack Overflow"),
    ]


@pytest.fixture
def sample_folders():
    return [
        Folder(id="2", name="Work"),
        Folder(id="5", name="Tutorials"),
    ]


@pytest.fixture
def crawler_bookmark():
    return Bookmark(
        id="b1",
        title="GitHub Crawl4AI",
        url="https://github.com/unclecode/crawl4ai",
        description="web crawler for LLMs",
    )


@pytest.fixture
def crawler_docs_bookmark():
    return Bookmark(
        id="b2",
        title="Crawl4AI Documentation",
        url="https://github.com/unclecode/crawl4ai/docs",
        description="web crawler for LLMs documentation",
    )


@pytest.fixture
def cookie_bookmark():
    return Bookmark(
        id="b3",
        title="Chocolate Chip Cookie Recipe",
        url="https://food.example.com/cookies",
        description="best cookie recipe ever",
    )


@pytest.fixture
def state_db_path(tmp_path):
    """Return path for a temporary state database."""
    return tmp_path / "test_state.db"
