"""Chrome bookmarks reader module."""
import json
import os
import sys
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from auto_bookmarks.models import Bookmark, Folder

ROOT_NAMES = ["bookmark_bar", "other", "synced"]

# Chrome timestamps count microseconds since 1601-01-01
_CHROME_EPOCH = datetime(1601, 1, 1)


def get_chrome_bookmarks_path(profile: str = "Default") -> Path:
    """Get the path to Chrome bookmarks file.

    Args:
        profile: Chrome profile name (default: "Default")

    Returns:
        Path to the Bookmarks file
    """
    home = Path.home()
    if os.name == "nt":  # Windows
        chrome_path = home / "AppData" / "Local" / "Google" / "Chrome" / "User Data" / profile / "Bookmarks"
    elif sys.platform == "darwin":  # macOS
        chrome_path = home / "Library" / "Application Support" / "Google" / "Chrome" / profile / "Bookmarks"
    elif os.name == "posix":  # Linux
        chrome_path = home / ".config" / "google-chrome" / profile / "Bookmarks"
        # Also check for chromium
        if not chrome_path.exists():
            chrome_path = home / ".config" / "chromium" / profile / "Bookmarks"
    else:
        raise OSError(f"Unsupported operating system: {os.name}")

    return chrome_path


def load_bookmarks_file(bookmarks_path: Optional[Path] = None) -> Dict[str, Any]:
    """Load Chrome bookmarks JSON file.

    Args:
        bookmarks_path: Optional path to bookmarks file. If None, uses default Chrome location.

    Returns:
        Parsed JSON bookmarks data

    Raises:
        FileNotFoundError: If bookmarks file doesn't exist
        json.JSONDecodeError: If bookmarks file is malformed
    """
    if bookmarks_path is None:
        bookmarks_path = get_chrome_bookmarks_path()

    if not bookmarks_path.exists():
        raise FileNotFoundError(f"Bookmarks file not found at {bookmarks_path}")

    with open(bookmarks_path, "r", encoding="utf-8") as f:
        return json.load(f)


def _parse_chrome_time(value: Any) -> datetime:
    try:
        return _CHROME_EPOCH + timedelta(microseconds=int(value))
    except (TypeError, ValueError, OverflowError):
        return datetime.utcnow()


def extract_items(
    node: Dict[str, Any],
    bookmarks: List[Bookmark],
    folders: List[Folder],
    parent_id: Optional[str] = None,
) -> None:
    """Recursively extract bookmarks and folders from a Chrome bookmarks node.

    Args:
        node: Current node in the bookmarks tree
        bookmarks: List to accumulate bookmarks
        folders: List to accumulate folders
        parent_id: Id of the enclosing folder (None at a root)
    """
    if node.get("type") == "url":
        bookmarks.append(Bookmark(
            id=str(node.get("id", "")),
            title=node.get("name", ""),
            url=node.get("url", ""),
            folder_id=parent_id,
            created_at=_parse_chrome_time(node.get("date_added")),
        ))
    elif node.get("type") == "folder":
        folder = Folder(
            id=str(node.get("id", "")),
            name=node.get("name", ""),
            parent_id=parent_id,
        )
        folders.append(folder)
        for child in node.get("children", []):
            extract_items(child, bookmarks, folders, folder.id)


def read_chrome_items(bookmarks_path: Optional[Path] = None) -> Tuple[List[Bookmark], List[Folder]]:
    """Read all bookmarks and folders from a Chrome bookmarks file.

    The Chrome roots (bookmarks bar, other, mobile) are not returned as
    folders; their direct children have no parent.

    Args:
        bookmarks_path: Optional path to bookmarks file. If None, uses default Chrome location.

    Returns:
        (bookmarks, folders) in file order

    Raises:
        FileNotFoundError: If bookmarks file doesn't exist
        json.JSONDecodeError: If bookmarks file is malformed
    """
    bookmarks_data = load_bookmarks_file(bookmarks_path)

    bookmarks: List[Bookmark] = []
    folders: List[Folder] = []

    # Chrome stores bookmarks in roots: bookmark_bar, other, synced
    roots = bookmarks_data.get("roots", {})

    for root_name in ROOT_NAMES:
        if root_name in roots:
            for child in roots[root_name].get("children", []):
                extract_items(child, bookmarks, folders)

    return bookmarks, folders
