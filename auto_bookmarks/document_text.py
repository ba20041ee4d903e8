"""Build the weighted text blobs that the engines tokenize.

Field weighting is done by literal repetition: a title repeated three times
contributes three times the raw term frequency.
"""
import re
from typing import List, Optional
from urllib.parse import urlsplit

from auto_bookmarks.models import Bookmark, Item, ItemKind
from auto_bookmarks.tokenizer import normalize


def extract_hostname(url: Optional[str]) -> Optional[str]:
    """Get the hostname of a URL without a leading ``www.``.

    Args:
        url: URL to parse

    Returns:
        Hostname, or None if the URL has no scheme or host
    """
    if not url:
        return None
    try:
        parts = urlsplit(url.strip())
        hostname = parts.hostname
    except ValueError:
        return None
    if not parts.scheme or not hostname:
        return None
    return re.sub(r"^www\.", "", hostname)


def _repeat(text: str, times: int) -> str:
    return " ".join([text] * times)


def build_search_text(item: Item) -> str:
    """Build the document text used for BM25 ranking.

    Args:
        item: Bookmark or folder

    Returns:
        Weighted text for bookmarks, the name for folders
    """
    if item.kind is ItemKind.FOLDER:
        return item.name or ""

    bookmark: Bookmark = item
    meta = bookmark.metadata
    parts: List[str] = []

    if bookmark.title:
        parts.append(_repeat(bookmark.title, 3))
    if meta and meta.title and meta.title != bookmark.title:
        parts.append(_repeat(meta.title, 2))
    if meta and meta.keywords:
        parts.append(_repeat(" ".join(meta.keywords), 2))
    if bookmark.tags:
        parts.append(_repeat(" ".join(bookmark.tags), 2))
    if bookmark.description:
        parts.append(bookmark.description)
    if meta and meta.description and meta.description != bookmark.description:
        parts.append(meta.description)
    if meta and meta.og_title and meta.og_title != bookmark.title:
        parts.append(meta.og_title)
    if meta and meta.og_description:
        parts.append(meta.og_description)
    if meta and meta.og_site_name:
        parts.append(meta.og_site_name)

    hostname = extract_hostname(bookmark.url)
    if hostname:
        parts.append(hostname)

    return " ".join(parts).strip()


def build_clustering_text(bookmark: Bookmark) -> str:
    """Build the normalized text used to vectorize a bookmark for clustering.

    Title counts three times, keywords and tags twice each.

    Args:
        bookmark: Bookmark to describe

    Returns:
        Lowercased text with punctuation removed (may be empty)
    """
    meta = bookmark.metadata
    parts: List[str] = []

    if bookmark.title:
        parts.append(_repeat(bookmark.title, 3))
    if bookmark.description:
        parts.append(bookmark.description)
    if meta:
        if meta.description:
            parts.append(meta.description)
        if meta.keywords:
            parts.append(_repeat(" ".join(meta.keywords), 2))
        if meta.og_site_name:
            parts.append(meta.og_site_name)
    if bookmark.tags:
        parts.append(_repeat(" ".join(bookmark.tags), 2))

    hostname = extract_hostname(bookmark.url)
    if hostname:
        parts.append(hostname)

    return " ".join(normalize(" ".join(parts)).split())
