"""Page metadata fetching for bookmark enrichment.

Metadata (title, description, keywords, OpenGraph fields) feeds the
clustering text of new bookmarks. The URL alone gives a baseline (title and
keywords from the hostname, path and query); fetched page metadata is merged
over it. Fetching is best effort: any failure yields None.
"""
import sys
from typing import Dict, List, Optional
from urllib.parse import parse_qsl, urlsplit

import httpx
import trafilatura
from bs4 import BeautifulSoup

from auto_bookmarks.config import get_config
from auto_bookmarks.models import BookmarkMetadata

_IGNORED_HOST_PARTS = {"www", "com"}
_IGNORED_QUERY_KEYS = {"utm_source", "utm_medium"}
_PAGE_EXTENSIONS = (".html", ".htm", ".php", ".asp", ".aspx")


def _log(message: str) -> None:
    print(f"[Enrichment] {message}", file=sys.stderr)


def parse_meta_tags(html: str) -> Dict[str, str]:
    """Collect ``<meta>`` name/property -> content pairs from HTML.

    Args:
        html: Page HTML

    Returns:
        Lowercased names (``og:title``, ``keywords``...) mapped to their content.
        The first occurrence of a name wins.
    """
    tags: Dict[str, str] = {}
    soup = BeautifulSoup(html, "html.parser")
    for meta in soup.find_all("meta"):
        name = meta.get("property") or meta.get("name")
        content = (meta.get("content") or "").strip()
        if name and content:
            tags.setdefault(name.strip().lower(), content)
    return tags


def _split_keywords(raw: Optional[str]) -> List[str]:
    if not raw:
        return []
    return [k.strip() for k in raw.split(",") if k.strip()]


def _title_from_url(hostname: str, path: str) -> str:
    segments = [s for s in path.split("/") if s]

    # github.com/owner/repo
    if "github.com" in hostname and len(segments) >= 2:
        return f"{segments[0]}/{segments[1]} - GitHub"

    meaningful = [
        s for s in segments
        if not s.isdigit() and not s.lower().endswith(_PAGE_EXTENSIONS)
    ]
    if not meaningful:
        return hostname

    title = meaningful[-1].replace("-", " ").replace("_", " ")
    stem, dot, _ = title.rpartition(".")
    if dot and stem:
        title = stem
    title = " ".join(word[:1].upper() + word[1:] for word in title.split())
    return title or hostname


def _keywords_from_url(hostname: str, path: str, query: str) -> List[str]:
    keywords = [part for part in hostname.split(".") if part not in _IGNORED_HOST_PARTS]
    keywords.extend(
        segment.replace("-", " ").replace("_", " ")
        for segment in path.split("/")
        if len(segment) > 2
    )
    for key, value in parse_qsl(query):
        if key not in _IGNORED_QUERY_KEYS:
            keywords.extend([key, value])

    return [k for k in dict.fromkeys(keywords) if len(k) > 2]


def analyze_url(url: str) -> Optional[BookmarkMetadata]:
    """Derive baseline metadata from a URL without fetching it.

    Args:
        url: Absolute URL

    Returns:
        Metadata with a readable title and keywords taken from the hostname,
        path segments and query parameters, or None if the URL has no host
    """
    try:
        parts = urlsplit(url or "")
        hostname = parts.hostname
    except ValueError:
        return None
    if not parts.scheme or not hostname:
        return None

    return BookmarkMetadata(
        title=_title_from_url(hostname, parts.path),
        keywords=_keywords_from_url(hostname, parts.path, parts.query),
    )


def merge_metadata(base: Optional[BookmarkMetadata], rich: Optional[BookmarkMetadata]) -> Optional[BookmarkMetadata]:
    """Overlay fetched metadata on a baseline.

    Fields present in ``rich`` win; keywords from both are kept, baseline first.
    """
    if base is None or rich is None:
        return rich or base

    return BookmarkMetadata(
        title=rich.title or base.title,
        description=rich.description or base.description,
        keywords=list(dict.fromkeys([*base.keywords, *rich.keywords])),
        og_title=rich.og_title or base.og_title,
        og_description=rich.og_description or base.og_description,
        og_site_name=rich.og_site_name or base.og_site_name,
    )


def extract_page_metadata(html: str, url: Optional[str] = None) -> BookmarkMetadata:
    """Extract bookmark metadata from page HTML.

    Args:
        html: Page HTML
        url: Page URL, used by trafilatura to resolve the site name

    Returns:
        Metadata; fields not found on the page stay empty
    """
    meta_tags = parse_meta_tags(html)
    document = trafilatura.extract_metadata(html, default_url=url)

    title = getattr(document, "title", None) if document else None
    description = getattr(document, "description", None) if document else None
    site_name = getattr(document, "sitename", None) if document else None

    keywords = _split_keywords(meta_tags.get("keywords"))
    if not keywords and document:
        keywords = list(getattr(document, "tags", None) or [])

    return BookmarkMetadata(
        title=title or meta_tags.get("og:title"),
        description=description or meta_tags.get("description"),
        keywords=keywords,
        og_title=meta_tags.get("og:title"),
        og_description=meta_tags.get("og:description"),
        og_site_name=meta_tags.get("og:site_name") or site_name,
    )


async def fetch_page_metadata(url: str, timeout: Optional[float] = None) -> Optional[BookmarkMetadata]:
    """Fetch a page and extract its metadata.

    Args:
        url: URL to fetch
        timeout: Request timeout in seconds (defaults to config)

    Returns:
        Extracted metadata or None if failed
    """
    config = get_config().enrichment
    if timeout is None:
        timeout = config.request_timeout

    try:
        async with httpx.AsyncClient(
            timeout=timeout,
            follow_redirects=True,
            headers={"User-Agent": "AutoBookmarks/1.0 (bookmark metadata)"}
        ) as client:
            response = await client.get(url)
            response.raise_for_status()

            html = response.text[:config.max_content_length]
            return extract_page_metadata(html, url)

    except httpx.HTTPError as e:
        _log(f"HTTP error fetching {url}: {e}")
        return None
    except Exception as e:
        _log(f"Error fetching {url}: {e}")
        return None

