"""MCP server exposing bookmark search and automatic organization."""
import asyncio
import json
import sys
from pathlib import Path
from typing import Any, List, Optional

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import Tool, TextContent

from auto_bookmarks.bookmarks_reader import get_chrome_bookmarks_path, read_chrome_items
from auto_bookmarks.clustering import ClusteringEngine
from auto_bookmarks.config import get_config
from auto_bookmarks.document_text import extract_hostname
from auto_bookmarks.enrichment import fetch_page_metadata
from auto_bookmarks.models import Bookmark
from auto_bookmarks.organizer import BookmarkOrganizer
from auto_bookmarks.search import BM25SearchEngine
from auto_bookmarks.state_store import get_state_store


# Global state
_organizer: Optional[BookmarkOrganizer] = None
_organizer_lock = asyncio.Lock()


def _text(text: str) -> List[TextContent]:
    return [TextContent(type="text", text=text)]


def load_items(bookmarks_path: Optional[Path] = None):
    """Read bookmarks and folders from Chrome, or nothing if unavailable.

    Args:
        bookmarks_path: Optional path to bookmarks file

    Returns:
        (bookmarks, folders)
    """
    if bookmarks_path is None:
        bookmarks_path = get_chrome_bookmarks_path(get_config().chrome_profile)
    try:
        return read_chrome_items(bookmarks_path)
    except FileNotFoundError as e:
        print(f"Warning: Could not find bookmarks file: {e}", file=sys.stderr)
    except Exception as e:
        print(f"Error loading bookmarks: {e}", file=sys.stderr)
    return [], []


async def get_organizer() -> BookmarkOrganizer:
    """Get or create the global organizer, loading bookmarks on first use."""
    global _organizer

    # Tool calls are dispatched concurrently; build the organizer once
    async with _organizer_lock:
        if _organizer is None:
            config = get_config()
            store = await get_state_store(config.state_db_path)
            clustering = ClusteringEngine(store, config.clustering)
            await clustering.initialize()

            organizer = BookmarkOrganizer(
                BM25SearchEngine(k1=config.search.k1, b=config.search.b),
                clustering,
                fetch_metadata=fetch_page_metadata,
                store=store,
            )
            await organizer.restore()
            organizer.load(*load_items())
            _organizer = organizer

    return _organizer


async def search_bookmarks_tool(query: str, limit: Optional[int] = None) -> List[TextContent]:
    """Tool handler for search_bookmarks."""
    organizer = await get_organizer()

    if not organizer.bookmarks and not organizer.folders:
        return _text("No bookmarks available. Please ensure Chrome bookmarks file exists.")

    if limit is None:
        limit = get_config().search.default_limit

    results = organizer.search(query, limit=limit)
    if not results:
        return _text(f"No bookmarks found matching query: {query}")

    return _text(json.dumps([r.to_dict() for r in results], indent=2))


async def add_bookmark_tool(
    url: str,
    title: str = "",
    description: Optional[str] = None,
    tags: Optional[List[str]] = None,
) -> List[TextContent]:
    """Tool handler for add_bookmark."""
    organizer = await get_organizer()

    bookmark = Bookmark(
        id="",
        title=title or extract_hostname(url) or url,
        url=url,
        description=description,
        tags=list(tags or []),
    )
    result = await organizer.add_bookmark(bookmark, auto_organize=get_config().auto_organize)

    return _text(json.dumps({
        "bookmark": result.bookmark.to_dict(),
        "assignment": result.assignment.to_dict() if result.assignment else None,
        "folder": result.folder.to_dict() if result.folder else None,
    }, indent=2))


async def cluster_stats_tool() -> List[TextContent]:
    """Tool handler for get_cluster_stats."""
    organizer = await get_organizer()
    return _text(json.dumps(organizer.clustering_engine.get_stats().to_dict(), indent=2))


async def list_clusters_tool() -> List[TextContent]:
    """Tool handler for list_clusters."""
    organizer = await get_organizer()
    clusters = [
        {
            "cluster_id": c.id,
            "label": c.label,
            "members": [m.url for m in c.members],
            "over_capacity": c.over_capacity,
        }
        for c in organizer.clustering_engine.get_clusters()
    ]
    return _text(json.dumps(clusters, indent=2))


async def reset_clustering_tool() -> List[TextContent]:
    """Tool handler for reset_clustering."""
    organizer = await get_organizer()
    removed = await organizer.reset_clustering()
    return _text(json.dumps({"status": "reset", "folders_removed": removed}))


async def reload_bookmarks_tool() -> List[TextContent]:
    """Tool handler for reload_bookmarks."""
    organizer = await get_organizer()
    organizer.load(*load_items())
    return _text(json.dumps({
        "bookmarks": len(organizer.bookmarks),
        "folders": len(organizer.folders),
    }))


def create_server() -> Server:
    """Create and configure the MCP server.

    Returns:
        Configured Server instance
    """
    server = Server("auto-bookmarks")

    @server.list_tools()
    async def list_tools() -> list[Tool]:
        """List available tools."""
        return [
            Tool(
                name="search_bookmarks",
                description="Search bookmarks and folders with BM25 ranking and fuzzy matching. Returns ranked items with scores.",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "query": {"type": "string", "description": "Search query"},
                        "limit": {"type": "integer", "description": "Maximum number of results"},
                    },
                    "required": ["query"]
                }
            ),
            Tool(
                name="add_bookmark",
                description="Add a bookmark and automatically file it into a similarity-based folder.",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "url": {"type": "string", "description": "Bookmark URL"},
                        "title": {"type": "string", "description": "Bookmark title"},
                        "description": {"type": "string", "description": "Optional description"},
                        "tags": {"type": "array", "items": {"type": "string"}, "description": "Optional tags"},
                    },
                    "required": ["url"]
                }
            ),
            Tool(
                name="get_cluster_stats",
                description="Get clustering statistics: cluster count, clustered bookmarks, vocabulary size and threshold.",
                inputSchema={"type": "object", "properties": {}}
            ),
            Tool(
                name="list_clusters",
                description="List automatic clusters with their labels and member URLs.",
                inputSchema={"type": "object", "properties": {}}
            ),
            Tool(
                name="reset_clustering",
                description="Forget all clusters and remove auto-generated folders.",
                inputSchema={"type": "object", "properties": {}}
            ),
            Tool(
                name="reload_bookmarks",
                description="Re-read bookmarks from Chrome into the search corpus.",
                inputSchema={"type": "object", "properties": {}}
            ),
        ]

    @server.call_tool()
    async def call_tool(name: str, arguments: Any) -> list[TextContent]:
        """Handle tool calls."""
        arguments = arguments or {}
        if name == "search_bookmarks":
            query = arguments.get("query", "")
            if not query:
                return _text("Error: 'query' parameter is required")
            return await search_bookmarks_tool(query, arguments.get("limit"))
        elif name == "add_bookmark":
            url = arguments.get("url", "")
            if not url:
                return _text("Error: 'url' parameter is required")
            return await add_bookmark_tool(
                url,
                arguments.get("title", ""),
                arguments.get("description"),
                arguments.get("tags"),
            )
        elif name == "get_cluster_stats":
            return await cluster_stats_tool()
        elif name == "list_clusters":
            return await list_clusters_tool()
        elif name == "reset_clustering":
            return await reset_clustering_tool()
        elif name == "reload_bookmarks":
            return await reload_bookmarks_tool()
        else:
            raise ValueError(f"Unknown tool: {name}")

    return server


async def main():
    """Main entry point for the MCP server."""
    server = create_server()

    async with stdio_server() as (read_stream, write_stream):
        initialization_options = server.create_initialization_options()
        await server.run(read_stream, write_stream, initialization_options)
