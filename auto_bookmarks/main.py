"""Main entry point for the auto-bookmarks MCP server."""
import asyncio

from auto_bookmarks.server import main


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
