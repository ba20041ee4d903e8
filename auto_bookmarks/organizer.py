"""Glue between bookmark records and the search and clustering engines.

The organizer owns an in-memory snapshot of bookmarks and folders. It keeps
the search corpus in sync with that snapshot and turns cluster assignments
into auto-generated folders.
"""
import sys
import uuid
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional, Sequence

from auto_bookmarks.clustering import ClusterAssignment, ClusteringEngine
from auto_bookmarks.enrichment import analyze_url, merge_metadata
from auto_bookmarks.models import Bookmark, BookmarkMetadata, Folder
from auto_bookmarks.search import SearchEngine, SearchResult
from auto_bookmarks.state_store import StateStore

# Bookmarks added here and the folders generated for them
ADDED_ITEMS_KEY = "organizer-items"

MetadataFetcher = Callable[[str], Awaitable[Optional[BookmarkMetadata]]]


def _log(message: str) -> None:
    print(f"[Organizer] {message}", file=sys.stderr)


def _new_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


@dataclass
class AddResult:
    """Outcome of adding a bookmark."""
    bookmark: Bookmark
    assignment: Optional[ClusterAssignment] = None
    folder: Optional[Folder] = None


class BookmarkOrganizer:
    """Adds bookmarks, files them into cluster folders and answers searches."""

    def __init__(
        self,
        search_engine: SearchEngine,
        clustering_engine: ClusteringEngine,
        fetch_metadata: Optional[MetadataFetcher] = None,
        store: Optional[StateStore] = None,
    ):
        """Create an organizer.

        Args:
            search_engine: Engine answering searches over the snapshot
            clustering_engine: Engine assigning new bookmarks to clusters
            fetch_metadata: Optional page metadata fetcher
            store: Where added bookmarks and generated folders are kept
                (defaults to the clustering engine's store)
        """
        self.search_engine = search_engine
        self.clustering_engine = clustering_engine
        self.fetch_metadata = fetch_metadata
        self.store = store if store is not None else clustering_engine.store
        self.bookmarks: List[Bookmark] = []
        self.folders: List[Folder] = []
        self.added_bookmarks: List[Bookmark] = []
        self.added_folders: List[Folder] = []

    async def restore(self) -> None:
        """Read previously added bookmarks and generated folders from the store.

        Call before ``load`` so the restored items join the snapshot. Unreadable
        state is logged and ignored.
        """
        try:
            saved = await self.store.get(ADDED_ITEMS_KEY)
            if saved:
                self.added_bookmarks = [Bookmark.from_dict(b) for b in saved.get("bookmarks", [])]
                self.added_folders = [Folder.from_dict(f) for f in saved.get("folders", [])]
                _log(f"Restored {len(self.added_bookmarks)} added bookmarks, {len(self.added_folders)} folders")
        except Exception as e:
            _log(f"Failed to restore added bookmarks: {e}")

    async def _save_added(self) -> None:
        try:
            await self.store.set(ADDED_ITEMS_KEY, {
                "bookmarks": [b.to_dict() for b in self.added_bookmarks],
                "folders": [f.to_dict() for f in self.added_folders],
            })
        except Exception as e:
            _log(f"Failed to save added bookmarks: {e}")

    def load(self, bookmarks: Sequence[Bookmark], folders: Sequence[Folder]) -> None:
        """Replace the snapshot and refresh the search corpus.

        Bookmarks added through ``add_bookmark`` and their generated folders
        are kept unless the new snapshot already has an item with the same id.
        """
        self.bookmarks = list(bookmarks)
        self.folders = list(folders)

        bookmark_ids = {b.id for b in self.bookmarks}
        self.bookmarks.extend(b for b in self.added_bookmarks if b.id not in bookmark_ids)
        folder_ids = {f.id for f in self.folders}
        self.folders.extend(f for f in self.added_folders if f.id not in folder_ids)

        self._refresh_search()

    def _refresh_search(self) -> None:
        self.search_engine.set_data(self.bookmarks, self.folders)

    def get_folder(self, folder_id: str) -> Optional[Folder]:
        return next((f for f in self.folders if f.id == folder_id), None)

    async def _enrich(self, bookmark: Bookmark) -> None:
        """Attach URL-derived metadata, overlaid with fetched page metadata.

        A failed fetch leaves the URL baseline in place.
        """
        if bookmark.metadata is not None:
            return

        fetched = None
        if self.fetch_metadata is not None:
            try:
                fetched = await self.fetch_metadata(bookmark.url)
            except Exception as e:
                _log(f"Metadata fetch failed, clustering with URL data: {e}")

        baseline = analyze_url(bookmark.url)
        metadata = merge_metadata(baseline, fetched)
        if metadata is None:
            return

        bookmark.metadata = metadata
        # Prefer a more descriptive title from the page
        if fetched is not None and fetched.title and len(fetched.title) > len(bookmark.title or ""):
            bookmark.title = fetched.title
        elif not bookmark.title and metadata.title:
            bookmark.title = metadata.title
        if not bookmark.description and metadata.description:
            bookmark.description = metadata.description

    def ensure_cluster_folder(self, assignment: ClusterAssignment) -> Folder:
        """Get the folder for a cluster, creating it if needed.

        Looks up a folder linked to the cluster id first, then an
        auto-generated folder with the same name (relinked to the cluster).

        Args:
            assignment: Cluster assignment from the clustering engine

        Returns:
            The folder bookmarks of this cluster belong in
        """
        folder = next((f for f in self.folders if f.cluster_id == assignment.cluster_id), None)
        if folder is not None:
            return folder

        folder = next(
            (f for f in self.folders if f.is_auto_generated and f.name == assignment.label),
            None,
        )
        if folder is not None:
            folder.cluster_id = assignment.cluster_id
            _log(f"Reusing existing folder: {folder.name} (updated cluster id)")
            return folder

        folder = Folder(
            id=_new_id("folder"),
            name=assignment.label,
            parent_id=None,
            cluster_id=assignment.cluster_id,
            is_auto_generated=True,
        )
        self.folders.append(folder)
        self.added_folders.append(folder)
        _log(f"Created cluster folder: {folder.name} ({folder.id})")
        return folder

    async def add_bookmark(self, bookmark: Bookmark, auto_organize: bool = True) -> AddResult:
        """Add a bookmark, filing it into a cluster folder when possible.

        Bookmarks with a folder already chosen are stored as given. A
        clustering failure leaves the bookmark at the root.

        Args:
            bookmark: Bookmark to add (an empty id gets a generated one)
            auto_organize: Whether to run the clustering engine

        Returns:
            The stored bookmark with its assignment and folder
        """
        if not bookmark.id:
            bookmark.id = _new_id("bookmark")

        result = AddResult(bookmark=bookmark)

        if auto_organize and bookmark.folder_id is None:
            await self._enrich(bookmark)
            try:
                assignment = await self.clustering_engine.add_bookmark(bookmark)
            except Exception as e:
                _log(f"Clustering failed for {bookmark.url}, keeping it at root: {e}")
                assignment = None

            if assignment is not None:
                folder = self.ensure_cluster_folder(assignment)
                bookmark.folder_id = folder.id
                bookmark.cluster_id = assignment.cluster_id
                result.assignment = assignment
                result.folder = folder

        self.bookmarks.append(bookmark)
        self.added_bookmarks.append(bookmark)
        self._refresh_search()
        await self._save_added()
        return result

    def search(self, query: str, limit: Optional[int] = None) -> List[SearchResult]:
        """Search bookmarks and folders; failures yield no results."""
        try:
            return self.search_engine.search(query, limit=limit)
        except Exception as e:
            _log(f"Search failed for {query!r}: {e}")
            return []

    async def reset_clustering(self) -> int:
        """Forget all clusters and remove auto-generated folders.

        Bookmarks in removed folders move back to the root. Added bookmarks
        are kept.

        Returns:
            Number of folders removed
        """
        await self.clustering_engine.reset()

        removed = {f.id for f in self.folders if f.is_auto_generated or f.cluster_id}
        for bookmark in self.bookmarks:
            if bookmark.folder_id in removed:
                bookmark.folder_id = None
            bookmark.cluster_id = None

        self.folders = [f for f in self.folders if f.id not in removed]
        self.added_folders = [f for f in self.added_folders if f.id not in removed]
        self._refresh_search()
        await self._save_added()
        _log(f"Clustering reset, removed {len(removed)} folders")
        return len(removed)
