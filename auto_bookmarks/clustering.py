"""Automatic bookmark clustering.

Each new bookmark is vectorized with TF-IDF and assigned to the cluster whose
centroid is most cosine-similar to it. When no cluster is similar enough a
new one is created. Clusters form a flat list under a single implicit root.

Calls to ``add_bookmark`` must be serialized by the caller: the engine
mutates centroids and the TF-IDF corpus without locking.
"""
import sys
import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from auto_bookmarks.config import ClusteringConfig
from auto_bookmarks.document_text import build_clustering_text, extract_hostname
from auto_bookmarks.models import Bookmark
from auto_bookmarks.state_store import StateStore
from auto_bookmarks.tokenizer import tokenize_for_clustering
from auto_bookmarks.vectorizer import (
    SparseVector,
    TfIdfVectorizer,
    compute_centroid,
    cosine_similarity,
    vector_from_pairs,
    vector_to_pairs,
)

TREE_STATE_KEY = "clustering-tree"
TFIDF_STATE_KEY = "clustering-tfidf"

ROOT_ID = "root"
ROOT_LABEL = "All Bookmarks"


def _log(message: str) -> None:
    print(f"[Clustering] {message}", file=sys.stderr)


def generate_cluster_id() -> str:
    return f"cluster-{uuid.uuid4().hex[:12]}"


@dataclass
class ClusterMember:
    """A bookmark assigned to a cluster, with the vector it had when added."""
    item_id: str
    url: str
    vector: SparseVector

    def to_state(self) -> Dict[str, Any]:
        return {"item_id": self.item_id, "url": self.url, "vector": vector_to_pairs(self.vector)}

    @classmethod
    def from_state(cls, state: Dict[str, Any]) -> "ClusterMember":
        return cls(
            item_id=str(state.get("item_id") or ""),
            url=str(state.get("url") or ""),
            vector=vector_from_pairs(state["vector"]),
        )


@dataclass
class Cluster:
    """A similarity folder: centroid is the mean of its member vectors."""
    id: str
    label: str
    centroid: SparseVector = field(default_factory=dict)
    members: List[ClusterMember] = field(default_factory=list)
    over_capacity: bool = False

    def add_member(self, member: ClusterMember) -> None:
        """Append a member and recompute the centroid from all member vectors."""
        self.members.append(member)
        self.centroid = compute_centroid([m.vector for m in self.members])

    def to_state(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "label": self.label,
            "centroid": vector_to_pairs(self.centroid),
            "members": [m.to_state() for m in self.members],
            "over_capacity": self.over_capacity,
        }

    @classmethod
    def from_state(cls, state: Dict[str, Any]) -> "Cluster":
        members = [ClusterMember.from_state(m) for m in state.get("members", [])]
        centroid = vector_from_pairs(state.get("centroid") or [])
        if members and not centroid:
            centroid = compute_centroid([m.vector for m in members])
        return cls(
            id=str(state["id"]),
            label=str(state.get("label") or ""),
            centroid=centroid,
            members=members,
            over_capacity=bool(state.get("over_capacity", False)),
        )


@dataclass
class ClusterAssignment:
    """Where a bookmark was placed."""
    cluster_id: str
    label: str
    similarity: float
    is_new_cluster: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cluster_id": self.cluster_id,
            "label": self.label,
            "similarity": self.similarity,
            "is_new_cluster": self.is_new_cluster,
        }


@dataclass
class ClusterStats:
    cluster_count: int
    total_members: int
    vocabulary_size: int
    threshold: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cluster_count": self.cluster_count,
            "total_members": self.total_members,
            "vocabulary_size": self.vocabulary_size,
            "threshold": self.threshold,
        }


class ClusteringEngine:
    """Online nearest-centroid clustering of bookmarks into folders."""

    def __init__(self, store: StateStore, config: Optional[ClusteringConfig] = None):
        """Create an engine.

        Args:
            store: Key-value store used to persist clusters and TF-IDF state
            config: Clustering parameters (defaults to ClusteringConfig())
        """
        self.store = store
        self.config = config or ClusteringConfig()
        self.vectorizer = TfIdfVectorizer()
        self.clusters: List[Cluster] = []
        self.is_initialized = False

    @property
    def threshold(self) -> float:
        return self.config.similarity_threshold

    async def initialize(self) -> None:
        """Restore persisted clusters and TF-IDF state, if any.

        Missing or corrupt state leaves the engine empty. Safe to call more
        than once; only the first call reads the store.
        """
        if self.is_initialized:
            return

        try:
            saved_tree = await self.store.get(TREE_STATE_KEY)
            saved_tfidf = await self.store.get(TFIDF_STATE_KEY)

            if saved_tree and saved_tfidf:
                clusters = [Cluster.from_state(c) for c in saved_tree.get("clusters", [])]
                vectorizer = TfIdfVectorizer.from_state(saved_tfidf)
                self.clusters = clusters
                self.vectorizer = vectorizer
                _log(f"Loaded existing clustering state with {len(self.clusters)} clusters")
        except Exception as e:
            _log(f"Failed to restore clustering state, starting empty: {e}")
            self.clusters = []
            self.vectorizer = TfIdfVectorizer()

        self.is_initialized = True

    async def persist_state(self) -> None:
        """Write clusters and TF-IDF state to the store.

        Raises whatever the store raises; in-memory state is kept either way.
        """
        await self.store.set(TREE_STATE_KEY, {
            "id": ROOT_ID,
            "label": ROOT_LABEL,
            "clusters": [c.to_state() for c in self.clusters],
        })
        await self.store.set(TFIDF_STATE_KEY, self.vectorizer.to_state())

    def get_clusters(self) -> List[Cluster]:
        return list(self.clusters)

    def get_cluster(self, cluster_id: str) -> Optional[Cluster]:
        for cluster in self.clusters:
            if cluster.id == cluster_id:
                return cluster
        return None

    def find_best_cluster(self, vector: SparseVector) -> Tuple[Optional[Cluster], float]:
        """Find the cluster whose centroid is most similar to a vector.

        Ties go to the cluster created first.

        Returns:
            (cluster, similarity), or (None, 0.0) when there are no clusters
        """
        best_cluster: Optional[Cluster] = None
        best_similarity = 0.0

        for cluster in self.clusters:
            similarity = cosine_similarity(vector, cluster.centroid)
            if best_cluster is None or similarity > best_similarity:
                best_cluster = cluster
                best_similarity = similarity

        return best_cluster, best_similarity

    def generate_label(self, bookmark: Bookmark) -> str:
        """Make a readable cluster label from a bookmark.

        Uses the hostname ("Github.com Resources"), then the first words of
        the title ("Chocolate Chip Cookie Collection"), then a timestamp.
        """
        hostname = extract_hostname(bookmark.url)
        if hostname:
            return f"{hostname[0].upper()}{hostname[1:]} Resources"

        if bookmark.title and bookmark.title.strip():
            words = bookmark.title.split()[:self.config.label_title_words]
            return " ".join(words) + " Collection"

        return f"Cluster {int(time.time() * 1000)}"

    def _create_cluster(self, bookmark: Bookmark, vector: SparseVector) -> Cluster:
        cluster = Cluster(id=generate_cluster_id(), label=self.generate_label(bookmark))
        cluster.add_member(ClusterMember(item_id=bookmark.id, url=bookmark.url, vector=dict(vector)))
        self.clusters.append(cluster)
        _log(f"Created new cluster: {cluster.label}")
        return cluster

    def _add_to_cluster(self, cluster: Cluster, bookmark: Bookmark, vector: SparseVector) -> None:
        cluster.add_member(ClusterMember(item_id=bookmark.id, url=bookmark.url, vector=dict(vector)))
        _log(f'Added "{bookmark.title}" to cluster "{cluster.label}" ({len(cluster.members)} items)')

        if len(cluster.members) > self.config.max_cluster_size:
            # Splitting is not implemented; the flag lets callers notice
            cluster.over_capacity = True
            _log(f'Cluster "{cluster.label}" exceeded max size {self.config.max_cluster_size}, needs split')

    async def add_bookmark(self, bookmark: Bookmark) -> Optional[ClusterAssignment]:
        """Assign a bookmark to a cluster, creating one if needed.

        Args:
            bookmark: Bookmark to place

        Returns:
            The assignment, or None if the bookmark has no usable text

        Raises:
            Whatever the state store raises while persisting
        """
        if not self.is_initialized:
            await self.initialize()

        text = build_clustering_text(bookmark)
        if not tokenize_for_clustering(text):
            _log(f"No text content found for: {bookmark.url}")
            return None

        doc_index = self.vectorizer.add_document(text)
        vector = self.vectorizer.get_vector(doc_index)
        if not vector:
            _log(f"Empty vector generated for: {bookmark.url}")
            return None

        if not self.clusters:
            cluster = self._create_cluster(bookmark, vector)
            _log("Cold start: created first cluster")
            assignment = ClusterAssignment(
                cluster_id=cluster.id,
                label=cluster.label,
                similarity=0.0,
                is_new_cluster=True,
            )
        else:
            best, similarity = self.find_best_cluster(vector)
            if best is not None and similarity >= self.threshold:
                self._add_to_cluster(best, bookmark, vector)
                assignment = ClusterAssignment(
                    cluster_id=best.id,
                    label=best.label,
                    similarity=similarity,
                    is_new_cluster=False,
                )
            else:
                cluster = self._create_cluster(bookmark, vector)
                assignment = ClusterAssignment(
                    cluster_id=cluster.id,
                    label=cluster.label,
                    similarity=similarity,
                    is_new_cluster=True,
                )

        await self.persist_state()
        return assignment

    def get_stats(self) -> ClusterStats:
        """Get a summary of the clustering state."""
        return ClusterStats(
            cluster_count=len(self.clusters),
            total_members=sum(len(c.members) for c in self.clusters),
            vocabulary_size=len(self.vectorizer.vocabulary),
            threshold=self.threshold,
        )

    async def reset(self) -> None:
        """Forget every cluster and all TF-IDF statistics, then persist."""
        self.vectorizer = TfIdfVectorizer()
        self.clusters = []
        self.is_initialized = True
        await self.persist_state()
        _log("Clustering state reset")
