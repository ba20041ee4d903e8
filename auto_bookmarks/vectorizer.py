"""TF-IDF vectorization and sparse vector math for clustering.

Sparse vectors are plain dicts mapping term to a positive weight. Absent
terms are zero; zero entries are never stored. When persisted, vectors are
written as lists of ``[term, weight]`` pairs.
"""
import math
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Set

from auto_bookmarks.tokenizer import tokenize_for_clustering

SparseVector = Dict[str, float]


def prune(vector: SparseVector) -> SparseVector:
    """Drop non-positive entries from a vector."""
    return {term: weight for term, weight in vector.items() if weight > 0}


def cosine_similarity(vec_a: Optional[SparseVector], vec_b: Optional[SparseVector]) -> float:
    """Cosine similarity of two sparse vectors.

    Returns:
        Value in [0, 1]; 0 when either vector is empty or has zero norm
    """
    if not vec_a or not vec_b:
        return 0.0

    # Iterate over the smaller vector for the dot product
    small, large = (vec_a, vec_b) if len(vec_a) <= len(vec_b) else (vec_b, vec_a)
    # fsum keeps the result independent of dict iteration order
    dot = math.fsum(weight * large[term] for term, weight in small.items() if term in large)

    norm_a = math.sqrt(math.fsum(w * w for w in vec_a.values()))
    norm_b = math.sqrt(math.fsum(w * w for w in vec_b.values()))
    magnitude = norm_a * norm_b
    if magnitude == 0:
        return 0.0

    return max(0.0, min(1.0, dot / magnitude))


def compute_centroid(vectors: List[SparseVector]) -> SparseVector:
    """Elementwise mean of vectors (absent terms count as zero)."""
    if not vectors:
        return {}

    weights: Dict[str, List[float]] = {}
    for vector in vectors:
        for term, weight in vector.items():
            weights.setdefault(term, []).append(weight)

    count = len(vectors)
    return prune({term: math.fsum(values) / count for term, values in weights.items()})


def vector_to_pairs(vector: SparseVector) -> List[List[Any]]:
    """Serialize a vector as sorted ``[term, weight]`` pairs."""
    return [[term, vector[term]] for term in sorted(vector)]


def vector_from_pairs(pairs: Iterable[Any]) -> SparseVector:
    """Restore a vector written by ``vector_to_pairs``."""
    return prune({str(term): float(weight) for term, weight in pairs})


class TermStatistics:
    """Vocabulary and document frequency counts for one corpus."""

    def __init__(self):
        self.vocabulary: Set[str] = set()
        self.document_frequencies: Dict[str, int] = {}

    def add_terms(self, terms: Iterable[str]) -> None:
        """Count one document containing the given terms."""
        for term in set(terms):
            self.vocabulary.add(term)
            self.document_frequencies[term] = self.document_frequencies.get(term, 0) + 1

    def document_frequency(self, term: str) -> int:
        return self.document_frequencies.get(term, 0)

    def to_state(self) -> Dict[str, Any]:
        return {
            "term_counts": [[term, self.document_frequencies[term]] for term in sorted(self.document_frequencies)],
            "vocabulary": sorted(self.vocabulary),
        }

    @classmethod
    def from_state(cls, state: Dict[str, Any]) -> "TermStatistics":
        stats = cls()
        stats.document_frequencies = {str(term): int(count) for term, count in state.get("term_counts", [])}
        stats.vocabulary = set(state.get("vocabulary", [])) | set(stats.document_frequencies)
        return stats


@dataclass
class _VectorizedDocument:
    tokens: List[str]
    term_freq: Dict[str, int] = field(default_factory=dict)


class TfIdfVectorizer:
    """Append-only TF-IDF model over every document ever added.

    With a single document IDF is degenerate, so its vector is the term
    frequency normalized by the most frequent term instead.
    """

    def __init__(self):
        self.documents: List[_VectorizedDocument] = []
        self.statistics = TermStatistics()

    @property
    def vocabulary(self) -> Set[str]:
        return self.statistics.vocabulary

    def add_document(self, text: str) -> int:
        """Add a document to the corpus.

        Args:
            text: Document text

        Returns:
            Index of the new document
        """
        tokens = tokenize_for_clustering(text)
        self.documents.append(_VectorizedDocument(tokens=tokens, term_freq=dict(Counter(tokens))))
        self.statistics.add_terms(tokens)
        return len(self.documents) - 1

    def get_vector(self, index: int) -> SparseVector:
        """Get the weighted vector of a document.

        Args:
            index: Document index returned by ``add_document``

        Returns:
            Sparse vector (may be empty)

        Raises:
            IndexError: If no document has that index
        """
        doc = self.documents[index]
        if not doc.term_freq:
            return {}

        if len(self.documents) == 1:
            max_tf = max(doc.term_freq.values())
            return prune({term: tf / max_tf for term, tf in doc.term_freq.items()})

        total = len(self.documents)
        vector = {}
        for term, tf in doc.term_freq.items():
            df = self.statistics.document_frequency(term)
            if df == 0:
                continue
            vector[term] = tf * math.log(total / df)
        return prune(vector)

    def reset(self) -> None:
        self.documents = []
        self.statistics = TermStatistics()

    def to_state(self) -> Dict[str, Any]:
        """Serialize to JSON-compatible data."""
        state = self.statistics.to_state()
        state["documents"] = [
            {
                "tokens": list(doc.tokens),
                "term_freq": [[term, doc.term_freq[term]] for term in sorted(doc.term_freq)],
                "index": i,
            }
            for i, doc in enumerate(self.documents)
        ]
        return state

    @classmethod
    def from_state(cls, state: Dict[str, Any]) -> "TfIdfVectorizer":
        """Restore a vectorizer written by ``to_state``.

        Raises:
            ValueError, TypeError, KeyError: If the state is malformed
        """
        if not isinstance(state, dict):
            raise ValueError("vectorizer state must be a mapping")

        vectorizer = cls()
        vectorizer.statistics = TermStatistics.from_state(state)
        for raw in state.get("documents", []):
            tokens = [str(t) for t in raw["tokens"]]
            if "term_freq" in raw:
                term_freq = {str(term): int(count) for term, count in raw["term_freq"]}
            else:
                term_freq = dict(Counter(tokens))
            vectorizer.documents.append(_VectorizedDocument(tokens=tokens, term_freq=term_freq))
        return vectorizer
