"""Search engine module for bookmarks and folders."""
import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol, Sequence, Tuple

from auto_bookmarks.document_text import build_search_text
from auto_bookmarks.models import Bookmark, Folder, Item, ItemKind
from auto_bookmarks.tokenizer import MIN_TOKEN_LENGTH, tokenize_fuzzy

# Weight of a fuzzy (substring) hit depending on where the token sits in the word
EXACT_MATCH_WEIGHT = 1.0
PREFIX_MATCH_WEIGHT = 0.8
SUFFIX_MATCH_WEIGHT = 0.6
INFIX_MATCH_WEIGHT = 0.4

# Each fuzzy hit adds this much to the term frequency
FUZZY_TF = 0.5


@dataclass
class SearchResult:
    """A ranked search hit."""
    kind: ItemKind
    item: Item
    score: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "item": self.item.to_dict(),
            "score": self.score,
        }


class SearchEngine(Protocol):
    """Protocol for search engines to allow extensibility."""

    def set_data(self, bookmarks: Sequence[Bookmark], folders: Sequence[Folder]) -> None:
        """Replace the corpus searched by subsequent queries."""
        ...

    def search(self, query: str, limit: Optional[int] = None) -> List[SearchResult]:
        """Search the corpus.

        Args:
            query: Search query string
            limit: Maximum number of results to return (None = all)

        Returns:
            List of matching items, sorted by relevance
        """
        ...


@dataclass
class _Document:
    """Derived view of one corpus item."""
    item: Item
    tokens: List[str]
    words: List[str]

    def contains(self, token: str) -> bool:
        if token in self.tokens:
            return True
        if len(token) >= MIN_TOKEN_LENGTH:
            return any(token in word for word in self.words)
        return False


class BM25SearchEngine:
    """BM25 ranking over weighted bookmark text with fuzzy substring matching.

    The corpus is a snapshot of bookmarks and folders replaced wholesale by
    ``set_data``. Derived token lists are built lazily on the first query
    after each ``set_data`` call.
    """

    def __init__(self, k1: float = 1.5, b: float = 0.75):
        self.k1 = k1
        self.b = b
        self.bookmarks: List[Bookmark] = []
        self.folders: List[Folder] = []
        self._documents: Optional[List[_Document]] = None
        self._avg_doc_length: float = 1.0

    def set_data(self, bookmarks: Sequence[Bookmark], folders: Sequence[Folder]) -> None:
        """Replace the corpus snapshot.

        Args:
            bookmarks: All bookmarks
            folders: All folders
        """
        self.bookmarks = list(bookmarks)
        self.folders = list(folders)
        self._documents = None

    def _build_documents(self) -> List[_Document]:
        if self._documents is None:
            documents = []
            for item in [*self.bookmarks, *self.folders]:
                text = build_search_text(item)
                documents.append(_Document(
                    item=item,
                    tokens=tokenize_fuzzy(text),
                    words=text.lower().split(),
                ))
            total = sum(len(doc.tokens) for doc in documents)
            # Corpora of only short words have no tokens at all
            self._avg_doc_length = total / len(documents) if total else 1.0
            self._documents = documents
        return self._documents

    def _idf(self, token: str, documents: List[_Document]) -> float:
        """Inverse document frequency, counting exact and fuzzy containment."""
        total = len(documents)
        doc_count = sum(1 for doc in documents if doc.contains(token))
        if doc_count == 0 or total == 0:
            return 0.0
        return math.log(1 + (total - doc_count + 0.5) / (doc_count + 0.5))

    def _term_frequency(self, token: str, doc: _Document) -> Tuple[float, float]:
        """Get (tf, match weight) of a query token in a document."""
        exact = doc.tokens.count(token)
        if exact > 0:
            return float(exact), EXACT_MATCH_WEIGHT

        if len(token) < MIN_TOKEN_LENGTH:
            return 0.0, EXACT_MATCH_WEIGHT

        fuzzy_matches = 0
        weight = EXACT_MATCH_WEIGHT
        for word in doc.words:
            if token in word:
                fuzzy_matches += 1
                # The last matching word decides the weight
                if word.startswith(token):
                    weight = PREFIX_MATCH_WEIGHT
                elif word.endswith(token):
                    weight = SUFFIX_MATCH_WEIGHT
                else:
                    weight = INFIX_MATCH_WEIGHT

        return fuzzy_matches * FUZZY_TF, weight

    def _score(self, doc: _Document, query_tokens: List[str], idf_cache: Dict[str, float]) -> float:
        score = 0.0
        doc_length = len(doc.tokens)
        length_norm = 1 - self.b + self.b * (doc_length / self._avg_doc_length)

        for token in query_tokens:
            tf, weight = self._term_frequency(token, doc)
            if tf <= 0:
                continue
            if token not in idf_cache:
                idf_cache[token] = self._idf(token, self._documents)
            idf = idf_cache[token]
            score += idf * (tf * (self.k1 + 1)) / (tf + self.k1 * length_norm) * weight

        return score

    def search(self, query: str, limit: Optional[int] = None) -> List[SearchResult]:
        """Rank bookmarks and folders against a query.

        Args:
            query: Search query string
            limit: Maximum number of results to return (None = all)

        Returns:
            Results with a positive score, highest first. Equal scores keep
            corpus order (bookmarks before folders).
        """
        if not query or not query.strip():
            return []

        documents = self._build_documents()
        if not documents:
            return []

        query_tokens = tokenize_fuzzy(query)
        idf_cache: Dict[str, float] = {}

        results = []
        for doc in documents:
            score = self._score(doc, query_tokens, idf_cache)
            if score > 0:
                results.append(SearchResult(kind=doc.item.kind, item=doc.item, score=score))

        # list.sort is stable, so ties keep corpus order
        results.sort(key=lambda r: r.score, reverse=True)

        if limit is not None:
            return results[:limit]
        return results
