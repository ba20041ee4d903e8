"""Text tokenization shared by the search and clustering engines."""
import re
from typing import List

MIN_TOKEN_LENGTH = 3

STOP_WORDS = frozenset([
    "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for", "of", "with", "by",
    "from", "up", "about", "into", "through", "during", "before", "after", "above", "below",
    "is", "are", "was", "were", "be", "been", "being", "have", "has", "had", "do", "does", "did",
    "will", "would", "could", "should", "may", "might", "must", "shall", "can",
])

_NON_WORD = re.compile(r"[^\w\s]")


def normalize(text: str) -> str:
    """Lowercase text and replace punctuation with spaces."""
    return _NON_WORD.sub(" ", (text or "").lower())


def tokenize(text: str) -> List[str]:
    """Split text into lowercase words of at least three characters.

    Args:
        text: Text to tokenize

    Returns:
        Tokens in their original order (duplicates kept)
    """
    return [token for token in normalize(text).split() if len(token) >= MIN_TOKEN_LENGTH]


def tokenize_for_clustering(text: str) -> List[str]:
    """Tokenize text for TF-IDF vectorization, dropping English stop words."""
    return [
        token for token in normalize(text).split()
        if token not in STOP_WORDS and len(token) >= MIN_TOKEN_LENGTH
    ]


def tokenize_fuzzy(text: str) -> List[str]:
    """Tokenize text and expand each token with n-grams and prefixes.

    For every token, adds its 3-grams (length >= 4), 4-grams (length >= 5)
    and prefixes from four characters up to the full token. The result is
    deduplicated; first occurrence order is kept.

    Args:
        text: Text to tokenize

    Returns:
        Unique tokens
    """
    tokens = tokenize(text)
    expanded = dict.fromkeys(tokens)

    for token in tokens:
        length = len(token)
        # crawl -> cra, raw, awl
        if length >= 4:
            for i in range(length - 2):
                expanded.setdefault(token[i:i + 3])
        # crawl4ai -> craw, rawl, awl4, wl4a, l4ai
        if length >= 5:
            for i in range(length - 3):
                expanded.setdefault(token[i:i + 4])
        # crawl4ai -> craw, crawl, crawl4, ...
        if length >= 4:
            for end in range(4, length + 1):
                expanded.setdefault(token[:end])

    return list(expanded)
