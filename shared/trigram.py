"""
Trigram similarity with PostgreSQL ``pg_trgm`` semantics.

PostgreSQL ranks search candidates with ``similarity()`` from the pg_trgm
extension. The same scoring is needed wherever Postgres is not available:
SQLite connections get :func:`similarity` registered as a SQL function, and
the in-memory store calls it directly, so all backends rank identically.

A string's trigram set is built per word: the text is lower-cased, split on
non-alphanumeric characters, and every word is padded with two leading
spaces and one trailing space before its 3-character windows are taken.
"""

from typing import FrozenSet, Optional

SIMILARITY_THRESHOLD = 0.10


def _words(text: str):
    word = []
    for ch in text.lower():
        if ch.isalnum():
            word.append(ch)
        elif word:
            yield "".join(word)
            word = []
    if word:
        yield "".join(word)


def trigrams(text: Optional[str]) -> FrozenSet[str]:
    if not text:
        return frozenset()
    grams = set()
    for word in _words(text):
        padded = f"  {word} "
        grams.update(padded[i:i + 3] for i in range(len(padded) - 2))
    return frozenset(grams)


def similarity(a: Optional[str], b: Optional[str]) -> float:
    """Shared trigrams over the union of both trigram sets, in [0, 1]."""
    ta, tb = trigrams(a), trigrams(b)
    if not ta or not tb:
        return 0.0
    shared = len(ta & tb)
    return shared / (len(ta) + len(tb) - shared)
