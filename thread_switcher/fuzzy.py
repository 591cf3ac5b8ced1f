"""Fuzzy matching for search-as-you-type.

Each whitespace-separated token of the query has to appear in the label as
a case-insensitive subsequence. Lower scores are better matches.
"""

from typing import Callable, Optional, Sequence, TypeVar

T = TypeVar("T")

WORD_SEPARATORS = " -_./\\:"

# Score weights
GAP_PENALTY = 1.0  # per skipped character between two matches
LEADING_PENALTY = 0.1  # per character before the first match
CONSECUTIVE_BONUS = 2.0
BOUNDARY_BONUS = 1.5


def fuzzy_score(token: str, text: str) -> Optional[float]:
    """Score a single token against text, or None when it doesn't match."""
    token = token.lower()
    text = text.lower()
    if not token:
        return 0.0

    score = 0.0
    pos = 0
    prev = -1
    for ch in token:
        idx = text.find(ch, pos)
        if idx < 0:
            return None
        if prev < 0:
            score += idx * LEADING_PENALTY
        elif idx == prev + 1:
            score -= CONSECUTIVE_BONUS
        else:
            score += (idx - prev - 1) * GAP_PENALTY
        if idx == 0 or text[idx - 1] in WORD_SEPARATORS:
            score -= BOUNDARY_BONUS
        prev = idx
        pos = idx + 1

    return score


def fuzzy_match(query: str, text: str) -> Optional[float]:
    """Score every query token against text; None if any token misses."""
    total = 0.0
    for token in query.split():
        score = fuzzy_score(token, text)
        if score is None:
            return None
        total += score
    return total


def fuzzy_filter(items: Sequence[T], query: str, key: Callable[[T], str]) -> list[T]:
    """Return the items matching query, best first.

    An empty query returns the items in their input order. Ties keep
    input order, so filtering is deterministic and idempotent.
    """
    if not query.split():
        return list(items)

    scored = []
    for position, item in enumerate(items):
        score = fuzzy_match(query, key(item))
        if score is not None:
            scored.append((score, position, item))

    scored.sort(key=lambda entry: (entry[0], entry[1]))
    return [item for _, _, item in scored]
