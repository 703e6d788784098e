"""Fuzzy matching for typo-tolerant search.

Edit distance is computed with a two-row Levenshtein table. Expanding a
query term against a large vocabulary goes through a trigram index first:
only terms sharing at least half of the query term's trigrams are handed to
the exact distance check.

Smart Defaults:
- No fuzzy matching for very short terms (1-2 chars)
- Max edit distance of 1 for short terms (3-5 chars)
- Max edit distance of 2 for longer terms (6+ chars)
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Mapping, Sequence
import logging


logger = logging.getLogger(__name__)

MAX_EDIT_DISTANCE = 2
TRIGRAM_SIZE = 3


def levenshtein_distance(s1: str, s2: str) -> int:
    """Calculate the Levenshtein (edit) distance between two strings.

    Only two rows of the dynamic programming table are kept, sized by the
    shorter string.

    Examples:
        >>> levenshtein_distance("kitten", "sitting")
        3
        >>> levenshtein_distance("", "abc")
        3
    """
    if not s1:
        return len(s2)
    if not s2:
        return len(s1)

    # Use shorter string as columns for space efficiency
    if len(s1) > len(s2):
        s1, s2 = s2, s1

    m, n = len(s1), len(s2)
    prev_row = list(range(m + 1))
    curr_row = [0] * (m + 1)

    for j in range(1, n + 1):
        curr_row[0] = j
        for i in range(1, m + 1):
            cost = 0 if s1[i - 1] == s2[j - 1] else 1
            curr_row[i] = min(
                prev_row[i] + 1,  # deletion
                curr_row[i - 1] + 1,  # insertion
                prev_row[i - 1] + cost,  # substitution
            )
        prev_row, curr_row = curr_row, prev_row

    return prev_row[m]


def fuzzy_match(term: str, target: str, max_distance: int) -> bool:
    """Return True when ``term`` is within ``max_distance`` edits of ``target``."""
    if abs(len(term) - len(target)) > max_distance:
        return False
    return levenshtein_distance(term, target) <= max_distance


def get_max_edit_distance(term_length: int) -> int:
    """Get the maximum allowed edit distance for a term based on its length."""
    if term_length <= 2:
        return 0  # No fuzzy for very short terms
    if term_length <= 5:
        return 1  # 1 typo for short terms
    return 2  # 2 typos for longer terms


def generate_trigrams(word: str) -> list[str]:
    """Overlapping three-character windows of ``word``.

    A word shorter than three characters is its own single trigram.
    """
    if len(word) < TRIGRAM_SIZE:
        return [word]
    return [word[idx : idx + TRIGRAM_SIZE] for idx in range(len(word) - TRIGRAM_SIZE + 1)]


def build_trigram_index(terms: Iterable[str]) -> dict[str, list[str]]:
    """Map each trigram to the terms containing it."""
    index: dict[str, list[str]] = defaultdict(list)
    for term in terms:
        for trigram in dict.fromkeys(generate_trigrams(term)):
            index[trigram].append(term)
    return dict(index)


def fuzzy_expand(term: str, vocabulary: Iterable[str], max_distance: int = MAX_EDIT_DISTANCE) -> list[str]:
    """Brute-force expansion: every vocabulary term within ``max_distance`` of ``term``."""
    return [candidate for candidate in vocabulary if fuzzy_match(term, candidate, max_distance)]


def fuzzy_expand_with_trigrams(
    term: str,
    trigram_index: Mapping[str, Sequence[str]],
    max_distance: int = MAX_EDIT_DISTANCE,
) -> list[str]:
    """Expand ``term`` using the trigram index to narrow candidates.

    Candidates need a trigram overlap of at least half the query term's
    trigram count before the exact distance check runs. Results are ordered by
    edit distance, then alphabetically.
    """
    if not term or not trigram_index:
        return []

    trigrams = generate_trigrams(term)
    overlap: dict[str, int] = defaultdict(int)
    for trigram in trigrams:
        for candidate in trigram_index.get(trigram, ()):
            overlap[candidate] += 1

    min_overlap = len(trigrams) // 2
    matches: list[tuple[int, str]] = []
    for candidate, shared in overlap.items():
        if shared < min_overlap:
            continue
        if abs(len(term) - len(candidate)) > max_distance:
            continue
        distance = levenshtein_distance(term, candidate)
        if distance <= max_distance:
            matches.append((distance, candidate))

    matches.sort()
    logger.debug(
        "Fuzzy expansion of %r: %d candidates, %d matches",
        term,
        len(overlap),
        len(matches),
    )
    return [candidate for _distance, candidate in matches]
