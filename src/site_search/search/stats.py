"""Statistical helpers for BM25 scoring.

The functions here only deal with numbers so they can be unit tested
without building an index.
"""

from __future__ import annotations

from collections.abc import Mapping
import math


DEFAULT_K1 = 1.2
DEFAULT_B = 0.75


def average_length(doc_lens: Mapping[int, int]) -> float:
    """Mean document length, 0.0 for an empty corpus."""
    if not doc_lens:
        return 0.0
    return sum(doc_lens.values()) / len(doc_lens)


def calculate_idf(doc_freq: int, total_docs: int) -> float:
    """Return ``ln(1 + (N - df + 0.5) / (df + 0.5))``.

    The ``1 +`` keeps the value positive even for terms present in every
    document. An empty corpus yields 0.0.
    """
    if total_docs <= 0:
        return 0.0
    df = max(0, min(doc_freq, total_docs))
    return math.log(1 + (total_docs - df + 0.5) / (df + 0.5))


def bm25(tf: int, doc_length: int, avg_doc_length: float, *, k1: float = DEFAULT_K1, b: float = DEFAULT_B) -> float:
    """Compute the BM25 term weight without IDF."""
    if tf <= 0 or avg_doc_length <= 0:
        return 0.0
    denominator = tf + k1 * (1 - b + b * (doc_length / avg_doc_length))
    return (tf * (k1 + 1)) / denominator
