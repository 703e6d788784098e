"""Unit tests for BM25 statistics helpers."""

import math

import pytest

from site_search.search.stats import DEFAULT_B, DEFAULT_K1, average_length, bm25, calculate_idf


@pytest.mark.unit
class TestAverageLength:
    def test_mean(self):
        assert average_length({0: 2, 1: 4}) == 3.0

    def test_empty(self):
        assert average_length({}) == 0.0


@pytest.mark.unit
class TestCalculateIdf:
    """IDF follows the ``1 +`` BM25 variant."""

    def test_formula(self):
        assert calculate_idf(1, 10) == pytest.approx(math.log(1 + 9.5 / 1.5))

    def test_positive_for_term_in_every_document(self):
        assert calculate_idf(10, 10) > 0

    def test_rarer_terms_weigh_more(self):
        assert calculate_idf(1, 100) > calculate_idf(10, 100) > calculate_idf(90, 100)

    def test_empty_corpus(self):
        assert calculate_idf(0, 0) == 0.0


@pytest.mark.unit
class TestBm25:
    """Term weight without IDF."""

    def test_defaults(self):
        assert DEFAULT_K1 == 1.2
        assert DEFAULT_B == 0.75

    def test_average_length_document(self):
        # tf=1 at the average length: (1 * 2.2) / (1 + 1.2)
        assert bm25(1, 10, 10.0) == pytest.approx(1.0)

    def test_zero_frequency(self):
        assert bm25(0, 10, 10.0) == 0.0

    def test_zero_average_length(self):
        assert bm25(3, 10, 0.0) == 0.0

    def test_increases_with_frequency_and_saturates(self):
        scores = [bm25(tf, 10, 10.0) for tf in (1, 2, 5, 50)]

        assert scores == sorted(scores)
        assert scores[-1] < DEFAULT_K1 + 1

    def test_longer_documents_score_lower(self):
        assert bm25(1, 5, 10.0) > bm25(1, 20, 10.0)

    def test_b_zero_ignores_length(self):
        assert bm25(1, 5, 10.0, b=0.0) == pytest.approx(bm25(1, 50, 10.0, b=0.0))
