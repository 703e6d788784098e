"""BM25 ranking over a SearchIndex with fuzzy, phrase, tag and version handling."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable, Iterable, Mapping
from functools import lru_cache
import logging

from site_search.config import SearchSettings
from site_search.observability.metrics import SEARCH_LATENCY, record_query_outcome, track_latency
from site_search.observability.tracing import create_span
from site_search.search.analyzers import Analyzer, StandardAnalyzer
from site_search.search.fuzzy import fuzzy_expand, fuzzy_expand_with_trigrams, get_max_edit_distance
from site_search.search.models import PostRecord, SearchIndex, SearchResult
from site_search.search.query import ParsedQuery, parse_query, split_tag_filter
from site_search.search.snippet import extract_snippet
from site_search.search.stats import bm25, calculate_idf


logger = logging.getLogger(__name__)

ALL_VERSIONS = "all"


class SearchEngine:
    """Rank posts of a :class:`SearchIndex` for free-text queries.

    The engine holds no per-query state and never mutates the index, so one
    instance can serve concurrent readers.
    """

    def __init__(self, settings: SearchSettings | None = None, analyzer: Analyzer | None = None) -> None:
        self.settings = settings or SearchSettings()
        self.analyzer = analyzer or StandardAnalyzer(
            use_stopwords=self.settings.use_stopwords,
            use_stemming=self.settings.use_stemming,
        )

    def search(self, index: SearchIndex, query: str, version_filter: str = ALL_VERSIONS) -> list[SearchResult]:
        """Return at most ``max_results`` hits ordered by descending score, then post id."""
        with create_span("search.query", attributes={"search.version_filter": version_filter}) as span:
            with track_latency(SEARCH_LATENCY):
                results = self._search(index, query, version_filter)
            span.set_attribute("search.result_count", len(results))
        record_query_outcome(len(results))
        return results

    def _search(self, index: SearchIndex, query: str, version_filter: str) -> list[SearchResult]:
        query = query.strip().lower()
        if not query:
            return []
        if index.total_docs <= 0 or index.avg_doc_len <= 0:
            logger.debug("Index has no scorable documents; returning no results")
            return []

        tag_filter, residual = split_tag_filter(query)
        parsed = parse_query(residual, self.analyzer)

        def eligible(post: PostRecord) -> bool:
            if version_filter != ALL_VERSIONS and post.version != version_filter:
                return False
            return not tag_filter or post.has_tag(tag_filter)

        scores: dict[int, float] = defaultdict(float)
        matched_terms = self._score_terms(index, parsed, eligible, scores)
        self._score_phrases(index, parsed, eligible, scores)

        if parsed.is_empty() and tag_filter:
            for post_id, post in enumerate(index.posts):
                if eligible(post):
                    scores[post_id] = 1.0

        self._apply_boosts(index, scores, residual.strip(), tag_filter)

        ranked = sorted(scores.items(), key=lambda item: (-item[1], item[0]))[: self.settings.max_results]
        highlight_terms = self._highlight_terms(index, parsed, matched_terms)
        logger.debug(
            "Query %r matched %d documents (tag=%r, version=%r)",
            query,
            len(scores),
            tag_filter,
            version_filter,
        )
        return [
            self._build_result(index, post_id, score, version_filter, highlight_terms) for post_id, score in ranked
        ]

    def _score_terms(
        self,
        index: SearchIndex,
        parsed: ParsedQuery,
        eligible: Callable[[PostRecord], bool],
        scores: dict[int, float],
    ) -> list[str]:
        matched: list[str] = []
        for term in dict.fromkeys(parsed.terms):
            postings = index.inverted.get(term)
            if postings:
                self._accumulate(index, postings, eligible, scores, weight=1.0)
                matched.append(term)
                continue
            if not self.settings.fuzzy_enabled:
                continue
            for fuzzy_term in self.expand_term(index, term):
                self._accumulate(
                    index,
                    index.inverted[fuzzy_term],
                    eligible,
                    scores,
                    weight=self.settings.fuzzy_modifier,
                )
                matched.append(fuzzy_term)
        return matched

    def _accumulate(
        self,
        index: SearchIndex,
        postings: Mapping[int, int],
        eligible: Callable[[PostRecord], bool],
        scores: dict[int, float],
        *,
        weight: float,
    ) -> None:
        idf = calculate_idf(len(postings), index.total_docs)
        for post_id, freq in postings.items():
            if not eligible(index.posts[post_id]):
                continue
            doc_len = index.doc_lens.get(post_id, freq)
            scores[post_id] += (
                idf * bm25(freq, doc_len, index.avg_doc_len, k1=self.settings.bm25_k1, b=self.settings.bm25_b) * weight
            )

    def expand_term(self, index: SearchIndex, term: str) -> list[str]:
        """Indexed terms within the allowed edit distance of ``term``."""
        max_distance = min(self.settings.max_edit_distance, get_max_edit_distance(len(term)))
        if max_distance <= 0 or not index.inverted:
            return []
        if index.trigram_index:
            candidates = fuzzy_expand_with_trigrams(term, index.trigram_index, max_distance)
        else:
            candidates = sorted(fuzzy_expand(term, index.inverted, max_distance))
        return [candidate for candidate in candidates if candidate in index.inverted]

    def _score_phrases(
        self,
        index: SearchIndex,
        parsed: ParsedQuery,
        eligible: Callable[[PostRecord], bool],
        scores: dict[int, float],
    ) -> None:
        for phrase in parsed.phrases:
            for post_id, post in enumerate(index.posts):
                if not eligible(post):
                    continue
                if phrase in post.normalized_title:
                    scores[post_id] += self.settings.phrase_boost * 2
                elif phrase in post.content.lower():
                    scores[post_id] += self.settings.phrase_boost

    def _apply_boosts(self, index: SearchIndex, scores: dict[int, float], query: str, tag_filter: str) -> None:
        for post_id in scores:
            post = index.posts[post_id]
            if query and query in post.normalized_title:
                scores[post_id] += self.settings.title_boost
            for tag in post.normalized_tags:
                if (query and tag == query) or (tag_filter and tag == tag_filter):
                    scores[post_id] += self.settings.tag_boost

    def _highlight_terms(self, index: SearchIndex, parsed: ParsedQuery, matched_terms: Iterable[str]) -> list[str]:
        terms: dict[str, None] = dict.fromkeys(parsed.phrases)
        terms.update(dict.fromkeys(parsed.originals))
        for term in matched_terms:
            terms.update(dict.fromkeys(index.stem_map.get(term, (term,))))
        return list(terms)

    def _build_result(
        self,
        index: SearchIndex,
        post_id: int,
        score: float,
        version_filter: str,
        highlight_terms: list[str],
    ) -> SearchResult:
        post = index.posts[post_id]
        title = post.title
        if version_filter == ALL_VERSIONS and post.version:
            title = f"[{post.version}] {title}"
        snippet = extract_snippet(
            post.content,
            highlight_terms,
            max_content_length=self.settings.max_snippet_content_length,
            default_length=self.settings.snippet_length,
            context_before=self.settings.snippet_context_before,
            context_after=self.settings.snippet_context_after,
        )
        return SearchResult(
            id=post_id,
            title=title,
            link=post.link,
            description=post.description,
            snippet=snippet,
            version=post.version,
            score=score,
        )


@lru_cache(maxsize=1)
def _default_engine() -> SearchEngine:
    # Built-in defaults only; environment overrides apply to explicitly configured engines.
    return SearchEngine(SearchSettings.model_construct())


def search(index: SearchIndex, query: str, version_filter: str = ALL_VERSIONS) -> list[SearchResult]:
    """Search ``index`` with the default ranking constants."""
    return _default_engine().search(index, query, version_filter)
