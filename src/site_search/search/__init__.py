"""
Full-text search engine for site posts.

This package provides a pure-Python search stack:
- analyzers: Tokenizer and filters (lowercase, length, stop, stemming)
- stemmer: Porter stemming algorithm
- fuzzy: Edit distance and trigram-accelerated term expansion
- query: Phrase/term/tag query parsing
- indexer: Inverted index construction from posts
- engine: BM25 ranking with boosts, filters and snippets
- snapshot: JSON snapshot persistence for built indexes
"""

from site_search.search.analyzers import DEFAULT_ANALYZER, Analyzer, StandardAnalyzer, get_analyzer, tokenize
from site_search.search.engine import SearchEngine, search
from site_search.search.fuzzy import fuzzy_match, levenshtein_distance
from site_search.search.indexer import build_search_index, load_posts
from site_search.search.models import IndexSnapshotError, PostRecord, SearchIndex, SearchResult
from site_search.search.query import ParsedQuery, parse_query
from site_search.search.snippet import extract_snippet
from site_search.search.stemmer import stem


__all__ = [
    "DEFAULT_ANALYZER",
    "Analyzer",
    "IndexSnapshotError",
    "ParsedQuery",
    "PostRecord",
    "SearchEngine",
    "SearchIndex",
    "SearchResult",
    "StandardAnalyzer",
    "build_search_index",
    "extract_snippet",
    "fuzzy_match",
    "get_analyzer",
    "levenshtein_distance",
    "load_posts",
    "parse_query",
    "search",
    "stem",
    "tokenize",
]
