"""Build a SearchIndex from a post corpus.

Each post's title, description, tags and content are analyzed together. The
analyzed tokens give both the postings (term frequencies) and the document
length, so per document ``sum(frequencies) == doc_len``.
"""

from __future__ import annotations

from collections import Counter, defaultdict
from collections.abc import Iterable, Mapping, Sequence
import logging
from pathlib import Path
from typing import Any

import orjson

from site_search.observability.metrics import INDEX_DOC_COUNT, INDEX_TERM_COUNT
from site_search.search.analyzers import DEFAULT_ANALYZER, Analyzer
from site_search.search.fuzzy import build_trigram_index
from site_search.search.models import PostRecord, SearchIndex
from site_search.search.stats import average_length


logger = logging.getLogger(__name__)


def document_text(post: PostRecord) -> str:
    """Concatenate the indexed fields of ``post``."""
    return " ".join((post.title, post.description, *post.tags, post.content))


def build_search_index(
    posts: Iterable[PostRecord],
    analyzer: Analyzer | None = None,
    *,
    with_trigrams: bool = True,
) -> SearchIndex:
    """Analyze ``posts`` and return an immutable inverted index.

    Args:
        posts: The corpus; iteration order defines post ids.
        analyzer: Analyzer used for every document. Queries must be parsed with
            an analyzer configured the same way.
        with_trigrams: Precompute the trigram index used for fuzzy expansion.
    """
    analyzer = analyzer or DEFAULT_ANALYZER
    records = tuple(posts)

    inverted: dict[str, dict[int, int]] = defaultdict(dict)
    doc_lens: dict[int, int] = {}
    surface_forms: dict[str, set[str]] = defaultdict(set)

    for post_id, post in enumerate(records):
        stemmed, originals = analyzer.analyze_with_originals(document_text(post))
        doc_lens[post_id] = len(stemmed)
        for term, freq in Counter(stemmed).items():
            inverted[term][post_id] = freq
        for term, original in zip(stemmed, originals):
            surface_forms[term].add(original)

    inverted = dict(inverted)
    stem_map = {term: tuple(sorted(forms)) for term, forms in surface_forms.items()}
    trigram_index = build_trigram_index(inverted) if with_trigrams else {}

    index = SearchIndex(
        posts=records,
        inverted=inverted,
        doc_lens=doc_lens,
        total_docs=len(records),
        avg_doc_len=average_length(doc_lens),
        stem_map=stem_map,
        trigram_index=trigram_index,
    )
    INDEX_DOC_COUNT.set(index.total_docs)
    INDEX_TERM_COUNT.set(index.vocabulary_size)
    logger.info(
        "Built search index: %d documents, %d terms, avg length %.1f",
        index.total_docs,
        index.vocabulary_size,
        index.avg_doc_len,
    )
    return index


def _text_field(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    return "" if value is None else str(value)


def post_from_mapping(data: Mapping[str, Any]) -> PostRecord:
    """Create a PostRecord from a loosely typed corpus entry."""
    if not isinstance(data, Mapping):
        raise ValueError(f"Corpus entries must be JSON objects, got {type(data).__name__}")
    tags = data.get("tags") or ()
    if isinstance(tags, str):
        tags = [tag.strip() for tag in tags.split(",") if tag.strip()]
    elif not isinstance(tags, (list, tuple)):
        raise ValueError(f"Post tags must be a list or a comma-separated string, got {type(tags).__name__}")
    return PostRecord.create(
        title=_text_field(data, "title"),
        link=_text_field(data, "link"),
        description=_text_field(data, "description"),
        tags=[str(tag) for tag in tags if tag is not None],
        content=_text_field(data, "content"),
        version=_text_field(data, "version"),
    )


def load_posts(path: Path) -> list[PostRecord]:
    """Read a corpus file: a JSON array of posts, or one JSON object per line."""
    raw = path.read_bytes()
    if raw.lstrip().startswith(b"["):
        entries: Sequence[Any] = orjson.loads(raw)
    else:
        entries = [orjson.loads(line) for line in raw.splitlines() if line.strip()]
    posts = [post_from_mapping(entry) for entry in entries]
    logger.debug("Loaded %d posts from %s", len(posts), path)
    return posts
