"""Query parsing: quoted phrases, free terms and the ``tag:`` filter."""

from __future__ import annotations

from dataclasses import dataclass
import logging

from site_search.search.analyzers import DEFAULT_ANALYZER, Analyzer


logger = logging.getLogger(__name__)

TAG_PREFIX = "tag:"


@dataclass(frozen=True)
class ParsedQuery:
    """Free terms and quoted phrases extracted from a raw query.

    ``terms`` are analyzed (stemmed) forms; ``originals`` holds the matching
    lowercase surface forms, index-aligned with ``terms``.
    """

    terms: tuple[str, ...]
    phrases: tuple[str, ...]
    raw: str
    originals: tuple[str, ...] = ()

    def is_empty(self) -> bool:
        return not self.terms and not self.phrases


def parse_query(raw: str, analyzer: Analyzer | None = None) -> ParsedQuery:
    """Split ``raw`` into quoted phrases and analyzed free terms.

    Each ``"`` toggles phrase mode. A closed phrase is trimmed, lowercased and
    kept when non-empty. Text inside an unterminated quote is dropped rather
    than treated as free terms.
    """
    analyzer = analyzer or DEFAULT_ANALYZER

    phrases: list[str] = []
    phrase_buf: list[str] = []
    free_buf: list[str] = []
    in_phrase = False

    for char in raw:
        if char == '"':
            if in_phrase:
                phrase = "".join(phrase_buf).strip()
                if phrase:
                    phrases.append(phrase.lower())
                phrase_buf.clear()
            in_phrase = not in_phrase
            free_buf.append(" ")
        elif in_phrase:
            phrase_buf.append(char)
        else:
            free_buf.append(char)

    terms, originals = analyzer.analyze_with_originals("".join(free_buf))
    logger.debug("Parsed query %r into terms=%s phrases=%s", raw, terms, phrases)
    return ParsedQuery(
        terms=tuple(terms),
        phrases=tuple(phrases),
        raw=raw,
        originals=tuple(originals),
    )


def split_tag_filter(query: str) -> tuple[str, str]:
    """Return ``(tag_filter, residual_query)`` for a lowercased query.

    ``"tag:rust ownership"`` becomes ``("rust", "ownership")``; queries without
    the prefix come back as ``("", query)``.
    """
    if not query.startswith(TAG_PREFIX):
        return "", query
    head, _, rest = query.partition(" ")
    return head[len(TAG_PREFIX) :], rest
