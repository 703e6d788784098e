"""Analyzer utilities for the site search stack.

Analyzers are composed Whoosh-style from a tokenizer followed by token
filters. The standard analyzer lowercases, drops one-character tokens,
removes English stopwords and applies Porter stemming; each of the last two
stages can be switched off independently.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, MutableMapping, Sequence
from dataclasses import dataclass, field
import re
from typing import Any, Protocol

from site_search.search.stemmer import PorterStemmer


MIN_TOKEN_LENGTH = 2


@dataclass
class Token:
    """Represents a token emitted by analyzers."""

    text: str
    position: int
    start_char: int
    end_char: int
    attributes: MutableMapping[str, Any] = field(default_factory=dict)

    def copy_with(self, **updates: Any) -> Token:
        data = {
            "text": self.text,
            "position": self.position,
            "start_char": self.start_char,
            "end_char": self.end_char,
            "attributes": dict(self.attributes),
        }
        data.update(updates)
        return Token(**data)


class Analyzer(Protocol):
    """Protocol implemented by analyzers."""

    def __call__(self, text: str) -> list[Token]:  # pragma: no cover - interface definition
        ...

    def analyze(self, text: str) -> list[str]:  # pragma: no cover - interface definition
        ...

    def analyze_with_originals(self, text: str) -> tuple[list[str], list[str]]:  # pragma: no cover
        ...


class Tokenizer(Protocol):
    """Protocol implemented by tokenizers."""

    def __call__(self, text: str) -> Iterator[Token]:  # pragma: no cover - interface definition
        ...


class TokenFilter(Protocol):
    """Protocol implemented by token filters."""

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:  # pragma: no cover - interface definition
        ...


# Runs of Unicode letters and digits; underscore is a separator.
_WORD_PATTERN = r"[^\W_]+"


class RegexTokenizer:
    """Regex-based tokenizer that yields word tokens."""

    def __init__(self, pattern: str = _WORD_PATTERN, flags: int = re.UNICODE) -> None:
        self.pattern = re.compile(pattern, flags)

    def __call__(self, text: str) -> Iterator[Token]:
        for position, match in enumerate(self.pattern.finditer(text)):
            yield Token(
                text=match.group(0),
                position=position,
                start_char=match.start(),
                end_char=match.end(),
            )


_DEFAULT_TOKENIZER = RegexTokenizer()


def tokenize(text: str) -> list[str]:
    """Split ``text`` into maximal runs of letters and digits.

    Case is preserved and no length filtering happens here.

    >>> tokenize("go-lang is awesome (really)")
    ['go', 'lang', 'is', 'awesome', 'really']
    """
    if not text:
        return []
    return [token.text for token in _DEFAULT_TOKENIZER(text)]


class LowercaseFilter:
    """Filter that lowercases token text."""

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:
        for token in tokens:
            if token.text.islower():
                yield token
            else:
                yield token.copy_with(text=token.text.lower())


class MinLengthFilter:
    """Drops tokens shorter than ``min_length`` characters."""

    def __init__(self, min_length: int = MIN_TOKEN_LENGTH) -> None:
        self.min_length = min_length

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:
        for token in tokens:
            if len(token.text) >= self.min_length:
                yield token


DEFAULT_STOPWORDS: frozenset[str] = frozenset(
    {
        "a", "an", "and", "are", "as", "at", "be", "but", "by", "for", "if", "in",
        "into", "is", "it", "no", "not", "of", "on", "or", "such", "that", "the", "their",
        "then", "there", "these", "they", "this", "to", "was", "will", "with", "have", "has",
        "had", "been", "being", "from", "were", "what", "when", "where", "which", "who",
        "whom", "why", "how", "all", "each", "every", "both", "few", "more", "most",
        "other", "some", "any", "only", "own", "same", "so", "than", "too", "very",
        "can", "just", "should", "now", "also", "its", "about", "after", "before", "above",
        "below", "between", "under", "again", "further", "once", "here", "during", "out", "up",
        "down", "off", "over", "through", "because", "while", "until", "am", "i", "me", "my",
        "myself", "we", "our", "ours", "ourselves", "you", "your", "yours", "yourself", "yourselves",
        "he", "him", "his", "himself", "she", "her", "hers", "herself", "itself", "them",
        "themselves", "those", "do", "does", "did", "would", "could", "may", "might", "must",
        "shall", "need", "dare", "ought", "used", "nor",
    }
)  # fmt: skip


def is_stopword(word: str) -> bool:
    return word.lower() in DEFAULT_STOPWORDS


class StopFilter:
    """Removes stopwords from the stream."""

    def __init__(self, stopwords: Iterable[str] | None = None) -> None:
        if stopwords is None:
            self.stopwords = DEFAULT_STOPWORDS
        else:
            self.stopwords = frozenset(word.lower() for word in stopwords)

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:
        for token in tokens:
            if token.text.lower() not in self.stopwords:
                yield token


class PorterStemFilter:
    """Replaces token text with its Porter stem, keeping the surface form in ``attributes``."""

    def __init__(self, stemmer: PorterStemmer | None = None) -> None:
        self.stemmer = stemmer or PorterStemmer()

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:
        for token in tokens:
            stemmed = self.stemmer.stem(token.text)
            if stemmed == token.text:
                token.attributes.setdefault("original", token.text)
                yield token
                continue
            clone = token.copy_with(text=stemmed)
            clone.attributes["original"] = token.text
            yield clone


class AnalyzerPipeline:
    """Composable analyzer pipeline (tokenizer + filters)."""

    def __init__(self, tokenizer: Tokenizer, filters: Sequence[TokenFilter] | None = None) -> None:
        self.tokenizer = tokenizer
        self.filters = list(filters or [])

    def __call__(self, text: str) -> list[Token]:
        stream: Iterable[Token] = self.tokenizer(text)
        for token_filter in self.filters:
            stream = token_filter(stream)
        tokens = list(stream)
        for idx, token in enumerate(tokens):  # normalize positions post-filtering
            token.position = idx
        return tokens


class StandardAnalyzer:
    """Default analyzer used at index time and query time.

    Args:
        use_stopwords: Drop English stopwords.
        use_stemming: Reduce tokens to their Porter stem.
        stopwords: Replacement stopword vocabulary.
        stem_cache: Mapping used to memoize stems; a private dict when omitted.
    """

    def __init__(
        self,
        *,
        use_stopwords: bool = True,
        use_stemming: bool = True,
        stopwords: Iterable[str] | None = None,
        stem_cache: MutableMapping[str, str] | None = None,
    ) -> None:
        self.use_stopwords = use_stopwords
        self.use_stemming = use_stemming
        self.stemmer = PorterStemmer(stem_cache)

        filters: list[TokenFilter] = [LowercaseFilter(), MinLengthFilter()]
        if use_stopwords:
            filters.append(StopFilter(stopwords))
        # Stemming is applied outside the pipeline so originals stay available.
        self._surface_pipeline = AnalyzerPipeline(RegexTokenizer(), filters)
        self._stem_filter = PorterStemFilter(self.stemmer) if use_stemming else None

    def __call__(self, text: str) -> list[Token]:
        tokens = self._surface_pipeline(text)
        if self._stem_filter is None:
            return tokens
        return list(self._stem_filter(tokens))

    def analyze(self, text: str) -> list[str]:
        """Return the normalized token texts for ``text``."""
        return [token.text for token in self(text) if token.text]

    def analyze_with_originals(self, text: str) -> tuple[list[str], list[str]]:
        """Return ``(stemmed, originals)``, index-aligned and of equal length."""
        originals = [token.text for token in self._surface_pipeline(text)]
        if not self.use_stemming:
            return list(originals), originals
        return [self.stemmer.stem(word) for word in originals], originals


_ANALYZER_FACTORIES: dict[str, Callable[[], StandardAnalyzer]] = {
    "default": lambda: StandardAnalyzer(),
    "english": lambda: StandardAnalyzer(),
    "english-nostem": lambda: StandardAnalyzer(use_stemming=False),
    "simple": lambda: StandardAnalyzer(use_stopwords=False, use_stemming=False),
}


def get_analyzer(name: str | None) -> StandardAnalyzer:
    """Return analyzer by name, defaulting to the standard analyzer."""

    if name is None:
        return _ANALYZER_FACTORIES["default"]()
    normalized = name.lower()
    if normalized not in _ANALYZER_FACTORIES:
        msg = f"Unknown analyzer '{name}'. Available: {sorted(_ANALYZER_FACTORIES)}"
        raise ValueError(msg)
    return _ANALYZER_FACTORIES[normalized]()


DEFAULT_ANALYZER = StandardAnalyzer()
