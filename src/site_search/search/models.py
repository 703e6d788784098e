"""Search data models."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any


class IndexSnapshotError(ValueError):
    """Raised when a serialized index cannot be turned back into a SearchIndex."""


def _as_term_tuple(value: Any) -> tuple[str, ...]:
    if not isinstance(value, (list, tuple)):
        raise TypeError(f"expected a list of terms, got {type(value).__name__}")
    return tuple(str(item) for item in value)


@dataclass(frozen=True)
class PostRecord:
    """One indexed document.

    ``normalized_title`` and ``normalized_tags`` are the lowercase forms of
    ``title`` and ``tags``; use :meth:`create` to derive them.
    """

    title: str
    normalized_title: str
    link: str
    description: str = ""
    tags: tuple[str, ...] = ()
    normalized_tags: tuple[str, ...] = ()
    content: str = ""
    version: str = ""

    @classmethod
    def create(
        cls,
        *,
        title: str,
        link: str,
        description: str = "",
        tags: Sequence[str] = (),
        content: str = "",
        version: str = "",
    ) -> PostRecord:
        tags = tuple(tags)
        return cls(
            title=title,
            normalized_title=title.lower(),
            link=link,
            description=description,
            tags=tags,
            normalized_tags=tuple(tag.lower() for tag in tags),
            content=content,
            version=version,
        )

    def has_tag(self, normalized_tag: str) -> bool:
        return normalized_tag in self.normalized_tags

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "title": self.title,
            "norm_title": self.normalized_title,
            "link": self.link,
            "desc": self.description,
            "tags": list(self.tags),
            "norm_tags": list(self.normalized_tags),
            "content": self.content,
            "ver": self.version,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> PostRecord:
        """Create from dictionary."""
        title = data.get("title", "")
        tags = tuple(data.get("tags", ()))
        return cls(
            title=title,
            normalized_title=data.get("norm_title", title.lower()),
            link=data.get("link", ""),
            description=data.get("desc", ""),
            tags=tags,
            normalized_tags=tuple(data.get("norm_tags", (tag.lower() for tag in tags))),
            content=data.get("content", ""),
            version=data.get("ver", ""),
        )


@dataclass(frozen=True)
class SearchIndex:
    """Immutable inverted index over a post corpus.

    A post's position in ``posts`` is its post id. ``inverted`` maps a term to
    ``{post_id: frequency}`` and ``doc_lens`` maps a post id to its token
    count. ``stem_map`` and ``trigram_index`` are optional accelerators for
    snippet highlighting and fuzzy expansion.
    """

    posts: tuple[PostRecord, ...]
    inverted: Mapping[str, Mapping[int, int]]
    doc_lens: Mapping[int, int]
    total_docs: int
    avg_doc_len: float
    stem_map: Mapping[str, Sequence[str]] = field(default_factory=dict)
    trigram_index: Mapping[str, Sequence[str]] = field(default_factory=dict)

    @classmethod
    def empty(cls) -> SearchIndex:
        return cls(posts=(), inverted={}, doc_lens={}, total_docs=0, avg_doc_len=0.0)

    @property
    def vocabulary_size(self) -> int:
        return len(self.inverted)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-compatible dictionary (post ids become string keys)."""
        return {
            "posts": [post.to_dict() for post in self.posts],
            "inv": {
                term: {str(post_id): freq for post_id, freq in postings.items()}
                for term, postings in self.inverted.items()
            },
            "lens": {str(post_id): length for post_id, length in self.doc_lens.items()},
            "avg": self.avg_doc_len,
            "total": self.total_docs,
            "stem": {term: list(forms) for term, forms in self.stem_map.items()},
            "ngram": {trigram: list(terms) for trigram, terms in self.trigram_index.items()},
        }

    @classmethod
    def from_dict(cls, data: Any) -> SearchIndex:
        """Rebuild an index from :meth:`to_dict` output, validating post ids."""
        if not isinstance(data, Mapping):
            raise IndexSnapshotError(f"Index snapshot must be a mapping, got {type(data).__name__}")
        try:
            posts = tuple(PostRecord.from_dict(entry) for entry in data.get("posts", ()))
            inverted = {
                term: {int(post_id): int(freq) for post_id, freq in postings.items()}
                for term, postings in data.get("inv", {}).items()
            }
            doc_lens = {int(post_id): int(length) for post_id, length in data.get("lens", {}).items()}
            total_docs = int(data.get("total", len(posts)))
            avg_doc_len = float(data.get("avg", 0.0))
            stem_map = {term: _as_term_tuple(forms) for term, forms in data.get("stem", {}).items()}
            trigram_index = {trigram: _as_term_tuple(terms) for trigram, terms in data.get("ngram", {}).items()}
        except (AttributeError, TypeError, ValueError) as exc:
            raise IndexSnapshotError(f"Malformed index snapshot: {exc}") from exc

        valid_ids = range(len(posts))
        for term, postings in inverted.items():
            for post_id in postings:
                if post_id not in valid_ids:
                    raise IndexSnapshotError(f"Posting for term {term!r} references unknown post id {post_id}")
        for post_id in doc_lens:
            if post_id not in valid_ids:
                raise IndexSnapshotError(f"Document length references unknown post id {post_id}")

        return cls(
            posts=posts,
            inverted=inverted,
            doc_lens=doc_lens,
            total_docs=total_docs,
            avg_doc_len=avg_doc_len,
            stem_map=stem_map,
            trigram_index=trigram_index,
        )


@dataclass(frozen=True)
class SearchResult:
    """A ranked hit returned to callers."""

    id: int
    title: str
    link: str
    description: str
    snippet: str
    version: str
    score: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "link": self.link,
            "description": self.description,
            "snippet": self.snippet,
            "version": self.version,
            "score": self.score,
        }
