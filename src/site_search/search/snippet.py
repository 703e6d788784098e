"""Snippet extraction with term highlighting.

Smart Defaults:
- Content beyond 10,000 characters is never scanned
- Without a match the snippet is the first 150 characters
- Around a match the window is 60 characters before and 90 after
- Matches are wrapped in ``<b>...</b>``
"""

from __future__ import annotations

from collections.abc import Sequence
import re


MAX_SNIPPET_CONTENT_LENGTH = 10_000
DEFAULT_SNIPPET_LENGTH = 150
SNIPPET_CONTEXT_BEFORE = 60
SNIPPET_CONTEXT_AFTER = 90
ELLIPSIS = "..."


def _leading_excerpt(content: str, length: int) -> str:
    if len(content) > length:
        return content[:length] + ELLIPSIS
    return content


def find_first_match(content: str, terms: Sequence[str]) -> int:
    """Earliest case-insensitive offset of any term in ``content``, or -1."""
    first = -1
    for term in terms:
        if not term:
            continue
        match = re.search(re.escape(term), content, re.IGNORECASE)
        if match and (first == -1 or match.start() < first):
            first = match.start()
    return first


def highlight_terms(snippet: str, terms: Sequence[str], open_tag: str = "<b>", close_tag: str = "</b>") -> str:
    """Wrap every occurrence of each term, and of its title-cased form, in emphasis tags.

    Overlapping occurrences keep the longer one, so a term never ends up
    nested inside another term's markers.
    """
    if not snippet or not terms:
        return snippet

    forms: set[str] = set()
    for term in terms:
        if term:
            forms.update((term, term.title()))

    matches: list[tuple[int, int]] = []
    for form in forms:
        matches.extend((m.start(), m.end()) for m in re.finditer(re.escape(form), snippet))
    if not matches:
        return snippet

    # Sort by start position, then by length (longer matches first to prefer them)
    matches.sort(key=lambda span: (span[0], -(span[1] - span[0])))
    selected: list[tuple[int, int]] = []
    for start, end in matches:
        if selected and start < selected[-1][1]:
            continue
        selected.append((start, end))

    parts: list[str] = []
    cursor = 0
    for start, end in selected:
        parts.append(snippet[cursor:start])
        parts.append(f"{open_tag}{snippet[start:end]}{close_tag}")
        cursor = end
    parts.append(snippet[cursor:])
    return "".join(parts)


def extract_snippet(
    content: str,
    terms: Sequence[str],
    *,
    max_content_length: int = MAX_SNIPPET_CONTENT_LENGTH,
    default_length: int = DEFAULT_SNIPPET_LENGTH,
    context_before: int = SNIPPET_CONTEXT_BEFORE,
    context_after: int = SNIPPET_CONTEXT_AFTER,
) -> str:
    """Build a highlighted preview of ``content`` around the first matching term.

    Examples:
        >>> extract_snippet("The quick brown fox jumps over the lazy dog.", ["fox"])
        'The quick brown <b>fox</b> jumps over the lazy dog.'
    """
    if len(content) > max_content_length:
        content = content[:max_content_length]

    if not terms:
        return _leading_excerpt(content, default_length)

    first = find_first_match(content, terms)
    if first == -1:
        return _leading_excerpt(content, default_length)

    start = max(0, first - context_before)
    end = min(len(content), first + context_after)
    snippet = highlight_terms(content[start:end], terms)

    prefix = ELLIPSIS if start > 0 else ""
    suffix = ELLIPSIS if end < len(content) else ""
    return f"{prefix}{snippet}{suffix}"
