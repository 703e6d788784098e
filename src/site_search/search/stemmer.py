"""Porter stemming algorithm for English.

The rewrite passes follow Martin Porter's original description
(https://tartarus.org/martin/PorterStemmer/). Steps 2-4 are driven by
ordered rule tables so each pass can be exercised in isolation.
"""

from __future__ import annotations

from collections.abc import MutableMapping
from dataclasses import dataclass
import threading


_VOWELS = frozenset("aeiou")
DEFAULT_STEM_CACHE_SIZE = 50_000


@dataclass(frozen=True)
class SuffixRule:
    """Replace ``suffix`` with ``replacement`` when the remaining stem has measure > ``min_measure``."""

    suffix: str
    replacement: str
    min_measure: int = 0


STEP2_RULES: tuple[SuffixRule, ...] = (
    SuffixRule("ational", "ate"),
    SuffixRule("tional", "tion"),
    SuffixRule("enci", "ence"),
    SuffixRule("anci", "ance"),
    SuffixRule("izer", "ize"),
    SuffixRule("abli", "able"),
    SuffixRule("alli", "al"),
    SuffixRule("entli", "ent"),
    SuffixRule("eli", "e"),
    SuffixRule("ousli", "ous"),
    SuffixRule("ization", "ize"),
    SuffixRule("ation", "ate"),
    SuffixRule("ator", "ate"),
    SuffixRule("alism", "al"),
    SuffixRule("iveness", "ive"),
    SuffixRule("fulness", "ful"),
    SuffixRule("ousness", "ous"),
    SuffixRule("aliti", "al"),
    SuffixRule("iviti", "ive"),
    SuffixRule("biliti", "ble"),
)

STEP3_RULES: tuple[SuffixRule, ...] = (
    SuffixRule("icate", "ic"),
    SuffixRule("ative", ""),
    SuffixRule("alize", "al"),
    SuffixRule("iciti", "ic"),
    SuffixRule("ical", "ic"),
    SuffixRule("ful", ""),
    SuffixRule("ness", ""),
)

STEP4_RULES: tuple[SuffixRule, ...] = tuple(
    SuffixRule(suffix, "", 1)
    for suffix in (
        "al",
        "ance",
        "ence",
        "er",
        "ic",
        "able",
        "ible",
        "ant",
        "ement",
        "ment",
        "ent",
        "ion",
        "ou",
        "ism",
        "ate",
        "iti",
        "ous",
        "ive",
        "ize",
    )
)


def is_consonant(word: str, index: int) -> bool:
    """Return True when ``word[index]`` acts as a consonant.

    ``y`` counts as a vowel only when it follows a consonant.
    """
    char = word[index]
    if char in _VOWELS:
        return False
    if char == "y":
        return index == 0 or not is_consonant(word, index - 1)
    return True


def measure(stem: str) -> int:
    """Count the VC sequences in ``stem`` (Porter's *m*)."""
    count = 0
    index = 0
    length = len(stem)
    while index < length and is_consonant(stem, index):
        index += 1
    while index < length:
        while index < length and not is_consonant(stem, index):
            index += 1
        if index >= length:
            break
        while index < length and is_consonant(stem, index):
            index += 1
        count += 1
    return count


def contains_vowel(stem: str) -> bool:
    return any(not is_consonant(stem, idx) for idx in range(len(stem)))


def ends_with_double_consonant(word: str) -> bool:
    return len(word) >= 2 and word[-1] == word[-2] and is_consonant(word, len(word) - 1)


def ends_with_cvc(word: str) -> bool:
    """Consonant-vowel-consonant ending where the final consonant is not w, x or y."""
    if len(word) < 3:
        return False
    last = len(word) - 1
    if not is_consonant(word, last) or is_consonant(word, last - 1) or not is_consonant(word, last - 2):
        return False
    return word[-1] not in "wxy"


def apply_rules(word: str, rules: tuple[SuffixRule, ...]) -> str:
    """Apply the first rule whose suffix matches; later rules are never consulted."""
    for rule in rules:
        if not word.endswith(rule.suffix):
            continue
        stem = word[: len(word) - len(rule.suffix)]
        if rule.suffix == "ion" and not stem.endswith(("s", "t")):
            return word
        if measure(stem) > rule.min_measure:
            return stem + rule.replacement
        return word
    return word


def step1a(word: str) -> str:
    if word.endswith("sses"):
        return word[:-2]
    if word.endswith("ies"):
        return word[:-2]
    if word.endswith("ss"):
        return word
    if word.endswith("s"):
        return word[:-1]
    return word


def _step1b_cleanup(stem: str) -> str:
    if stem.endswith(("at", "bl", "iz")):
        return stem + "e"
    if ends_with_double_consonant(stem) and stem[-1] not in "lsz":
        return stem[:-1]
    if measure(stem) == 1 and ends_with_cvc(stem):
        return stem + "e"
    return stem


def step1b(word: str) -> str:
    if word.endswith("eed"):
        stem = word[:-3]
        if measure(stem) > 0:
            return stem + "ee"
        return word
    for suffix in ("ed", "ing"):
        if word.endswith(suffix):
            stem = word[: -len(suffix)]
            if contains_vowel(stem):
                return _step1b_cleanup(stem)
            return word
    return word


def step1c(word: str) -> str:
    if word.endswith("y") and contains_vowel(word[:-1]):
        return word[:-1] + "i"
    return word


def step2(word: str) -> str:
    return apply_rules(word, STEP2_RULES)


def step3(word: str) -> str:
    return apply_rules(word, STEP3_RULES)


def step4(word: str) -> str:
    return apply_rules(word, STEP4_RULES)


def step5a(word: str) -> str:
    if not word.endswith("e"):
        return word
    stem = word[:-1]
    m = measure(stem)
    if m > 1 or (m == 1 and not ends_with_cvc(stem)):
        return stem
    return word


def step5b(word: str) -> str:
    if word.endswith("ll") and measure(word) > 1:
        return word[:-1]
    return word


_STEPS = (step1a, step1b, step1c, step2, step3, step4, step5a, step5b)


def stem(word: str) -> str:
    """Reduce ``word`` to its Porter stem.

    Words of two characters or fewer are returned unchanged. The input is
    expected to be lowercase already; the analyzer takes care of that.

    Examples:
        >>> stem("caresses")
        'caress'
        >>> stem("relational")
        'relat'
        >>> stem("go")
        'go'
    """
    if len(word) <= 2:
        return word
    for step in _STEPS:
        word = step(word)
    return word


class PorterStemmer:
    """Porter stemmer with an optional size-bounded memoizing cache.

    The cache is any mutable mapping of word to stem that preserves insertion
    order; it is kept in least-recently-used order and trimmed to
    ``max_cache_size`` entries. Access is guarded by a lock so a single
    stemmer can be shared by threads analyzing in parallel.
    """

    def __init__(
        self,
        cache: MutableMapping[str, str] | None = None,
        *,
        use_cache: bool = True,
        max_cache_size: int = DEFAULT_STEM_CACHE_SIZE,
    ) -> None:
        if max_cache_size < 1:
            raise ValueError("max_cache_size must be at least 1")
        self._cache: MutableMapping[str, str] | None = cache if cache is not None else ({} if use_cache else None)
        self.max_cache_size = max_cache_size
        self._lock = threading.Lock()

    @property
    def cache_size(self) -> int:
        return len(self._cache) if self._cache is not None else 0

    def stem(self, word: str) -> str:
        if self._cache is None:
            return stem(word)
        with self._lock:
            cached = self._cache.pop(word, None)
            if cached is not None:
                self._cache[word] = cached
                return cached
        result = stem(word)
        with self._lock:
            self._cache[word] = result
            while len(self._cache) > self.max_cache_size:
                del self._cache[next(iter(self._cache))]
        return result

    def clear(self) -> None:
        if self._cache is not None:
            with self._lock:
                self._cache.clear()

    __call__ = stem
