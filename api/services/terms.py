# api/services/terms.py
"""Search term expansion and pattern compilation."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Literal, Optional, Sequence, Set

__all__ = [
    "Family",
    "MIN_WORD_LENGTH",
    "STOPWORDS",
    "TermFamily",
    "compile_patterns",
    "escape_pattern",
    "expand_term",
    "significant_words",
    "split_words",
    "word_set",
]

Family = Literal["primary", "secondary"]

MIN_WORD_LENGTH = 3

# Compared against the lowercase word; whole phrases are never filtered.
STOPWORDS = frozenset(
    {
        "the",
        "and",
        "or",
        "to",
        "from",
        "in",
        "on",
        "at",
        "by",
        "for",
        "with",
        "about",
        "as",
        "into",
        "through",
        "during",
        "before",
        "after",
        "above",
        "below",
        "between",
        "under",
        "since",
        "without",
        "within",
        "of",
        "off",
        "out",
        "over",
        "up",
        "down",
        "near",
        "along",
        "among",
        "across",
        "behind",
        "beyond",
        "plus",
        "except",
        "but",
        "per",
        "via",
        "upon",
        "against",
    }
)

_METACHARACTERS = re.compile(r"[.*+?^${}()|\[\]\\]")
_WHITESPACE = re.compile(r"\s+")


def split_words(phrase: Optional[str]) -> List[str]:
    """Split a phrase on runs of whitespace, dropping empty fragments."""

    if not phrase:
        return []
    return [word for word in _WHITESPACE.split(phrase) if word]


def significant_words(phrase: Optional[str]) -> List[str]:
    """Return the words of ``phrase`` worth matching on their own."""

    return [
        word
        for word in split_words(phrase)
        if len(word) >= MIN_WORD_LENGTH and word.lower() not in STOPWORDS
    ]


def expand_term(phrase: Optional[str]) -> List[str]:
    """Expand a search phrase into the literals to match.

    The whole phrase always comes first, followed by its significant words in
    the order they appear. An absent or empty phrase expands to nothing.
    """

    if not phrase:
        return []
    return [phrase, *significant_words(phrase)]


def word_set(phrase: Optional[str]) -> Set[str]:
    """Case-folded significant words used for membership checks."""

    return {word.casefold() for word in significant_words(phrase)}


def escape_pattern(literal: str) -> str:
    """Backslash-escape regex metacharacters, leaving everything else intact."""

    return _METACHARACTERS.sub(r"\\\g<0>", literal)


def compile_patterns(patterns: Sequence[str]) -> Optional[re.Pattern[str]]:
    """Compile literals into one case-insensitive capturing alternation.

    Returns ``None`` when there is nothing to match so callers can skip the
    scan entirely. Alternatives keep their input order: when several could
    match at the same offset the earliest one wins.
    """

    if not patterns:
        return None
    alternation = "|".join(escape_pattern(pattern) for pattern in patterns)
    return re.compile(f"({alternation})", re.IGNORECASE)


@dataclass(slots=True)
class TermFamily:
    """An expanded search phrase bound to its highlight family."""

    family: Family
    phrase: Optional[str]
    patterns: List[str] = field(default_factory=list)
    words: Set[str] = field(default_factory=set)

    @classmethod
    def from_phrase(cls, family: Family, phrase: Optional[str]) -> "TermFamily":
        return cls(
            family=family,
            phrase=phrase or None,
            patterns=expand_term(phrase),
            words=word_set(phrase),
        )

    @property
    def is_active(self) -> bool:
        return bool(self.patterns)

    def compile(self) -> Optional[re.Pattern[str]]:
        return compile_patterns(self.patterns)

    def matches(self, piece: str) -> bool:
        """Whether ``piece`` equals the phrase or one of its significant words."""

        if not self.phrase:
            return False
        folded = piece.casefold()
        return folded == self.phrase.casefold() or folded in self.words
