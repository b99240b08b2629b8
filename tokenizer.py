"""Word splitting, validation and stop-word handling."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

WORD_SEPARATOR = " "


def split_into_words(text: str) -> list[str]:
    """Split text on spaces, dropping empty fragments."""
    return [word for word in text.split(WORD_SEPARATOR) if word]


def is_valid_word(word: str) -> bool:
    """A valid word contains no control characters."""
    return not any(ord(char) < 0x20 for char in word)


def make_unique_non_empty_strings(strings: Iterable[str]) -> frozenset[str]:
    return frozenset(value for value in strings if value)


@dataclass(frozen=True)
class StopWords:
    """Immutable set of words excluded from indexing and queries."""

    words: frozenset[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        object.__setattr__(self, "words", make_unique_non_empty_strings(self.words))

    @classmethod
    def from_source(cls, source: str | Iterable[str] | StopWords) -> StopWords:
        if isinstance(source, StopWords):
            return source
        if isinstance(source, str):
            source = split_into_words(source)
        return cls(make_unique_non_empty_strings(source))

    def contains(self, word: str) -> bool:
        return word in self.words

    def __contains__(self, word: object) -> bool:
        return word in self.words

    def __len__(self) -> int:
        return len(self.words)
