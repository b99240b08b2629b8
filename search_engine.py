"""In-memory TF-IDF search server with stop words and minus words."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from functools import cmp_to_key
from typing import Callable, Iterable, Iterator, Sequence, Union

from tokenizer import StopWords, is_valid_word, split_into_words

MAX_RESULT_DOCUMENT_COUNT = 5
RELEVANCE_EPSILON = 1e-6
INVALID_DOCUMENT_ID = -1


class DocumentStatus(Enum):
    ACTUAL = "actual"
    IRRELEVANT = "irrelevant"
    BANNED = "banned"
    REMOVED = "removed"

    @classmethod
    def from_name(cls, name: str) -> DocumentStatus:
        """Parse a case-insensitive status name."""
        try:
            return cls(name.strip().lower())
        except ValueError:
            allowed = ", ".join(status.value for status in cls)
            raise ValueError(f"Unknown document status '{name}', expected one of: {allowed}") from None


DocumentPredicate = Callable[[int, DocumentStatus, int], bool]
SearchCriterion = Union[DocumentStatus, DocumentPredicate]


class SearchServerError(ValueError):
    """Base class for rejected documents and queries."""


class InvalidDocumentIdError(SearchServerError):
    pass


class InvalidWordError(SearchServerError):
    pass


class MalformedMinusWordError(SearchServerError):
    pass


class DocumentNotFoundError(SearchServerError, LookupError):
    pass


@dataclass(frozen=True)
class Document:
    """Single ranked search result."""

    id: int
    relevance: float
    rating: int


@dataclass(frozen=True)
class DocumentData:
    rating: int
    status: DocumentStatus


@dataclass(frozen=True)
class Query:
    """Parsed query: words that add relevance and words that exclude documents."""

    plus_words: frozenset[str]
    minus_words: frozenset[str]


@dataclass(frozen=True)
class _QueryWord:
    data: str
    is_minus: bool
    is_stop: bool


class SearchServer:
    """Indexes documents and ranks them against free-text queries.

    The server keeps no internal locks: callers sharing one instance between
    threads must not run ``add_document`` concurrently with any other call.
    """

    def __init__(self, stop_words: str | Iterable[str] | StopWords = "") -> None:
        self._stop_words = StopWords.from_source(stop_words)
        self._word_to_document_freqs: dict[str, dict[int, float]] = {}
        self._document_to_word_freqs: dict[int, dict[str, float]] = {}
        self._documents: dict[int, DocumentData] = {}
        self._document_ids: list[int] = []

    @property
    def stop_words(self) -> StopWords:
        return self._stop_words

    def add_document(
        self,
        document_id: int,
        document: str,
        status: DocumentStatus = DocumentStatus.ACTUAL,
        ratings: Sequence[int] = (),
    ) -> None:
        """Index a document. Raises before touching any state if it is rejected."""
        if document_id < 0:
            raise InvalidDocumentIdError(f"Document id must be non-negative, got {document_id}")
        if document_id in self._documents:
            raise InvalidDocumentIdError(f"Document id {document_id} is already indexed")

        words = self._split_into_words_no_stop(document)

        word_counts: dict[str, int] = {}
        for word in words:
            word_counts[word] = word_counts.get(word, 0) + 1

        total_words = len(words)
        word_freqs: dict[str, float] = {}
        for word, count in word_counts.items():
            tf = count / total_words
            word_freqs[word] = tf
            self._word_to_document_freqs.setdefault(word, {})[document_id] = tf

        self._document_to_word_freqs[document_id] = word_freqs
        self._documents[document_id] = DocumentData(
            rating=_compute_average_rating(ratings),
            status=status,
        )
        self._document_ids.append(document_id)

    def find_top_documents(
        self,
        raw_query: str,
        criterion: SearchCriterion = DocumentStatus.ACTUAL,
    ) -> list[Document]:
        """Return the best matches accepted by a status filter or a predicate."""
        query = self.parse_query(raw_query)

        if isinstance(criterion, DocumentStatus):
            status = criterion

            def predicate(_document_id: int, document_status: DocumentStatus, _rating: int) -> bool:
                return document_status == status

        else:
            predicate = criterion

        matched_documents = self._find_all_documents(query, predicate)
        matched_documents.sort(key=cmp_to_key(_compare_documents))
        return matched_documents[:MAX_RESULT_DOCUMENT_COUNT]

    def get_document_count(self) -> int:
        return len(self._documents)

    def get_document_id(self, index: int) -> int:
        """Return the id added at ``index`` or ``INVALID_DOCUMENT_ID``."""
        if 0 <= index < len(self._document_ids):
            return self._document_ids[index]
        return INVALID_DOCUMENT_ID

    def __len__(self) -> int:
        return len(self._documents)

    def __iter__(self) -> Iterator[int]:
        return iter(self._document_ids)

    def get_word_frequencies(self, document_id: int) -> dict[str, float]:
        """Term frequencies of a document, empty if it had no indexable words."""
        if document_id not in self._documents:
            raise DocumentNotFoundError(f"Document id {document_id} is not indexed")
        return dict(self._document_to_word_freqs[document_id])

    def match_document(self, raw_query: str, document_id: int) -> tuple[list[str], DocumentStatus]:
        """Report which query words occur in a document.

        The word list is emptied when any minus word occurs in the document.
        """
        query = self.parse_query(raw_query)
        if document_id not in self._documents:
            raise DocumentNotFoundError(f"Document id {document_id} is not indexed")

        status = self._documents[document_id].status
        for word in query.minus_words:
            if document_id in self._word_to_document_freqs.get(word, {}):
                return [], status

        matched_words = [
            word
            for word in sorted(query.plus_words)
            if document_id in self._word_to_document_freqs.get(word, {})
        ]
        return matched_words, status

    def parse_query(self, raw_query: str) -> Query:
        """Parse raw text into plus and minus words, dropping stop words."""
        plus_words: set[str] = set()
        minus_words: set[str] = set()
        for word in split_into_words(raw_query):
            query_word = self._parse_query_word(word)
            if query_word.is_stop:
                continue
            if query_word.is_minus:
                minus_words.add(query_word.data)
            else:
                plus_words.add(query_word.data)

        return Query(
            plus_words=frozenset(plus_words - minus_words),
            minus_words=frozenset(minus_words),
        )

    def _is_stop_word(self, word: str) -> bool:
        return self._stop_words.contains(word)

    def _split_into_words_no_stop(self, text: str) -> list[str]:
        words: list[str] = []
        for word in split_into_words(text):
            if not is_valid_word(word):
                raise InvalidWordError(f"Document contains invalid characters in word {word!r}")
            if not self._is_stop_word(word):
                words.append(word)
        return words

    def _parse_query_word(self, text: str) -> _QueryWord:
        is_minus = False
        if text.startswith("-"):
            is_minus = True
            text = text[1:]
        if not text or text.startswith("-"):
            raise MalformedMinusWordError(f"Malformed minus word in query: {('-' + text)!r}")
        if not is_valid_word(text):
            raise InvalidWordError(f"Query contains invalid characters in word {text!r}")

        return _QueryWord(data=text, is_minus=is_minus, is_stop=self._is_stop_word(text))

    def _compute_word_inverse_document_freq(self, word: str) -> float:
        return math.log(self.get_document_count() / len(self._word_to_document_freqs[word]))

    def _find_all_documents(self, query: Query, predicate: DocumentPredicate) -> list[Document]:
        document_to_relevance: dict[int, float] = {}
        for word in sorted(query.plus_words):
            postings = self._word_to_document_freqs.get(word)
            if not postings:
                continue
            inverse_document_freq = self._compute_word_inverse_document_freq(word)
            for document_id, term_freq in postings.items():
                document_data = self._documents[document_id]
                if predicate(document_id, document_data.status, document_data.rating):
                    document_to_relevance[document_id] = (
                        document_to_relevance.get(document_id, 0.0) + term_freq * inverse_document_freq
                    )

        for word in query.minus_words:
            for document_id in self._word_to_document_freqs.get(word, {}):
                document_to_relevance.pop(document_id, None)

        return [
            Document(
                id=document_id,
                relevance=relevance,
                rating=self._documents[document_id].rating,
            )
            for document_id, relevance in sorted(document_to_relevance.items())
        ]


def _compute_average_rating(ratings: Sequence[int]) -> int:
    if not ratings:
        return 0
    return sum(ratings) // len(ratings)


def _compare_documents(lhs: Document, rhs: Document) -> int:
    if abs(lhs.relevance - rhs.relevance) < RELEVANCE_EPSILON:
        return rhs.rating - lhs.rating
    return -1 if lhs.relevance > rhs.relevance else 1
