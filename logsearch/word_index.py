"""Inverted word index: lower-cased word -> record indices.

Each posting list is a dict used as an insertion-ordered set, so a
(word, index) pair is stored once and results come back in the order the
records were indexed.
"""

from typing import Optional

from logsearch.errors import EmptyQueryError
from logsearch.tokenizer import RegexTokenizer, Tokenizer, word_tokens


class WordIndex:
    def __init__(self, tokenizer: Optional[Tokenizer] = None):
        self._tokenizer = tokenizer or RegexTokenizer()
        self._postings: dict[str, dict[int, None]] = {}

    def words_in(self, message: str) -> list[str]:
        """Distinct indexable words of a message, in first-seen order."""
        return list(dict.fromkeys(word_tokens(self._tokenizer, message)))

    def index_message(self, index: int, message: str) -> list[str]:
        """Add ``index`` under every distinct word of ``message``.

        Returns the words that were indexed.
        """
        words = self.words_in(message)
        for word in words:
            self.add(word, index)
        return words

    def add(self, word: str, index: int) -> None:
        self._postings.setdefault(word, {})[index] = None

    def search(self, word: str) -> list[int]:
        if word is None:
            raise EmptyQueryError()
        key = word.strip().lower()
        if not key:
            raise EmptyQueryError()
        return list(self._postings.get(key, ()))

    @property
    def vocabulary_size(self) -> int:
        return len(self._postings)

    def as_dict(self) -> dict[str, list[int]]:
        return {word: list(posting) for word, posting in self._postings.items()}

    def reset(self) -> None:
        self._postings.clear()
