"""Regex word tokenizer.

Splits text into tagged tokens. Only ``word`` tokens are indexed; numbers,
punctuation and the other tags are kept in the token stream so callers can
see what was dropped.
"""

import re
from typing import Iterator, NamedTuple, Protocol


class Token(NamedTuple):
    value: str
    tag: str


class Tokenizer(Protocol):
    def tokenize(self, text: str) -> Iterator[Token]:
        ...


# Order matters: earlier alternatives win.
_TOKEN_PATTERNS = [
    ("url", r"(?:https?://|www\.)[^\s<>\"']+"),
    ("email", r"[\w.+-]+@[\w-]+(?:\.[\w-]+)+"),
    ("mention", r"@\w+"),
    ("hashtag", r"#\w+"),
    ("time", r"\d{1,2}:\d{2}(?::\d{2})?(?:\s?[AaPp][Mm])?"),
    ("ordinal", r"\d+(?:st|nd|rd|th)\b"),
    ("number", r"(?:(?<!\w)[+-])?\d+(?:[.,]\d+)*"),
    ("word", r"[^\W\d_]+(?:['’][^\W\d_]+)*"),
    ("punctuation", r"[.,;:!?\"'’()\[\]{}\-–—/…]"),
    ("symbol", r"\S"),
]

_TOKEN_RE = re.compile(
    "|".join(f"(?P<{tag}>{pattern})" for tag, pattern in _TOKEN_PATTERNS)
)


class RegexTokenizer:
    """Default tokenizer. ``server-500`` -> word, punctuation, number."""

    def tokenize(self, text: str) -> Iterator[Token]:
        for match in _TOKEN_RE.finditer(text):
            yield Token(match.group(), match.lastgroup)


def word_tokens(tokenizer: Tokenizer, text: str) -> Iterator[str]:
    """Yield the lower-cased values of word-tagged tokens only."""
    for token in tokenizer.tokenize(text):
        if token.tag == "word":
            yield token.value.lower()
