"""A small tokenizer for CUDA source text."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional


class TokenType(Enum):
    IDENTIFIER = 0
    EOF = 1

    def __str__(self) -> str:
        if self is TokenType.IDENTIFIER:
            return "Identifier"
        return f"Unknown({self.value})"


# Keyword table; words found here become tokens.
KEYWORDS: dict[str, TokenType] = {}


@dataclass(frozen=True)
class Token:
    kind: TokenType
    value: str

    def __str__(self) -> str:
        return f"Token{{Type: {self.kind}, Value: {self.value}}}"


class Tokenizer:
    """Scans source text for keyword tokens."""

    def __init__(self, source: str, keywords: Optional[Mapping[str, TokenType]] = None):
        self._source = source
        self._pos = 0
        self._tokens: list[Token] = []
        self._keywords = KEYWORDS if keywords is None else dict(keywords)

    def _at_end(self) -> bool:
        return self._pos >= len(self._source)

    def _peek(self) -> str:
        return self._source[self._pos]

    def _advance(self) -> str:
        char = self._source[self._pos]
        self._pos += 1
        return char

    def _scan_token(self) -> None:
        while not self._at_end() and self._peek().isspace():
            self._pos += 1
        if self._at_end():
            return
        char = self._advance()
        if char.isalpha():
            self._scan_word(char)

    def _scan_word(self, first: str) -> None:
        chars = [first]
        while not self._at_end():
            char = self._peek()
            if not (char.isalpha() or char.isnumeric() or char == "_"):
                break
            chars.append(self._advance())
        word = "".join(chars)
        kind = self._keywords.get(word)
        if kind is not None:
            self._tokens.append(Token(kind, word))

    def scan_tokens(self) -> list[Token]:
        """Scan the whole source and return its tokens, ending with EOF."""
        while not self._at_end():
            self._scan_token()
        self._tokens.append(Token(TokenType.EOF, ""))
        return list(self._tokens)


def tokenize(code: str) -> list[Token]:
    """Tokenize ``code``, print each token on its own line and return them."""
    tokens = Tokenizer(code).scan_tokens()
    for token in tokens:
        print(token)
    return tokens