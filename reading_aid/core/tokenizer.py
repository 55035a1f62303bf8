"""Whitespace tokenizer producing positionally indexed words.

WHY: The read-aloud view highlights one word at a time. It needs a
stable list of words where the playback index maps to exactly one token.

HOW: str.split() with no arguments splits on runs of whitespace and drops
empty fragments, which is exactly the contract. Punctuation stays
attached to its word ("review." is one token).

RULES:
- Pure and total: empty or whitespace-only text yields []
- Indices are 0..n-1 in reading order and never change for a given text
- No incremental updates; re-tokenize whenever the text changes
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List


@dataclass(frozen=True)
class Token:
    """A whitespace-delimited word with its position in the source text."""

    text: str
    index: int


def tokenize(text: str) -> List[Token]:
    """Split text into ordered word tokens."""
    return [Token(text=word, index=i) for i, word in enumerate(text.split())]
