"""Word-boundary tokenization.

The tokenizer is the same one the taggers were trained with: the input is
split on every word boundary, each piece is stripped and empty pieces are
dropped.

Example:
    >>> from seqtagger.tokenizer import tokenize
    >>> tokenize("What is the weather in Cambridge MA?")
    ['What', 'is', 'the', 'weather', 'in', 'Cambridge', 'MA', '?']
"""

import re
from typing import List, Sequence

_WORD_BOUNDARY = re.compile(r"\b")


def tokenize(text: str) -> List[str]:
    """Split text into tokens on word boundaries.

    Args:
        text: Input text.

    Returns:
        Ordered list of non-empty tokens. Empty or whitespace-only input
        gives an empty list.

    Raises:
        ValueError: If ``text`` is not a string.
    """
    if not isinstance(text, str):
        raise ValueError(f"text must be a string, got {type(text).__name__}")
    pieces = (piece.strip() for piece in _WORD_BOUNDARY.split(text))
    return [piece for piece in pieces if piece]


def truncate(tokens: Sequence[str], sequence_length: int) -> List[str]:
    """Keep the first ``sequence_length`` tokens."""
    return list(tokens[:sequence_length])
