"""
Token counting for chapter and document budgets.

Callers depend on the Tokenizer protocol only; the default heuristic can be
swapped for an exact encoder without touching the pipeline:

    from chapter_index.tokenizer import get_tokenizer

    tok = get_tokenizer("tiktoken")
    tok.count("Some chapter text")
"""

from typing import Protocol, runtime_checkable

import tiktoken

__all__ = [
    "Tokenizer",
    "HeuristicTokenizer",
    "TiktokenTokenizer",
    "get_tokenizer",
    "count_tokens",
]


@runtime_checkable
class Tokenizer(Protocol):
    """Interface for token counting. Must be deterministic and free of side effects."""

    def count(self, text: str) -> int:
        ...

    @property
    def name(self) -> str:
        ...


class HeuristicTokenizer:
    """Average of a characters/4 estimate and the whitespace word count."""

    def count(self, text: str) -> int:
        if not text or not text.strip():
            return 0
        char_estimate = len(text) // 4
        word_count = len(text.split())
        return round((char_estimate + word_count) / 2)

    @property
    def name(self) -> str:
        return "heuristic"


class TiktokenTokenizer:
    """Exact counts with a tiktoken encoding (cl100k_base by default)."""

    def __init__(self, encoding: str = "cl100k_base"):
        self._encoding_name = encoding
        self._encoding = None

    def count(self, text: str) -> int:
        if not text or not text.strip():
            return 0
        if self._encoding is None:
            self._encoding = tiktoken.get_encoding(self._encoding_name)
        return len(self._encoding.encode(text))

    @property
    def name(self) -> str:
        return "tiktoken"


_REGISTRY: dict[str, type] = {
    "heuristic": HeuristicTokenizer,
    "tiktoken": TiktokenTokenizer,
}

_DEFAULT = HeuristicTokenizer()


def get_tokenizer(name: str | None = None) -> Tokenizer:
    """Return a tokenizer by name ('heuristic' when None). Raises KeyError if unknown."""
    if not name:
        return _DEFAULT
    if name not in _REGISTRY:
        raise KeyError(f"Unknown tokenizer: {name}. Available: {list(_REGISTRY)}")
    return _REGISTRY[name]()


def count_tokens(text: str, tokenizer: Tokenizer | None = None) -> int:
    """Count tokens with the given tokenizer, or the heuristic one."""
    return (tokenizer or _DEFAULT).count(text)
