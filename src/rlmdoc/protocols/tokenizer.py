"""Protocol for exact token counters."""

from typing import Protocol, runtime_checkable


@runtime_checkable
class Tokenizer(Protocol):
    """Protocol for tokenizers used by token-budgeted chunking.

    Allows swapping between tiktoken encodings, model-specific tokenizers
    or test doubles.
    """

    @property
    def name(self) -> str:
        """Return identifier for the encoding used."""
        ...

    def count_tokens(self, text: str) -> int:
        """Return the exact number of tokens in ``text``."""
        ...
