"""Tokenizers for exact token counting."""

from rlmdoc.config import get_settings
from rlmdoc.tokenizers.tiktoken_tokenizer import TiktokenTokenizer


def default_tokenizer() -> TiktokenTokenizer:
    """Return a tokenizer for the configured encoding."""
    return TiktokenTokenizer(get_settings().token_encoding)


__all__ = ["TiktokenTokenizer", "default_tokenizer"]
