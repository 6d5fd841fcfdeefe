"""tiktoken-based exact tokenizer."""

import tiktoken


class TiktokenTokenizer:
    """Token counter backed by a tiktoken encoding.

    Uses cl100k_base by default, the encoding of current OpenAI chat
    models, which is a close stand-in for most LLM tokenizers.
    """

    DEFAULT_ENCODING = "cl100k_base"

    def __init__(self, encoding_name: str | None = None):
        """Initialize the tokenizer.

        Args:
            encoding_name: Name of the tiktoken encoding to use.
                           Defaults to cl100k_base.
        """
        self._encoding_name = encoding_name or self.DEFAULT_ENCODING
        self._encoding: tiktoken.Encoding | None = None

    @property
    def encoding(self) -> tiktoken.Encoding:
        """Lazy-load the encoding on first access."""
        if self._encoding is None:
            self._encoding = tiktoken.get_encoding(self._encoding_name)
        return self._encoding

    @property
    def name(self) -> str:
        """Return identifier for the encoding used."""
        return self._encoding_name

    def count_tokens(self, text: str) -> int:
        """Count the tokens in ``text``.

        Special-token markers in documents are counted as ordinary text.
        """
        if not text:
            return 0
        return len(self.encoding.encode(text, disallowed_special=()))
