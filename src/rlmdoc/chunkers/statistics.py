"""Per-chunk text statistics."""

from dataclasses import replace

from rlmdoc.models import Chunk
from rlmdoc.models.document import count_lines


def chunk_statistics(text: str) -> dict[str, str]:
    return {
        "wordCount": str(len(text.split())),
        "lineCount": str(count_lines(text)),
        "charCount": str(len(text)),
        "charCountNoWhitespace": str(sum(1 for c in text if not c.isspace())),
    }


def enrich_statistics(chunks: list[Chunk]) -> list[Chunk]:
    """Add word, line and character counts to each chunk's metadata."""
    return [replace(c, metadata={**c.metadata, **chunk_statistics(c.content)}) for c in chunks]
