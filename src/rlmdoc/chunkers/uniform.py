"""Fixed-size chunking strategy."""

from rlmdoc.chunkers.base import finalize, make_chunk
from rlmdoc.chunkers.options import UniformOptions
from rlmdoc.models import Chunk, Document


def window_bounds(length: int, size: int, overlap: int = 0) -> list[tuple[int, int]]:
    """Return ``(start, end)`` of consecutive windows covering ``length`` characters."""
    bounds = []
    start = 0
    while start < length:
        end = min(start + size, length)
        bounds.append((start, end))
        if end == length:
            break
        start = end - overlap
    return bounds


class UniformChunker:
    """Split content into windows of ``size`` characters.

    Use for aggregation/summary tasks where all content is potentially
    relevant. With ``overlap`` each window after the first starts
    ``overlap`` characters before the previous one ended; the last
    window may be shorter.
    """

    name = "uniform"

    def __init__(self, options: UniformOptions | None = None):
        self.options = options or UniformOptions()
        self.options.validate()

    def chunk(self, document: Document) -> list[Chunk]:
        content = document.content
        chunks = [
            make_chunk(content, start, end, document.id, self.name)
            for start, end in window_bounds(len(content), self.options.size, self.options.overlap)
        ]
        return finalize(chunks)
