"""Protocol for text chunking strategies."""

from typing import Protocol, runtime_checkable

from rlmdoc.models import Chunk, Document


@runtime_checkable
class ChunkingStrategy(Protocol):
    """Protocol for text chunking strategies.

    A strategy is built from its options record and cuts one document into
    an ordered list of chunks whose offsets point into ``document.content``.
    """

    @property
    def name(self) -> str:
        """Return the strategy name recorded in chunk metadata."""
        ...

    def chunk(self, document: Document) -> list[Chunk]:
        """Split the document into chunks with metadata."""
        ...
