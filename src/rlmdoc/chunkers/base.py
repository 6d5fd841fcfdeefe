"""Helpers shared by the chunking strategies."""

from dataclasses import replace

from rlmdoc.models import Chunk


def make_chunk(
    content: str,
    start: int,
    end: int,
    document_id: str,
    strategy: str,
    **metadata: str,
) -> Chunk:
    """Build a chunk for ``content[start:end]``; index and total are set by ``finalize``."""
    return Chunk(
        index=0,
        content=content[start:end],
        start_offset=start,
        end_offset=end,
        metadata={"documentId": document_id, "strategy": strategy, **metadata},
    )


def finalize(chunks: list[Chunk], **metadata: str) -> list[Chunk]:
    """Number chunks contiguously and stamp the final ``totalChunks`` on each."""
    total = str(len(chunks))
    return [
        replace(chunk, index=i, metadata={**chunk.metadata, **metadata, "totalChunks": total})
        for i, chunk in enumerate(chunks)
    ]
