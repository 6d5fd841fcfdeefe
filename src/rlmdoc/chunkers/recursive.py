"""Semantic-then-size recursive chunking strategy."""

import logging
from typing import Optional

from rlmdoc.chunkers.base import finalize, make_chunk
from rlmdoc.chunkers.options import RecursiveOptions, TokenOptions
from rlmdoc.chunkers.semantic import SemanticChunker
from rlmdoc.chunkers.token import TokenChunker
from rlmdoc.chunkers.uniform import window_bounds
from rlmdoc.models import Chunk, Document, DocumentMetadata
from rlmdoc.protocols.tokenizer import Tokenizer

logger = logging.getLogger(__name__)


class RecursiveChunker:
    """Split by Markdown sections, then re-split sections over budget.

    Sections longer than ``target_size`` characters are cut into uniform
    windows, or into token-budgeted chunks when ``max_tokens`` is set.
    Sections within budget pass through unchanged.
    """

    name = "recursive"

    def __init__(self, options: RecursiveOptions | None = None, tokenizer: Optional[Tokenizer] = None):
        self.options = options or RecursiveOptions()
        self.options.validate()
        self.tokenizer = tokenizer
        self.semantic = SemanticChunker(self.options.semantic)

    @property
    def sub_strategy(self) -> str:
        return "token" if self.options.max_tokens is not None else "uniform"

    def chunk(self, document: Document) -> list[Chunk]:
        content = document.content
        chunks: list[Chunk] = []

        for section_index, section in enumerate(self.semantic.sections(content)):
            section_meta = section.metadata()
            if section.size <= self.options.target_size:
                chunks.append(
                    make_chunk(content, section.start, section.end, document.id, self.name, **section_meta)
                )
                continue

            bounds = self._split(document, section.start, section.end)
            logger.debug(
                "Section %d (%s) has %d chars, split into %d %s chunks",
                section_index,
                section.header or "<preamble>",
                section.size,
                len(bounds),
                self.sub_strategy,
            )
            for sub_index, (start, end, extra) in enumerate(bounds):
                chunks.append(
                    make_chunk(
                        content,
                        start,
                        end,
                        document.id,
                        self.name,
                        **section_meta,
                        **extra,
                        subStrategy=self.sub_strategy,
                        sectionIndex=str(section_index),
                        subChunk=str(sub_index),
                        subChunkCount=str(len(bounds)),
                    )
                )

        return finalize(chunks)

    def _split(self, document: Document, start: int, end: int) -> list[tuple[int, int, dict[str, str]]]:
        """Re-split ``content[start:end]``; returned offsets are document-relative."""
        if self.options.max_tokens is None:
            return [
                (start + s, start + e, {})
                for s, e in window_bounds(end - start, self.options.target_size, self.options.overlap)
            ]

        if self.tokenizer is None:
            # Imported here so the tiktoken dependency is only touched when needed
            from rlmdoc.tokenizers import default_tokenizer

            self.tokenizer = default_tokenizer()

        text = document.content[start:end]
        section = Document(
            id=document.id,
            content=text,
            metadata=DocumentMetadata.describe(document.metadata.source, text),
        )
        sub_chunks = TokenChunker(TokenOptions(max_tokens=self.options.max_tokens), self.tokenizer).chunk(section)
        return [
            (start + c.start_offset, start + c.end_offset, {"tokenCount": c.metadata["tokenCount"]})
            for c in sub_chunks
        ]

