"""Chunking strategies and the ``segment`` dispatcher."""

import logging
from typing import Optional, assert_never

from rlmdoc.chunkers.auto import mark_auto_selected, select_strategy
from rlmdoc.chunkers.filtering import FilteringChunker
from rlmdoc.chunkers.options import (
    AutoOptions,
    FilteringOptions,
    RecursiveOptions,
    SemanticOptions,
    Strategy,
    StrategyOptions,
    TokenOptions,
    UniformOptions,
    build_options,
    parse_strategy,
)
from rlmdoc.chunkers.recursive import RecursiveChunker
from rlmdoc.chunkers.semantic import SemanticChunker
from rlmdoc.chunkers.statistics import enrich_statistics
from rlmdoc.chunkers.token import TokenChunker
from rlmdoc.chunkers.uniform import UniformChunker
from rlmdoc.models import Chunk, Document
from rlmdoc.protocols.chunker import ChunkingStrategy
from rlmdoc.protocols.tokenizer import Tokenizer

logger = logging.getLogger(__name__)


def create_chunker(options: StrategyOptions, tokenizer: Optional[Tokenizer] = None) -> ChunkingStrategy:
    """Instantiate the chunker for a concrete (non-auto) options record."""
    match options:
        case UniformOptions():
            return UniformChunker(options)
        case FilteringOptions():
            return FilteringChunker(options)
        case SemanticOptions():
            return SemanticChunker(options)
        case TokenOptions():
            if tokenizer is None:
                from rlmdoc.tokenizers import default_tokenizer

                tokenizer = default_tokenizer()
            return TokenChunker(options, tokenizer)
        case RecursiveOptions():
            return RecursiveChunker(options, tokenizer)
        case AutoOptions():
            raise TypeError("Auto options are resolved by segment(), not instantiated")
        case _:
            assert_never(options)


def segment(
    document: Document,
    options: StrategyOptions,
    tokenizer: Optional[Tokenizer] = None,
) -> list[Chunk]:
    """Split a document into an ordered list of chunks.

    Args:
        document: Document whose content is segmented
        options: Options record of the strategy to apply
        tokenizer: Exact tokenizer for token budgets (defaults to tiktoken)

    Returns:
        Chunks in increasing index order, each stamped with ``totalChunks``

    Raises:
        ConfigurationError: If the options are invalid
    """
    if isinstance(options, AutoOptions):
        selected = select_strategy(document.content, options)
        return mark_auto_selected(segment(document, selected, tokenizer))

    chunker = create_chunker(options, tokenizer)
    chunks = chunker.chunk(document)
    logger.debug("%s produced %d chunks from %d chars", chunker.name, len(chunks), len(document.content))
    return chunks


__all__ = [
    "segment",
    "create_chunker",
    "select_strategy",
    "enrich_statistics",
    "build_options",
    "parse_strategy",
    "Strategy",
    "StrategyOptions",
    "UniformOptions",
    "FilteringOptions",
    "SemanticOptions",
    "TokenOptions",
    "RecursiveOptions",
    "AutoOptions",
    "UniformChunker",
    "FilteringChunker",
    "SemanticChunker",
    "TokenChunker",
    "RecursiveChunker",
]
