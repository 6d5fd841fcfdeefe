"""Heuristic strategy selection."""

import logging
import re
from dataclasses import replace

from rlmdoc.chunkers.options import (
    AutoOptions,
    FilteringOptions,
    RecursiveOptions,
    SemanticOptions,
    StrategyOptions,
    UniformOptions,
    compile_pattern,
)
from rlmdoc.chunkers.structure import find_headers
from rlmdoc.errors import ConfigurationError
from rlmdoc.models import Chunk

logger = logging.getLogger(__name__)


def query_pattern(query: str) -> str:
    """Use ``query`` as a regex when it compiles, otherwise match it literally."""
    try:
        compile_pattern(query, label="query")
    except ConfigurationError:
        return re.escape(query)
    return query


def select_strategy(content: str, options: AutoOptions | None = None) -> StrategyOptions:
    """Pick concrete strategy options for ``content``.

    Rules, first match wins:
      1. a non-empty query: filter on it
      2. two or more Markdown headers: semantic with small sections merged
      3. content above the large-document threshold: recursive
      4. otherwise: uniform with the default size
    """
    options = options or AutoOptions()
    options.validate()

    if options.query and options.query.strip():
        logger.debug("Auto: query given, using filter")
        return FilteringOptions(
            pattern=query_pattern(options.query),
            context_window=options.context_window,
        )

    if len(find_headers(content)) >= 2:
        logger.debug("Auto: Markdown headers found, using semantic")
        return SemanticOptions(merge_small=True, min_size=options.semantic_min_size)

    if len(content) > options.large_document_threshold:
        logger.debug("Auto: %d chars over threshold, using recursive", len(content))
        return RecursiveOptions(target_size=options.recursive_target_size)

    logger.debug("Auto: using uniform")
    return UniformOptions(size=options.default_size)


def mark_auto_selected(chunks: list[Chunk]) -> list[Chunk]:
    return [replace(c, metadata={**c.metadata, "autoSelected": "true"}) for c in chunks]
