"""Session state machine for chunk navigation and result collection.

A ``Session`` is a plain value: every operation loads it from the session
store, mutates it through the methods here, and saves it back.
"""

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterable, Optional

from rlmdoc.chunkers import enrich_statistics, segment
from rlmdoc.chunkers.options import StrategyOptions
from rlmdoc.errors import (
    ChunkNotFoundError,
    ConfigurationError,
    DocumentNotLoadedError,
    LoaderError,
    RecursionLimitError,
)
from rlmdoc.models import Aggregate, Chunk, Document, DocumentMetadata, aggregate
from rlmdoc.models.results import DEFAULT_SEPARATOR
from rlmdoc.protocols.tokenizer import Tokenizer

logger = logging.getLogger(__name__)

MAX_RECURSION_DEPTH = 5


class SessionState(str, Enum):
    EMPTY = "empty"
    LOADED = "loaded"
    CHUNKED = "chunked"


@dataclass(frozen=True)
class JumpTarget:
    """An absolute 0-based chunk index or a percentage through the buffer."""

    index: Optional[int] = None
    percent: Optional[float] = None

    def resolve(self, count: int) -> int:
        """Return the clamped 0-based index this target points at in ``count`` chunks."""
        last = count - 1
        if self.percent is not None:
            percent = min(max(self.percent, 0.0), 100.0)
            # Round half up, not Python's banker's rounding
            target = math.floor(percent / 100 * last + 0.5)
        else:
            target = self.index or 0
        return min(max(target, 0), last)


def parse_jump_target(text: str, one_based: bool = False) -> JumpTarget:
    """Parse ``"12"`` or ``"50%"``.

    Args:
        text: Index or percentage with a ``%`` suffix
        one_based: Treat plain indexes as 1-based, as users type them

    Raises:
        ConfigurationError: If the text is neither form
    """
    value = text.strip()
    if value.endswith("%"):
        message = f"Invalid percentage '{text}'. Use a number followed by % (e.g. 50%)"
        try:
            percent = float(value[:-1])
        except ValueError:
            raise ConfigurationError(message) from None
        if not math.isfinite(percent):
            raise ConfigurationError(message)
        return JumpTarget(percent=percent)
    try:
        index = int(value)
    except ValueError:
        raise ConfigurationError(f"Invalid index '{text}'. Use a number or a percentage (e.g. 50%)") from None
    return JumpTarget(index=index - 1 if one_based else index)


def parse_slice_range(text: str, length: int) -> tuple[int, int]:
    """Parse Python-style ``start:end`` (either side optional, negatives count from the end).

    Returns:
        ``(start, end)`` clamped to ``[0, length]``

    Raises:
        ConfigurationError: If the range is malformed or empty after clamping
    """
    parts = text.split(":")
    if len(parts) != 2:
        raise ConfigurationError(f"Invalid range '{text}'. Use start:end (e.g. 0:1000, -500:, :1000)")

    def bound(part: str, default: int) -> int:
        part = part.strip()
        if not part:
            return default
        try:
            value = int(part)
        except ValueError:
            raise ConfigurationError(f"Invalid range bound '{part}' in '{text}'") from None
        return length + value if value < 0 else value

    start = max(0, bound(parts[0], 0))
    end = min(length, bound(parts[1], length))
    if start > end:
        raise ConfigurationError(f"Invalid range '{text}'. Document length is {length:,} chars")
    return start, end


@dataclass
class Session:
    """Persisted state of one session identifier."""

    recursion_depth: int = 0
    content: Optional[str] = None
    metadata: Optional[DocumentMetadata] = None
    chunk_buffer: list[Chunk] = field(default_factory=list)
    current_chunk_index: int = 0
    results: dict[str, str] = field(default_factory=dict)

    @property
    def state(self) -> SessionState:
        if self.content is None:
            return SessionState.EMPTY
        if not self.chunk_buffer:
            return SessionState.LOADED
        return SessionState.CHUNKED

    @property
    def has_document(self) -> bool:
        return self.content is not None

    @property
    def has_chunks(self) -> bool:
        return bool(self.chunk_buffer)

    @property
    def chunk_count(self) -> int:
        return len(self.chunk_buffer)

    @property
    def has_more_chunks(self) -> bool:
        return self.current_chunk_index < len(self.chunk_buffer) - 1

    @property
    def current_chunk(self) -> Optional[Chunk]:
        if 0 <= self.current_chunk_index < len(self.chunk_buffer):
            return self.chunk_buffer[self.current_chunk_index]
        return None

    def to_document(self) -> Document:
        """Rebuild a document from the loaded content.

        Raises:
            DocumentNotLoadedError: If nothing is loaded
        """
        if self.content is None:
            raise DocumentNotLoadedError("No document loaded. Use 'rlmdoc load <file>' first.")
        metadata = self.metadata or DocumentMetadata.describe("memory", self.content)
        return Document(id=metadata.source or "session", content=self.content, metadata=metadata)

    # Document and chunks

    def load_document(self, document: Document) -> None:
        """Replace the loaded content; chunks are dropped, results and depth kept."""
        self.content = document.content
        self.metadata = document.metadata
        self.chunk_buffer = []
        self.current_chunk_index = 0

    def chunk(self, options: StrategyOptions, tokenizer: Optional[Tokenizer] = None) -> list[Chunk]:
        """Segment the loaded content, replacing the chunk buffer.

        Options are validated before the buffer is touched, so a bad
        configuration leaves the session unchanged.

        Raises:
            DocumentNotLoadedError: If nothing is loaded
            ConfigurationError: If the options are invalid
        """
        document = self.to_document()
        chunks = enrich_statistics(segment(document, options, tokenizer))
        self.chunk_buffer = chunks
        self.current_chunk_index = 0
        logger.info("Created %d chunks", len(chunks))
        return chunks

    def _require_chunks(self) -> None:
        if not self.chunk_buffer:
            raise ChunkNotFoundError("No chunks available. Use 'rlmdoc chunk' first.")

    def _clamp(self, index: int) -> int:
        return min(max(index, 0), len(self.chunk_buffer) - 1)

    def next_chunk(self) -> Optional[Chunk]:
        """Advance the cursor and return the chunk now under it.

        Returns None without moving when the cursor is on the last chunk.
        """
        self._require_chunks()
        if not self.has_more_chunks:
            return None
        self.current_chunk_index += 1
        return self.current_chunk

    def skip(self, count: int, min_length: int = 0) -> Chunk:
        """Move the cursor by ``count`` (negative moves back), clamped to the buffer.

        With ``min_length`` the move keeps going in the same direction past
        chunks shorter than that, stopping at either end.
        """
        self._require_chunks()
        target = self._clamp(self.current_chunk_index + count)
        if min_length > 0 and count != 0:
            step = 1 if count > 0 else -1
            while (
                0 <= target + step < len(self.chunk_buffer)
                and self.chunk_buffer[target].length < min_length
            ):
                target += step
        self.current_chunk_index = target
        return self.chunk_buffer[target]

    def jump(self, target: int | JumpTarget) -> Chunk:
        """Move the cursor to a 0-based index or a percentage through the buffer."""
        self._require_chunks()
        if not isinstance(target, JumpTarget):
            target = JumpTarget(index=target)
        self.current_chunk_index = target.resolve(len(self.chunk_buffer))
        return self.chunk_buffer[self.current_chunk_index]

    def slice(self, text: str) -> str:
        """Return ``content[start:end]`` for a ``start:end`` range."""
        if self.content is None:
            raise DocumentNotLoadedError("No document loaded. Use 'rlmdoc load <file>' first.")
        start, end = parse_slice_range(text, len(self.content))
        return self.content[start:end]

    # Results

    def store(self, key: str, value: str) -> None:
        """Store a partial result; an existing key is overwritten."""
        if not key:
            raise ConfigurationError("Result key must not be empty")
        self.results[key] = value

    def get_result(self, key: str) -> Optional[str]:
        return self.results.get(key)

    def remove_result(self, key: str) -> bool:
        return self.results.pop(key, None) is not None

    def aggregate(self, final: bool = False, separator: str = DEFAULT_SEPARATOR) -> Aggregate:
        return aggregate(self.results, final=final, separator=separator)

    def clear(self) -> None:
        """Reset to an empty session, results and recursion depth included."""
        self.content = None
        self.metadata = None
        self.chunk_buffer = []
        self.current_chunk_index = 0
        self.results = {}
        self.recursion_depth = 0

    # Recursion guard

    def enter_recursion(self) -> bool:
        """Enter one decomposition level.

        Returns:
            True if the depth is already at ``MAX_RECURSION_DEPTH``; the
            depth is then left unchanged
        """
        if self.recursion_depth >= MAX_RECURSION_DEPTH:
            return True
        self.recursion_depth += 1
        return False

    def exit_recursion(self) -> None:
        if self.recursion_depth > 0:
            self.recursion_depth -= 1

    def descend(self) -> int:
        """Like ``enter_recursion`` but raises when the limit is reached.

        Raises:
            RecursionLimitError: If the depth is already at the maximum
        """
        if self.enter_recursion():
            raise RecursionLimitError(
                f"Maximum recursion depth ({MAX_RECURSION_DEPTH}) reached. Aggregate what you have."
            )
        return self.recursion_depth

    # Summary

    def progress(self) -> dict:
        """Return a summary of the session for status displays."""
        count = len(self.chunk_buffer)
        current = self.current_chunk
        processed = self.chunk_buffer[self.current_chunk_index].end_offset if current else 0
        remaining_chars = sum(c.length for c in self.chunk_buffer[self.current_chunk_index + 1 :])
        return {
            "state": self.state.value,
            "source": self.metadata.source if self.metadata else None,
            "totalLength": len(self.content) if self.content is not None else 0,
            "chunkCount": count,
            "currentIndex": self.current_chunk_index if count else None,
            "remainingChunks": count - self.current_chunk_index - 1 if count else 0,
            "resultCount": len(self.results),
            "processedChars": processed,
            "percentComplete": round((self.current_chunk_index + 1) / count * 100, 1) if count else 0.0,
            "remainingTokenEstimate": remaining_chars // 4,
            "recursionDepth": self.recursion_depth,
        }


def import_results(session: Session, paths: Iterable[Path | str]) -> list[str]:
    """Store each file's text under its file stem.

    Returns:
        The keys that were stored, in order

    Raises:
        LoaderError: If a file cannot be read
    """
    keys = []
    for path in sorted(Path(p) for p in paths):
        try:
            value = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise LoaderError(f"Cannot import {path}: {e}") from e
        session.store(path.stem, value)
        keys.append(path.stem)
    logger.info("Imported %d results", len(keys))
    return keys
