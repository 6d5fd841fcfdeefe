"""Core data models for documents and chunks."""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Optional


def estimate_tokens(text: str) -> int:
    """Cheap token estimate used for display: four characters per token."""
    return len(text) // 4


def count_lines(text: str) -> int:
    return text.count("\n") + 1


@dataclass(frozen=True)
class DocumentMetadata:
    """Descriptive attributes of the content currently held by a document."""

    source: str
    total_length: int
    token_estimate: int
    line_count: int
    loaded_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    # Format-specific metadata
    content_type: Optional[str] = None
    title: Optional[str] = None
    word_count: Optional[int] = None
    header_count: Optional[int] = None
    code_block_count: Optional[int] = None
    code_languages: tuple[str, ...] = ()
    reading_time_minutes: Optional[int] = None
    extra: dict[str, str] = field(default_factory=dict)

    @classmethod
    def describe(cls, source: str, content: str, **fields) -> "DocumentMetadata":
        """Build metadata whose size statistics match ``content``."""
        return cls(
            source=source,
            total_length=len(content),
            token_estimate=estimate_tokens(content),
            line_count=count_lines(content),
            **fields,
        )

    def with_content(self, content: str, **fields) -> "DocumentMetadata":
        """Return a copy recomputed for new content."""
        return replace(
            self,
            total_length=len(content),
            token_estimate=estimate_tokens(content),
            line_count=count_lines(content),
            **fields,
        )


@dataclass(frozen=True)
class Document:
    """A normalized document produced by a loader."""

    id: str
    content: str
    metadata: DocumentMetadata

    def with_id(self, id: str) -> "Document":
        return replace(self, id=id)

    def with_content(self, content: str, **metadata_fields) -> "Document":
        """Replace the content, keeping metadata in step with it."""
        return replace(
            self,
            content=content,
            metadata=self.metadata.with_content(content, **metadata_fields),
        )


@dataclass(frozen=True)
class Chunk:
    """One bounded, offset-addressable segment of document content.

    ``start_offset`` and ``end_offset`` are character offsets into the
    content the chunk was cut from, so ``content == text[start:end]``.
    """

    index: int
    content: str
    start_offset: int
    end_offset: int
    metadata: dict[str, str] = field(default_factory=dict)

    @property
    def length(self) -> int:
        return len(self.content)

    @property
    def token_estimate(self) -> int:
        return estimate_tokens(self.content)

    @property
    def token_count(self) -> Optional[int]:
        """Exact token count when a tokenizer measured this chunk."""
        value = self.metadata.get("tokenCount")
        return int(value) if value is not None else None
