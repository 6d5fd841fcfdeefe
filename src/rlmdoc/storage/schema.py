"""JSON schema of persisted session files.

Field names are camelCase on disk and stable across releases; bump
``SCHEMA_VERSION`` when making breaking changes.
"""

from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from rlmdoc.models import Chunk, DocumentMetadata
from rlmdoc.session import Session

SCHEMA_VERSION = 1


class _Record(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MetadataRecord(_Record):
    """Persisted form of ``DocumentMetadata``."""

    source: str
    total_length: int = Field(ge=0)
    token_estimate: int = Field(ge=0)
    line_count: int = Field(ge=0)
    loaded_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    content_type: Optional[str] = None
    title: Optional[str] = None
    word_count: Optional[int] = None
    header_count: Optional[int] = None
    code_block_count: Optional[int] = None
    code_languages: list[str] = Field(default_factory=list)
    reading_time_minutes: Optional[int] = None
    extra: dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_metadata(cls, metadata: DocumentMetadata) -> "MetadataRecord":
        return cls(
            source=metadata.source,
            total_length=metadata.total_length,
            token_estimate=metadata.token_estimate,
            line_count=metadata.line_count,
            loaded_at=metadata.loaded_at,
            content_type=metadata.content_type,
            title=metadata.title,
            word_count=metadata.word_count,
            header_count=metadata.header_count,
            code_block_count=metadata.code_block_count,
            code_languages=list(metadata.code_languages),
            reading_time_minutes=metadata.reading_time_minutes,
            extra=dict(metadata.extra),
        )

    def to_metadata(self) -> DocumentMetadata:
        return DocumentMetadata(
            source=self.source,
            total_length=self.total_length,
            token_estimate=self.token_estimate,
            line_count=self.line_count,
            loaded_at=self.loaded_at,
            content_type=self.content_type,
            title=self.title,
            word_count=self.word_count,
            header_count=self.header_count,
            code_block_count=self.code_block_count,
            code_languages=tuple(self.code_languages),
            reading_time_minutes=self.reading_time_minutes,
            extra=dict(self.extra),
        )


class ChunkRecord(_Record):
    """Persisted form of ``Chunk``."""

    index: int = Field(ge=0)
    content: str
    start_offset: int = Field(ge=0)
    end_offset: int = Field(ge=0)
    metadata: dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_chunk(cls, chunk: Chunk) -> "ChunkRecord":
        return cls(
            index=chunk.index,
            content=chunk.content,
            start_offset=chunk.start_offset,
            end_offset=chunk.end_offset,
            metadata=dict(chunk.metadata),
        )

    def to_chunk(self) -> Chunk:
        return Chunk(
            index=self.index,
            content=self.content,
            start_offset=self.start_offset,
            end_offset=self.end_offset,
            metadata=dict(self.metadata),
        )


class SessionRecord(_Record):
    """Persisted form of ``Session``."""

    version: int = SCHEMA_VERSION
    recursion_depth: int = Field(default=0, ge=0)
    content: Optional[str] = None
    metadata: Optional[MetadataRecord] = None
    chunk_buffer: list[ChunkRecord] = Field(default_factory=list)
    current_chunk_index: int = Field(default=0, ge=0)
    results: dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_session(cls, session: Session) -> "SessionRecord":
        return cls(
            recursion_depth=session.recursion_depth,
            content=session.content,
            metadata=MetadataRecord.from_metadata(session.metadata) if session.metadata else None,
            chunk_buffer=[ChunkRecord.from_chunk(c) for c in session.chunk_buffer],
            current_chunk_index=session.current_chunk_index,
            results=dict(session.results),
        )

    def to_session(self) -> Session:
        chunks = [record.to_chunk() for record in self.chunk_buffer]
        index = min(self.current_chunk_index, max(len(chunks) - 1, 0))
        return Session(
            recursion_depth=self.recursion_depth,
            content=self.content,
            metadata=self.metadata.to_metadata() if self.metadata else None,
            chunk_buffer=chunks,
            current_chunk_index=index,
            results=dict(self.results),
        )


def session_to_dict(session: Session) -> dict[str, Any]:
    """Serialize a session to its JSON-ready, camelCase form."""
    return SessionRecord.from_session(session).model_dump(by_alias=True, mode="json")


def session_from_dict(data: Any) -> Session:
    """Rebuild a session from its persisted form.

    Raises:
        pydantic.ValidationError: If the data does not match the schema
    """
    return SessionRecord.model_validate(data).to_session()
