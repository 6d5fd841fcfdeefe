"""Data models for rlmdoc."""

from rlmdoc.models.document import Chunk, Document, DocumentMetadata, estimate_tokens
from rlmdoc.models.results import DEFAULT_SEPARATOR, Aggregate, aggregate, combine
from rlmdoc.models.validation import ValidationResult

__all__ = [
    "Document",
    "DocumentMetadata",
    "Chunk",
    "estimate_tokens",
    "Aggregate",
    "aggregate",
    "combine",
    "DEFAULT_SEPARATOR",
    "ValidationResult",
]
