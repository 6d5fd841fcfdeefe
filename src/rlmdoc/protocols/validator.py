"""Protocol for document validators."""

from typing import Protocol, runtime_checkable

from rlmdoc.models import Document
from rlmdoc.models.validation import ValidationResult


@runtime_checkable
class Validator(Protocol):
    """Protocol for checks run on a document before it enters a session."""

    def validate(self, document: Document) -> ValidationResult:
        """Return pass/fail with human-readable errors and warnings."""
        ...
