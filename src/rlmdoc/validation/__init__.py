"""Document validation."""

from rlmdoc.config import Settings
from rlmdoc.models import Document, ValidationResult
from rlmdoc.validation.composite import CompositeValidator
from rlmdoc.validation.range import RangeValidator
from rlmdoc.validation.syntactic import SyntacticValidator


def default_validator(settings: Settings | None = None) -> CompositeValidator:
    """Syntactic checks first, then the configured size limits."""
    return CompositeValidator(SyntacticValidator(), RangeValidator.from_settings(settings))


def validate_document(document: Document, settings: Settings | None = None) -> ValidationResult:
    return default_validator(settings).validate(document)


__all__ = [
    "validate_document",
    "default_validator",
    "CompositeValidator",
    "RangeValidator",
    "SyntacticValidator",
    "ValidationResult",
]
