"""Size and line-count limits."""

from rlmdoc.config import Settings, get_settings
from rlmdoc.models import Document, ValidationResult

MIB = 1024 * 1024
# Fraction of a limit above which a warning is reported
WARN_RATIO = 0.8


class RangeValidator:
    """Reject documents that are empty or exceed the size and line limits."""

    def __init__(
        self,
        max_bytes: int = 5 * MIB,
        max_lines: int = 100_000,
        min_chars: int = 1,
    ):
        self.max_bytes = max_bytes
        self.max_lines = max_lines
        self.min_chars = min_chars

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "RangeValidator":
        settings = settings or get_settings()
        return cls(max_bytes=settings.max_document_bytes, max_lines=settings.max_line_count)

    def validate(self, document: Document) -> ValidationResult:
        errors: list[str] = []
        warnings: list[str] = []
        length = len(document.content)
        size = len(document.content.encode("utf-8"))
        lines = document.metadata.line_count

        if length < self.min_chars:
            errors.append(f"Document is too small ({length} chars). Minimum required: {self.min_chars} chars.")

        if size > self.max_bytes:
            errors.append(
                f"Document exceeds maximum size ({size / MIB:.1f} MB). "
                f"Maximum allowed: {self.max_bytes / MIB:.1f} MB."
            )
        elif size > self.max_bytes * WARN_RATIO:
            warnings.append(f"Document is approaching size limit ({size / MIB:.1f} MB).")

        if lines > self.max_lines:
            errors.append(
                f"Document exceeds maximum line count ({lines:,} lines). "
                f"Maximum allowed: {self.max_lines:,} lines."
            )
        elif lines > self.max_lines * WARN_RATIO:
            warnings.append(f"Document is approaching line count limit ({lines:,} lines).")

        if errors:
            return ValidationResult.failure(errors, warnings)
        return ValidationResult.success(warnings)
