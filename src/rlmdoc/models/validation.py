"""Outcome of validating a document."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ValidationResult:
    """Pass/fail with human-readable errors and warnings."""

    errors: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)

    @classmethod
    def success(cls, warnings: list[str] | None = None) -> "ValidationResult":
        return cls(warnings=tuple(warnings or ()))

    @classmethod
    def failure(cls, errors: list[str], warnings: list[str] | None = None) -> "ValidationResult":
        return cls(errors=tuple(errors), warnings=tuple(warnings or ()))

    def merge(self, other: "ValidationResult") -> "ValidationResult":
        """Combine two results; errors and warnings accumulate."""
        return ValidationResult(self.errors + other.errors, self.warnings + other.warnings)
