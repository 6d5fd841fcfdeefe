"""Validator chaining."""

from rlmdoc.models import Document, ValidationResult
from rlmdoc.protocols.validator import Validator


class CompositeValidator:
    """Run validators in order, accumulating errors and warnings.

    Stops at the first failing validator unless ``run_all`` is set.
    """

    def __init__(self, *validators: Validator, run_all: bool = False):
        self.validators = list(validators)
        self.run_all = run_all

    def validate(self, document: Document) -> ValidationResult:
        result = ValidationResult()
        for validator in self.validators:
            outcome = validator.validate(document)
            result = result.merge(outcome)
            if not outcome.is_valid and not self.run_all:
                break
        return result
