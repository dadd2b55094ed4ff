from __future__ import annotations


class NumberingError(Exception):
    """Base class for every failure raised by the numbering services."""


# --- Rule administration ---


class RuleValidationError(NumberingError, ValueError):
    message = "Invalid numbering rule"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)


class EmptyRuleName(RuleValidationError):
    message = "Rule name must not be empty"


class EmptyTemplate(RuleValidationError):
    message = "Template must not be empty"


class InvalidSequenceDigits(RuleValidationError):
    message = "Sequence digits must be between 1 and 18"


class EmptyDocumentTypeCodes(RuleValidationError):
    message = "At least one document type code is required"


class InvalidEffectivePeriod(RuleValidationError):
    message = "effective_until must not be earlier than effective_from"


# --- Number generation ---


class NumberGenerationError(NumberingError):
    message = "Document number generation failed"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)


class RequestValidationError(NumberGenerationError, ValueError):
    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field


class NoApplicableRule(NumberGenerationError):
    message = "No applicable rule found for the given criteria"


class SequenceExhausted(NumberGenerationError):
    message = "Sequence numbers exhausted for the rule"


class DuplicateNumber(NumberGenerationError):
    message = "Generated document number already exists"


class TemplateError(NumberGenerationError):
    message = "Template parsing error"
