"""Error taxonomy shared by the store, the service and the HTTP layer."""

from typing import NamedTuple


class TriageError(Exception):
    """Base exception for triage errors."""

    pass


class ValidationIssue(NamedTuple):
    """A single violated constraint, addressed by dotted field path."""

    field: str
    message: str


class ValidationError(TriageError):
    """Raised when a rule, condition, field or config breaks an invariant.

    Carries one issue per violated constraint, not just the first.
    """

    def __init__(self, issues: list[ValidationIssue]) -> None:
        self.issues = list(issues)
        summary = "; ".join(f"{i.field or '<root>'}: {i.message}" for i in self.issues)
        super().__init__(f"Validation failed: {summary}")

    def to_list(self) -> list[dict[str, str]]:
        """Return issues as JSON-ready dicts."""
        return [{"field": i.field, "message": i.message} for i in self.issues]


class RuleNotFoundError(TriageError):
    """Raised when a mutation targets a rule id absent from the document."""

    def __init__(self, rule_id: str) -> None:
        self.rule_id = rule_id
        super().__init__(f"Rule with id {rule_id} not found")


class StorageError(TriageError):
    """Base exception for storage errors."""

    pass


class StorageReadError(StorageError):
    """Raised when the stored document is missing, unreadable or malformed."""

    pass


class StorageWriteError(StorageError):
    """Raised when the document could not be written."""

    pass


class AppError(Exception):
    """Operational error with an HTTP status, raised by the service layer."""

    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(message)


class ChatCompletionError(AppError):
    """Raised when the language model request fails before streaming."""

    def __init__(self, message: str = "Failed to get a response from the language model") -> None:
        super().__init__(502, message)
