"""Reconciliation failures.

Each failure carries the operation that failed and the release or record it
targeted, so callers can log and retry by hand. Compensating rollback errors
are attached as secondary errors and never replace the primary one.
"""

from __future__ import annotations


class ReconcileError(Exception):
    """Base class for reconciliation failures.

    Attributes:
        message: What went wrong
        operation: Name of the failed operation (e.g. "install main release")
        target: Identity of the release or record involved
        details: Optional underlying error text
        secondary_errors: Errors raised while compensating for this one
    """

    http_status: int = 500
    kind: str = "internal"

    def __init__(
        self,
        message: str,
        *,
        operation: str = "",
        target: str = "",
        details: str | None = None,
        http_status: int | None = None,
    ) -> None:
        self.message = message
        self.operation = operation
        self.target = target
        self.details = details
        self.secondary_errors: list[Exception] = []
        if http_status is not None:
            self.http_status = http_status
        super().__init__(message)

    @property
    def client_error(self) -> bool:
        """Whether the caller caused the failure (4xx)."""
        return 400 <= self.http_status < 500

    def add_secondary(self, error: Exception) -> None:
        """Attach an error raised while rolling back."""
        self.secondary_errors.append(error)

    def __str__(self) -> str:
        text = self.message
        if self.operation or self.target:
            context = " ".join(part for part in (self.operation, self.target) if part)
            text = f"{text} [{context}]"
        if self.details:
            text = f"{text}: {self.details}"
        for error in self.secondary_errors:
            text = f"{text}; additionally: {error}"
        return text


class ValidationFailure(ReconcileError):
    """Bad manifest, image or request fields. Raised before any mutation."""

    http_status = 400
    kind = "validation"


class ConflictFailure(ReconcileError):
    """An application with the same name already exists on the cluster."""

    http_status = 403
    kind = "conflict"


class PlatformFailure(ReconcileError):
    """A namespace or release operation on the cluster failed."""

    kind = "platform"


class PersistenceFailure(ReconcileError):
    """A relational read or write failed after the cluster was mutated."""

    kind = "persistence"
