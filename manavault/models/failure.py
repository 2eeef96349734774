"""
Failure classification and response envelope.

Known, explainable failures are raised as `KnownError` subclasses and
rendered by the application's exception handler as an `ApiResponse`
with a known-failure outcome and the error's HTTP status code.

Expected per-item failures during import (unmatched cards, a failed
catalog chunk) are NOT exceptions; they are carried as item status.
"""

from enum import Enum

from pydantic import BaseModel, Field


class FailureKind(str, Enum):
    """Classification of failure types."""

    # Input validation failures
    INVALID_INPUT = "invalid_input"

    # Service failures
    SERVICE_UNAVAILABLE = "service_unavailable"
    EXTERNAL_API_ERROR = "external_api_error"


class OutcomeType(str, Enum):
    """High-level outcome classification."""

    KNOWN_FAILURE = "known_failure"


class FailureDetail(BaseModel):
    """Detailed information about a failure."""

    kind: FailureKind = Field(
        ...,
        description="Classification of the failure",
    )
    message: str = Field(
        ...,
        description="User-appropriate explanation of what went wrong",
    )
    detail: str | None = Field(
        default=None,
        description="Additional technical detail (optional)",
    )
    suggestion: str | None = Field(
        default=None,
        description="Suggested action for the user",
    )


class ApiResponse(BaseModel):
    """Response envelope for classified outcomes."""

    outcome: OutcomeType = Field(
        ...,
        description="High-level classification of the result",
    )
    failure: FailureDetail | None = Field(
        default=None,
        description="Failure details (present on non-success)",
    )

    @classmethod
    def known_failure(
        cls,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
    ) -> "ApiResponse":
        """Create a known failure response."""
        return cls(
            outcome=OutcomeType.KNOWN_FAILURE,
            failure=FailureDetail(
                kind=kind,
                message=message,
                detail=detail,
                suggestion=suggestion,
            ),
        )


class KnownError(Exception):
    """
    Base class for exceptions that represent known, explainable failures.

    Subclass this for errors where the system knows exactly what went wrong.
    """

    def __init__(
        self,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
        status_code: int = 400,
    ):
        self.kind = kind
        self.message = message
        self.detail = detail
        self.suggestion = suggestion
        self.status_code = status_code
        super().__init__(message)

    def to_response(self) -> ApiResponse:
        """Convert to an ApiResponse."""
        return ApiResponse.known_failure(
            kind=self.kind,
            message=self.message,
            detail=self.detail,
            suggestion=self.suggestion,
        )


class RateLimitTimeoutError(KnownError):
    """
    A single catalog call exceeded the gate timeout.

    Distinguished from generic network failure so callers can report
    "service busy, try later" rather than "bad input".
    """

    def __init__(self, timeout: float):
        self.timeout = timeout
        super().__init__(
            kind=FailureKind.SERVICE_UNAVAILABLE,
            message=(
                f"Request timed out after {timeout:g}s. "
                "This may be due to rate limiting or high server load."
            ),
            suggestion="The card catalog is busy. Please try again shortly.",
            status_code=503,
        )


class CatalogUnavailableError(KnownError):
    """The card catalog returned an error or could not be reached."""

    def __init__(self, detail: str | None = None):
        super().__init__(
            kind=FailureKind.EXTERNAL_API_ERROR,
            message="The card catalog could not be reached.",
            detail=detail,
            suggestion="Try again later.",
            status_code=502,
        )
