"""
Failure Explanation Envelope.

Every command reports its outcome through ApiResponse. Failures in this
application never crash the process: they degrade to "no state change"
plus a classified, explained message.

Response types:
- Success: Operation completed successfully
- Refusal: System chose not to proceed (e.g. an out-of-date load)
- KnownFailure: System knows why it failed
- UnknownFailure: System does not know why it failed

All error responses leaving the HTTP layer pass through `finalize_response()`.
"""

from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field


class FailureKind(str, Enum):
    """Classification of failure types."""

    # Input validation failures
    INVALID_INPUT = "invalid_input"
    UNSUPPORTED_FORMAT = "unsupported_format"

    # Resource failures
    NOT_FOUND = "not_found"
    DATASET_UNAVAILABLE = "dataset_unavailable"

    # Ordering
    STALE_LOAD = "stale_load"

    # Unknown
    UNKNOWN = "unknown"


class OutcomeType(str, Enum):
    """High-level outcome classification."""

    SUCCESS = "success"
    REFUSAL = "refusal"
    KNOWN_FAILURE = "known_failure"
    UNKNOWN_FAILURE = "unknown_failure"


T = TypeVar("T")


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


class ApiResponse(BaseModel, Generic[T]):
    """Universal response envelope for failed commands."""

    outcome: OutcomeType
    data: T | None = None
    failure: FailureDetail | None = None

    @classmethod
    def success(cls, data: T) -> "ApiResponse[T]":
        """Create a success response."""
        return cls(outcome=OutcomeType.SUCCESS, data=data)

    @classmethod
    def refusal(
        cls,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
    ) -> "ApiResponse[Any]":
        """Create a refusal response."""
        return cls(
            outcome=OutcomeType.REFUSAL,
            failure=FailureDetail(
                kind=kind,
                message=message,
                detail=detail,
                suggestion=suggestion,
            ),
        )

    @classmethod
    def known_failure(
        cls,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
    ) -> "ApiResponse[Any]":
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

    @classmethod
    def unknown_failure(cls, detail: str | None = None) -> "ApiResponse[Any]":
        """Create an unknown failure response (catch-all)."""
        return cls(
            outcome=OutcomeType.UNKNOWN_FAILURE,
            failure=FailureDetail(
                kind=FailureKind.UNKNOWN,
                message="Something went wrong and the cause is unknown. Please retry.",
                detail=detail,
                suggestion="If this persists, please report the issue.",
            ),
        )


class KnownError(Exception):
    """
    Base class for exceptions that represent known, explainable failures.

    Subclass this for errors where the system knows exactly what went wrong.
    """

    outcome = OutcomeType.KNOWN_FAILURE

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

    def to_response(self) -> ApiResponse[Any]:
        """Convert to an ApiResponse."""
        if self.outcome == OutcomeType.REFUSAL:
            return ApiResponse.refusal(
                kind=self.kind,
                message=self.message,
                detail=self.detail,
                suggestion=self.suggestion,
            )
        return ApiResponse.known_failure(
            kind=self.kind,
            message=self.message,
            detail=self.detail,
            suggestion=self.suggestion,
        )


class DatasetLoadError(KnownError):
    """
    A dataset fragment could not be fetched or parsed.

    The whole merge is aborted; the previous dataset stays in place.
    """

    def __init__(self, fragment: str, detail: str | None = None):
        self.fragment = fragment
        super().__init__(
            kind=FailureKind.DATASET_UNAVAILABLE,
            message=f"Failed to load dataset fragment '{fragment}'.",
            detail=detail,
            suggestion="Check that the dataset files are being served and try again.",
            status_code=502,
        )


class UnsupportedFormatError(KnownError):
    """An import was offered in a format other than JSON or CSV."""

    def __init__(self, format_name: str):
        self.format_name = format_name
        super().__init__(
            kind=FailureKind.UNSUPPORTED_FORMAT,
            message=f"Unsupported file type '{format_name}'. Use .json or .csv",
            status_code=415,
        )


class StaleLoadError(KnownError):
    """A load finished after a newer load for the same session started."""

    outcome = OutcomeType.REFUSAL

    def __init__(self, token: int, latest: int):
        self.token = token
        self.latest = latest
        super().__init__(
            kind=FailureKind.STALE_LOAD,
            message="A newer dataset load superseded this one.",
            detail=f"attempt {token} superseded by attempt {latest}",
            status_code=409,
        )


class GuessIndexError(KnownError):
    """Removal was requested for a history row that does not exist."""

    def __init__(self, index: int, size: int):
        self.index = index
        self.size = size
        super().__init__(
            kind=FailureKind.INVALID_INPUT,
            message=f"No guess at position {index}.",
            detail=f"history has {size} entries",
            status_code=400,
        )


# =============================================================================
# FAILURE AUTHORITY BOUNDARY
# =============================================================================

def finalize_response(response: ApiResponse[Any]) -> ApiResponse[Any]:
    """
    Validate a response at the HTTP boundary.

    Success carries no failure detail; every other outcome must carry one.

    Raises:
        ValueError: If response structure is invalid
    """
    if response.outcome == OutcomeType.SUCCESS:
        if response.failure is not None:
            raise ValueError("Success response must not have failure details")
    else:
        if response.failure is None:
            raise ValueError(f"{response.outcome.value} response must have failure details")

    return response


def create_unknown_failure(exception: Exception) -> ApiResponse[Any]:
    """
    Unknown failure envelope for an unclassified exception.

    Only the exception type is reported; its message may leak internals.
    """
    return finalize_response(ApiResponse.unknown_failure(detail=type(exception).__name__))
