"""Price lookup error types."""

from __future__ import annotations

from enum import Enum


class PriceErrorCode(Enum):
    """Failure classification for a price lookup."""

    RESOLUTION_FAILED = "resolution_failed"
    TRANSPORT_ERROR = "transport_error"
    RATE_LIMITED = "rate_limited"
    TIMEOUT = "timeout"
    NOT_FOUND = "not_found"
    EXTRACTION_FAILED = "extraction_failed"
    NO_DATA = "no_data"


class PriceError(Exception):
    """Price lookup exception with error code and retryable flag.

    Raised inside the transport and the providers; the provider boundary
    converts it into an absent result so callers never see it.

    Attributes:
        message: Human-readable error description.
        code: Structured error code for logging and diagnostics.
        retryable: Whether a later refresh could plausibly succeed.
    """

    def __init__(
        self,
        message: str,
        code: PriceErrorCode = PriceErrorCode.TRANSPORT_ERROR,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.retryable = retryable
