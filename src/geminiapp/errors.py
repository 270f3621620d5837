"""Exception hierarchy for geminiapp."""

from __future__ import annotations


class GeminiAppError(Exception):
    """Base exception for all geminiapp errors."""

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint = hint


class ConfigurationError(GeminiAppError):
    """Configuration or auth input was malformed."""


class ValidationError(GeminiAppError):
    """Request content failed validation."""


class CredentialError(GeminiAppError):
    """A bearer token could not be obtained."""


class APIError(GeminiAppError):
    """API call failed.

    ``retryable`` is the only signal the retry loop consults, so callers can
    branch on error type rather than parse messages.
    """

    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        retryable: bool = False,
        status_code: int | None = None,
        body: str | None = None,
        attempts: int | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.retryable = retryable
        self.status_code = status_code
        self.body = body
        self.attempts = attempts


class TransientHTTPError(APIError):
    """Rate limiting, server error or transport failure; retried locally."""

    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        status_code: int | None = None,
        body: str | None = None,
    ) -> None:
        super().__init__(
            message, hint=hint, retryable=True, status_code=status_code, body=body
        )


class RateLimitError(TransientHTTPError):
    """Rate limit exceeded (HTTP 429)."""


class PermanentHTTPError(APIError):
    """Non-retryable HTTP failure (any non-200 outside 429 and 5xx)."""


class RetryExhaustedError(APIError):
    """Every attempt allowed by the retry policy failed transiently."""
