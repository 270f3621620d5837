"""Small HTTP-related constants shared across geminiapp.

This module is intentionally tiny to avoid circular imports and drift.
"""

from __future__ import annotations

SUCCESS_STATUS_CODE = 200
RATE_LIMIT_STATUS_CODE = 429

JSON_CONTENT_TYPE = "application/json"
API_KEY_HEADER = "X-Goog-Api-Key"
AUTHORIZATION_HEADER = "Authorization"


def is_transient_status(status_code: int) -> bool:
    """Return True for status codes worth retrying: 429 and any 5xx."""
    return status_code == RATE_LIMIT_STATUS_CODE or 500 <= status_code <= 599
