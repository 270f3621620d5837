"""Resilient request dispatcher: authenticated POST with bounded retries."""

from __future__ import annotations

from collections.abc import Mapping
import json
import logging
import time
from typing import TYPE_CHECKING, Any

import httpx

from geminiapp._http import (
    JSON_CONTENT_TYPE,
    RATE_LIMIT_STATUS_CODE,
    SUCCESS_STATUS_CODE,
    is_transient_status,
)
from geminiapp.auth import AmbientAuth
from geminiapp.cache import CredentialCache
from geminiapp.errors import (
    APIError,
    PermanentHTTPError,
    RateLimitError,
    TransientHTTPError,
)
from geminiapp.retry import RetryPolicy, retry_call

if TYPE_CHECKING:
    from collections.abc import Callable
    from types import TracebackType

    from geminiapp.auth import AuthStrategy
    from geminiapp.urls import RequestUrl

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_S = 60.0


def _auth_hint(status_code: int, body: str) -> str | None:
    """Generate a hint for auth errors where naming the env var is useful."""
    body_lower = body.lower()
    if status_code in {401, 403} or (
        status_code == 400 and ("api key" in body_lower or "api_key" in body_lower)
    ):
        return (
            "Check credentials/permissions (try setting GEMINI_API_KEY, "
            "GEMINI_SERVICE_ACCOUNT_FILE or Config.api_key)."
        )
    return None


class Dispatcher:
    """Send one request, retrying 429 and 5xx responses with backoff.

    The dispatcher owns its ``httpx.Client`` unless one is passed in. Token
    caching is delegated to the injected ``CredentialCache`` so several
    dispatchers can share it.
    """

    def __init__(
        self,
        *,
        client: httpx.Client | None = None,
        retry: RetryPolicy | None = None,
        credential_cache: CredentialCache | None = None,
        sleep: Callable[[float], None] = time.sleep,
        timeout_s: float = DEFAULT_TIMEOUT_S,
    ) -> None:
        """Create a dispatcher; every collaborator is optional."""
        self._owns_client = client is None
        self._client = client if client is not None else httpx.Client(timeout=timeout_s)
        self.retry = retry or RetryPolicy()
        self.credential_cache = credential_cache or CredentialCache()
        self._sleep = sleep

    def __enter__(self) -> Dispatcher:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        """Close the HTTP client if this dispatcher created it."""
        if self._owns_client:
            self._client.close()

    def build_headers(self, auth: AuthStrategy | None) -> dict[str, str]:
        """Resolve credential headers; no auth means the ambient identity."""
        strategy = auth if auth is not None else AmbientAuth()
        headers = {"Content-Type": JSON_CONTENT_TYPE}
        headers.update(strategy.headers(self.credential_cache))
        return headers

    def dispatch(
        self, url: RequestUrl | str, body: Mapping[str, Any] | str
    ) -> dict[str, Any]:
        """POST *body* to *url* and return the parsed JSON response.

        Credentials are resolved once, before the first attempt.

        Raises:
            CredentialError: If a bearer token could not be obtained.
            PermanentHTTPError: On any non-200 status other than 429/5xx.
            RetryExhaustedError: When every attempt failed transiently.
            APIError: If a 200 response body is not valid JSON.
        """
        auth = getattr(url, "auth", None)
        headers = self.build_headers(auth)
        target = str(url)
        payload = body if isinstance(body, str) else json.dumps(body)

        return retry_call(
            lambda: self._attempt(target, headers, payload),
            policy=self.retry,
            sleep=self._sleep,
        )

    def _attempt(self, url: str, headers: dict[str, str], payload: str) -> dict[str, Any]:
        try:
            response = self._client.post(url, headers=headers, content=payload)
        except httpx.RequestError as exc:
            raise TransientHTTPError(f"Transport error calling {url}: {exc}") from exc

        status_code = response.status_code
        if status_code == SUCCESS_STATUS_CODE:
            try:
                parsed = response.json()
            except ValueError as exc:
                raise APIError(
                    "Response body is not valid JSON",
                    status_code=status_code,
                    body=response.text,
                ) from exc
            if not isinstance(parsed, dict):
                raise APIError(
                    f"Expected a JSON object, got {type(parsed).__name__}",
                    status_code=status_code,
                    body=response.text,
                )
            return parsed

        if is_transient_status(status_code):
            err_cls = (
                RateLimitError
                if status_code == RATE_LIMIT_STATUS_CODE
                else TransientHTTPError
            )
            raise err_cls(
                f"Transient failure (status={status_code})",
                status_code=status_code,
                body=response.text,
            )

        logger.error(
            "Request failed with response code %s - %s", status_code, response.text
        )
        raise PermanentHTTPError(
            f"Request failed (status={status_code})",
            hint=_auth_hint(status_code, response.text),
            status_code=status_code,
            body=response.text,
        )
