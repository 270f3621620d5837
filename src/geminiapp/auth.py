"""Auth variants and credential-header resolution.

Exactly one variant is active per request, picked in a fixed priority:
an explicit API key, then a service-account credential exchanged for a
bearer token, then a bearer token for the ambient host identity.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
import logging
from typing import TYPE_CHECKING, Any, Literal, Protocol, runtime_checkable

import google.auth
from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request
from google.oauth2 import service_account
from pydantic import BaseModel, Field, SecretStr, field_validator
from pydantic import ValidationError as PydanticValidationError

from geminiapp._http import API_KEY_HEADER, AUTHORIZATION_HEADER
from geminiapp.cache import AccessToken, CredentialCache
from geminiapp.errors import ConfigurationError, CredentialError

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

logger = logging.getLogger(__name__)

CLOUD_PLATFORM_SCOPE = "https://www.googleapis.com/auth/cloud-platform"
DEFAULT_TOKEN_URI = "https://oauth2.googleapis.com/token"
DEFAULT_SCOPES: tuple[str, ...] = (CLOUD_PLATFORM_SCOPE,)


class ServiceAccountInfo(BaseModel):
    """The subset of a service-account key file needed for token exchange."""

    model_config = {"extra": "ignore", "frozen": True}

    type: Literal["service_account"] = "service_account"
    private_key: SecretStr
    client_email: str = Field(min_length=1)
    private_key_id: str | None = None
    token_uri: str = DEFAULT_TOKEN_URI

    @field_validator("private_key", mode="before")
    @classmethod
    def reject_blank_private_key(cls, v: Any) -> Any:
        """Blank keys can never sign an assertion."""
        raw = v.get_secret_value() if isinstance(v, SecretStr) else v
        if isinstance(raw, str) and not raw.strip():
            raise ValueError("private_key must not be empty")
        return v

    def to_google_info(self) -> dict[str, str]:
        """Render the dict shape google-auth expects."""
        info = {
            "type": self.type,
            "private_key": self.private_key.get_secret_value(),
            "client_email": self.client_email,
            "token_uri": self.token_uri,
        }
        if self.private_key_id is not None:
            info["private_key_id"] = self.private_key_id
        return info


@runtime_checkable
class TokenExchanger(Protocol):
    """Exchanges a service-account key for a short-lived access token."""

    def exchange(
        self, info: ServiceAccountInfo, scopes: Sequence[str]
    ) -> AccessToken: ...  # noqa: D102


@runtime_checkable
class AmbientTokenProvider(Protocol):
    """Returns an access token for the current execution identity."""

    def token(self, scopes: Sequence[str]) -> AccessToken: ...  # noqa: D102


def _expiry_to_epoch(expiry: datetime | None) -> float | None:
    # google-auth reports expiry as a naive UTC datetime.
    if expiry is None:
        return None
    if expiry.tzinfo is None:
        expiry = expiry.replace(tzinfo=timezone.utc)
    return expiry.timestamp()


class GoogleAuthTokenExchanger:
    """TokenExchanger backed by google-auth's JWT-bearer grant."""

    def exchange(self, info: ServiceAccountInfo, scopes: Sequence[str]) -> AccessToken:
        """Sign an assertion for *info* and trade it for an access token."""
        credentials = service_account.Credentials.from_service_account_info(
            info.to_google_info(), scopes=list(scopes)
        )
        credentials.refresh(Request())
        return AccessToken(
            token=credentials.token, expires_at=_expiry_to_epoch(credentials.expiry)
        )


class GoogleAuthAmbientTokenProvider:
    """AmbientTokenProvider backed by Application Default Credentials."""

    def token(self, scopes: Sequence[str]) -> AccessToken:
        """Refresh the default credentials and return their token."""
        credentials, _project = google.auth.default(scopes=list(scopes))
        credentials.refresh(Request())
        return AccessToken(
            token=credentials.token, expires_at=_expiry_to_epoch(credentials.expiry)
        )


def _bearer(token: AccessToken) -> dict[str, str]:
    return {AUTHORIZATION_HEADER: f"Bearer {token.token}"}


def _fetch_token(
    cache: CredentialCache,
    key: str,
    fetch: Callable[[], AccessToken],
    *,
    identity: str,
) -> AccessToken:
    try:
        token = cache.get_or_fetch(key, fetch)
    except (GoogleAuthError, ValueError) as exc:
        logger.error("Failed to obtain access token for %s: %s", identity, exc)
        raise CredentialError(
            f"Could not obtain an access token for {identity}",
            hint="Check the service-account key or the host's default credentials.",
        ) from exc
    if not token.token:
        cache.invalidate(key)
        logger.error("Token provider returned an empty token for %s", identity)
        raise CredentialError(f"Empty access token returned for {identity}")
    return token


@dataclass(frozen=True)
class ApiKeyAuth:
    """Key-based scheme: the key travels in the ``X-Goog-Api-Key`` header."""

    api_key: str = field(repr=False)

    def headers(self, cache: CredentialCache) -> dict[str, str]:
        """Render the credential header; the cache is unused."""
        del cache
        return {API_KEY_HEADER: self.api_key}

    def __repr__(self) -> str:
        """Return a redacted representation."""
        return "ApiKeyAuth(api_key='[REDACTED]')"


@dataclass(frozen=True)
class ServiceAccountAuth:
    """Service-account scheme: key exchanged for a cached bearer token."""

    info: ServiceAccountInfo
    exchanger: TokenExchanger = field(
        default_factory=GoogleAuthTokenExchanger, compare=False
    )
    scopes: tuple[str, ...] = DEFAULT_SCOPES

    @property
    def cache_key(self) -> str:
        """Cache identity for this account's tokens."""
        return f"service_account:{self.info.client_email}"

    def headers(self, cache: CredentialCache) -> dict[str, str]:
        """Render ``Authorization: Bearer`` with a fresh or cached token."""
        token = _fetch_token(
            cache,
            self.cache_key,
            lambda: self.exchanger.exchange(self.info, self.scopes),
            identity=self.info.client_email,
        )
        return _bearer(token)


@dataclass(frozen=True)
class AmbientAuth:
    """Fallback scheme: bearer token for the host's ambient identity."""

    provider: AmbientTokenProvider = field(
        default_factory=GoogleAuthAmbientTokenProvider, compare=False
    )
    scopes: tuple[str, ...] = DEFAULT_SCOPES

    cache_key = "ambient"

    def headers(self, cache: CredentialCache) -> dict[str, str]:
        """Render ``Authorization: Bearer`` with a fresh or cached token."""
        token = _fetch_token(
            cache,
            self.cache_key,
            lambda: self.provider.token(self.scopes),
            identity="the ambient host identity",
        )
        return _bearer(token)


AuthStrategy = ApiKeyAuth | ServiceAccountAuth | AmbientAuth

AuthInput = AuthStrategy | Mapping[str, Any] | str | None


def resolve_auth(
    auth: AuthInput,
    *,
    exchanger: TokenExchanger | None = None,
    ambient: AmbientTokenProvider | None = None,
) -> AuthStrategy:
    """Pick exactly one auth variant for *auth*.

    Accepts a variant instance (returned as-is), a bare API key, or a mapping
    shaped like ``{"api_key": ...}`` / ``{"apiKey": ...}`` or a service-account
    key file (``{"type": "service_account", ...}``). Anything else falls back
    to the ambient host identity.

    Raises:
        ConfigurationError: If a service-account mapping is malformed.
    """
    if isinstance(auth, (ApiKeyAuth, ServiceAccountAuth, AmbientAuth)):
        return auth

    if isinstance(auth, str):
        if auth.strip():
            return ApiKeyAuth(auth.strip())
        auth = None

    if isinstance(auth, Mapping):
        api_key = auth.get("api_key") or auth.get("apiKey")
        if isinstance(api_key, str) and api_key.strip():
            return ApiKeyAuth(api_key.strip())

        if auth.get("type") == "service_account":
            try:
                info = ServiceAccountInfo.model_validate(dict(auth))
            except PydanticValidationError as exc:
                raise ConfigurationError(
                    "Invalid service-account credentials",
                    hint="Provide 'private_key' and 'client_email' from the key file.",
                ) from exc
            if exchanger is None:
                return ServiceAccountAuth(info)
            return ServiceAccountAuth(info, exchanger=exchanger)

    if ambient is None:
        return AmbientAuth()
    return AmbientAuth(provider=ambient)
