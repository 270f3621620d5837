"""Configuration: frozen Config resolved from arguments and the environment."""

from __future__ import annotations

from dataclasses import dataclass, field
import json
import os
from pathlib import Path
from typing import TYPE_CHECKING, Any

from dotenv import load_dotenv

from geminiapp.auth import resolve_auth
from geminiapp.errors import ConfigurationError
from geminiapp.retry import RetryPolicy
from geminiapp.urls import DEFAULT_API_HOST

if TYPE_CHECKING:
    from geminiapp.auth import AmbientTokenProvider, AuthStrategy, TokenExchanger

load_dotenv()

API_KEY_ENV_VAR = "GEMINI_API_KEY"
SERVICE_ACCOUNT_FILE_ENV_VAR = "GEMINI_SERVICE_ACCOUNT_FILE"
API_HOST_ENV_VAR = "GEMINI_API_HOST"


@dataclass(frozen=True)
class Config:
    """Immutable client configuration.

    Unset credentials and host are auto-resolved from ``GEMINI_API_KEY``,
    ``GEMINI_SERVICE_ACCOUNT_FILE`` and ``GEMINI_API_HOST``. With neither a
    key nor a key file, requests authenticate as the ambient host identity.

    Example:
        config = Config(api_key="...", retry=RetryPolicy(max_attempts=3))
    """

    api_key: str | None = None
    #: Path to a service-account JSON key file.
    service_account_file: str | None = None
    #: Resolved to GEMINI_API_HOST or the default host when unset.
    api_host: str | None = None
    use_tls: bool = True
    timeout_s: float = 60.0
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    #: Cached tokens are refreshed this many seconds before they expire.
    token_refresh_margin_s: float = 60.0

    def __post_init__(self) -> None:
        """Auto-resolve environment values and validate."""
        if self.api_key is None:
            object.__setattr__(self, "api_key", os.environ.get(API_KEY_ENV_VAR) or None)
        if self.service_account_file is None:
            object.__setattr__(
                self,
                "service_account_file",
                os.environ.get(SERVICE_ACCOUNT_FILE_ENV_VAR) or None,
            )
        if self.api_host is None:
            object.__setattr__(
                self, "api_host", os.environ.get(API_HOST_ENV_VAR) or DEFAULT_API_HOST
            )

        if self.timeout_s <= 0:
            raise ConfigurationError(
                f"timeout_s must be > 0, got {self.timeout_s}",
                hint="This is the per-request HTTP timeout in seconds.",
            )
        if self.token_refresh_margin_s < 0:
            raise ConfigurationError(
                f"token_refresh_margin_s must be ≥ 0, got {self.token_refresh_margin_s}",
                hint="Tokens are refreshed this many seconds before expiry.",
            )

    def auth_info(self) -> dict[str, Any]:
        """Return the raw auth mapping this config describes."""
        if self.api_key:
            return {"api_key": self.api_key}
        if self.service_account_file is not None:
            if not Path(self.service_account_file).is_file():
                raise ConfigurationError(
                    f"Service-account key file not found: {self.service_account_file}",
                    hint=f"Point {SERVICE_ACCOUNT_FILE_ENV_VAR} at a JSON key file.",
                )
            try:
                info = json.loads(Path(self.service_account_file).read_text())
            except (OSError, ValueError) as exc:
                raise ConfigurationError(
                    f"Could not read service-account key file {self.service_account_file}",
                    hint="The file must be the JSON key downloaded for the account.",
                ) from exc
            if not isinstance(info, dict):
                raise ConfigurationError(
                    "Service-account key file must contain a JSON object"
                )
            return info
        return {}

    def auth(
        self,
        *,
        exchanger: TokenExchanger | None = None,
        ambient: AmbientTokenProvider | None = None,
    ) -> AuthStrategy:
        """Resolve the auth variant this config describes."""
        return resolve_auth(self.auth_info(), exchanger=exchanger, ambient=ambient)

    def __str__(self) -> str:
        """Return a redacted, developer-friendly representation."""
        return (
            f"Config(api_key={'[REDACTED]' if self.api_key else None}, "
            f"service_account_file={self.service_account_file!r}, "
            f"api_host={self.api_host!r}, use_tls={self.use_tls})"
        )

    __repr__ = __str__
