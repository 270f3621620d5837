"""geminiapp: a thin, resilient client for the Generative AI HTTP API.

Public API:
    - generate_content(): One-shot content generation
    - count_tokens(): One-shot token counting
    - GenerativeModel: A model bound to credentials and a dispatcher
    - Config: Configuration dataclass
"""

from __future__ import annotations

import logging

from geminiapp.auth import (
    AmbientAuth,
    ApiKeyAuth,
    ServiceAccountAuth,
    ServiceAccountInfo,
    resolve_auth,
)
from geminiapp.cache import AccessToken, CredentialCache
from geminiapp.client import GenerativeModel, count_tokens, generate_content
from geminiapp.config import Config
from geminiapp.content import format_new_content, inline_data_part
from geminiapp.dispatcher import Dispatcher
from geminiapp.errors import (
    APIError,
    ConfigurationError,
    CredentialError,
    GeminiAppError,
    PermanentHTTPError,
    RateLimitError,
    RetryExhaustedError,
    TransientHTTPError,
    ValidationError,
)
from geminiapp.response import GenerateContentResponse
from geminiapp.retry import RetryPolicy
from geminiapp.urls import Model, ModelVersion, RequestUrl, Task

try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("geminiapp")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"

# Library-level NullHandler: stay silent unless the consumer configures logging.
logging.getLogger("geminiapp").addHandler(logging.NullHandler())

__all__ = [
    "APIError",
    "AccessToken",
    "AmbientAuth",
    "ApiKeyAuth",
    "Config",
    "ConfigurationError",
    "CredentialCache",
    "CredentialError",
    "Dispatcher",
    "GeminiAppError",
    "GenerateContentResponse",
    "GenerativeModel",
    "Model",
    "ModelVersion",
    "PermanentHTTPError",
    "RateLimitError",
    "RequestUrl",
    "RetryExhaustedError",
    "RetryPolicy",
    "ServiceAccountAuth",
    "ServiceAccountInfo",
    "Task",
    "TransientHTTPError",
    "ValidationError",
    "count_tokens",
    "format_new_content",
    "generate_content",
    "inline_data_part",
    "resolve_auth",
]
