"""Endpoint descriptors: (model, task) pairs rendered to request URLs."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any
from urllib.parse import urlencode

if TYPE_CHECKING:
    from collections.abc import Mapping

    from geminiapp.auth import AuthStrategy

DEFAULT_API_HOST = "googleapis.com"


class Task(str, Enum):
    """Vendor API operation being invoked."""

    COUNT_TOKENS = "count_tokens"
    GENERATE_CONTENT = "generate_content"


class Model(str, Enum):
    """Model families; the family decides the URL shape."""

    DIALOGUE = "dialogue"
    CONTENT_CREATOR = "content-creator"


class ModelVersion(str, Enum):
    """Versions accepted by the content-creator family."""

    V1 = "v1"
    V2 = "v2"


def _plain(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


@dataclass(frozen=True)
class RequestUrl:
    """Immutable endpoint descriptor.

    ``str()`` renders ``{scheme}://{model}.{api_host}/{task}``. No validation
    happens here; malformed input passes through unchanged.
    """

    model: Model | str
    task: Task | str
    auth: AuthStrategy | None = field(default=None, repr=False)
    use_tls: bool = True
    options: Mapping[str, Any] = field(default_factory=dict)
    api_host: str = DEFAULT_API_HOST

    @property
    def model_version(self) -> str | None:
        """Version option, accepted as ``model_version`` or ``modelVersion``."""
        version = self.options.get("model_version")
        if version is None:
            version = self.options.get("modelVersion")
        return _plain(version)

    def __str__(self) -> str:
        """Render the request URL."""
        scheme = "https" if self.use_tls else "http"
        model = _plain(self.model)
        url = f"{scheme}://{model}.{self.api_host}/{_plain(self.task)}"
        version = self.model_version
        if model == Model.CONTENT_CREATOR.value and version is not None:
            url += "?" + urlencode({"model_version": version})
        return url
