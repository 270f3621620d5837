"""Client facade: generate content and count tokens for one model."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any

from geminiapp.auth import resolve_auth
from geminiapp.cache import CredentialCache
from geminiapp.config import Config
from geminiapp.content import format_generate_content_input
from geminiapp.dispatcher import Dispatcher
from geminiapp.response import GenerateContentResponse
from geminiapp.urls import Model, RequestUrl, Task

if TYPE_CHECKING:
    from types import TracebackType

    from geminiapp.auth import AuthInput

ContentInput = str | Sequence[str | Mapping[str, Any]] | Mapping[str, Any]


class GenerativeModel:
    """A model bound to one auth variant and one dispatcher.

    ``auth`` wins over credentials found in *config*; with neither, requests
    authenticate as the ambient host identity.

    Example:
        with GenerativeModel("dialogue", {"api_key": "..."}) as model:
            print(model.generate_content("Write a haiku").text())
    """

    def __init__(
        self,
        model: Model | str,
        auth: AuthInput = None,
        *,
        config: Config | None = None,
        dispatcher: Dispatcher | None = None,
    ) -> None:
        """Bind *model* to credentials and a dispatcher."""
        self.config = config or Config()
        self.model = model.value if isinstance(model, Model) else model
        self.auth = resolve_auth(auth) if auth is not None else self.config.auth()
        self._owns_dispatcher = dispatcher is None
        self.dispatcher = dispatcher or Dispatcher(
            retry=self.config.retry,
            credential_cache=CredentialCache(
                refresh_margin_s=self.config.token_refresh_margin_s
            ),
            timeout_s=self.config.timeout_s,
        )

    def __enter__(self) -> GenerativeModel:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        """Close the dispatcher if this model created it."""
        if self._owns_dispatcher:
            self.dispatcher.close()

    def _url(self, task: Task, options: Mapping[str, Any] | None = None) -> RequestUrl:
        return RequestUrl(
            model=self.model,
            task=task,
            auth=self.auth,
            use_tls=self.config.use_tls,
            options=dict(options or {}),
            api_host=self.config.api_host,
        )

    def generate_content(
        self,
        params: ContentInput,
        request_options: Mapping[str, Any] | None = None,
    ) -> GenerateContentResponse:
        """Generate content for a prompt, a list of parts, or a full request.

        Args:
            params: Prompt string, list of strings/parts, or a mapping that
                already carries ``contents``.
            request_options: Per-request options such as ``model_version``.

        Returns:
            GenerateContentResponse wrapping the raw payload.
        """
        body = format_generate_content_input(params)
        raw = self.dispatcher.dispatch(
            self._url(Task.GENERATE_CONTENT, request_options), body
        )
        return GenerateContentResponse(raw)

    def count_tokens(self, params: ContentInput) -> dict[str, Any]:
        """Count tokens for *params*; the body also names the model."""
        body = {**format_generate_content_input(params), "model": self.model}
        return self.dispatcher.dispatch(self._url(Task.COUNT_TOKENS), body)


def generate_content(
    auth: AuthInput,
    model: Model | str,
    params: ContentInput,
    request_options: Mapping[str, Any] | None = None,
) -> GenerateContentResponse:
    """One-shot ``generate_content`` with a throwaway model."""
    with GenerativeModel(model, auth) as generative_model:
        return generative_model.generate_content(params, request_options)


def count_tokens(
    auth: AuthInput,
    model: Model | str,
    params: ContentInput,
) -> dict[str, Any]:
    """One-shot ``count_tokens`` with a throwaway model."""
    with GenerativeModel(model, auth) as generative_model:
        return generative_model.count_tokens(params)
