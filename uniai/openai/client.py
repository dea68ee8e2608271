"""OpenAI-compatible Chat Completions adapter.

One class serves every vendor speaking the Chat Completions wire format; the
registered name only changes the settings view it is built with:

- ``openai`` / ``openai_custom``: OpenAI or any custom base URL.
- ``deepseek``, ``xai``, ``groq``: base URL presets.
- ``gemini_openai``: Gemini models on ``<gemini base>/v1beta/openai``. Replayed
  tool calls carry ``extra_content.google.thought_signature``.

External dependencies:
- ``openai`` SDK, driven over the adapter's ``httpx.Client`` with SDK retries
  disabled (``max_retries=0``). The core never retries.

Cancellation:
- Non-streaming calls read the body through ``with_streaming_response`` so a
  cancelled token can close the live response.
- Streaming calls run in :class:`BaseStreamingAdapter`, which closes the SDK
  stream when the token fires.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

import openai

from ..base.cancellation import CancellationToken, check_cancelled
from ..base.errors import UniAIError
from ..base.http import close_on_cancel
from ..base.logging import LogContext
from ..base.models import Request, Result
from ..base.provider_base import BaseProvider
from ..base.streaming import BaseStreamingAdapter, StreamAccumulator
from .conversion import build_chat_params, build_stream_params, to_result
from .streaming import translate_chunk

__all__ = ["OpenAIProvider"]


class OpenAIProvider(BaseProvider):
    """Adapter for OpenAI-compatible Chat Completions endpoints.

    Subclasses (Azure) override ``_make_client`` and ``escape_hatch``; the
    request/response mapping is shared.
    """

    @property
    def logger_name(self) -> str:
        return "openai"

    # ----- hooks -----

    def _make_client(self, api_key: str) -> openai.OpenAI:
        """Create the SDK client over the adapter-owned HTTP client."""
        return openai.OpenAI(
            api_key=api_key,
            base_url=self._settings.base_url or None,
            http_client=self.http_client,
            max_retries=0,
            timeout=self._http_settings.timeout.to_httpx(),
        )

    def escape_hatch(self, request: Request) -> Mapping[str, Any]:
        return request.options.openai

    # ----- chat -----

    def chat(self, request: Request, *, token: Optional[CancellationToken] = None) -> Result:
        """Run one chat completion, streaming when ``options.on_stream`` is set.

        Raises:
            ConfigError: Missing model or API key (before any network I/O).
            ValidationError: Messages that cannot be encoded.
            ProviderError: Vendor or transport failure.
            StreamCancelled: The stream callback raised.
            Cancelled: ``token`` fired.
        """
        model = self.resolve_model(request)
        api_key = self.require_api_key(model)
        ctx = LogContext(provider=self.provider_name, model=model)
        check_cancelled(token, provider=self.provider_name, model=model)
        t0 = self.log_start(ctx, request)
        try:
            if request.options.on_stream is not None:
                params = build_stream_params(request, model, extra=self.escape_hatch(request))
                self.debug_json(request, "chat.request", params)
                result = self._stream(request, params, api_key=api_key, ctx=ctx, token=token)
            else:
                params = build_chat_params(request, model, extra=self.escape_hatch(request))
                self.debug_json(request, "chat.request", params)
                result = self._complete(params, api_key=api_key, model=model, token=token)
                self.debug_json(request, "chat.response", result.raw)
        except UniAIError as exc:
            if exc.provider is None:
                exc.provider = self.provider_name
                exc.model = exc.model or model
            self.log_error(ctx, request, exc)
            raise
        result.provider = self.provider_name
        self.log_end(ctx, result, t0)
        return result

    def _complete(
        self,
        params: dict,
        *,
        api_key: str,
        model: str,
        token: Optional[CancellationToken],
    ) -> Result:
        client = self._make_client(api_key)
        try:
            with client.chat.completions.with_streaming_response.create(**params) as response:
                with close_on_cancel(token, response.http_response):
                    completion = response.parse()
        except Exception as exc:
            err = self.translate_error(exc, model=model, token=token)
            if err is exc:
                raise
            raise err from exc
        check_cancelled(token, provider=self.provider_name, model=model)
        return to_result(completion)

    def _stream(
        self,
        request: Request,
        params: dict,
        *,
        api_key: str,
        ctx: LogContext,
        token: Optional[CancellationToken],
    ) -> Result:
        client = self._make_client(api_key)

        def _starter():
            return client.chat.completions.create(**params)

        def _translator(chunk: Any, acc: StreamAccumulator) -> None:
            self.debug_json(request, "chat.stream_chunk", chunk)
            translate_chunk(chunk, acc)

        adapter = BaseStreamingAdapter(
            ctx=ctx,
            provider_name=self.provider_name,
            model=params["model"],
            starter=_starter,
            translator=_translator,
            callback=request.options.on_stream,
            logger=self._logger,
            cancellation_token=token,
        )
        return adapter.run()
