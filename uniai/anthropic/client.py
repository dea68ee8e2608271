"""AnthropicProvider adapter.

Implements the Messages API through the ``anthropic`` SDK
(``client.messages.create``), driven over the adapter's ``httpx.Client``
with SDK retries disabled.

Key behaviors:
* Non-streaming responses are read through ``with_streaming_response`` so a
  cancelled token can close the live response.
* Streaming uses ``messages.create(stream=True)`` raw SSE events, translated by
  :func:`uniai.anthropic.streaming.translate_event` inside
  :class:`BaseStreamingAdapter`.
* Missing key or model raises ``ConfigError`` before any network call.
"""

from __future__ import annotations

from typing import Any, Optional

import anthropic

from ..base.cancellation import CancellationToken, check_cancelled
from ..base.errors import UniAIError
from ..base.http import close_on_cancel
from ..base.logging import LogContext
from ..base.models import Request, Result
from ..base.provider_base import BaseProvider
from ..base.streaming import BaseStreamingAdapter, StreamAccumulator
from .conversion import build_params, to_result
from .streaming import translate_event


class AnthropicProvider(BaseProvider):
    """Adapter for Anthropic's Messages API supporting chat and streaming."""

    def _make_client(self, api_key: str) -> anthropic.Anthropic:
        return anthropic.Anthropic(
            api_key=api_key,
            base_url=self._settings.base_url or None,
            http_client=self.http_client,
            max_retries=0,
            timeout=self._http_settings.timeout.to_httpx(),
        )

    def chat(self, request: Request, *, token: Optional[CancellationToken] = None) -> Result:
        """Run one Messages API call, streaming when ``options.on_stream`` is set."""
        model = self.resolve_model(request)
        api_key = self.require_api_key(model)
        ctx = LogContext(provider=self.provider_name, model=model)
        check_cancelled(token, provider=self.provider_name, model=model)
        t0 = self.log_start(ctx, request)
        try:
            params = build_params(request, model)
            client = self._make_client(api_key)
            if request.options.on_stream is not None:
                params["stream"] = True
                self.debug_json(request, "chat.request", params)
                result = self._stream(client, request, params, ctx=ctx, token=token)
            else:
                self.debug_json(request, "chat.request", params)
                result = self._complete(client, params, model=model, token=token)
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
        client: anthropic.Anthropic,
        params: dict,
        *,
        model: str,
        token: Optional[CancellationToken],
    ) -> Result:
        try:
            with client.messages.with_streaming_response.create(**params) as response:
                with close_on_cancel(token, response.http_response):
                    message = response.parse()
        except Exception as exc:
            err = self.translate_error(exc, model=model, token=token)
            if err is exc:
                raise
            raise err from exc
        check_cancelled(token, provider=self.provider_name, model=model)
        return to_result(message)

    def _stream(
        self,
        client: anthropic.Anthropic,
        request: Request,
        params: dict,
        *,
        ctx: LogContext,
        token: Optional[CancellationToken],
    ) -> Result:
        def _translator(event: Any, acc: StreamAccumulator) -> None:
            self.debug_json(request, "chat.stream_chunk", event)
            translate_event(event, acc)

        adapter = BaseStreamingAdapter(
            ctx=ctx,
            provider_name=self.provider_name,
            model=params["model"],
            starter=lambda: client.messages.create(**params),
            translator=_translator,
            callback=request.options.on_stream,
            logger=self._logger,
            cancellation_token=token,
        )
        return adapter.run()


__all__ = ["AnthropicProvider"]
