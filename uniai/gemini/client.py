"""Gemini native adapter (``generateContent`` over httpx).

Purpose:
- Call ``{base}/v1beta/models/{model}:generateContent`` with the adapter's
  ``httpx.Client`` and map the response back to the IR.

Notes:
- Streaming is not implemented for the native endpoint: a request carrying a
  stream callback fails with ``UnsupportedCapability`` before any I/O.
- Returned tool-call ids embed Gemini's thought signature. Callers must replay
  the previous turn's tool calls unchanged; a replayed call without one fails
  with ``ValidationError`` naming the tool and id.
- The ``gemini_openai`` provider name serves Gemini through the
  OpenAI-compatible adapter instead.
"""

from __future__ import annotations

from typing import Optional
from urllib.parse import quote

from ..base.cancellation import CancellationToken, check_cancelled
from ..base.errors import UniAIError, UnsupportedCapability
from ..base.http import close_on_cancel, read_json_body
from ..base.logging import LogContext
from ..base.models import Request, Result
from ..base.provider_base import BaseProvider
from ..config.defaults import GEMINI_DEFAULT_BASE_URL
from .conversion import build_payload, to_result

_BASE_SUFFIXES = ("/v1beta/openai", "/v1/openai", "/openai", "/v1beta", "/v1")


def normalize_base(base: Optional[str]) -> str:
    """Strip API-version and OpenAI-compat suffixes from a configured base URL."""
    trimmed = (base or "").strip().rstrip("/")
    for suffix in _BASE_SUFFIXES:
        if trimmed.endswith(suffix):
            trimmed = trimmed[: -len(suffix)]
    return trimmed or GEMINI_DEFAULT_BASE_URL


def normalize_model(model: str) -> str:
    model = (model or "").strip()
    if model.startswith("models/"):
        model = model[len("models/"):]
    return model


class GeminiProvider(BaseProvider):
    """Adapter for Google's native Gemini REST API."""

    def endpoint(self, model: str) -> str:
        return f"{normalize_base(self._settings.base_url)}/v1beta/models/{quote(normalize_model(model), safe='')}:generateContent"

    def chat(self, request: Request, *, token: Optional[CancellationToken] = None) -> Result:
        """Run one ``generateContent`` call.

        Raises:
            UnsupportedCapability: ``options.on_stream`` is set.
            ConfigError: Missing model or API key.
            ValidationError: A replayed tool call without thought signature, or
                a tool result that matches no prior call.
            ProviderError: Non-2xx status, oversize or undecodable body.
        """
        model = self.resolve_model(request)
        if request.options.on_stream is not None:
            raise UnsupportedCapability(
                message="gemini provider does not support streaming",
                provider=self.provider_name,
                model=model,
                stage="dispatch",
            )
        api_key = self.require_api_key(model)
        ctx = LogContext(provider=self.provider_name, model=model)
        check_cancelled(token, provider=self.provider_name, model=model)
        t0 = self.log_start(ctx, request)
        try:
            payload = build_payload(request, provider=self.provider_name, model=model)
            self.debug_json(request, "chat.request", payload)
            body = self._post(payload, api_key=api_key, model=model, token=token)
            self.debug_json(request, "chat.response", body)
            result = to_result(body, model)
        except UniAIError as exc:
            if exc.provider is None:
                exc.provider = self.provider_name
                exc.model = exc.model or model
            self.log_error(ctx, request, exc)
            raise
        result.provider = self.provider_name
        self.log_end(ctx, result, t0)
        return result

    def _post(self, payload: dict, *, api_key: str, model: str, token: Optional[CancellationToken]) -> dict:
        try:
            with self.http_client.stream(
                "POST",
                self.endpoint(model),
                params={"key": api_key},
                json=payload,
                headers={"Content-Type": "application/json"},
            ) as response:
                with close_on_cancel(token, response):
                    body = read_json_body(
                        response,
                        self._http_settings.max_response_bytes,
                        provider=self.provider_name,
                        model=model,
                    )
        except Exception as exc:
            err = self.translate_error(exc, model=model, token=token)
            if err is exc:
                raise
            raise err from exc
        check_cancelled(token, provider=self.provider_name, model=model)
        return body


__all__ = ["GeminiProvider", "normalize_base", "normalize_model"]
