"""Shared adapter plumbing.

``BaseProvider`` owns what every adapter needs besides its wire mapping:

- the immutable :class:`ProviderSettings` view (key, base URL, default model);
- one ``httpx.Client`` built from :class:`HTTPSettings`, or an injected client
  the adapter does not own;
- model and credential checks that fail with ``ConfigError`` before any
  network call;
- start/end/error logging and debug-sink reporting.

Adapters are safe for concurrent calls: nothing mutable is written per call.
"""
from __future__ import annotations

import time
from typing import Any, Optional

import httpx

from ..config.settings import ProviderSettings
from .diagnostics import emit_error, emit_json
from .cancellation import CancellationToken
from .errors import Cancelled, ConfigError, UniAIError, wrap_exception
from .http import HTTPSettings, build_http_client
from .logging import LogContext, get_logger, normalized_log_event
from .models import Request, Result


class BaseProvider:
    """Base class for vendor adapters (subclasses implement ``chat``)."""

    def __init__(
        self,
        settings: ProviderSettings,
        *,
        http_settings: Optional[HTTPSettings] = None,
        http_client: Optional[httpx.Client] = None,
    ) -> None:
        self._settings = settings
        self._http_settings = http_settings or HTTPSettings()
        self._owns_client = http_client is None
        self._http = http_client if http_client is not None else build_http_client(self._http_settings)
        self._logger = get_logger(f"uniai.{self.logger_name}")

    # ----- identity -----

    @property
    def provider_name(self) -> str:
        return self._settings.name

    @property
    def logger_name(self) -> str:
        """Logger suffix; adapters sharing a class share a logger family."""
        return self._settings.name

    @property
    def settings(self) -> ProviderSettings:
        return self._settings

    @property
    def http_client(self) -> httpx.Client:
        return self._http

    # ----- lifecycle -----

    def close(self) -> None:
        """Close the HTTP client when this adapter created it."""
        if self._owns_client:
            self._http.close()

    def __enter__(self) -> "BaseProvider":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    # ----- preconditions -----

    def resolve_model(self, request: Request) -> str:
        """Return the request model or the configured default.

        Raises:
            ConfigError: When neither is set.
        """
        model = (request.model or self._settings.model or "").strip()
        if not model:
            raise ConfigError(
                message="model is required (set it on the request or in the client config)",
                provider=self.provider_name,
                stage="dispatch",
            )
        return model

    def require_api_key(self, model: Optional[str]) -> str:
        """Return the API key or raise :class:`ConfigError`."""
        key = (self._settings.api_key or "").strip()
        if not key:
            raise ConfigError(
                message=f"{self.provider_name} api key is required",
                provider=self.provider_name,
                model=model,
                stage="dispatch",
            )
        return key

    def translate_error(
        self,
        exc: BaseException,
        *,
        model: Optional[str],
        token: Optional[CancellationToken] = None,
        stage: str = "dispatch",
    ) -> UniAIError:
        """Map an SDK or transport exception onto the taxonomy.

        A failure observed after ``token`` fired is reported as ``Cancelled``;
        errors of this package pass through unchanged.
        """
        if token is not None and token.cancelled and not isinstance(exc, UniAIError):
            return Cancelled(
                message=token.reason or "operation cancelled",
                provider=self.provider_name,
                model=model,
                stage=stage,
            )
        return wrap_exception(exc, provider=self.provider_name, model=model, stage=stage)

    # ----- observability -----

    def debug_json(self, request: Request, label: str, value: Any) -> None:
        emit_json(self._settings.debug, request.options.debug_sink, f"{self.provider_name}.{label}", value)

    def log_start(self, ctx: LogContext, request: Request) -> float:
        normalized_log_event(
            self._logger,
            "chat.start",
            ctx,
            phase="start",
            stream=request.options.on_stream is not None,
            tools=len(request.tools),
            messages=len(request.messages),
        )
        return time.perf_counter()

    def log_end(self, ctx: LogContext, result: Result, t0: float) -> None:
        normalized_log_event(
            self._logger,
            "chat.end",
            ctx,
            phase="finalize",
            emitted=True,
            tokens=result.usage,
            tool_calls=len(result.tool_calls),
            latency_ms=round((time.perf_counter() - t0) * 1000.0, 3),
        )

    def log_error(self, ctx: LogContext, request: Request, error: UniAIError) -> None:
        normalized_log_event(
            self._logger,
            "chat.error",
            ctx,
            phase="finalize",
            error_code=error.code.value,
            emitted=False,
            error=str(error),
        )
        emit_error(self._settings.debug, request.options.debug_sink, f"{self.provider_name}.chat.error", error)


__all__ = ["BaseProvider"]
