"""Dispatcher: selects an adapter by name and forwards one chat call.

The name -> adapter mapping is fixed when the dispatcher is built; there is
no global registry. Resolution order for the active provider:

1. ``request.provider`` (per-request override)
2. the client-level default
3. the literal ``"openai"``

An unknown name is a :class:`ConfigError`. The dispatcher never retries.
Errors from this package reach the caller as-is; anything else an adapter
raises is wrapped into a :class:`ProviderError` chained to the original.
"""
from __future__ import annotations

import time
from types import MappingProxyType
from typing import Mapping, Optional

from .cancellation import CancellationToken, check_cancelled
from .errors import ConfigError, wrap_exception
from .interfaces import ChatProvider
from .logging import LogContext, get_logger, normalized_log_event
from .models import Request, Result

FALLBACK_PROVIDER = "openai"


class Dispatcher:
    """Route requests to a fixed set of adapters."""

    def __init__(self, adapters: Mapping[str, ChatProvider], *, default_provider: str = "") -> None:
        self._adapters = MappingProxyType({k.strip().lower(): v for k, v in adapters.items()})
        self._default = (default_provider or "").strip().lower()
        self._logger = get_logger("uniai.dispatcher")

    @property
    def adapters(self) -> Mapping[str, ChatProvider]:
        return self._adapters

    def resolve_name(self, request: Request) -> str:
        """Return the provider name ``request`` should be sent to."""
        return (request.provider or "").strip().lower() or self._default or FALLBACK_PROVIDER

    def resolve(self, name: str) -> ChatProvider:
        """Return the adapter registered as ``name``.

        Raises:
            ConfigError: When no adapter is registered under that name.
        """
        adapter = self._adapters.get((name or "").strip().lower())
        if adapter is None:
            raise ConfigError(message=f"provider {name!r} not supported", provider=name, stage="dispatch")
        return adapter

    def chat(self, request: Request, *, token: Optional[CancellationToken] = None) -> Result:
        """Send ``request`` to its resolved adapter and return the Result."""
        name = self.resolve_name(request)
        adapter = self.resolve(name)
        ctx = LogContext(provider=name, model=request.model or None)
        check_cancelled(token, provider=name, model=request.model or None)
        normalized_log_event(
            self._logger,
            "dispatch.start",
            ctx,
            phase="start",
            stream=request.options.on_stream is not None,
            tools=len(request.tools),
        )
        t0 = time.perf_counter()
        try:
            result = adapter.chat(request, token=token)
        except Exception as exc:
            err = wrap_exception(exc, provider=name, model=request.model or None)
            normalized_log_event(
                self._logger,
                "dispatch.error",
                ctx,
                phase="finalize",
                error_code=err.code.value,
                emitted=False,
                error=str(err),
            )
            if err is exc:
                raise
            raise err from exc
        if not result.provider:
            result.provider = name
        normalized_log_event(
            self._logger,
            "dispatch.end",
            ctx,
            phase="finalize",
            emitted=True,
            tokens=result.usage,
            latency_ms=round((time.perf_counter() - t0) * 1000.0, 3),
        )
        return result


__all__ = ["Dispatcher", "FALLBACK_PROVIDER"]
