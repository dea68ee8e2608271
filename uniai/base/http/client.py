"""Per-adapter HTTP transport.

Purpose:
    Every adapter owns one ``httpx.Client`` built from :class:`HTTPSettings`
    (timeout and response-body limit). Callers may inject their own client,
    which is how tests run adapters against ``httpx.MockTransport``. There is
    no process-wide pool; closing an adapter closes only its own client.

Failure semantics:
    - Non-2xx responses raise :class:`ProviderError` carrying the vendor body.
    - Bodies larger than ``max_response_bytes`` raise :class:`ProviderError`.
    - Transport exceptions are wrapped by ``wrap_exception`` at the call site.
"""

from __future__ import annotations

import json
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Optional

import httpx

from ..cancellation import CancellationToken
from ..errors import ProviderError, provider_error_from_status
from ..timeouts import TimeoutConfig, get_timeout_config

DEFAULT_MAX_RESPONSE_BYTES = 100 * 1024 * 1024


@dataclass(frozen=True)
class HTTPSettings:
    """Transport limits owned by one adapter instance."""

    timeout: TimeoutConfig = field(default_factory=get_timeout_config)
    max_response_bytes: int = DEFAULT_MAX_RESPONSE_BYTES


def build_http_client(
    settings: Optional[HTTPSettings] = None,
    *,
    transport: Optional[httpx.BaseTransport] = None,
    headers: Optional[Dict[str, str]] = None,
) -> httpx.Client:
    """Create an ``httpx.Client`` configured from ``settings``.

    Parameters:
        settings: Timeout and size limits; defaults from the environment.
        transport: Optional transport override (``httpx.MockTransport`` in tests).
        headers: Default headers sent with every request.
    """
    settings = settings or HTTPSettings()
    return httpx.Client(timeout=settings.timeout.to_httpx(), transport=transport, headers=headers)


def read_body(response: httpx.Response, limit: int, *, provider: str, model: Optional[str]) -> bytes:
    """Read a (possibly streamed) response body, enforcing ``limit`` bytes."""
    declared = response.headers.get("content-length")
    if declared and declared.isdigit() and int(declared) > limit:
        raise ProviderError(
            message=f"response body exceeds {limit} bytes",
            provider=provider,
            model=model,
            stage="read",
            status_code=response.status_code,
        )
    chunks = []
    size = 0
    for chunk in response.iter_bytes():
        size += len(chunk)
        if size > limit:
            raise ProviderError(
                message=f"response body exceeds {limit} bytes",
                provider=provider,
                model=model,
                stage="read",
                status_code=response.status_code,
            )
        chunks.append(chunk)
    return b"".join(chunks)


def _decode_error_body(body: bytes) -> Any:
    text = body.decode("utf-8", errors="replace").strip()
    try:
        return json.loads(text)
    except ValueError:
        return text


def read_json_body(
    response: httpx.Response,
    limit: int,
    *,
    provider: str,
    model: Optional[str],
) -> Any:
    """Return the decoded JSON body or raise :class:`ProviderError`.

    Non-2xx statuses are raised with the decoded vendor body as ``raw``.
    """
    body = read_body(response, limit, provider=provider, model=model)
    if response.status_code < 200 or response.status_code >= 300:
        raise provider_error_from_status(
            response.status_code, _decode_error_body(body), provider=provider, model=model
        )
    try:
        return json.loads(body)
    except ValueError as exc:
        raise ProviderError(
            message=f"invalid JSON response: {exc}",
            provider=provider,
            model=model,
            stage="decode",
            raw=body.decode("utf-8", errors="replace"),
            status_code=response.status_code,
        ) from exc


@contextmanager
def close_on_cancel(token: Optional[CancellationToken], resource: Any) -> Iterator[None]:
    """Close ``resource`` if ``token`` fires while the block runs."""
    if token is None:
        yield
        return
    unregister = token.on_cancel(resource.close)
    try:
        yield
    finally:
        unregister()


__all__ = [
    "HTTPSettings",
    "DEFAULT_MAX_RESPONSE_BYTES",
    "build_http_client",
    "read_body",
    "read_json_body",
    "close_on_cancel",
]
