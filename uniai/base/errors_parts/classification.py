"""
Error classification helpers mapping HTTP statuses and transport exceptions
to normalized :class:`ErrorCode` values, and wrapping them into
:class:`ProviderError` at the adapter boundary.
"""
from __future__ import annotations

from typing import Any, Dict, Optional

import httpx

from .error_code import ErrorCode
from .taxonomy import ProviderError
from .uniai_error import UniAIError


_HTTP_STATUS_MAP: Dict[int, ErrorCode] = {
    400: ErrorCode.PROVIDER,
    401: ErrorCode.AUTH,
    403: ErrorCode.AUTH,
    404: ErrorCode.NOT_FOUND,
    408: ErrorCode.TIMEOUT,
    409: ErrorCode.CONFLICT,
    422: ErrorCode.PROVIDER,
    429: ErrorCode.RATE_LIMIT,
    500: ErrorCode.SERVER_ERROR,
    502: ErrorCode.TRANSIENT,
    503: ErrorCode.UNAVAILABLE,
    504: ErrorCode.TIMEOUT,
}

_RETRYABLE = frozenset(
    {ErrorCode.RATE_LIMIT, ErrorCode.TIMEOUT, ErrorCode.TRANSIENT, ErrorCode.UNAVAILABLE}
)


def _extract_status(exc: BaseException) -> Optional[int]:
    """Attempt to extract an HTTP status code from an SDK or transport exception.

    Supported attribute shapes (checked in order):
    - ``exc.status_code``
    - ``exc.status``
    - ``exc.response.status_code``
    Returns ``None`` if no valid status can be found.
    """
    for attr in ("status_code", "status"):
        val = getattr(exc, attr, None)
        if isinstance(val, int) and 100 <= val < 600:
            return val
    resp = getattr(exc, "response", None)
    if resp is not None:
        sc = getattr(resp, "status_code", None)
        if isinstance(sc, int) and 100 <= sc < 600:
            return sc
    return None


def classify_status(status: Optional[int]) -> ErrorCode:
    """Map an HTTP status to an error code; non-mapped 5xx are server errors."""
    if status is None:
        return ErrorCode.UNKNOWN
    if status in _HTTP_STATUS_MAP:
        return _HTTP_STATUS_MAP[status]
    if status >= 500:
        return ErrorCode.SERVER_ERROR
    return ErrorCode.PROVIDER


def classify_exception(exc: BaseException) -> ErrorCode:
    """Classify an exception into a normalized :class:`ErrorCode`.

    Precedence:
        1. Errors of this package pass their own code through.
        2. Timeout exceptions (builtin and httpx).
        3. Other httpx transport errors are transient.
        4. HTTP status mapping.
        5. ``UNKNOWN`` fallback.
    """
    if isinstance(exc, UniAIError):
        return exc.code
    if isinstance(exc, (TimeoutError, httpx.TimeoutException)):
        return ErrorCode.TIMEOUT
    if isinstance(exc, httpx.TransportError):
        return ErrorCode.TRANSIENT
    status = _extract_status(exc)
    if status is not None:
        return classify_status(status)
    return ErrorCode.UNKNOWN


def provider_error_from_status(
    status: int,
    body: Any,
    *,
    provider: str,
    model: Optional[str],
    stage: str = "dispatch",
) -> ProviderError:
    """Build a :class:`ProviderError` for a non-success HTTP response."""
    code = classify_status(status)
    detail = _error_detail(body)
    return ProviderError(
        message=f"HTTP {status}: {detail}",
        provider=provider,
        model=model,
        stage=stage,
        code=code,
        raw=body,
        status_code=status,
        retryable=code in _RETRYABLE,
    )


def wrap_exception(
    exc: BaseException,
    *,
    provider: str,
    model: Optional[str],
    stage: str = "dispatch",
) -> UniAIError:
    """Wrap a foreign exception into a :class:`ProviderError`.

    Errors already belonging to this package are returned unchanged so they
    propagate verbatim. SDK status errors keep their response body as ``raw``.
    """
    if isinstance(exc, UniAIError):
        return exc
    code = classify_exception(exc)
    status = _extract_status(exc)
    raw: Any = getattr(exc, "body", None)
    if raw is None:
        raw = exc
    return ProviderError(
        message=str(exc) or type(exc).__name__,
        provider=provider,
        model=model,
        stage=stage,
        code=code if code is not ErrorCode.UNKNOWN else ErrorCode.PROVIDER,
        raw=raw,
        status_code=status,
        retryable=code in _RETRYABLE,
    )


def _error_detail(body: Any, limit: int = 512) -> str:
    """Prefer the vendor envelope message (``{"error": {"message": ...}}``)."""
    if isinstance(body, dict):
        err = body.get("error")
        if isinstance(err, dict) and isinstance(err.get("message"), str) and err["message"].strip():
            return err["message"].strip()
        if isinstance(body.get("message"), str) and body["message"].strip():
            return body["message"].strip()
    text = body.strip() if isinstance(body, str) else (repr(body) if body is not None else "")
    return text if len(text) <= limit else text[:limit] + "..."


__all__ = [
    "classify_exception",
    "classify_status",
    "provider_error_from_status",
    "wrap_exception",
    "_extract_status",
    "_HTTP_STATUS_MAP",
]
