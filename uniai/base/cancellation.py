"""Cooperative cancellation primitives (public API facade).

- ``CancellationToken`` carries cancellation through one chat call.
- ``CancelledError`` is the low-level signal raised by ``raise_if_cancelled``.
- ``check_cancelled`` converts that signal into the ``Cancelled`` taxonomy error.
"""

from __future__ import annotations

from typing import Optional

from .cancellation_parts.cancellation_token import CancellationToken
from .cancellation_parts.cancelled_error import CancelledError
from .errors import Cancelled


def check_cancelled(
    token: Optional[CancellationToken],
    *,
    provider: Optional[str] = None,
    model: Optional[str] = None,
    stage: str = "dispatch",
) -> None:
    """Raise :class:`Cancelled` when ``token`` has been cancelled."""
    if token is None:
        return
    try:
        token.raise_if_cancelled()
    except CancelledError as exc:
        raise Cancelled(message=str(exc), provider=provider, model=model, stage=stage) from exc


__all__ = ["CancellationToken", "CancelledError", "check_cancelled"]
