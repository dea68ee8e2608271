"""Cancellation signal raised by ``CancellationToken.raise_if_cancelled``.

Adapters translate it into :class:`uniai.base.errors.Cancelled` so callers
see one taxonomy.
"""

from __future__ import annotations


class CancelledError(RuntimeError):
    """Raised when an operation observes a cancellation request."""


__all__ = ["CancelledError"]
