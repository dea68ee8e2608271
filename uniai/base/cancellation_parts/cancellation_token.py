"""Cooperative cancellation token.

One token is passed through a whole chat call: client, emulation engine,
dispatcher, adapter and streaming loop. Adapters poll it between chunks and
register ``on_cancel`` callbacks that close the live HTTP response, so a read
blocked in another thread aborts as well.
"""

from __future__ import annotations

from threading import Lock
from typing import Callable, List

from .cancelled_error import CancelledError
from .state import State


class CancellationToken:
    """A thread-safe cancellation token with cascading children."""

    def __init__(self, *, parent: "CancellationToken | None" = None) -> None:
        self._state = State()
        self._lock = Lock()
        self._children: List[CancellationToken] = []
        if parent is not None:
            parent.link_child(self)

    @property
    def cancelled(self) -> bool:
        """Whether cancellation has been requested."""
        return self._state.cancelled

    @property
    def reason(self) -> str | None:
        return self._state.reason

    def cancel(self, reason: str | None = None) -> None:
        """Request cancellation, run registered callbacks, cascade to children.

        Callbacks run once, in registration order, on the cancelling thread.
        """
        with self._lock:
            if self._state.cancelled:
                return
            self._state.cancelled = True
            self._state.reason = reason
            callbacks = list(self._state.callbacks)
            self._state.callbacks.clear()
            children = list(self._children)
        for callback in callbacks:
            callback()
        for child in children:
            child.cancel(reason)

    def on_cancel(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Register ``callback``; it runs immediately if already cancelled.

        Returns an unregister function so callers can drop the callback once
        the guarded resource is closed.
        """
        with self._lock:
            run_now = self._state.cancelled
            if not run_now:
                self._state.callbacks.append(callback)
        if run_now:
            callback()

        def _unregister() -> None:
            with self._lock:
                if callback in self._state.callbacks:
                    self._state.callbacks.remove(callback)

        return _unregister

    def link_child(self, token: "CancellationToken") -> "CancellationToken":
        """Link a child token so parent cancellation cascades (returns child)."""
        with self._lock:
            self._children.append(token)
            should_cancel = self._state.cancelled
            reason = self._state.reason
        if should_cancel:
            token.cancel(reason)
        return token

    def raise_if_cancelled(self) -> None:
        """Raise ``CancelledError`` if the token is cancelled."""
        if self._state.cancelled:
            raise CancelledError(self._state.reason or "operation cancelled")

    def child(self) -> "CancellationToken":
        return CancellationToken(parent=self)

    def __repr__(self) -> str:  # pragma: no cover - introspection aid
        return (
            f"CancellationToken(cancelled={self._state.cancelled}, "
            f"reason={self._state.reason!r}, children={len(self._children)})"
        )


__all__ = ["CancellationToken"]
