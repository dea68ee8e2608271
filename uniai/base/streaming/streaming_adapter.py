"""Base streaming loop shared by streaming adapters.

Adapters supply two callables:

``starter() -> Iterable``
    Opens the long-lived vendor stream (an SDK stream object or any iterable
    with an optional ``close()``).
``translator(chunk, accumulator) -> None``
    Turns one vendor chunk into accumulator calls.

``BaseStreamingAdapter.run()`` drives the loop on the calling thread, checks
the cancellation token between chunks, closes the stream on every exit path
and logs ``stream.start`` / ``stream.end`` / ``stream.cancelled`` /
``stream.error`` with :class:`StreamMetrics`.
"""
from __future__ import annotations

import logging
from contextlib import ExitStack
from typing import Any, Callable, Iterable, Optional

from ..cancellation import CancellationToken, CancelledError, check_cancelled
from ..errors import Cancelled, StreamCancelled, UniAIError, wrap_exception
from ..logging import LogContext, normalized_log_event
from ..models import Result, StreamCallback
from .accumulator import StreamAccumulator
from .streaming_metrics import StreamMetrics

Translator = Callable[[Any, StreamAccumulator], None]


class BaseStreamingAdapter:
    """Encapsulates the provider streaming loop boilerplate."""

    def __init__(
        self,
        *,
        ctx: LogContext,
        provider_name: str,
        model: str,
        starter: Callable[[], Iterable[Any]],
        translator: Translator,
        callback: StreamCallback,
        logger: logging.Logger,
        cancellation_token: Optional[CancellationToken] = None,
    ) -> None:
        self.ctx = ctx
        self.provider_name = provider_name
        self.model = model
        self._starter = starter
        self._translator = translator
        self._logger = logger
        self._token = cancellation_token
        self.metrics = StreamMetrics()
        self.accumulator = StreamAccumulator(
            callback, provider=provider_name, model=model, metrics=self.metrics
        )

    def _log_end(self, event: str, *, error: Optional[UniAIError] = None) -> None:
        self.metrics.close()
        normalized_log_event(
            self._logger,
            event,
            self.ctx,
            phase="finalize",
            error_code=error.code.value if error is not None else None,
            emitted=self.metrics.emitted > 0,
            tokens=self.metrics.tokens,
            level=logging.INFO if error is None else logging.WARNING,
            emitted_count=self.metrics.emitted,
            time_to_first_delta_ms=self.metrics.time_to_first_delta_ms,
            total_duration_ms=self.metrics.total_duration_ms,
            error=str(error) if error is not None else None,
        )

    def _cancelled(self, exc: BaseException) -> Cancelled:
        reason = getattr(self._token, "reason", None) or str(exc) or "operation cancelled"
        return Cancelled(message=reason, provider=self.provider_name, model=self.model, stage="stream")

    def _open(self) -> Iterable[Any]:
        check_cancelled(self._token, provider=self.provider_name, model=self.model, stage="stream.start")
        normalized_log_event(self._logger, "stream.start", self.ctx, phase="start")
        try:
            return self._starter()
        except UniAIError as exc:
            self._log_end("stream.error", error=exc)
            raise
        except Exception as exc:
            err = wrap_exception(exc, provider=self.provider_name, model=self.model, stage="stream.start")
            self._log_end("stream.error", error=err)
            raise err from exc

    def run(self) -> Result:
        """Execute the streaming lifecycle and return the accumulated Result.

        Raises:
            StreamCancelled: The caller's callback raised.
            Cancelled: The cancellation token fired.
            ProviderError: Transport or vendor failure before or mid-stream.
        """
        stream = self._open()
        with ExitStack() as stack:
            close = getattr(stream, "close", None)
            if callable(close):
                stack.callback(close)
                if self._token is not None:
                    stack.callback(self._token.on_cancel(close))
            try:
                for chunk in stream:
                    check_cancelled(self._token, provider=self.provider_name, model=self.model, stage="stream")
                    self.accumulator.add_raw(chunk)
                    self._translator(chunk, self.accumulator)
                check_cancelled(self._token, provider=self.provider_name, model=self.model, stage="stream")
                result = self.accumulator.finish()
            except StreamCancelled as exc:
                self._log_end("stream.cancelled", error=exc)
                raise
            except Cancelled as exc:
                self._log_end("stream.cancelled", error=exc)
                raise
            except CancelledError as exc:
                err = self._cancelled(exc)
                self._log_end("stream.cancelled", error=err)
                raise err from exc
            except UniAIError as exc:
                self._log_end("stream.error", error=exc)
                raise
            except Exception as exc:
                if self._token is not None and self._token.cancelled:
                    err = self._cancelled(exc)
                    self._log_end("stream.cancelled", error=err)
                    raise err from exc
                err = wrap_exception(exc, provider=self.provider_name, model=self.model, stage="stream")
                self._log_end("stream.error", error=err)
                raise err from exc
        self._log_end("stream.end")
        return result


__all__ = ["BaseStreamingAdapter", "Translator"]
