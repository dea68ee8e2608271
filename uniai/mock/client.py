"""Deterministic scripted provider for offline testing.

Purpose
-------
Provide a lightweight adapter that satisfies the ``ChatProvider`` contract
without any network traffic. Replies are scripted up front (one per call, in
order) so tests can exercise the dispatcher, the emulation engine and the
streaming contract deterministically. Every request received is recorded.

Streaming
---------
When the request carries ``options.on_stream`` the reply is replayed through
the shared :class:`BaseStreamingAdapter`: text chunks first (``reply.stream``
or the text split into small pieces), then one tool-call delta per scripted
call, then ``done`` with the scripted usage.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from threading import Lock
from typing import Any, Callable, Iterable, List, Optional, Sequence, Union

from ..base.cancellation import CancellationToken, check_cancelled
from ..base.errors import ProviderError, UniAIError
from ..base.logging import LogContext, get_logger, normalized_log_event
from ..base.models import PART_TEXT, Part, Request, Result, ToolCall, Usage
from ..base.streaming import BaseStreamingAdapter, StreamAccumulator


@dataclass
class MockReply:
    """One scripted reply.

    Attributes
    ----------
    text:
        Assistant text.
    tool_calls:
        Tool calls to return.
    usage:
        Token usage reported (defaults to zeros).
    stream:
        Explicit text chunks for streaming; defaults to ``text`` split in
        pieces of ``chunk_size`` characters.
    model:
        Reported model; defaults to the request model.
    error:
        Raised instead of replying when set.
    """

    text: str = ""
    tool_calls: List[ToolCall] = field(default_factory=list)
    usage: Usage = field(default_factory=Usage)
    stream: Optional[List[str]] = None
    model: Optional[str] = None
    error: Optional[BaseException] = None


Script = Union[MockReply, Callable[[Request], MockReply]]


def _chunk_text(text: str, size: int) -> List[str]:
    return [text[i : i + size] for i in range(0, len(text), size)] if text else []


class MockProvider:
    """Adapter that returns scripted replies instead of calling a live API."""

    def __init__(
        self,
        replies: Optional[Sequence[Script]] = None,
        *,
        provider: str = "mock",
        model: str = "mock-model",
        chunk_size: int = 4,
    ) -> None:
        """Initialize the provider.

        Parameters
        ----------
        replies:
            Scripted replies consumed one per call. A callable receives the
            request and returns the reply. When the script is exhausted the
            last entry is reused.
        provider:
            Logical provider name used in results and logs.
        model:
            Model reported when neither the reply nor the request names one.
        chunk_size:
            Characters per streamed text chunk when ``reply.stream`` is unset.
        """
        self._provider = provider or "mock"
        self._model = model
        self._chunk_size = max(1, int(chunk_size))
        self._replies: List[Script] = list(replies or [MockReply(text="ok")])
        self._cursor = 0
        self._lock = Lock()
        self.requests: List[Request] = []
        self._logger = get_logger(f"uniai.mock.{self._provider}")

    @property
    def provider_name(self) -> str:
        return self._provider

    @property
    def calls(self) -> int:
        return len(self.requests)

    def _next_reply(self, request: Request) -> MockReply:
        with self._lock:
            self.requests.append(request)
            script = self._replies[min(self._cursor, len(self._replies) - 1)]
            self._cursor += 1
        return script(request) if callable(script) else script

    def chat(self, request: Request, *, token: Optional[CancellationToken] = None) -> Result:
        """Return the next scripted reply, streaming it when requested."""
        model = request.model or self._model
        check_cancelled(token, provider=self.provider_name, model=model)
        reply = self._next_reply(request)
        ctx = LogContext(provider=self.provider_name, model=model)
        normalized_log_event(self._logger, "chat.start", ctx, phase="start")
        if reply.error is not None:
            if isinstance(reply.error, UniAIError):
                raise reply.error
            raise ProviderError(
                message=str(reply.error),
                provider=self.provider_name,
                model=model,
                stage="dispatch",
                raw=reply.error,
            ) from reply.error
        if request.options.on_stream is not None:
            result = self._stream(request, reply, ctx=ctx, model=reply.model or model, token=token)
        else:
            result = Result(
                text=reply.text,
                parts=[Part(type=PART_TEXT, text=reply.text)] if reply.text else [],
                model=reply.model or model,
                tool_calls=list(reply.tool_calls),
                usage=reply.usage,
                raw={"mock": self.provider_name, "call": self.calls},
            )
        result.provider = self.provider_name
        normalized_log_event(self._logger, "chat.end", ctx, phase="finalize", emitted=True, tokens=result.usage)
        return result

    def _stream(
        self,
        request: Request,
        reply: MockReply,
        *,
        ctx: LogContext,
        model: str,
        token: Optional[CancellationToken],
    ) -> Result:
        chunks: List[Any] = [("text", c) for c in (reply.stream if reply.stream is not None else _chunk_text(reply.text, self._chunk_size))]
        chunks.extend(("tool", (i, call)) for i, call in enumerate(reply.tool_calls))
        chunks.append(("usage", reply.usage))

        def _starter() -> Iterable[Any]:
            return list(chunks)

        def _translator(chunk: Any, acc: StreamAccumulator) -> None:
            kind, value = chunk
            if kind == "text":
                acc.add_text(value)
            elif kind == "tool":
                index, call = value
                acc.add_tool_call_delta(
                    index,
                    id=call.id,
                    name=call.function.name,
                    args_chunk=call.function.arguments,
                    thought_signature=call.thought_signature,
                )
            else:
                acc.set_usage(
                    input_tokens=value.input_tokens,
                    output_tokens=value.output_tokens,
                    total_tokens=value.total_tokens,
                )

        adapter = BaseStreamingAdapter(
            ctx=ctx,
            provider_name=self.provider_name,
            model=model,
            starter=_starter,
            translator=_translator,
            callback=request.options.on_stream,
            logger=self._logger,
            cancellation_token=token,
        )
        return adapter.run()


__all__ = ["MockProvider", "MockReply"]
