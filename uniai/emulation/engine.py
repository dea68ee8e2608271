"""
Tool-calling emulation engine.

Purpose:
- Make function calling work against models with no native tool support,
  or recover when a native attempt returned no tool calls.

Flow (``fallback`` and ``force`` modes, tools present):
1. Build a decision request: system prompt describing the tools, history
   reduced to user turns plus the latest assistant text, no tools.
2. Dispatch it (never streamed) and parse the reply as a JSON decision.
3. Check the decision against ``tool_choice`` and the offered tool names.
4. No call decided: re-issue the original request without tools and return
   that answer. Calls decided: return them as synthesized tool calls, with
   model and usage taken from the decision call.

Both successful branches add the ``"tool calls emulated"`` warning. Any error
aborts the whole call; no partial result is returned.
"""
from __future__ import annotations

import time
from typing import List, Optional, Union

from ..base.cancellation import CancellationToken, check_cancelled
from ..base.diagnostics import emit_json, emit_text
from ..base.dispatcher import Dispatcher
from ..base.errors import ConfigError, UniAIError
from ..base.logging import LogContext, get_logger, normalized_log_event
from ..base.models import (
    WARNING_TOOL_CALLS_EMULATED,
    EmulationMode,
    Request,
    Result,
    ToolCall,
    ToolCallFunction,
)
from ..base.streaming import StreamAccumulator
from .parser import DecisionCall, parse_decision
from .policy import enforce_tool_choice, ensure_known_tools
from .prompt import build_decision_request, build_final_request


def _coerce_mode(mode: Union[EmulationMode, str, None]) -> EmulationMode:
    if mode is None or mode == "":
        return EmulationMode.OFF
    if isinstance(mode, EmulationMode):
        return mode
    try:
        return EmulationMode(str(mode).strip().lower())
    except ValueError as exc:
        raise ConfigError(message=f"invalid emulation mode {mode!r}", stage="config") from exc


def synthesize_tool_calls(calls: List[DecisionCall]) -> List[ToolCall]:
    """Turn decided calls into IR tool calls with fresh ``emulated_<ns>_<i>`` ids."""
    stamp = time.time_ns()
    return [
        ToolCall(
            id=f"emulated_{stamp}_{i}",
            function=ToolCallFunction(name=call.name, arguments=call.arguments),
        )
        for i, call in enumerate(calls)
    ]


class ToolEmulationEngine:
    """Run chat calls through the dispatcher, emulating tool calls when asked.

    The engine holds no per-call state and is safe to share between threads.
    """

    def __init__(self, dispatcher: Dispatcher, *, debug: bool = False) -> None:
        self._dispatcher = dispatcher
        self._debug = debug
        self._logger = get_logger("uniai.emulation")

    @property
    def dispatcher(self) -> Dispatcher:
        return self._dispatcher

    def chat(
        self,
        request: Request,
        *,
        mode: Union[EmulationMode, str, None] = None,
        token: Optional[CancellationToken] = None,
    ) -> Result:
        """Serve ``request`` under ``mode``.

        ``mode`` defaults to the request's own ``emulation_mode`` and then to
        ``off``. ``off`` dispatches directly. ``fallback`` dispatches natively
        first and emulates only when tools were offered and none was called.
        ``force`` emulates whenever tools are offered.

        Raises:
            EmulationParseError: The decision reply is not a recoverable decision.
            EmulationPolicyViolation: The decision breaks ``tool_choice``.
            UnknownToolError: The decision names a tool that was not offered.
            UniAIError: Anything raised by the dispatcher or adapters.
        """
        resolved = _coerce_mode(mode if mode is not None else request.options.emulation_mode)
        if resolved is EmulationMode.OFF or not request.tools:
            return self._dispatcher.chat(request, token=token)
        if resolved is EmulationMode.FALLBACK:
            native = self._dispatcher.chat(request, token=token)
            if native.tool_calls:
                return native
        return self.emulate(request, mode=resolved, token=token)

    def emulate(
        self,
        request: Request,
        *,
        mode: EmulationMode = EmulationMode.FORCE,
        token: Optional[CancellationToken] = None,
    ) -> Result:
        """Run the decision flow for ``request`` unconditionally."""
        provider = self._dispatcher.resolve_name(request)
        ctx = LogContext(provider=provider, model=request.model or None, emulation_mode=mode.value)
        sink = request.options.debug_sink
        emit_json(
            self._debug,
            sink,
            "tool_emulation.start",
            {"provider": provider, "tools": len(request.tools), "mode": mode.value},
        )
        normalized_log_event(self._logger, "emulation.start", ctx, phase="start", tools=len(request.tools))
        try:
            result = self._run(request, ctx=ctx, token=token)
        except UniAIError as exc:
            if exc.provider is None:
                exc.provider = provider
                exc.model = exc.model or request.model or None
            normalized_log_event(
                self._logger,
                "emulation.result",
                ctx,
                phase="finalize",
                error_code=exc.code.value,
                emitted=False,
                error=str(exc),
            )
            raise
        normalized_log_event(
            self._logger,
            "emulation.result",
            ctx,
            phase="finalize",
            emitted=True,
            tokens=result.usage,
            tool_calls=len(result.tool_calls),
        )
        return result

    def _run(self, request: Request, *, ctx: LogContext, token: Optional[CancellationToken]) -> Result:
        sink = request.options.debug_sink
        decision_req = build_decision_request(request)
        emit_json(self._debug, sink, "tool_emulation.decision_request", decision_req)
        decision = self._dispatcher.chat(decision_req, token=token)
        emit_text(self._debug, sink, "tool_emulation.decision_response", decision.text)

        calls = parse_decision(decision.text)
        emit_json(self._debug, sink, "tool_emulation.parsed_calls", {"calls": [c.to_dict() for c in calls]})
        normalized_log_event(
            self._logger,
            "emulation.decision",
            ctx,
            phase="decision",
            tokens=decision.usage,
            calls=[c.name for c in calls],
        )
        enforce_tool_choice(request.tool_choice, calls)
        ensure_known_tools(request.tools, calls)
        check_cancelled(token, provider=ctx.provider, model=ctx.model)

        if not calls:
            final_req = build_final_request(request)
            normalized_log_event(self._logger, "emulation.final", ctx.bind(decision_model=decision.model or None), phase="final")
            emit_json(self._debug, sink, "tool_emulation.final_request", final_req)
            result = self._dispatcher.chat(final_req, token=token)
            result.warnings.append(WARNING_TOOL_CALLS_EMULATED)
            return result

        result = Result(
            model=decision.model,
            tool_calls=synthesize_tool_calls(calls),
            usage=decision.usage,
            raw=decision.raw,
            warnings=[WARNING_TOOL_CALLS_EMULATED],
            provider=decision.provider,
        )
        if request.options.on_stream is not None:
            self._replay(request, result)
        return result

    @staticmethod
    def _replay(request: Request, result: Result) -> None:
        """Deliver synthesized calls to a streaming caller, ending with ``done``."""
        acc = StreamAccumulator(request.options.on_stream, provider=result.provider, model=result.model)
        for i, call in enumerate(result.tool_calls):
            acc.add_tool_call_delta(i, id=call.id, name=call.function.name, args_chunk=call.function.arguments)
        acc.set_usage(
            input_tokens=result.usage.input_tokens,
            output_tokens=result.usage.output_tokens,
            total_tokens=result.usage.total_tokens,
        )
        acc.finish()


__all__ = ["ToolEmulationEngine", "synthesize_tool_calls"]
