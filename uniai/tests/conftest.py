"""Shared fixtures for the uniai test suite.

- ``clean_env`` (autouse): removes vendor and ``UNIAI_*`` variables so no test
  depends on the developer's shell.
- ``mock_http``: builds an ``httpx.Client`` over ``httpx.MockTransport`` that
  records every request; adapters run against it without network access.
- ``sse``: renders a list of JSON events as a ``text/event-stream`` body.
"""

from __future__ import annotations

import json
import os
from typing import Any, Callable, Iterable, Iterator, List

import httpx
import pytest

_ENV_PREFIXES = (
    "UNIAI_",
    "OPENAI_",
    "AZURE_",
    "ANTHROPIC_",
    "GEMINI_",
    "GOOGLE_",
    "DEEPSEEK_",
    "XAI_",
    "GROQ_",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Strip provider credentials and client settings from the environment."""
    for key in list(os.environ):
        if key.startswith(_ENV_PREFIXES):
            monkeypatch.delenv(key, raising=False)
    yield


class RecordingTransport(httpx.MockTransport):
    """``MockTransport`` that keeps every request it served."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.requests: List[httpx.Request] = []

        def _record(request: httpx.Request) -> httpx.Response:
            request.read()
            self.requests.append(request)
            return handler(request)

        super().__init__(_record)

    def json_bodies(self) -> List[Any]:
        return [json.loads(r.content) for r in self.requests]


@pytest.fixture()
def mock_http() -> Iterator[Callable[[Callable[[httpx.Request], httpx.Response]], httpx.Client]]:
    """Return a factory ``(handler) -> httpx.Client``; the transport is on ``client.recorder``."""
    clients: List[httpx.Client] = []

    def _factory(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.Client:
        transport = RecordingTransport(handler)
        client = httpx.Client(transport=transport)
        client.recorder = transport  # type: ignore[attr-defined]
        clients.append(client)
        return client

    yield _factory
    for client in clients:
        client.close()


@pytest.fixture()
def sse() -> Callable[..., httpx.Response]:
    """Build a streaming SSE response from JSON events.

    ``named=True`` adds an ``event:`` line from each event's ``type`` (Anthropic
    style); ``done=True`` appends the ``[DONE]`` sentinel (OpenAI style).
    """

    def _build(events: Iterable[Any], *, named: bool = False, done: bool = False, status: int = 200) -> httpx.Response:
        lines: List[str] = []
        for event in events:
            if named:
                lines.append(f"event: {event['type']}")
            lines.append(f"data: {json.dumps(event)}")
            lines.append("")
        if done:
            lines.extend(["data: [DONE]", ""])
        body = ("\n".join(lines) + "\n").encode("utf-8")
        return httpx.Response(status, headers={"content-type": "text/event-stream"}, content=body)

    return _build
