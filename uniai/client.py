"""
Public chat client.

``Client`` wires a :class:`ClientConfig` into one adapter per supported
provider name, a :class:`Dispatcher` over them and the tool-calling
emulation engine. One ``chat`` call builds and validates a request from
functional options, resolves the emulation mode (request first, then the
client default) and runs it.

Example::

    client = Client(ClientConfig.from_env(provider="anthropic"))
    result = client.chat(
        with_model("claude-3-5-sonnet-latest"),
        with_messages(user("Hello")),
    )
    print(result.text)
"""
from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

import httpx

from .base.cancellation import CancellationToken
from .base.dispatcher import Dispatcher
from .base.factory import ProviderFactory
from .base.http import HTTPSettings
from .base.interfaces import ChatProvider
from .base.logging import LogContext, get_logger, normalized_log_event
from .base.models import Result
from .base.request_builder import RequestOption, build_request
from .base.timeouts import resolve_timeout
from .config import ClientConfig, ClientConfigView
from .emulation import ToolEmulationEngine


class Client:
    """Multi-vendor chat client.

    Parameters
    ----------
    config:
        Client configuration; ``ClientConfig.from_env()`` when omitted.
    http_client:
        Optional ``httpx.Client`` shared by every adapter. The client does not
        close an injected instance.
    adapters:
        Optional prebuilt adapters by provider name. When given, no adapter is
        built from ``config``; tests pass a ``MockProvider`` here.
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        *,
        http_client: Optional[httpx.Client] = None,
        adapters: Optional[Mapping[str, ChatProvider]] = None,
    ) -> None:
        self._config = config if config is not None else ClientConfig.from_env()
        self._logger = get_logger("uniai.client")
        self._adapters: Dict[str, ChatProvider] = dict(adapters) if adapters is not None else self._build_adapters(http_client)
        self._dispatcher = Dispatcher(self._adapters, default_provider=self._config.default_provider)
        self._engine = ToolEmulationEngine(self._dispatcher, debug=self._config.debug)

    def _build_adapters(self, http_client: Optional[httpx.Client]) -> Dict[str, ChatProvider]:
        http_settings = HTTPSettings(
            timeout=resolve_timeout(self._config.http_timeout),
            max_response_bytes=self._config.max_response_bytes,
        )
        return {
            name: ProviderFactory.create(
                name,
                self._config.provider_settings(name),
                http_settings=http_settings,
                http_client=http_client,
            )
            for name in ProviderFactory.supported()
        }

    @property
    def dispatcher(self) -> Dispatcher:
        return self._dispatcher

    def get_config(self) -> ClientConfigView:
        """Return the non-sensitive configuration snapshot."""
        return self._config.view()

    def chat(self, *options: RequestOption, token: Optional[CancellationToken] = None) -> Result:
        """Build, validate and run one chat request.

        Parameters
        ----------
        *options:
            Functional request options (``with_model``, ``with_messages``...).
        token:
            Optional cancellation token propagated to every network call.

        Raises
        ------
        ValidationError
            The request is malformed; nothing was sent.
        ConfigError
            Unknown provider, or missing model or API key for it.
        UniAIError
            Any provider, streaming or emulation failure.
        """
        request = build_request(*options)
        mode = request.options.emulation_mode or self._config.emulation_mode
        normalized_log_event(
            self._logger,
            "client.chat",
            LogContext(
                provider=self._dispatcher.resolve_name(request),
                model=request.model or None,
                emulation_mode=getattr(mode, "value", mode),
            ),
            phase="start",
        )
        return self._engine.chat(request, mode=mode, token=token)

    def close(self) -> None:
        """Close adapter-owned HTTP clients."""
        for adapter in self._adapters.values():
            close = getattr(adapter, "close", None)
            if callable(close):
                close()

    def __enter__(self) -> "Client":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()


__all__ = ["Client"]
