"""Provider factory.

Purpose
-------
Create adapter instances by canonical name. Adapter modules are imported
lazily with ``importlib`` so a missing optional SDK only affects the adapters
that need it.

Failure semantics
-----------------
Unknown names, import failures and constructor errors raise
:class:`ConfigError` with an actionable message. No network access happens
here; adapters validate credentials when a call is made.
"""

from __future__ import annotations

from importlib import import_module
from typing import Dict, Optional, Tuple

import httpx

from ..config.settings import ProviderSettings
from .errors import ConfigError
from .http import HTTPSettings
from .interfaces import ChatProvider


class ProviderFactory:
    """Create provider adapters from a canonical name (e.g. ``"openai"``)."""

    # Canonical provider names -> import path and class name
    _PROVIDERS: Dict[str, Dict[str, str]] = {
        "openai": {"module": "uniai.openai.client", "class": "OpenAIProvider"},
        "openai_custom": {"module": "uniai.openai.client", "class": "OpenAIProvider"},
        "deepseek": {"module": "uniai.openai.client", "class": "OpenAIProvider"},
        "xai": {"module": "uniai.openai.client", "class": "OpenAIProvider"},
        "groq": {"module": "uniai.openai.client", "class": "OpenAIProvider"},
        "gemini_openai": {"module": "uniai.openai.client", "class": "OpenAIProvider"},
        "azure": {"module": "uniai.openai.azure", "class": "AzureOpenAIProvider"},
        "anthropic": {"module": "uniai.anthropic.client", "class": "AnthropicProvider"},
        "gemini": {"module": "uniai.gemini.client", "class": "GeminiProvider"},
    }

    @classmethod
    def supported(cls) -> Tuple[str, ...]:
        """Return the registered provider names in registration order."""
        return tuple(cls._PROVIDERS)

    @classmethod
    def create(
        cls,
        provider: str,
        settings: ProviderSettings,
        *,
        http_settings: Optional[HTTPSettings] = None,
        http_client: Optional[httpx.Client] = None,
    ) -> ChatProvider:
        """Create a provider adapter instance.

        Parameters
        ----------
        provider:
            Canonical provider name.
        settings:
            Per-adapter settings view (key, base URL, default model).
        http_settings:
            Timeout and body-size limits for the adapter-owned client.
        http_client:
            Optional injected ``httpx.Client``; the adapter then does not own it.

        Raises
        ------
        ConfigError
            Unknown provider, import failure, missing class or constructor error.
        """
        key = (provider or "").strip().lower()
        spec = cls._PROVIDERS.get(key)
        if spec is None:
            raise ConfigError(message=f"provider {provider!r} not supported", provider=provider, stage="dispatch")
        try:
            module = import_module(spec["module"])
        except ImportError as exc:
            raise ConfigError(
                message=f"failed to import adapter module {spec['module']!r}: {exc}",
                provider=key,
                stage="dispatch",
                raw=exc,
            ) from exc
        adapter_cls = getattr(module, spec["class"], None)
        if adapter_cls is None:
            raise ConfigError(
                message=f"adapter class {spec['class']!r} missing in {spec['module']!r}",
                provider=key,
                stage="dispatch",
            )
        try:
            return adapter_cls(settings, http_settings=http_settings, http_client=http_client)
        except ConfigError:
            raise
        except (TypeError, ValueError) as exc:
            raise ConfigError(
                message=f"failed to initialize adapter {key!r}: {exc}",
                provider=key,
                stage="dispatch",
                raw=exc,
            ) from exc


__all__ = ["ProviderFactory"]
