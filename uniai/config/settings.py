"""Client configuration.

``ClientConfig`` holds one slot per vendor setting plus client-wide
transport and emulation defaults. Adapters never see the whole config: the
dispatcher hands each one a :class:`ProviderSettings` view built by
``ClientConfig.provider_settings``.

Precedence
----------
1. Explicit ``ClientConfig`` fields.
2. Environment variables (``ClientConfig.from_env``).
3. Built-in defaults from ``uniai.config.defaults``.

OpenAI-compatible presets (``deepseek``, ``xai``, ``groq``) fall back to the
OpenAI key and model when their own slots are empty.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional

from ..base.errors import ConfigError
from ..base.models import EmulationMode
from ..base.http import DEFAULT_MAX_RESPONSE_BYTES
from ..base.timeouts import DEFAULT_HTTP_TIMEOUT_SECONDS
from .defaults import (
    ANTHROPIC_DEFAULT_BASE_URL,
    AZURE_DEFAULT_API_VERSION,
    DEEPSEEK_DEFAULT_BASE_URL,
    DEFAULT_PROVIDER,
    GEMINI_DEFAULT_BASE_URL,
    GROQ_DEFAULT_BASE_URL,
    OPENAI_DEFAULT_BASE_URL,
    XAI_DEFAULT_BASE_URL,
)
from .env import env_bool, env_float, env_int, env_str, resolve_env


@dataclass(frozen=True)
class ProviderSettings:
    """Immutable per-adapter settings view.

    Attributes:
        name: Provider name the adapter is registered under.
        api_key: Credential; ``None`` makes every call fail with ``ConfigError``.
        base_url: Endpoint root.
        model: Default model when the request names none.
        extra: Vendor-specific settings (e.g. Azure ``api_version``).
        debug: Log diagnostics payloads when the request has no debug sink.
    """

    name: str
    api_key: Optional[str] = None
    base_url: Optional[str] = None
    model: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)
    debug: bool = False


@dataclass(frozen=True)
class ClientConfigView:
    """Non-sensitive snapshot for diagnostics (no secrets)."""

    provider: str
    model: Optional[str]
    api_base: Optional[str]


def _emulation_mode(value: Any) -> EmulationMode:
    if isinstance(value, EmulationMode):
        return value
    try:
        return EmulationMode(str(value or "off").strip().lower())
    except ValueError as exc:
        raise ConfigError(message=f"invalid emulation mode {value!r}", stage="config") from exc


def _gemini_openai_base(base: Optional[str]) -> str:
    base = (base or GEMINI_DEFAULT_BASE_URL).rstrip("/")
    if base.endswith("/v1beta"):
        return base + "/openai"
    if "/openai" not in base:
        return base + "/v1beta/openai"
    return base


@dataclass
class ClientConfig:
    """Configuration for :class:`uniai.Client`.

    Attributes:
        provider: Default provider name (``"openai"`` when empty).
        http_timeout: Per-request HTTP timeout in seconds.
        max_response_bytes: Upper bound for non-streaming response bodies.
        debug: Log diagnostics payloads when no debug sink is supplied.
        emulation_mode: Default tool-calling emulation mode.
    """

    provider: str = ""

    openai_api_key: Optional[str] = None
    openai_base_url: Optional[str] = None
    openai_model: Optional[str] = None

    azure_api_key: Optional[str] = None
    azure_endpoint: Optional[str] = None
    azure_model: Optional[str] = None
    azure_api_version: str = AZURE_DEFAULT_API_VERSION

    anthropic_api_key: Optional[str] = None
    anthropic_base_url: Optional[str] = None
    anthropic_model: Optional[str] = None

    gemini_api_key: Optional[str] = None
    gemini_base_url: Optional[str] = None
    gemini_model: Optional[str] = None

    deepseek_api_key: Optional[str] = None
    deepseek_base_url: Optional[str] = None
    deepseek_model: Optional[str] = None

    xai_api_key: Optional[str] = None
    xai_base_url: Optional[str] = None
    xai_model: Optional[str] = None

    groq_api_key: Optional[str] = None
    groq_base_url: Optional[str] = None
    groq_model: Optional[str] = None

    http_timeout: float = DEFAULT_HTTP_TIMEOUT_SECONDS
    max_response_bytes: int = DEFAULT_MAX_RESPONSE_BYTES
    debug: bool = False
    emulation_mode: EmulationMode = EmulationMode.OFF

    def __post_init__(self) -> None:
        self.emulation_mode = _emulation_mode(self.emulation_mode)

    @classmethod
    def from_env(cls, **overrides: Any) -> "ClientConfig":
        """Build a config from environment variables, then apply ``overrides``.

        Reads ``UNIAI_PROVIDER``, ``<VENDOR>_API_KEY`` / ``_BASE_URL`` /
        ``_MODEL`` (Gemini also accepts ``GOOGLE_API_KEY``; Azure uses the
        ``AZURE_OPENAI_`` prefix with ``AZURE_OPENAI_ENDPOINT``),
        ``UNIAI_HTTP_TIMEOUT``, ``UNIAI_MAX_RESPONSE_BYTES``, ``UNIAI_DEBUG``
        and ``UNIAI_EMULATION_MODE``.
        """
        values: Dict[str, Any] = {}
        for vendor in ("openai", "anthropic", "gemini", "deepseek", "xai", "groq"):
            values[f"{vendor}_api_key"] = resolve_env(vendor, "API_KEY")[0]
            values[f"{vendor}_base_url"] = resolve_env(vendor, "BASE_URL")[0]
            values[f"{vendor}_model"] = resolve_env(vendor, "MODEL")[0]
        values["azure_api_key"] = resolve_env("azure", "API_KEY")[0]
        values["azure_endpoint"] = env_str("AZURE_OPENAI_ENDPOINT")
        values["azure_model"] = resolve_env("azure", "MODEL")[0]
        if api_version := env_str("AZURE_OPENAI_API_VERSION"):
            values["azure_api_version"] = api_version
        values["provider"] = env_str("UNIAI_PROVIDER") or ""
        if (timeout := env_float("UNIAI_HTTP_TIMEOUT")) is not None and timeout > 0:
            values["http_timeout"] = timeout
        if (limit := env_int("UNIAI_MAX_RESPONSE_BYTES")) is not None and limit > 0:
            values["max_response_bytes"] = limit
        values["debug"] = env_bool("UNIAI_DEBUG")
        if mode := env_str("UNIAI_EMULATION_MODE"):
            values["emulation_mode"] = _emulation_mode(mode)
        values.update(overrides)
        return cls(**values)

    @property
    def default_provider(self) -> str:
        return (self.provider or "").strip() or DEFAULT_PROVIDER

    def provider_settings(self, name: str) -> ProviderSettings:
        """Return the settings view for adapter ``name``.

        Unknown names get an empty view; the dispatcher rejects them before
        any adapter is built.
        """
        return replace(self._vendor_settings(name), debug=self.debug)

    def _vendor_settings(self, name: str) -> ProviderSettings:
        openai_model = self.openai_model
        if name in ("openai", "openai_custom"):
            return ProviderSettings(
                name=name,
                api_key=self.openai_api_key,
                base_url=self.openai_base_url or OPENAI_DEFAULT_BASE_URL,
                model=openai_model,
            )
        if name == "deepseek":
            return ProviderSettings(
                name=name,
                api_key=self.deepseek_api_key or self.openai_api_key,
                base_url=self.deepseek_base_url or DEEPSEEK_DEFAULT_BASE_URL,
                model=self.deepseek_model or openai_model,
            )
        if name == "xai":
            return ProviderSettings(
                name=name,
                api_key=self.xai_api_key or self.openai_api_key,
                base_url=self.xai_base_url or XAI_DEFAULT_BASE_URL,
                model=self.xai_model or openai_model,
            )
        if name == "groq":
            return ProviderSettings(
                name=name,
                api_key=self.groq_api_key or self.openai_api_key,
                base_url=self.groq_base_url or GROQ_DEFAULT_BASE_URL,
                model=self.groq_model or openai_model,
            )
        if name == "azure":
            return ProviderSettings(
                name=name,
                api_key=self.azure_api_key,
                base_url=self.azure_endpoint,
                model=self.azure_model,
                extra={"api_version": self.azure_api_version},
            )
        if name == "anthropic":
            return ProviderSettings(
                name=name,
                api_key=self.anthropic_api_key,
                base_url=self.anthropic_base_url or ANTHROPIC_DEFAULT_BASE_URL,
                model=self.anthropic_model,
            )
        if name == "gemini":
            return ProviderSettings(
                name=name,
                api_key=self.gemini_api_key,
                base_url=(self.gemini_base_url or GEMINI_DEFAULT_BASE_URL).rstrip("/"),
                model=self.gemini_model or openai_model,
            )
        if name == "gemini_openai":
            return ProviderSettings(
                name=name,
                api_key=self.gemini_api_key or self.openai_api_key,
                base_url=_gemini_openai_base(self.gemini_base_url),
                model=self.gemini_model or openai_model,
            )
        return ProviderSettings(name=name)

    def view(self) -> ClientConfigView:
        """Return the non-sensitive view for the default provider."""
        settings = self.provider_settings(self.default_provider)
        return ClientConfigView(
            provider=self.default_provider,
            model=settings.model,
            api_base=settings.base_url,
        )


__all__ = ["ClientConfig", "ClientConfigView", "ProviderSettings"]
