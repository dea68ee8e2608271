"""Azure OpenAI adapter.

Same wire mapping as :class:`OpenAIProvider`; differences:

- the SDK client is ``openai.AzureOpenAI`` bound to the configured endpoint and
  ``api_version`` (default ``2024-08-01-preview``);
- the resolved model is the deployment name;
- the ``azure`` escape hatch is used when set, else the ``openai`` one.
"""

from __future__ import annotations

from typing import Any, Mapping

import openai

from ..base.errors import ConfigError
from ..base.models import Request
from ..config.defaults import AZURE_DEFAULT_API_VERSION
from .client import OpenAIProvider


class AzureOpenAIProvider(OpenAIProvider):
    """Chat Completions against an Azure OpenAI deployment."""

    @property
    def logger_name(self) -> str:
        return "azure"

    def _make_client(self, api_key: str) -> openai.AzureOpenAI:
        endpoint = (self._settings.base_url or "").strip()
        if not endpoint:
            raise ConfigError(
                message="azure endpoint is required (set azure_endpoint or AZURE_OPENAI_ENDPOINT)",
                provider=self.provider_name,
                stage="dispatch",
            )
        return openai.AzureOpenAI(
            azure_endpoint=endpoint,
            api_key=api_key,
            api_version=self._settings.extra.get("api_version") or AZURE_DEFAULT_API_VERSION,
            http_client=self.http_client,
            max_retries=0,
            timeout=self._http_settings.timeout.to_httpx(),
        )

    def escape_hatch(self, request: Request) -> Mapping[str, Any]:
        return request.options.azure or request.options.openai


__all__ = ["AzureOpenAIProvider"]
