"""OpenAI-compatible adapters (OpenAI, Azure and base-URL presets)."""

from .azure import AzureOpenAIProvider
from .client import OpenAIProvider

__all__ = ["OpenAIProvider", "AzureOpenAIProvider"]
