"""Centralized defaults for the chat client and its adapters.

Values here are used when neither ``ClientConfig`` nor the environment
provides an override. Models have no built-in default: a call without a
request model or configured default fails with ``ConfigError``.
"""

from __future__ import annotations

DEFAULT_PROVIDER = "openai"

OPENAI_DEFAULT_BASE_URL = "https://api.openai.com/v1"
DEEPSEEK_DEFAULT_BASE_URL = "https://api.deepseek.com"
XAI_DEFAULT_BASE_URL = "https://api.x.ai/v1"
GROQ_DEFAULT_BASE_URL = "https://api.groq.com/openai/v1"

AZURE_DEFAULT_API_VERSION = "2024-08-01-preview"

ANTHROPIC_DEFAULT_BASE_URL = "https://api.anthropic.com"
ANTHROPIC_API_VERSION = "2023-06-01"
ANTHROPIC_DEFAULT_MAX_TOKENS = 8192

GEMINI_DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com"

# Accepted by Gemini's OpenAI-compatible endpoint when a replayed tool call
# has no thought signature.
GEMINI_THOUGHT_SIGNATURE_BYPASS = "skip_thought_signature_validator"

__all__ = [
    "DEFAULT_PROVIDER",
    "OPENAI_DEFAULT_BASE_URL",
    "DEEPSEEK_DEFAULT_BASE_URL",
    "XAI_DEFAULT_BASE_URL",
    "GROQ_DEFAULT_BASE_URL",
    "AZURE_DEFAULT_API_VERSION",
    "ANTHROPIC_DEFAULT_BASE_URL",
    "ANTHROPIC_API_VERSION",
    "ANTHROPIC_DEFAULT_MAX_TOKENS",
    "GEMINI_DEFAULT_BASE_URL",
    "GEMINI_THOUGHT_SIGNATURE_BYPASS",
]
