"""Gemini native ``generateContent`` adapter."""

from .client import GeminiProvider

__all__ = ["GeminiProvider"]
