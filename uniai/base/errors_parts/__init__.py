"""Errors parts package public surface.

Re-exports individual error taxonomy components for optional direct imports.
Prefer importing from `uniai.base.errors` for the stable surface.
"""

from .error_code import ErrorCode
from .uniai_error import UniAIError
from .taxonomy import (
    Cancelled,
    ConfigError,
    EmulationParseError,
    EmulationPolicyViolation,
    ProviderError,
    StreamCancelled,
    UnknownToolError,
    UnsupportedCapability,
    ValidationError,
)
from .classification import classify_exception, classify_status, provider_error_from_status, wrap_exception

__all__ = [
    "ErrorCode",
    "UniAIError",
    "ConfigError",
    "ValidationError",
    "ProviderError",
    "UnsupportedCapability",
    "StreamCancelled",
    "Cancelled",
    "EmulationParseError",
    "EmulationPolicyViolation",
    "UnknownToolError",
    "classify_exception",
    "classify_status",
    "provider_error_from_status",
    "wrap_exception",
]
