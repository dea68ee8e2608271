"""Unified error taxonomy public surface.

This module re-exports the one-class-per-file implementations under
``uniai.base.errors_parts`` so callers have one stable import path.
"""

from .errors_parts.error_code import ErrorCode
from .errors_parts.uniai_error import UniAIError
from .errors_parts.taxonomy import (
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
from .errors_parts.classification import (
    classify_exception,
    classify_status,
    provider_error_from_status,
    wrap_exception,
)

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
