"""HTTP transport helpers exposed for adapters."""

from .client import (
    DEFAULT_MAX_RESPONSE_BYTES,
    HTTPSettings,
    build_http_client,
    close_on_cancel,
    read_body,
    read_json_body,
)

__all__ = [
    "HTTPSettings",
    "DEFAULT_MAX_RESPONSE_BYTES",
    "build_http_client",
    "close_on_cancel",
    "read_body",
    "read_json_body",
]
