"""Tool helpers shared by adapters and the emulation engine.

- ``schema``: JSON-Schema normalizer for tool parameters.
- ``call_id``: thought-signature codec for opaque tool-call identifiers.
"""

from .call_id import (
    THOUGHT_SIGNATURE_MARKER,
    encode_tool_call_id,
    resolve_thought_signature,
    split_tool_call_id,
)
from .schema import normalize_schema, normalized_copy, object_schema_or_default

__all__ = [
    "normalize_schema",
    "normalized_copy",
    "object_schema_or_default",
    "THOUGHT_SIGNATURE_MARKER",
    "encode_tool_call_id",
    "split_tool_call_id",
    "resolve_thought_signature",
]
