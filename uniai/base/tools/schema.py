"""JSON-Schema normalizer for tool parameter schemas.

Some vendor tool-schema validators reject array-typed fields that lack an
``items`` node, while schema authors often omit it. ``normalize_schema``
enforces exactly one rule: every object node whose ``type`` is ``"array"``
(or a list containing ``"array"``) gets ``items``, defaulting to ``{}`` when
absent or null. Nothing else is validated or rewritten, so a second pass is a
no-op.
"""
from __future__ import annotations

import copy
from typing import Any, Dict, List

# Keywords whose value is a mapping of name -> subschema.
_MAP_KEYWORDS = ("properties", "patternProperties", "definitions", "$defs")
# Keywords whose value is a single subschema (or a list for legacy tuple ``items``).
_NODE_KEYWORDS = (
    "items",
    "additionalProperties",
    "contains",
    "not",
    "if",
    "then",
    "else",
    "propertyNames",
)
# Keywords whose value is a list of subschemas.
_LIST_KEYWORDS = ("allOf", "anyOf", "oneOf", "prefixItems")


def _includes_array_type(value: Any) -> bool:
    if isinstance(value, str):
        return value == "array"
    if isinstance(value, list):
        return any(isinstance(v, str) and v == "array" for v in value)
    return False


def _visit(node: Any) -> None:
    if isinstance(node, list):
        for item in node:
            _visit(item)
        return
    if not isinstance(node, dict):
        return
    if _includes_array_type(node.get("type")) and node.get("items") is None:
        node["items"] = {}
    for key in _MAP_KEYWORDS:
        children = node.get(key)
        if isinstance(children, dict):
            for child in children.values():
                _visit(child)
    for key in _NODE_KEYWORDS:
        if key in node:
            _visit(node[key])
    for key in _LIST_KEYWORDS:
        children = node.get(key)
        if isinstance(children, list):
            for child in children:
                _visit(child)


def normalize_schema(schema: Any) -> Any:
    """Normalize ``schema`` in place and return it for convenience.

    Parameters:
        schema: A JSON-Schema-like tree (mappings, lists and scalars). ``None``
            and scalars are returned untouched.

    Returns:
        The same object, with ``items`` added to every array-typed node.
    """
    _visit(schema)
    return schema


def normalized_copy(schema: Any) -> Any:
    """Return a normalized deep copy, leaving ``schema`` untouched.

    Adapters use this so the caller's request is never mutated.
    """
    if schema is None:
        return None
    return normalize_schema(copy.deepcopy(schema))


def object_schema_or_default(schema: Any) -> Dict[str, Any]:
    """Return a normalized copy of ``schema`` or an empty object schema."""
    if isinstance(schema, dict) and schema:
        return normalized_copy(schema)
    return {"type": "object", "properties": {}}


__all__: List[str] = ["normalize_schema", "normalized_copy", "object_schema_or_default"]
