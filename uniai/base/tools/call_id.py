"""Tool-call identifier codec for vendor continuation state.

Gemini-class providers hand back an opaque "thought signature" with every
function call and require it to be replayed on the next turn. Callers that
round-trip only ``id``/``name``/``arguments`` would drop it, so adapters fold
the signature into the identifier itself::

    <baseID>|ts:<base64url(signature), unpadded>

Decoding splits on the *last* marker. Anything that does not decode cleanly
yields ``(id, "")`` so the caller can fail closed with
``resolve_thought_signature``.
"""
from __future__ import annotations

import base64
import binascii
from typing import Optional, Tuple

from ..errors import ValidationError
from ..models import ToolCall

THOUGHT_SIGNATURE_MARKER = "|ts:"


def _b64url_encode(value: str) -> str:
    return base64.urlsafe_b64encode(value.encode("utf-8")).decode("ascii").rstrip("=")


def _b64url_decode(value: str) -> str:
    padded = value + "=" * (-len(value) % 4)
    raw = base64.b64decode(padded.encode("ascii"), altchars=b"-_", validate=True)
    return raw.decode("utf-8")


def encode_tool_call_id(call_id: str, signature: Optional[str]) -> str:
    """Embed ``signature`` into ``call_id``.

    Both values are kept verbatim so splitting the result gives them back;
    when either is blank the id is returned unchanged.
    """
    call_id = call_id or ""
    if not call_id.strip() or not (signature or "").strip():
        return call_id
    return f"{call_id}{THOUGHT_SIGNATURE_MARKER}{_b64url_encode(signature)}"


def split_tool_call_id(call_id: str) -> Tuple[str, str]:
    """Return ``(base_id, signature)``; the signature is ``""`` when absent or undecodable."""
    call_id = call_id or ""
    idx = call_id.rfind(THOUGHT_SIGNATURE_MARKER)
    if idx <= 0:
        return call_id, ""
    encoded = call_id[idx + len(THOUGHT_SIGNATURE_MARKER):]
    if not encoded:
        return call_id, ""
    try:
        signature = _b64url_decode(encoded)
    except (binascii.Error, ValueError):
        return call_id, ""
    base = call_id[:idx]
    if not base.strip() or not signature:
        return call_id, ""
    return base, signature


def resolve_thought_signature(
    call: ToolCall,
    *,
    provider: Optional[str] = None,
    model: Optional[str] = None,
) -> Tuple[str, str]:
    """Return ``(base_id, signature)`` for a replayed assistant tool call.

    The explicit ``thought_signature`` field wins; otherwise the id is decoded.

    Raises:
        ValidationError: When neither source yields a signature. The message
            names the tool and id so the caller can fix the replay.
    """
    base, decoded = split_tool_call_id(call.id)
    signature = (call.thought_signature or "").strip() or decoded
    if not signature:
        raise ValidationError(
            message=(
                f'assistant tool call "{call.function.name}" (id="{call.id}") is missing '
                "thought_signature; replay the previous turn's tool calls verbatim when "
                "sending tool results"
            ),
            provider=provider,
            model=model,
            stage="encode",
        )
    return base, signature


__all__ = [
    "THOUGHT_SIGNATURE_MARKER",
    "encode_tool_call_id",
    "split_tool_call_id",
    "resolve_thought_signature",
]
