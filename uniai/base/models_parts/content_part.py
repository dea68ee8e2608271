"""
Multimodal message content part.

A ``Part`` is a tagged union: plain text, an image referenced by URL, or an
inline base64 image with its MIME type. Only ``text`` parts are valid outside
user messages.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Literal, Optional


PartType = Literal["text", "image_url", "image_base64"]

PART_TEXT = "text"
PART_IMAGE_URL = "image_url"
PART_IMAGE_BASE64 = "image_base64"


@dataclass
class Part:
    """One unit of multimodal message content.

    Attributes:
        type: Discriminator (``"text"``, ``"image_url"`` or ``"image_base64"``).
        text: Text payload for ``text`` parts.
        url: Image location for ``image_url`` parts.
        data_base64: Base64 image data for ``image_base64`` parts.
        mime_type: MIME type for ``image_base64`` parts (adapters default it
            to ``image/png`` when missing).
    """

    type: PartType
    text: Optional[str] = None
    url: Optional[str] = None
    data_base64: Optional[str] = None
    mime_type: Optional[str] = None

    @property
    def is_text(self) -> bool:
        return self.type == PART_TEXT

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serializable dictionary without empty fields."""
        out: Dict[str, Any] = {"type": self.type}
        for key in ("text", "url", "data_base64", "mime_type"):
            val = getattr(self, key)
            if val is not None:
                out[key] = val
        return out


__all__ = ["Part", "PartType", "PART_TEXT", "PART_IMAGE_URL", "PART_IMAGE_BASE64"]
