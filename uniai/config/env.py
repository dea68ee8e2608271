"""uniai.config.env
=================

Environment variable mapping for vendor credentials and endpoints.

Design Notes
------------
- ``ENV_PREFIX`` maps a vendor to the prefix of its variables:
  ``<PREFIX>_API_KEY``, ``<PREFIX>_BASE_URL`` and ``<PREFIX>_MODEL``.
- Some vendors accept several names; ``ENV_ALIASES`` lists them with the
  canonical name first to establish precedence.
- Helpers never raise on unknown vendors or unset variables; callers decide
  how to proceed.
"""

from __future__ import annotations

import os
from typing import Dict, Iterable, Optional, Tuple

ENV_PREFIX: Dict[str, str] = {
    "openai": "OPENAI",
    "azure": "AZURE_OPENAI",
    "anthropic": "ANTHROPIC",
    "gemini": "GEMINI",
    "deepseek": "DEEPSEEK",
    "xai": "XAI",
    "groq": "GROQ",
}

# Vendor -> ordered tuple of acceptable API key variables (canonical first)
ENV_ALIASES: Dict[str, Tuple[str, ...]] = {
    "gemini": ("GEMINI_API_KEY", "GOOGLE_API_KEY"),
}


def is_placeholder(val: Optional[str]) -> bool:
    """Return True if ``val`` looks like a placeholder rather than a real value.

    Heuristics (case-insensitive): contains ``placeholder``, ``changeme``,
    ``your-`` or ``example``.
    """
    if val is None:
        return False
    v = str(val).strip().lower()
    return "placeholder" in v or "changeme" in v or "example" in v or v.startswith("your-")


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    if not value or is_placeholder(value):
        return None
    return value


def get_env_var_candidates(vendor: str, field: str = "API_KEY") -> Iterable[str]:
    """Yield acceptable variable names for ``vendor``/``field`` in priority order."""
    v = (vendor or "").lower()
    prefix = ENV_PREFIX.get(v)
    canonical = f"{prefix}_{field}" if prefix else None
    if canonical:
        yield canonical
    if field == "API_KEY":
        for alias in ENV_ALIASES.get(v, ()):
            if alias != canonical:
                yield alias


def resolve_env(vendor: str, field: str = "API_KEY") -> Tuple[Optional[str], Optional[str]]:
    """Return ``(value, variable_name)`` for the first usable candidate."""
    for name in get_env_var_candidates(vendor, field):
        value = _clean(os.environ.get(name))
        if value is not None:
            return value, name
    return None, None


def env_str(name: str) -> Optional[str]:
    return _clean(os.environ.get(name))


def env_bool(name: str) -> bool:
    return (os.environ.get(name) or "").strip().lower() in {"1", "true", "yes", "on"}


def env_float(name: str) -> Optional[float]:
    raw = env_str(name)
    if raw is None:
        return None
    try:
        return float(raw)
    except ValueError:
        return None


def env_int(name: str) -> Optional[int]:
    raw = env_str(name)
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError:
        return None


__all__ = [
    "ENV_PREFIX",
    "ENV_ALIASES",
    "is_placeholder",
    "get_env_var_candidates",
    "resolve_env",
    "env_str",
    "env_bool",
    "env_float",
    "env_int",
]
