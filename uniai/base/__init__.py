"""
Vendor-neutral core of the chat abstraction.

Exports the IR, the error taxonomy, cancellation and the dispatcher. Adapter
plumbing (``provider_base``, ``factory``) depends on ``uniai.config`` and is
imported from its own module to keep package initialization acyclic.
"""

from .cancellation import CancellationToken, check_cancelled
from .dispatcher import Dispatcher
from .errors import ErrorCode, UniAIError
from .models import Message, Options, Part, Request, Result, Tool, ToolCall, ToolChoice, Usage
from .request_builder import build_request, validate_request

__all__ = [
    "CancellationToken",
    "check_cancelled",
    "Dispatcher",
    "ErrorCode",
    "UniAIError",
    "Message",
    "Options",
    "Part",
    "Request",
    "Result",
    "Tool",
    "ToolCall",
    "ToolChoice",
    "Usage",
    "build_request",
    "validate_request",
]
