"""uniai package

One chat-completion API over several LLM vendors.

Purpose:
    Callers build a vendor-neutral request with functional options and get a
    normalized :class:`Result` back, whichever adapter served it. Streaming,
    tool calling and tool-calling emulation behave the same across vendors.

Public API (re-exported):
    - Version: ``__version__``
    - Client: :class:`Client`, :class:`ClientConfig`
    - Request builders: ``with_*`` options plus message, part, tool and
      tool-choice helpers
    - IR types: :class:`Request`, :class:`Result`, :class:`Message`,
      :class:`ToolCall`, :class:`StreamEvent`, :class:`EmulationMode`
    - Errors: :class:`UniAIError` and its taxonomy
"""

from .base.cancellation import CancellationToken
from .base.errors import (
    Cancelled,
    ConfigError,
    EmulationParseError,
    EmulationPolicyViolation,
    ErrorCode,
    ProviderError,
    StreamCancelled,
    UniAIError,
    UnknownToolError,
    UnsupportedCapability,
    ValidationError,
)
from .base.models import (
    WARNING_TOOL_CALLS_EMULATED,
    EmulationMode,
    Message,
    Options,
    Part,
    Request,
    Result,
    Tool,
    ToolCall,
    ToolCallFunction,
    ToolChoice,
    Usage,
)
from .base.request_builder import (
    assistant,
    assistant_tool_calls,
    build_request,
    function_tool,
    image_base64_part,
    image_url_part,
    system,
    text_part,
    tool_choice_auto,
    tool_choice_function,
    tool_choice_none,
    tool_choice_required,
    tool_result,
    user,
    user_parts,
    with_anthropic_options,
    with_azure_options,
    with_debug_sink,
    with_emulation_mode,
    with_frequency_penalty,
    with_gemini_options,
    with_max_tokens,
    with_message,
    with_messages,
    with_model,
    with_on_stream,
    with_openai_options,
    with_presence_penalty,
    with_provider,
    with_stop,
    with_temperature,
    with_tool_choice,
    with_tools,
    with_top_p,
    with_user,
)
from .base.streaming import StreamEvent, ToolCallDelta
from .config import ClientConfig, ClientConfigView
from .client import Client

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "Client",
    "ClientConfig",
    "ClientConfigView",
    "CancellationToken",
    # errors
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
    # IR
    "EmulationMode",
    "Message",
    "Options",
    "Part",
    "Request",
    "Result",
    "Tool",
    "ToolCall",
    "ToolCallFunction",
    "ToolChoice",
    "Usage",
    "StreamEvent",
    "ToolCallDelta",
    "WARNING_TOOL_CALLS_EMULATED",
    # builders
    "build_request",
    "with_provider",
    "with_model",
    "with_messages",
    "with_message",
    "with_temperature",
    "with_top_p",
    "with_max_tokens",
    "with_stop",
    "with_presence_penalty",
    "with_frequency_penalty",
    "with_user",
    "with_tools",
    "with_tool_choice",
    "with_emulation_mode",
    "with_on_stream",
    "with_debug_sink",
    "with_openai_options",
    "with_anthropic_options",
    "with_gemini_options",
    "with_azure_options",
    "system",
    "user",
    "user_parts",
    "assistant",
    "assistant_tool_calls",
    "tool_result",
    "text_part",
    "image_url_part",
    "image_base64_part",
    "function_tool",
    "tool_choice_auto",
    "tool_choice_none",
    "tool_choice_required",
    "tool_choice_function",
]
