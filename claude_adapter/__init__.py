"""
Claude Adapter

Lets Anthropic Messages API clients talk to OpenAI Chat Completions backends.
Converts requests and responses in both buffered and streaming (SSE) modes,
with native function calling or an XML tool-calling convention for backends
that have none.
"""

from .config import Settings, get_settings
from .converters import (
    PrefillPolicy,
    ToolIdReconciler,
    anthropic_messages_to_openai_chat_request,
    generate_xml_tool_instructions,
    has_xml_tool_instructions,
    openai_chat_to_anthropic_messages_response,
    validate_messages_request,
)
from .errors import AppError, create_error_response
from .ir import StreamEvent
from .logging_config import setup_logging
from .schemas import CallingMode, Protocol
from .service import ChatBackend, MessagesService, OpenAIChatBackend
from .stream import (
    NativeStreamReEmitter,
    SSEFormatter,
    ToolIdRegistry,
    XmlStreamReEmitter,
    encode_sse,
)

__version__ = "0.1.0"
__all__ = [
    # Conversion
    "anthropic_messages_to_openai_chat_request",
    "openai_chat_to_anthropic_messages_response",
    "validate_messages_request",
    "ToolIdReconciler",
    "PrefillPolicy",
    "generate_xml_tool_instructions",
    "has_xml_tool_instructions",
    # Streaming
    "NativeStreamReEmitter",
    "XmlStreamReEmitter",
    "ToolIdRegistry",
    "StreamEvent",
    "SSEFormatter",
    "encode_sse",
    # Service
    "ChatBackend",
    "MessagesService",
    "OpenAIChatBackend",
    # Ambient
    "AppError",
    "create_error_response",
    "Settings",
    "get_settings",
    "setup_logging",
    # Enums
    "CallingMode",
    "Protocol",
]
