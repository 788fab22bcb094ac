"""
Protocol Schemas Module

Defines TypedDict schemas for the Anthropic Messages and OpenAI Chat payloads
the adapter reads and writes.
"""

from enum import Enum
from typing import Any, Dict, List, Literal, Optional, TypedDict, Union


class Protocol(str, Enum):
    """Supported API protocols."""
    OPENAI_CHAT = "openai_chat"
    ANTHROPIC_MESSAGES = "anthropic_messages"


class CallingMode(str, Enum):
    """How tool calls travel to and from the backend."""
    NATIVE = "native"  # OpenAI tools / tool_calls fields
    XML = "xml"  # <tool_code> markup embedded in plain text


# =============================================================================
# OpenAI Chat Completions Types
# =============================================================================

class OpenAIChatFunctionDef(TypedDict, total=False):
    """OpenAI function definition within a tool."""
    name: str
    description: str
    parameters: Dict[str, Any]


class OpenAIChatTool(TypedDict):
    """OpenAI Chat tool definition."""
    type: Literal["function"]
    function: OpenAIChatFunctionDef


class OpenAIChatFunctionCall(TypedDict):
    """Function call in a tool call."""
    name: str
    arguments: str  # JSON string


class OpenAIChatToolCall(TypedDict):
    """Tool call from assistant."""
    id: str
    type: Literal["function"]
    function: OpenAIChatFunctionCall


class OpenAIChatMessage(TypedDict, total=False):
    """OpenAI Chat message."""
    role: Literal["system", "user", "assistant", "tool"]
    content: Optional[Union[str, List[Dict[str, Any]]]]
    tool_calls: List[OpenAIChatToolCall]
    tool_call_id: str


OpenAIChatToolChoice = Union[
    Literal["none", "auto", "required"],
    Dict[str, Any],
]


class OpenAIChatRequest(TypedDict, total=False):
    """OpenAI Chat Completions request."""
    model: str
    messages: List[OpenAIChatMessage]
    max_tokens: int
    temperature: float
    top_p: float
    stop: List[str]
    stream: bool
    tools: List[OpenAIChatTool]
    tool_choice: OpenAIChatToolChoice


# =============================================================================
# Anthropic Messages Types
# =============================================================================

class AnthropicToolDefinition(TypedDict, total=False):
    """Anthropic tool definition."""
    name: str
    description: str
    input_schema: Dict[str, Any]


class AnthropicMessage(TypedDict):
    """Anthropic message."""
    role: Literal["user", "assistant"]
    content: Union[str, List[Dict[str, Any]]]


class AnthropicMessagesRequest(TypedDict, total=False):
    """Anthropic Messages request."""
    model: str
    messages: List[AnthropicMessage]
    system: Union[str, List[Dict[str, Any]]]
    max_tokens: int
    temperature: float
    top_p: float
    top_k: int
    stop_sequences: List[str]
    stream: bool
    tools: List[AnthropicToolDefinition]
    tool_choice: Dict[str, Any]
    metadata: Dict[str, Any]


class AnthropicUsage(TypedDict, total=False):
    """Anthropic usage block."""
    input_tokens: int
    output_tokens: int
    cache_read_input_tokens: int


class AnthropicMessagesResponse(TypedDict):
    """Anthropic Messages response."""
    id: str
    type: Literal["message"]
    role: Literal["assistant"]
    content: List[Dict[str, Any]]
    model: str
    stop_reason: Optional[str]
    stop_sequence: Optional[str]
    usage: AnthropicUsage
