"""
Intermediate Representation Type Definitions

Protocol-neutral shapes that Anthropic Messages payloads are decoded into
before being encoded as OpenAI Chat payloads, and back again for responses.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union


class Role(str, Enum):
    """Conversation roles; system text is carried separately on IRRequest."""
    USER = "user"
    ASSISTANT = "assistant"


class ContentBlockType(str, Enum):
    """Content block kinds."""
    TEXT = "text"
    IMAGE = "image"
    TOOL_USE = "tool_use"
    TOOL_RESULT = "tool_result"


class ImageSourceType(str, Enum):
    """Where image bytes come from."""
    URL = "url"
    BASE64 = "base64"


class ToolChoiceType(str, Enum):
    """How the model may pick tools."""
    AUTO = "auto"
    NONE = "none"
    ANY = "any"  # "required" in OpenAI
    SPECIFIC = "specific"  # one named tool


class StopReason(str, Enum):
    """Anthropic stop reasons reachable from an OpenAI finish_reason."""
    END_TURN = "end_turn"
    MAX_TOKENS = "max_tokens"
    STOP_SEQUENCE = "stop_sequence"
    TOOL_USE = "tool_use"


@dataclass
class IRTextBlock:
    """Plain text."""
    type: ContentBlockType = field(default=ContentBlockType.TEXT, init=False)
    text: str = ""


@dataclass
class IRImageBlock:
    """An image, inline (base64) or by URL."""
    type: ContentBlockType = field(default=ContentBlockType.IMAGE, init=False)
    source_type: ImageSourceType = ImageSourceType.URL
    url: Optional[str] = None
    base64_data: Optional[str] = None
    media_type: Optional[str] = None


@dataclass
class IRToolUseBlock:
    """A tool invocation by the assistant."""
    type: ContentBlockType = field(default=ContentBlockType.TOOL_USE, init=False)
    id: str = ""
    name: str = ""
    input: Dict[str, Any] = field(default_factory=dict)


@dataclass
class IRToolResultBlock:
    """The output of a tool invocation, flattened to text."""
    type: ContentBlockType = field(default=ContentBlockType.TOOL_RESULT, init=False)
    tool_use_id: str = ""
    content: str = ""
    is_error: bool = False


IRContentBlock = Union[
    IRTextBlock,
    IRImageBlock,
    IRToolUseBlock,
    IRToolResultBlock,
]


@dataclass
class IRMessage:
    """
    Unified message representation.

    `raw_text` is set when the source message carried plain string content,
    so encoders can tell "hello" apart from [{"type": "text", "text": "hello"}].
    """
    role: Role
    content: List[IRContentBlock] = field(default_factory=list)
    raw_text: Optional[str] = None

    def get_text_content(self) -> str:
        """Extract text content from all text blocks."""
        texts = []
        for block in self.content:
            if isinstance(block, IRTextBlock):
                texts.append(block.text)
        return "".join(texts)

    def get_tool_calls(self) -> List[IRToolUseBlock]:
        """Extract all tool use blocks."""
        return [b for b in self.content if isinstance(b, IRToolUseBlock)]

    def get_tool_results(self) -> List[IRToolResultBlock]:
        """Extract all tool result blocks."""
        return [b for b in self.content if isinstance(b, IRToolResultBlock)]


@dataclass
class IRToolDeclaration:
    """A tool the model may call; `parameters` is its JSON Schema."""
    name: str
    description: Optional[str] = None
    parameters: Dict[str, Any] = field(default_factory=dict)


@dataclass
class IRToolChoice:
    """Tool selection constraint."""
    type: ToolChoiceType = ToolChoiceType.AUTO
    name: Optional[str] = None  # set for SPECIFIC


@dataclass
class IRUsage:
    """Token counts reported by the backend."""
    input_tokens: int = 0
    output_tokens: int = 0
    cache_read_tokens: int = 0

    def to_anthropic(self) -> Dict[str, int]:
        usage = {
            "input_tokens": self.input_tokens,
            "output_tokens": self.output_tokens,
        }
        if self.cache_read_tokens:
            usage["cache_read_input_tokens"] = self.cache_read_tokens
        return usage


@dataclass
class IRGenerationConfig:
    """Sampling and length limits."""
    temperature: Optional[float] = None
    top_p: Optional[float] = None
    max_tokens: Optional[int] = None
    stop_sequences: Optional[List[str]] = None


@dataclass
class IRRequest:
    """
    A client request.

    Decoded from an Anthropic Messages request; the OpenAI Chat encoder
    builds the backend payload from it.
    """
    model: str
    messages: List[IRMessage] = field(default_factory=list)
    system: Optional[str] = None

    generation_config: IRGenerationConfig = field(default_factory=IRGenerationConfig)

    tools: List[IRToolDeclaration] = field(default_factory=list)
    tool_choice: Optional[IRToolChoice] = None

    stream: bool = False


@dataclass
class IRResponse:
    """
    A backend reply.

    Decoded from an OpenAI Chat completion; the Anthropic Messages encoder
    builds the client-facing message from it.
    """
    id: str
    model: str
    content: List[IRContentBlock] = field(default_factory=list)
    stop_reason: Optional[StopReason] = None
    usage: IRUsage = field(default_factory=IRUsage)

    def get_tool_calls(self) -> List[IRToolUseBlock]:
        """Extract all tool use blocks."""
        return [b for b in self.content if isinstance(b, IRToolUseBlock)]


class StreamEventType(str, Enum):
    """Anthropic Messages streaming event names."""
    MESSAGE_START = "message_start"
    MESSAGE_DELTA = "message_delta"
    MESSAGE_STOP = "message_stop"
    CONTENT_BLOCK_START = "content_block_start"
    CONTENT_BLOCK_DELTA = "content_block_delta"
    CONTENT_BLOCK_STOP = "content_block_stop"
    ERROR = "error"


@dataclass
class StreamEvent:
    """
    One Anthropic streaming event as an (event name, JSON payload) pair.

    The payload always repeats the event name under "type".
    """
    event: StreamEventType
    data: Dict[str, Any] = field(default_factory=dict)

    @property
    def index(self) -> Optional[int]:
        return self.data.get("index")
