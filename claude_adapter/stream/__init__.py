"""
Stream Re-emitters Module

Turns OpenAI Chat chunk streams into Anthropic Messages stream events and
wire-encodes them as SSE.
"""

from .base import ChunkView, StreamReEmitter
from .id_registry import ToolIdRegistry, get_tool_id_registry
from .native import NativeStreamReEmitter
from .sse import EventSink, SSEFormatter, drain_to_sink, encode_sse
from .xml import XmlStreamReEmitter

__all__ = [
    "ChunkView",
    "EventSink",
    "NativeStreamReEmitter",
    "SSEFormatter",
    "StreamReEmitter",
    "ToolIdRegistry",
    "XmlStreamReEmitter",
    "drain_to_sink",
    "encode_sse",
    "get_tool_id_registry",
]
