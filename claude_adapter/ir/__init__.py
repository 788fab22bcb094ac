"""
Intermediate Representation (IR) Module

Provides protocol-neutral types shared by the Anthropic and OpenAI converters.
"""

from .types import (
    ContentBlockType,
    ImageSourceType,
    IRContentBlock,
    IRGenerationConfig,
    IRImageBlock,
    IRMessage,
    IRRequest,
    IRResponse,
    IRTextBlock,
    IRToolChoice,
    IRToolDeclaration,
    IRToolResultBlock,
    IRToolUseBlock,
    IRUsage,
    Role,
    StopReason,
    StreamEvent,
    StreamEventType,
    ToolChoiceType,
)

__all__ = [
    "ContentBlockType",
    "ImageSourceType",
    "IRContentBlock",
    "IRGenerationConfig",
    "IRImageBlock",
    "IRMessage",
    "IRRequest",
    "IRResponse",
    "IRTextBlock",
    "IRToolChoice",
    "IRToolDeclaration",
    "IRToolResultBlock",
    "IRToolUseBlock",
    "IRUsage",
    "Role",
    "StopReason",
    "StreamEvent",
    "StreamEventType",
    "ToolChoiceType",
]
