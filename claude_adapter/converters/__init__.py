"""
Protocol Converters Module

Converts Anthropic Messages requests into OpenAI Chat Completions requests,
and OpenAI Chat Completions responses back into Anthropic messages.
"""

import random
from typing import Any, Dict, Optional

from ..schemas import CallingMode
from .anthropic_messages import AnthropicMessagesDecoder, AnthropicMessagesEncoder
from .exceptions import ConversionError, StreamConversionError, ValidationError
from .openai_chat import (
    OpenAIChatDecoder,
    OpenAIChatEncoder,
    decode_usage,
    parse_tool_arguments,
    payload_to_dict,
)
from .prefill import PrefillPolicy
from .reconciler import ToolIdReconciler
from .tool_code import ToolCodeMatch, ToolCodeScanner
from .tools import generate_tool_use_id
from .validation import ValidationResult, format_validation_errors, validate_messages_request
from .xml_prompt import generate_xml_tool_instructions, has_xml_tool_instructions


def anthropic_messages_to_openai_chat_request(
    payload: Dict[str, Any],
    *,
    target_model: Optional[str] = None,
    mode: CallingMode = CallingMode.NATIVE,
    reconciler: Optional[ToolIdReconciler] = None,
    encoder: Optional[OpenAIChatEncoder] = None,
) -> Dict[str, Any]:
    """
    Convert an Anthropic Messages request to an OpenAI Chat Completions request.

    Args:
        payload: Anthropic request body (left untouched)
        target_model: Backend model name; defaults to the requested model
        mode: Tool calling convention
        reconciler: Tool id table for this request; a fresh one by default
        encoder: Encoder carrying prefill and max_tokens policy

    Returns:
        OpenAI Chat request body
    """
    ir = AnthropicMessagesDecoder().decode_request(payload)
    encoder = encoder or OpenAIChatEncoder()
    return encoder.encode_request(
        ir,
        reconciler or ToolIdReconciler(),
        target_model=target_model,
        mode=mode,
    )


def openai_chat_to_anthropic_messages_response(
    payload: Any,
    original_model: str,
    *,
    mode: CallingMode = CallingMode.NATIVE,
    rng: Optional[random.Random] = None,
) -> Dict[str, Any]:
    """
    Convert an OpenAI Chat Completions response to an Anthropic message.

    The message reports `original_model`, the model the client asked for.
    """
    ir = OpenAIChatDecoder(rng=rng).decode_response(payload, mode=mode)
    ir.model = original_model
    return AnthropicMessagesEncoder().encode_response(ir)


__all__ = [
    "AnthropicMessagesDecoder",
    "AnthropicMessagesEncoder",
    "ConversionError",
    "OpenAIChatDecoder",
    "OpenAIChatEncoder",
    "PrefillPolicy",
    "StreamConversionError",
    "ToolCodeMatch",
    "ToolCodeScanner",
    "ToolIdReconciler",
    "ValidationError",
    "ValidationResult",
    "anthropic_messages_to_openai_chat_request",
    "decode_usage",
    "format_validation_errors",
    "generate_tool_use_id",
    "generate_xml_tool_instructions",
    "has_xml_tool_instructions",
    "openai_chat_to_anthropic_messages_response",
    "parse_tool_arguments",
    "payload_to_dict",
    "validate_messages_request",
]
