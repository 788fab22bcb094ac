"""
Anthropic Messages API Encoder/Decoder

Decodes Anthropic Messages requests into the Intermediate Representation and
encodes IR responses and streaming events back into Anthropic format.
"""

from typing import Any, Dict, List, Optional, Union

from ..ir import (
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
from .exceptions import ValidationError


class AnthropicMessagesDecoder:
    """Decodes Anthropic Messages API format to IR."""

    def decode_request(self, payload: Dict[str, Any]) -> IRRequest:
        """Decode an Anthropic Messages request to IR."""
        ir = IRRequest(
            model=payload.get("model", ""),
            stream=bool(payload.get("stream", False)),
        )

        ir.messages = self._decode_messages(payload.get("messages") or [])

        system = payload.get("system")
        if system:
            if isinstance(system, str):
                ir.system = system
            elif isinstance(system, list):
                # System can be an array of text blocks
                ir.system = self._extract_text_from_blocks(system, separator="\n")

        ir.generation_config = self._decode_generation_config(payload)

        if payload.get("tools"):
            ir.tools = self._decode_tools(payload["tools"])

        if payload.get("tool_choice"):
            ir.tool_choice = self._decode_tool_choice(payload["tool_choice"])

        return ir

    def _decode_messages(self, messages: List[Dict[str, Any]]) -> List[IRMessage]:
        """Decode messages to IR format, one IR message per source message."""
        ir_messages = []
        for position, msg in enumerate(messages):
            role = self._map_role(msg.get("role", "user"))
            content = msg.get("content")

            if isinstance(content, str):
                ir_messages.append(
                    IRMessage(role=role, content=[IRTextBlock(text=content)], raw_text=content)
                )
                continue

            if content is not None and not isinstance(content, list):
                raise ValidationError(
                    f"messages[{position}].content",
                    "must be a string or an array of content blocks",
                    value=content,
                    expected="string or array",
                )

            ir_message = IRMessage(role=role)
            for item in content or []:
                block = self._decode_content_block(item)
                if block is not None:
                    ir_message.content.append(block)
            ir_messages.append(ir_message)

        return ir_messages

    def _decode_content_block(self, block: Dict[str, Any]) -> Optional[IRContentBlock]:
        """Decode a single content block; unknown block types are skipped."""
        if not isinstance(block, dict):
            return None
        block_type = block.get("type", "text")

        if block_type == "text":
            return IRTextBlock(text=block.get("text") or "")

        elif block_type == "image":
            source = block.get("source") or {}
            if source.get("type", "base64") == "base64":
                return IRImageBlock(
                    source_type=ImageSourceType.BASE64,
                    base64_data=source.get("data"),
                    media_type=source.get("media_type"),
                )
            return IRImageBlock(
                source_type=ImageSourceType.URL,
                url=source.get("url"),
            )

        elif block_type == "tool_use":
            tool_input = block.get("input")
            return IRToolUseBlock(
                id=block.get("id") or "",
                name=block.get("name") or "",
                input=tool_input if tool_input is not None else {},
            )

        elif block_type == "tool_result":
            return IRToolResultBlock(
                tool_use_id=block.get("tool_use_id") or "",
                content=self._decode_tool_result_content(block.get("content")),
                is_error=bool(block.get("is_error", False)),
            )

        return None

    def _decode_tool_result_content(self, content: Any) -> str:
        """Flatten tool result content to text; non-text parts are dropped."""
        if isinstance(content, str):
            return content
        if isinstance(content, list):
            return self._extract_text_from_blocks(content, separator="\n")
        return ""

    def _decode_generation_config(self, payload: Dict[str, Any]) -> IRGenerationConfig:
        """Decode generation configuration."""
        config = IRGenerationConfig()

        if payload.get("temperature") is not None:
            config.temperature = payload["temperature"]
        if payload.get("top_p") is not None:
            config.top_p = payload["top_p"]
        if payload.get("max_tokens") is not None:
            config.max_tokens = payload["max_tokens"]
        if payload.get("stop_sequences"):
            config.stop_sequences = list(payload["stop_sequences"])

        return config

    def _decode_tools(self, tools: List[Dict[str, Any]]) -> List[IRToolDeclaration]:
        """Decode tool declarations."""
        return [
            IRToolDeclaration(
                name=tool.get("name", ""),
                description=tool.get("description"),
                parameters=tool.get("input_schema") or {},
            )
            for tool in tools
        ]

    def _decode_tool_choice(self, tool_choice: Dict[str, Any]) -> IRToolChoice:
        """Decode tool choice configuration; unknown types fall back to auto."""
        choice_type = tool_choice.get("type", "auto")

        if choice_type == "none":
            return IRToolChoice(type=ToolChoiceType.NONE)
        if choice_type == "any":
            return IRToolChoice(type=ToolChoiceType.ANY)
        if choice_type == "tool" and tool_choice.get("name"):
            return IRToolChoice(type=ToolChoiceType.SPECIFIC, name=tool_choice["name"])
        return IRToolChoice(type=ToolChoiceType.AUTO)

    def _extract_text_from_blocks(self, blocks: List[Any], separator: str = "") -> str:
        """Extract text content from blocks."""
        texts = []
        for block in blocks:
            if isinstance(block, dict) and block.get("type") == "text":
                texts.append(block.get("text") or "")
        return separator.join(texts)

    def _map_role(self, role: str) -> Role:
        """Map Anthropic role to IR role."""
        return Role.ASSISTANT if role == "assistant" else Role.USER


class AnthropicMessagesEncoder:
    """Encodes IR responses and stream events to Anthropic Messages format."""

    def encode_response(self, ir: IRResponse) -> Dict[str, Any]:
        """Encode an IR response as an Anthropic message."""
        content = [self._encode_content_block(block) for block in ir.content]

        return {
            "id": f"msg_{ir.id}",
            "type": "message",
            "role": "assistant",
            "content": content,
            "model": ir.model,
            "stop_reason": self._map_stop_reason(ir.stop_reason),
            "stop_sequence": None,
            "usage": ir.usage.to_anthropic(),
        }

    def _encode_content_block(self, block: IRContentBlock) -> Dict[str, Any]:
        if isinstance(block, IRToolUseBlock):
            return {
                "type": "tool_use",
                "id": block.id,
                "name": block.name,
                "input": block.input,
            }
        return {"type": "text", "text": getattr(block, "text", "")}

    # -------------------------------------------------------------------------
    # Stream events
    # -------------------------------------------------------------------------

    def message_start(self, message_id: str, model: str, usage: IRUsage) -> StreamEvent:
        return self._format_event(
            StreamEventType.MESSAGE_START,
            {
                "message": {
                    "id": message_id,
                    "type": "message",
                    "role": "assistant",
                    "content": [],
                    "model": model,
                    "stop_reason": None,
                    "stop_sequence": None,
                    "usage": usage.to_anthropic(),
                }
            },
        )

    def text_block_start(self, index: int) -> StreamEvent:
        return self._format_event(
            StreamEventType.CONTENT_BLOCK_START,
            {"index": index, "content_block": {"type": "text", "text": ""}},
        )

    def tool_use_block_start(self, index: int, tool_id: str, name: str) -> StreamEvent:
        return self._format_event(
            StreamEventType.CONTENT_BLOCK_START,
            {
                "index": index,
                "content_block": {
                    "type": "tool_use",
                    "id": tool_id,
                    "name": name,
                    "input": {},
                },
            },
        )

    def text_delta(self, index: int, text: str) -> StreamEvent:
        return self._format_event(
            StreamEventType.CONTENT_BLOCK_DELTA,
            {"index": index, "delta": {"type": "text_delta", "text": text}},
        )

    def input_json_delta(self, index: int, partial_json: str) -> StreamEvent:
        return self._format_event(
            StreamEventType.CONTENT_BLOCK_DELTA,
            {"index": index, "delta": {"type": "input_json_delta", "partial_json": partial_json}},
        )

    def block_stop(self, index: int) -> StreamEvent:
        return self._format_event(StreamEventType.CONTENT_BLOCK_STOP, {"index": index})

    def message_delta(self, stop_reason: Optional[StopReason], usage: IRUsage) -> StreamEvent:
        return self._format_event(
            StreamEventType.MESSAGE_DELTA,
            {
                "delta": {
                    "stop_reason": self._map_stop_reason(stop_reason),
                    "stop_sequence": None,
                },
                "usage": usage.to_anthropic(),
            },
        )

    def message_stop(self) -> StreamEvent:
        return self._format_event(StreamEventType.MESSAGE_STOP, {})

    def error(self, message: str, error_type: str = "api_error") -> StreamEvent:
        return self._format_event(
            StreamEventType.ERROR,
            {"error": {"type": error_type, "message": message}},
        )

    def _format_event(self, event_type: StreamEventType, data: Dict[str, Any]) -> StreamEvent:
        """Attach the event name to its payload."""
        data["type"] = event_type.value
        return StreamEvent(event=event_type, data=data)

    def _map_stop_reason(self, reason: Optional[Union[StopReason, str]]) -> Optional[str]:
        """Map IR stop reason to Anthropic stop reason."""
        if reason is None:
            return None
        return StopReason(reason).value
