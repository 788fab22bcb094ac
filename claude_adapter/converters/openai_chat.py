"""
OpenAI Chat Completions Encoder/Decoder

Encodes IR requests as OpenAI Chat Completions payloads (native tool calls or
XML-in-text tool calls) and decodes OpenAI completions into IR responses.
"""

import json
import logging
import random
from typing import Any, Dict, List, Optional, Union

from ..ir import (
    ImageSourceType,
    IRImageBlock,
    IRMessage,
    IRRequest,
    IRResponse,
    IRTextBlock,
    IRToolResultBlock,
    IRToolUseBlock,
    IRUsage,
    Role,
    StopReason,
)
from ..schemas import CallingMode, OpenAIChatMessage, OpenAIChatRequest, Protocol
from .exceptions import ConversionError
from .prefill import PrefillPolicy
from .reconciler import ToolIdReconciler
from .tool_code import ToolCodeScanner
from .tools import encode_tool_choice, encode_tools, generate_tool_use_id
from .xml_prompt import generate_xml_tool_instructions, has_xml_tool_instructions

logger = logging.getLogger(__name__)

_FINISH_REASON_MAP = {
    "stop": StopReason.END_TURN,
    "length": StopReason.MAX_TOKENS,
    "tool_calls": StopReason.TOOL_USE,
    "content_filter": StopReason.END_TURN,
}


def payload_to_dict(payload: Any) -> Dict[str, Any]:
    """
    Normalise an OpenAI payload to a plain dict.

    Accepts dicts as well as openai SDK models (ChatCompletion,
    ChatCompletionChunk).
    """
    if isinstance(payload, dict):
        return payload
    model_dump = getattr(payload, "model_dump", None)
    if callable(model_dump):
        return model_dump()
    raise ConversionError(
        f"Unsupported OpenAI payload type: {type(payload).__name__}",
        source_protocol=Protocol.OPENAI_CHAT.value,
        target_protocol=Protocol.ANTHROPIC_MESSAGES.value,
    )


def parse_tool_arguments(arguments: Optional[str]) -> Dict[str, Any]:
    """
    Parse a JSON arguments string into a tool input object.

    Empty arguments become {}; anything that is not a JSON object is kept as
    {"raw": arguments}.
    """
    if arguments is None or not arguments.strip():
        return {}
    try:
        parsed = json.loads(arguments)
    except json.JSONDecodeError:
        logger.warning("Tool arguments are not valid JSON, wrapping raw text")
        return {"raw": arguments}
    if not isinstance(parsed, dict):
        logger.warning("Tool arguments are not a JSON object, wrapping raw text")
        return {"raw": arguments}
    return parsed


class OpenAIChatEncoder:
    """Encodes IR requests to OpenAI Chat Completions format."""

    def __init__(
        self,
        prefill_policy: Optional[PrefillPolicy] = None,
        max_tokens_rewrite_from: int = 1,
        max_tokens_rewrite_to: int = 32,
    ):
        self.prefill_policy = prefill_policy or PrefillPolicy()
        self.max_tokens_rewrite_from = max_tokens_rewrite_from
        self.max_tokens_rewrite_to = max_tokens_rewrite_to

    def encode_request(
        self,
        ir: IRRequest,
        reconciler: ToolIdReconciler,
        target_model: Optional[str] = None,
        mode: CallingMode = CallingMode.NATIVE,
    ) -> OpenAIChatRequest:
        """
        Encode an IR request as an OpenAI Chat request.

        Tool ids in `ir` are rewritten in place through `reconciler`; the IR
        is a private copy of the client payload.
        """
        mode = CallingMode(mode)
        self._reconcile_tool_ids(ir.messages, reconciler)

        messages: List[OpenAIChatMessage] = []
        system = self._encode_system(ir, mode)
        if system is not None:
            messages.append({"role": "system", "content": system})

        for msg in ir.messages:
            messages.extend(self._encode_message(msg, mode))

        result: OpenAIChatRequest = {
            "model": target_model or ir.model,
            "messages": messages,
        }

        config = ir.generation_config
        if config.max_tokens is not None:
            result["max_tokens"] = self._encode_max_tokens(config.max_tokens)
        if mode == CallingMode.XML:
            # The markup parser is not robust to high-entropy output
            result["temperature"] = 0
        elif config.temperature is not None:
            result["temperature"] = config.temperature
        if config.top_p is not None:
            result["top_p"] = config.top_p
        if config.stop_sequences:
            result["stop"] = config.stop_sequences
        result["stream"] = ir.stream

        if mode == CallingMode.NATIVE and ir.tools:
            result["tools"] = encode_tools(ir.tools)
            if ir.tool_choice is not None:
                result["tool_choice"] = encode_tool_choice(ir.tool_choice)

        return result

    def _reconcile_tool_ids(
        self, messages: List[IRMessage], reconciler: ToolIdReconciler
    ) -> None:
        # Every tool_use is registered before any tool_result is resolved
        for msg in messages:
            for block in msg.get_tool_calls():
                block.id = reconciler.register_tool_use(block.id)
        for msg in messages:
            for block in msg.get_tool_results():
                block.tool_use_id = reconciler.resolve_tool_result(block.tool_use_id)

    def _encode_system(self, ir: IRRequest, mode: CallingMode) -> Optional[str]:
        system = ir.system or None
        if mode != CallingMode.XML or not ir.tools:
            return system
        if system and has_xml_tool_instructions(system):
            return system
        instructions = generate_xml_tool_instructions(ir.tools)
        return f"{system}\n{instructions}" if system else instructions

    def _encode_max_tokens(self, max_tokens: int) -> int:
        if max_tokens == self.max_tokens_rewrite_from:
            return self.max_tokens_rewrite_to
        return max_tokens

    def _encode_message(self, msg: IRMessage, mode: CallingMode) -> List[OpenAIChatMessage]:
        """Expand one IR message into zero or more OpenAI messages."""
        if msg.role == Role.ASSISTANT:
            return self._encode_assistant_message(msg, mode)
        if msg.raw_text is not None:
            return [{"role": "user", "content": msg.raw_text}]
        if mode == CallingMode.XML:
            return self._encode_xml_user_message(msg)
        return self._encode_native_user_message(msg)

    def _encode_native_user_message(self, msg: IRMessage) -> List[OpenAIChatMessage]:
        result: List[OpenAIChatMessage] = []
        parts: List[Dict[str, Any]] = []

        for block in msg.content:
            if isinstance(block, IRToolResultBlock):
                result.append(
                    {
                        "role": "tool",
                        "tool_call_id": block.tool_use_id,
                        "content": self._tool_result_text(block),
                    }
                )
            elif isinstance(block, IRTextBlock):
                parts.append({"type": "text", "text": block.text})
            elif isinstance(block, IRImageBlock):
                parts.append(self._encode_image_block(block))

        if parts:
            if len(parts) == 1 and parts[0]["type"] == "text":
                result.append({"role": "user", "content": parts[0]["text"]})
            else:
                result.append({"role": "user", "content": parts})
        return result

    def _encode_xml_user_message(self, msg: IRMessage) -> List[OpenAIChatMessage]:
        texts = [b.text for b in msg.content if isinstance(b, IRTextBlock) and b.text]
        outputs = [
            f"<tool_output>\n{self._tool_result_text(b)}\n</tool_output>"
            for b in msg.get_tool_results()
        ]
        sections = []
        if texts:
            sections.append("\n".join(texts))
        sections.extend(outputs)
        if not sections:
            return []
        return [{"role": "user", "content": "\n\n".join(sections)}]

    def _encode_assistant_message(
        self, msg: IRMessage, mode: CallingMode
    ) -> List[OpenAIChatMessage]:
        if msg.raw_text is not None:
            if self.prefill_policy.is_prefill(msg.raw_text):
                logger.debug("Dropping assistant prefill message")
                return []
            return [{"role": "assistant", "content": msg.raw_text}]

        text = msg.get_text_content()
        tool_calls = msg.get_tool_calls()
        if not tool_calls and self.prefill_policy.is_prefill(text):
            logger.debug("Dropping assistant prefill message")
            return []

        if mode == CallingMode.XML:
            segments = [text] if text else []
            segments.extend(
                f'<tool_code name="{block.name}">{json.dumps(block.input)}</tool_code>'
                for block in tool_calls
            )
            return [{"role": "assistant", "content": "\n".join(segments)}]

        result: OpenAIChatMessage = {"role": "assistant", "content": text or None}
        if tool_calls:
            result["tool_calls"] = [self._encode_tool_call(block) for block in tool_calls]
        return [result]

    def _encode_tool_call(self, block: IRToolUseBlock) -> Dict[str, Any]:
        return {
            "id": block.id,
            "type": "function",
            "function": {
                "name": block.name,
                "arguments": json.dumps(block.input),
            },
        }

    def _encode_image_block(self, block: IRImageBlock) -> Dict[str, Any]:
        if block.source_type == ImageSourceType.BASE64:
            url = f"data:{block.media_type or 'image/png'};base64,{block.base64_data or ''}"
        else:
            url = block.url or ""
        return {"type": "image_url", "image_url": {"url": url}}

    @staticmethod
    def _tool_result_text(block: IRToolResultBlock) -> str:
        if block.is_error:
            return f"Error: {block.content}"
        return block.content


class OpenAIChatDecoder:
    """Decodes OpenAI Chat Completions responses to IR."""

    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng or random.SystemRandom()

    def decode_response(
        self,
        payload: Union[Dict[str, Any], Any],
        mode: CallingMode = CallingMode.NATIVE,
    ) -> IRResponse:
        """Decode an OpenAI Chat response to IR (first choice only)."""
        payload = payload_to_dict(payload)
        mode = CallingMode(mode)
        ir = IRResponse(
            id=payload.get("id") or "",
            model=payload.get("model") or "",
        )

        choices = payload.get("choices") or []
        if choices:
            choice = choices[0]
            message = choice.get("message") or {}
            content = message.get("content")

            if mode == CallingMode.XML:
                self._decode_xml_content(content or "", ir)
            elif content:
                ir.content.append(IRTextBlock(text=content))

            for tc in message.get("tool_calls") or []:
                function = tc.get("function") or {}
                ir.content.append(
                    IRToolUseBlock(
                        id=tc.get("id") or generate_tool_use_id(self._rng),
                        name=function.get("name") or "",
                        input=parse_tool_arguments(function.get("arguments")),
                    )
                )

            ir.stop_reason = self._map_finish_reason(choice.get("finish_reason"))
            if (
                mode == CallingMode.XML
                and ir.get_tool_calls()
                and ir.stop_reason == StopReason.END_TURN
            ):
                ir.stop_reason = StopReason.TOOL_USE

        ir.usage = decode_usage(payload.get("usage"))
        return ir

    def _decode_xml_content(self, content: str, ir: IRResponse) -> None:
        scanner = ToolCodeScanner()
        for match in scanner.feed(content):
            if match.text_before:
                ir.content.append(IRTextBlock(text=match.text_before))
            ir.content.append(
                IRToolUseBlock(
                    id=generate_tool_use_id(self._rng),
                    name=match.name,
                    input=parse_tool_arguments(match.arguments),
                )
            )
        remainder = scanner.finish()
        if remainder:
            ir.content.append(IRTextBlock(text=remainder))

    def _map_finish_reason(self, reason: Optional[str]) -> Optional[StopReason]:
        """Map OpenAI finish reason to IR stop reason."""
        if reason is None:
            return None
        return _FINISH_REASON_MAP.get(reason, StopReason.END_TURN)


def decode_usage(usage: Optional[Dict[str, Any]]) -> IRUsage:
    """Decode an OpenAI usage object; missing counters are zero."""
    if not usage:
        return IRUsage()
    prompt_details = usage.get("prompt_tokens_details") or {}
    return IRUsage(
        input_tokens=usage.get("prompt_tokens") or 0,
        output_tokens=usage.get("completion_tokens") or 0,
        cache_read_tokens=prompt_details.get("cached_tokens") or 0,
    )
