"""
Unit Tests for OpenAI -> Anthropic Response Conversion
"""

import pytest
from openai.types.chat import ChatCompletion

from claude_adapter.converters import (
    ConversionError,
    openai_chat_to_anthropic_messages_response,
    parse_tool_arguments,
)
from claude_adapter.schemas import CallingMode
from tests.fixtures import (
    OPENAI_CHAT_SIMPLE_RESPONSE,
    OPENAI_CHAT_TOOL_CALL_RESPONSE,
    OPENAI_CHAT_XML_RESPONSE,
)


def _response(finish_reason, content="ok"):
    return {
        "id": "chatcmpl-x",
        "model": "gpt-4o",
        "choices": [
            {"index": 0, "message": {"role": "assistant", "content": content}, "finish_reason": finish_reason}
        ],
    }


class TestNativeResponse:
    """Tests for native-mode response conversion."""

    def test_simple_response(self):
        result = openai_chat_to_anthropic_messages_response(
            OPENAI_CHAT_SIMPLE_RESPONSE, "claude-sonnet-4-5"
        )

        assert result == {
            "id": "msg_chatcmpl-123",
            "type": "message",
            "role": "assistant",
            "content": [{"type": "text", "text": "I'm doing well, thank you!"}],
            "model": "claude-sonnet-4-5",
            "stop_reason": "end_turn",
            "stop_sequence": None,
            "usage": {"input_tokens": 10, "output_tokens": 15},
        }

    @pytest.mark.parametrize(
        "finish_reason,expected",
        [
            ("stop", "end_turn"),
            ("length", "max_tokens"),
            ("tool_calls", "tool_use"),
            ("content_filter", "end_turn"),
            ("function_call", "end_turn"),
            (None, None),
        ],
    )
    def test_finish_reason_mapping(self, finish_reason, expected):
        result = openai_chat_to_anthropic_messages_response(_response(finish_reason), "m")
        assert result["stop_reason"] == expected

    def test_tool_calls_follow_text_in_order(self):
        result = openai_chat_to_anthropic_messages_response(
            OPENAI_CHAT_TOOL_CALL_RESPONSE, "claude-sonnet-4-5"
        )

        assert result["stop_reason"] == "tool_use"
        assert result["content"] == [
            {"type": "text", "text": "Checking both cities."},
            {"type": "tool_use", "id": "call_paris", "name": "get_weather", "input": {"location": "Paris"}},
            {"type": "tool_use", "id": "call_tokyo", "name": "get_weather", "input": {"raw": "{location: Tokyo"}},
        ]

    def test_cached_tokens_are_reported(self):
        result = openai_chat_to_anthropic_messages_response(
            OPENAI_CHAT_TOOL_CALL_RESPONSE, "claude-sonnet-4-5"
        )
        assert result["usage"] == {
            "input_tokens": 80,
            "output_tokens": 30,
            "cache_read_input_tokens": 64,
        }

    def test_missing_usage_is_zero(self):
        result = openai_chat_to_anthropic_messages_response(_response("stop"), "m")
        assert result["usage"] == {"input_tokens": 0, "output_tokens": 0}

    def test_empty_content_has_no_text_block(self):
        result = openai_chat_to_anthropic_messages_response(_response("stop", content=None), "m")
        assert result["content"] == []

    def test_no_choices(self):
        payload = {"id": "x", "model": "gpt-4o", "choices": []}
        result = openai_chat_to_anthropic_messages_response(payload, "m")
        assert result["content"] == []
        assert result["stop_reason"] is None

    def test_tool_call_without_id_gets_generated_id(self, rng):
        payload = _response("tool_calls", content=None)
        payload["choices"][0]["message"]["tool_calls"] = [
            {"type": "function", "function": {"name": "run", "arguments": ""}}
        ]
        result = openai_chat_to_anthropic_messages_response(payload, "m", rng=rng)
        block = result["content"][0]

        assert block["id"].startswith("toolu_")
        assert len(block["id"]) == len("toolu_") + 24
        assert block["input"] == {}

    def test_sdk_model_is_accepted(self):
        completion = ChatCompletion.model_validate(OPENAI_CHAT_TOOL_CALL_RESPONSE)
        result = openai_chat_to_anthropic_messages_response(completion, "claude-sonnet-4-5")

        assert result["id"] == "msg_chatcmpl-456"
        assert [block["type"] for block in result["content"]] == ["text", "tool_use", "tool_use"]

    def test_unsupported_payload_type(self):
        with pytest.raises(ConversionError):
            openai_chat_to_anthropic_messages_response("not a response", "m")

    def test_native_mode_leaves_markup_as_text(self):
        result = openai_chat_to_anthropic_messages_response(OPENAI_CHAT_XML_RESPONSE, "m")
        assert len(result["content"]) == 1
        assert "<tool_code" in result["content"][0]["text"]
        assert result["stop_reason"] == "end_turn"


class TestXmlResponse:
    """Tests for XML-mode response conversion."""

    def test_tool_code_is_parsed(self, rng):
        result = openai_chat_to_anthropic_messages_response(
            OPENAI_CHAT_XML_RESPONSE, "claude-sonnet-4-5", mode=CallingMode.XML, rng=rng
        )

        assert result["stop_reason"] == "tool_use"
        assert result["content"][0] == {"type": "text", "text": "I'll check."}
        tool = result["content"][1]
        assert tool["type"] == "tool_use"
        assert tool["name"] == "get_weather"
        assert tool["input"] == {"location": "Paris"}
        assert tool["id"].startswith("toolu_")
        assert len(result["content"]) == 2

    def test_plain_text_keeps_stop_reason(self):
        result = openai_chat_to_anthropic_messages_response(
            _response("stop", content="<think>hmm</think>Just text."), "m", mode="xml"
        )
        assert result["content"] == [{"type": "text", "text": "Just text."}]
        assert result["stop_reason"] == "end_turn"

    def test_length_is_not_upgraded(self):
        content = '<tool_code name="run">{}</tool_code>'
        result = openai_chat_to_anthropic_messages_response(
            _response("length", content=content), "m", mode="xml"
        )
        assert result["stop_reason"] == "max_tokens"
        assert result["content"][0]["input"] == {}

    def test_trailing_text_after_tool_code(self):
        content = 'Before <tool_code name="a">{"x": 1}</tool_code> after'
        result = openai_chat_to_anthropic_messages_response(
            _response("stop", content=content), "m", mode="xml"
        )
        assert [block["type"] for block in result["content"]] == ["text", "tool_use", "text"]
        assert result["content"][0]["text"] == "Before"
        assert result["content"][2]["text"] == "after"


class TestParseToolArguments:
    """Tests for tool argument parsing."""

    @pytest.mark.parametrize("arguments", [None, "", "   "])
    def test_empty(self, arguments):
        assert parse_tool_arguments(arguments) == {}

    def test_object(self):
        assert parse_tool_arguments('{"a": [1, 2]}') == {"a": [1, 2]}

    @pytest.mark.parametrize("arguments", ["[1, 2]", "42", '"text"', "{broken"])
    def test_non_object_is_wrapped(self, arguments):
        assert parse_tool_arguments(arguments) == {"raw": arguments}
