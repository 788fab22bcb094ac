"""
Unit Tests for the XML Tool-Call Stream Re-emitter
"""

import json

import pytest

from claude_adapter.stream import XmlStreamReEmitter
from tests.fixtures import (
    async_chunks,
    collect,
    event_names,
    failing_chunks,
    finish_chunk,
    text_chunk,
    usage_chunk,
)


async def _re_emit(pieces, rng=None, tail=None):
    chunks = [text_chunk(piece) for piece in pieces]
    chunks.extend(tail if tail is not None else [finish_chunk("stop")])
    re_emitter = XmlStreamReEmitter("claude-sonnet-4-5", rng=rng)
    return await collect(re_emitter.stream(async_chunks(chunks)))


def _content_blocks(events):
    """Rebuild (type, payload) pairs from complete block triples."""
    blocks = []
    for event in events:
        if event.event.value == "content_block_start":
            blocks.append([event.data["content_block"], []])
        elif event.event.value == "content_block_delta":
            blocks[-1][1].append(event.data["delta"])
    return blocks


class TestXmlStream:
    """Tests for XmlStreamReEmitter."""

    @pytest.mark.asyncio
    async def test_text_then_tool_call(self, rng):
        events = await _re_emit(
            ["Let me check.", ' <tool_code name="get_weather">', '{"location": "Paris"}', "</tool_code>"],
            rng=rng,
        )

        assert event_names(events) == [
            "message_start",
            "content_block_start",
            "content_block_delta",
            "content_block_stop",
            "content_block_start",
            "content_block_delta",
            "content_block_stop",
            "message_delta",
            "message_stop",
        ]
        assert events[2].data["delta"] == {"type": "text_delta", "text": "Let me check."}
        tool = events[4].data["content_block"]
        assert tool["type"] == "tool_use"
        assert tool["name"] == "get_weather"
        assert tool["id"].startswith("toolu_")
        assert json.loads(events[5].data["delta"]["partial_json"]) == {"location": "Paris"}
        assert [events[i].index for i in (1, 2, 3, 4, 5, 6)] == [0, 0, 0, 1, 1, 1]
        assert events[-2].data["delta"]["stop_reason"] == "tool_use"

    @pytest.mark.asyncio
    async def test_each_block_has_exactly_one_delta(self):
        text = (
            "<think>which tools?</think>First "
            '<tool_code name="a">{"n": 1}</tool_code> then '
            '<tool_code name="b">{"n": 2}</tool_code> bye'
        )
        events = await _re_emit([text[i : i + 4] for i in range(0, len(text), 4)])
        blocks = _content_blocks(events)

        assert [len(deltas) for _, deltas in blocks] == [1] * len(blocks)
        assert [(block["type"], deltas[0].get("text")) for block, deltas in blocks] == [
            ("text", "First"),
            ("tool_use", None),
            ("text", "then"),
            ("tool_use", None),
            ("text", "bye"),
        ]

    @pytest.mark.asyncio
    async def test_plain_text_is_one_block_at_end(self):
        events = await _re_emit(["Hello", " there", "!"])

        assert event_names(events) == [
            "message_start",
            "content_block_start",
            "content_block_delta",
            "content_block_stop",
            "message_delta",
            "message_stop",
        ]
        assert events[2].data["delta"]["text"] == "Hello there!"
        assert events[-2].data["delta"]["stop_reason"] == "end_turn"

    @pytest.mark.asyncio
    async def test_think_only_output_has_no_blocks(self):
        events = await _re_emit(["<think>", "nothing to say", "</think>"])
        assert event_names(events) == ["message_start", "message_delta", "message_stop"]

    @pytest.mark.asyncio
    async def test_empty_arguments_become_empty_object(self):
        events = await _re_emit(['<tool_code name="ping"></tool_code>'])
        deltas = [e.data["delta"] for e in events if e.event.value == "content_block_delta"]
        assert deltas == [{"type": "input_json_delta", "partial_json": "{}"}]

    @pytest.mark.asyncio
    async def test_unterminated_call_is_flushed_as_text(self):
        events = await _re_emit(['Working <tool_code name="a">{"x"'])
        assert events[2].data["delta"]["text"] == 'Working <tool_code name="a">{"x"'
        assert events[-2].data["delta"]["stop_reason"] == "end_turn"

    @pytest.mark.asyncio
    async def test_usage_chunk_is_reported(self):
        events = await _re_emit(["Hi"], tail=[finish_chunk("stop"), usage_chunk(30, 5)])
        assert events[-2].data["usage"] == {"input_tokens": 30, "output_tokens": 5}

    @pytest.mark.asyncio
    async def test_failure_emits_error_without_closing(self):
        re_emitter = XmlStreamReEmitter("m")
        events = await collect(
            re_emitter.stream(failing_chunks([text_chunk("buffered")], TimeoutError("read timeout")))
        )
        assert event_names(events) == ["message_start", "error"]
        assert events[-1].data["error"]["message"] == "read timeout"

    @pytest.mark.asyncio
    async def test_single_chunk_call_yields_one_tool_block(self):
        events = await _re_emit(['<tool_code name="t">{"a":1}</tool_code>'])
        blocks = _content_blocks(events)

        assert len(blocks) == 1
        block, deltas = blocks[0]
        assert block["type"] == "tool_use"
        assert block["name"] == "t"
        assert deltas == [{"type": "input_json_delta", "partial_json": '{"a":1}'}]

    @pytest.mark.asyncio
    async def test_lookup_scenario(self, rng):
        events = await _re_emit(
            ["Let me check. ", '<tool_code name="lookup">{"q":"x"}</tool_code>'],
            rng=rng,
            tail=[],
        )
        blocks = _content_blocks(events)

        assert event_names(events)[0] == "message_start"
        assert [(block["type"], deltas) for block, deltas in blocks] == [
            ("text", [{"type": "text_delta", "text": "Let me check."}]),
            (
                "tool_use",
                [{"type": "input_json_delta", "partial_json": '{"q":"x"}'}],
            ),
        ]
        assert blocks[1][0]["name"] == "lookup"
        assert event_names(events)[-2:] == ["message_delta", "message_stop"]
        assert events[-2].data["delta"]["stop_reason"] == "tool_use"

    @pytest.mark.asyncio
    async def test_think_inside_call_is_not_forwarded(self):
        events = await _re_emit(['<tool_code name="a"><think>hmm</think>{"x":1}</tool_code>'])
        blocks = _content_blocks(events)

        assert [block["type"] for block, _ in blocks] == ["tool_use"]
        assert blocks[0][1] == [{"type": "input_json_delta", "partial_json": '{"x":1}'}]

    @pytest.mark.asyncio
    async def test_unclosed_think_does_not_swallow_call(self):
        events = await _re_emit(["<think>plan ", '<tool_code name="a">{"x":1}</tool_code>'])
        blocks = _content_blocks(events)

        assert [block["type"] for block, _ in blocks] == ["text", "tool_use"]
        assert blocks[1][0]["name"] == "a"
        assert json.loads(blocks[1][1][0]["partial_json"]) == {"x": 1}
        assert events[-2].data["delta"]["stop_reason"] == "tool_use"
