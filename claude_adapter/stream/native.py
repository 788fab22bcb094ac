"""
Native Tool-Call Stream Re-emitter

Re-emits an OpenAI Chat stream that carries structured tool_calls deltas.
Text deltas are forwarded as they arrive; each backend tool-call position
becomes one tool_use block whose argument fragments are forwarded verbatim.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from ..ir import StreamEvent
from .base import ChunkView, StreamReEmitter

logger = logging.getLogger(__name__)


@dataclass
class _ToolBlock:
    index: int
    id: str
    name: str
    arguments: str = ""
    closed: bool = False


class NativeStreamReEmitter(StreamReEmitter):
    """
    Re-emitter for backends with native function calling.

    Blocks are closed when the backend reports a finish_reason, or at stream
    end if it never does.
    """

    def __init__(self, model: str, **kwargs):
        super().__init__(model, **kwargs)
        self._text_index: Optional[int] = None
        self._tool_blocks: Dict[int, _ToolBlock] = {}
        self._blocks_closed = False

    def process_chunk(self, chunk: ChunkView) -> List[StreamEvent]:
        if self._blocks_closed:
            return []

        events: List[StreamEvent] = []

        text = chunk.delta.get("content")
        if text:
            if self._text_index is None:
                self._text_index = self.allocate_index()
                events.append(self._encoder.text_block_start(self._text_index))
            events.append(self._encoder.text_delta(self._text_index, text))

        for tool_call in chunk.delta.get("tool_calls") or []:
            events.extend(self._process_tool_call(tool_call))

        if chunk.finish_reason is not None:
            events.extend(self.close_blocks())

        return events

    def _process_tool_call(self, tool_call: Dict) -> List[StreamEvent]:
        events: List[StreamEvent] = []
        position = tool_call.get("index") or 0
        function = tool_call.get("function") or {}

        block = self._tool_blocks.get(position)
        if block is None:
            events.extend(self._close_text_block())
            block = _ToolBlock(
                index=self.allocate_index(),
                id=self.claim_tool_id(tool_call.get("id")),
                name=function.get("name") or "",
            )
            self._tool_blocks[position] = block
            self.tool_blocks_opened += 1
            events.append(self._encoder.tool_use_block_start(block.index, block.id, block.name))
        elif block.closed:
            return events

        arguments = function.get("arguments")
        if arguments:
            block.arguments += arguments
            events.append(self._encoder.input_json_delta(block.index, arguments))
        return events

    def _close_text_block(self) -> List[StreamEvent]:
        if self._text_index is None:
            return []
        index = self._text_index
        self._text_index = None
        return [self._encoder.block_stop(index)]

    def close_blocks(self) -> List[StreamEvent]:
        events = self._close_text_block()
        for position in sorted(self._tool_blocks):
            block = self._tool_blocks[position]
            if not block.closed:
                block.closed = True
                events.append(self._encoder.block_stop(block.index))
        self._blocks_closed = True
        return events
