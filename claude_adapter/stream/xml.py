"""
XML Tool-Call Stream Re-emitter

Re-emits an OpenAI Chat stream from a backend without function calling.
Tool calls arrive as <tool_code name="...">{json}</tool_code> markup inside
the text, so text is buffered until the scanner can classify it; every
block is emitted complete (start, one delta, stop).
"""

import logging
from typing import List

from ..converters.tool_code import ToolCodeScanner
from ..ir import StreamEvent
from .base import ChunkView, StreamReEmitter

logger = logging.getLogger(__name__)


class XmlStreamReEmitter(StreamReEmitter):
    """Re-emitter for the XML calling convention."""

    def __init__(self, model: str, **kwargs):
        super().__init__(model, **kwargs)
        self._scanner = ToolCodeScanner()

    def process_chunk(self, chunk: ChunkView) -> List[StreamEvent]:
        text = chunk.delta.get("content")
        if not text:
            return []

        events: List[StreamEvent] = []
        for match in self._scanner.feed(text):
            if match.text_before:
                events.extend(self.complete_text_block(match.text_before))
            logger.debug("XML tool call detected: %s", match.name)
            events.extend(
                self.complete_tool_block(
                    self.claim_tool_id(),
                    match.name,
                    match.arguments or "{}",
                )
            )
        return events

    def close_blocks(self) -> List[StreamEvent]:
        remainder = self._scanner.finish()
        if not remainder:
            return []
        return self.complete_text_block(remainder)
