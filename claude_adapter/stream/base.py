"""
Stream Re-emitter Base

Shared lifecycle for turning an OpenAI Chat chunk stream into Anthropic
Messages stream events: message_start on the first chunk, usage tracking,
block bookkeeping, the closing message_delta/message_stop pair, and the
single error path.
"""

import logging
import random
from dataclasses import dataclass
from typing import Any, AsyncIterable, AsyncIterator, Dict, List, Optional, Set

from ..converters.anthropic_messages import AnthropicMessagesEncoder
from ..converters.exceptions import StreamConversionError
from ..converters.openai_chat import decode_usage
from ..converters.tools import generate_tool_use_id, random_id
from ..hooks import RecordingHooks, UsageRecord, fire_error, fire_usage
from ..ir import IRUsage, StopReason, StreamEvent
from .id_registry import ToolIdRegistry

logger = logging.getLogger(__name__)


@dataclass
class ChunkView:
    """The parts of one OpenAI chunk a re-emitter looks at."""
    raw: Dict[str, Any]
    delta: Dict[str, Any]
    finish_reason: Optional[str]


class StreamReEmitter:
    """
    Base class for OpenAI -> Anthropic stream re-emitters.

    Subclasses implement process_chunk() and close_blocks(). One instance
    handles exactly one stream.
    """

    def __init__(
        self,
        model: str,
        *,
        rng: Optional[random.Random] = None,
        id_registry: Optional[ToolIdRegistry] = None,
        hooks: Optional[RecordingHooks] = None,
        provider: str = "",
    ):
        self.model = model
        self._rng = rng or random.SystemRandom()
        self._id_registry = id_registry
        self._hooks = hooks
        self._provider = provider
        self._encoder = AnthropicMessagesEncoder()

        self.message_id: Optional[str] = None
        self.backend_model: Optional[str] = None
        self.usage = IRUsage()
        self.started = False
        self.finished = False
        self.tool_blocks_opened = 0
        self._next_index = 0
        self._stream_tool_ids: Set[str] = set()

    async def stream(self, chunks: AsyncIterable[Any]) -> AsyncIterator[StreamEvent]:
        """
        Re-emit a backend chunk stream as Anthropic events.

        Any exception raised while consuming `chunks` ends the output with a
        single error event; open blocks are left as they are.
        """
        chunk_index = 0
        try:
            async for raw_chunk in chunks:
                view = self._view(raw_chunk, chunk_index)
                chunk_index += 1
                if not self.started:
                    yield self._start(view.raw)
                self._update_usage(view.raw)
                for event in self.process_chunk(view):
                    yield event
            for event in self.finish():
                yield event
        except Exception as exc:
            logger.error("Backend stream failed: %s", exc)
            fire_error(
                self._hooks,
                exc,
                request_id=self.message_id or "",
                provider=self._provider,
                model_name=self.model,
                streaming=True,
            )
            yield self._encoder.error(str(exc))
            return

        fire_usage(
            self._hooks,
            UsageRecord(
                provider=self._provider,
                model_name=self.model,
                model=self.backend_model,
                input_tokens=self.usage.input_tokens,
                output_tokens=self.usage.output_tokens,
                cached_input_tokens=self.usage.cache_read_tokens or None,
                streaming=True,
            ),
        )

    def process_chunk(self, chunk: ChunkView) -> List[StreamEvent]:
        raise NotImplementedError

    def close_blocks(self) -> List[StreamEvent]:
        raise NotImplementedError

    def finish(self) -> List[StreamEvent]:
        """Close open blocks and emit message_delta + message_stop."""
        events: List[StreamEvent] = []
        if not self.started:
            events.append(self._start({}))
        events.extend(self.close_blocks())

        stop_reason = StopReason.TOOL_USE if self.tool_blocks_opened else StopReason.END_TURN
        events.append(self._encoder.message_delta(stop_reason, self.usage))
        events.append(self._encoder.message_stop())
        self.finished = True
        logger.debug(
            "Stream %s finished: stop_reason=%s usage=%s",
            self.message_id,
            stop_reason.value,
            self.usage,
        )
        return events

    # -------------------------------------------------------------------------
    # Helpers for subclasses
    # -------------------------------------------------------------------------

    def allocate_index(self) -> int:
        index = self._next_index
        self._next_index += 1
        return index

    def claim_tool_id(self, backend_id: Optional[str] = None) -> str:
        """Use the backend id when it is unused, otherwise generate a fresh one."""
        tool_id = backend_id
        while not tool_id or self._is_used(tool_id):
            tool_id = generate_tool_use_id(self._rng)
        self._stream_tool_ids.add(tool_id)
        if self._id_registry is not None:
            self._id_registry.add(tool_id)
        return tool_id

    def complete_text_block(self, text: str) -> List[StreamEvent]:
        index = self.allocate_index()
        return [
            self._encoder.text_block_start(index),
            self._encoder.text_delta(index, text),
            self._encoder.block_stop(index),
        ]

    def complete_tool_block(self, tool_id: str, name: str, arguments: str) -> List[StreamEvent]:
        index = self.allocate_index()
        self.tool_blocks_opened += 1
        return [
            self._encoder.tool_use_block_start(index, tool_id, name),
            self._encoder.input_json_delta(index, arguments),
            self._encoder.block_stop(index),
        ]

    def _is_used(self, tool_id: str) -> bool:
        if tool_id in self._stream_tool_ids:
            return True
        return self._id_registry is not None and tool_id in self._id_registry

    def _start(self, chunk: Dict[str, Any]) -> StreamEvent:
        self.started = True
        backend_id = chunk.get("id")
        self.message_id = f"msg_{backend_id}" if backend_id else "msg_" + random_id(self._rng, 24)
        self.backend_model = chunk.get("model")
        return self._encoder.message_start(self.message_id, self.model, self.usage)

    def _update_usage(self, chunk: Dict[str, Any]) -> None:
        usage = chunk.get("usage")
        if usage:
            self.usage = decode_usage(usage)

    def _view(self, raw_chunk: Any, chunk_index: int) -> ChunkView:
        if isinstance(raw_chunk, dict):
            chunk = raw_chunk
        elif callable(getattr(raw_chunk, "model_dump", None)):
            chunk = raw_chunk.model_dump()
        else:
            raise StreamConversionError(
                f"Unsupported chunk type: {type(raw_chunk).__name__}",
                event_index=chunk_index,
            )

        choices = chunk.get("choices") or []
        if not isinstance(choices, list):
            raise StreamConversionError(
                "Chunk choices must be a list",
                event_index=chunk_index,
            )
        if not choices:
            return ChunkView(raw=chunk, delta={}, finish_reason=None)

        choice = choices[0] or {}
        return ChunkView(
            raw=chunk,
            delta=choice.get("delta") or {},
            finish_reason=choice.get("finish_reason"),
        )
