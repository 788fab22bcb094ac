"""
SSE Encoding

Wire-encodes Anthropic stream events as Server-Sent Events frames.
"""

import json
from typing import Any, AsyncIterator, Dict, Optional, Protocol, Union

from ..ir import StreamEvent


class SSEFormatter:
    """Formatter for Server-Sent Events (SSE) format."""

    @staticmethod
    def format_event(
        event_type: Optional[str],
        data: Union[Dict[str, Any], str],
        *,
        include_newlines: bool = True,
    ) -> str:
        """
        Format an event as SSE.

        Args:
            event_type: Optional event type (e.g., "message_start")
            data: Event data (dict or string)
            include_newlines: Include trailing newlines

        Returns:
            Formatted SSE string
        """
        lines = []

        if event_type:
            lines.append(f"event: {event_type}")

        if isinstance(data, str):
            lines.append(f"data: {data}")
        else:
            lines.append(f"data: {json.dumps(data, ensure_ascii=False)}")

        result = "\n".join(lines)
        if include_newlines:
            result += "\n\n"

        return result

    @classmethod
    def format_stream_event(cls, event: StreamEvent) -> str:
        return cls.format_event(event.event.value, event.data)


class EventSink(Protocol):
    """Consumer of (event name, payload) pairs, e.g. an HTTP response writer."""

    async def send(self, event: str, data: Dict[str, Any]) -> None: ...


async def drain_to_sink(events: AsyncIterator[StreamEvent], sink: EventSink) -> None:
    """Deliver every event, in order, to `sink`."""
    async for event in events:
        await sink.send(event.event.value, event.data)


async def encode_sse(events: AsyncIterator[StreamEvent]) -> AsyncIterator[bytes]:
    """Encode a stream of events as UTF-8 SSE frames."""
    async for event in events:
        yield SSEFormatter.format_stream_event(event).encode("utf-8")
