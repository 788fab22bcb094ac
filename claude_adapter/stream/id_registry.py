"""
Streaming Tool ID Registry

Bounded, append-only set of tool ids already handed to clients. Shared by
the streams of one process so that unrelated concurrent streams are unlikely
to reuse an id.
"""

from collections import OrderedDict
from functools import lru_cache
from typing import Optional

from ..config import Settings, get_settings


class ToolIdRegistry:
    """Remembers up to `max_size` ids; on overflow the oldest half is dropped."""

    def __init__(self, max_size: int = 10000):
        if max_size < 2:
            raise ValueError("max_size must be at least 2")
        self.max_size = max_size
        self._ids: "OrderedDict[str, None]" = OrderedDict()

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "ToolIdRegistry":
        settings = settings or get_settings()
        return cls(max_size=settings.TOOL_ID_CACHE_SIZE)

    def __contains__(self, tool_id: str) -> bool:
        return tool_id in self._ids

    def __len__(self) -> int:
        return len(self._ids)

    def add(self, tool_id: str) -> None:
        self._ids[tool_id] = None
        if len(self._ids) > self.max_size:
            for _ in range(self.max_size // 2):
                self._ids.popitem(last=False)


@lru_cache()
def get_tool_id_registry() -> ToolIdRegistry:
    """Process-wide registry (Singleton)."""
    return ToolIdRegistry.from_settings()
