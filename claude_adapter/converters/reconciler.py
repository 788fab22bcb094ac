"""
Tool Identifier Reconciliation

A conversation history may carry the same tool_use id more than once
(client replay, re-sent turns). Backends reject duplicate tool_call ids,
so duplicates are rewritten on the wire and each tool_result is re-pointed
at the id its tool_use was given, first-in-first-out.
"""

import logging
import random
from typing import Dict, List, Optional, Set

from .tools import random_id

logger = logging.getLogger(__name__)

# Ids longer than this keep a recognisable prefix when rewritten
PREFIX_KEEP_THRESHOLD = 11
PREFIX_KEEP_LENGTH = 8
MAX_DRAW_ATTEMPTS = 64


class ToolIdReconciler:
    """
    Per-request tool id table.

    Create one per request mapping; it has no cross-request lifetime.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng or random.SystemRandom()
        self.seen: Set[str] = set()
        self.replacements: Dict[str, List[str]] = {}
        self.cursor: Dict[str, int] = {}

    def register_tool_use(self, original_id: str) -> str:
        """
        Register a tool_use id in document order and return the id to send.

        The first occurrence keeps its id. Later occurrences get a fresh id of
        the same length.
        """
        if original_id in self.seen:
            assigned_id = self._synthesize(original_id)
            logger.info("tool_use id repaired: %s -> %s", original_id, assigned_id)
        else:
            assigned_id = original_id

        self.seen.add(assigned_id)
        self.replacements.setdefault(original_id, []).append(assigned_id)
        return assigned_id

    def resolve_tool_result(self, original_id: str) -> str:
        """
        Resolve a tool_result's tool_use_id in document order.

        Unknown ids, and ids referenced more often than they were used, pass
        through unchanged.
        """
        assigned = self.replacements.get(original_id)
        if not assigned:
            return original_id

        index = self.cursor.get(original_id, 0)
        if index >= len(assigned):
            return original_id

        self.cursor[original_id] = index + 1
        resolved = assigned[index]
        if resolved != original_id:
            logger.info("tool_result id updated: %s -> %s", original_id, resolved)
        return resolved

    def _synthesize(self, original_id: str) -> str:
        length = len(original_id)
        if length > PREFIX_KEEP_THRESHOLD:
            prefix = original_id[:PREFIX_KEEP_LENGTH]
        else:
            prefix = ""

        for _ in range(MAX_DRAW_ATTEMPTS):
            candidate = prefix + random_id(self._rng, length - len(prefix))
            if candidate not in self.seen:
                return candidate

        # The same-length space is exhausted (very short or empty ids); grow
        # until a free id appears.
        candidate = prefix + random_id(self._rng, length - len(prefix))
        while candidate in self.seen:
            candidate += random_id(self._rng, 1)
        return candidate
