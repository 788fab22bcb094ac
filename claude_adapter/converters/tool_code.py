"""
Incremental <tool_code> Scanner

Finds <tool_code name="...">...</tool_code> elements in text that arrives in
arbitrary pieces. Closed <think>...</think> spans are removed, also inside a
tool_code body; a <think> still open when a call completes is kept as text.
Text is only released once the scanner knows it is not part of a tag, and the
search position is remembered between feeds so each character is examined a
bounded number of times.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

OPEN_MARKER = "<tool_code"
CLOSE_MARKER = "</tool_code>"
THINK_OPEN = "<think>"
THINK_CLOSE = "</think>"

_OPEN_TAG_PATTERN = re.compile(r'^<tool_code\s+name="([^"]+)">$')
_THINK_SPAN_PATTERN = re.compile(r"<think>.*?</think>", re.DOTALL)
_NESTED_TOOL_PATTERN = re.compile(r'<tool\s+name="[^"]*">\s*')
_CLOSE_TOOL_PATTERN = re.compile(r"</tool>\s*")
_LEADING_NAME_LINE_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*\s*\n")


class ScanState(str, Enum):
    """Where the scanner currently is relative to markup."""
    SCANNING = "scanning"  # plain text, looking for <tool_code or <think>
    IN_THINK = "in_think"  # inside <think>, looking for </think>
    IN_OPEN_TAG = "in_open_tag"  # saw <tool_code, waiting for the closing ">"
    IN_TAG = "in_tag"  # inside the element body, looking for </tool_code>


@dataclass
class ToolCodeMatch:
    """A completed tool_code element and the visible text that preceded it."""
    text_before: str
    name: str
    arguments: str


def clean_tool_arguments(raw: str) -> str:
    """Strip stray <tool name="..."> wrappers and a leading bare tool-name line."""
    cleaned = _NESTED_TOOL_PATTERN.sub("", raw)
    cleaned = _CLOSE_TOOL_PATTERN.sub("", cleaned)
    cleaned = _LEADING_NAME_LINE_PATTERN.sub("", cleaned.lstrip(), count=1)
    return cleaned.strip()


def _partial_marker_suffix(text: str, markers: List[str]) -> int:
    """Length of the longest suffix of `text` that is a proper prefix of a marker."""
    longest = 0
    for marker in markers:
        for size in range(min(len(marker) - 1, len(text)), longest, -1):
            if text.endswith(marker[:size]):
                longest = size
                break
    return longest


class ToolCodeScanner:
    """
    Incremental state machine over a text stream.

    feed() returns every tool_code element completed by the new text;
    finish() returns whatever visible text remains.
    """

    def __init__(self):
        self.state = ScanState.SCANNING
        self._buffer = ""
        self._search_from = 0
        self._close_from = 0
        self._visible: List[str] = []
        self._open_tag = ""
        self._tool_name = ""

    def feed(self, text: str) -> List[ToolCodeMatch]:
        self._buffer += text
        matches: List[ToolCodeMatch] = []
        while True:
            if self.state == ScanState.SCANNING:
                progressed = self._scan_text()
            elif self.state == ScanState.IN_THINK:
                progressed = self._scan_think()
            elif self.state == ScanState.IN_OPEN_TAG:
                progressed = self._scan_open_tag()
            else:
                match = self._scan_body()
                progressed = match is not None
                if match is not None:
                    matches.append(match)
            if not progressed:
                return matches

    def finish(self) -> str:
        """Flush the remainder as text; unterminated markup is kept verbatim."""
        if self.state == ScanState.IN_THINK:
            self._visible.append(THINK_OPEN)
        elif self.state == ScanState.IN_TAG:
            self._visible.append(self._open_tag)
        self._visible.append(self._buffer)
        remainder = "".join(self._visible).strip()

        self._visible = []
        self._buffer = ""
        self._search_from = 0
        self._close_from = 0
        self.state = ScanState.SCANNING
        return remainder

    def _find(self, marker: str) -> int:
        position = self._buffer.find(marker, self._search_from)
        if position < 0:
            # Only the tail could still grow into the marker
            self._search_from = max(0, len(self._buffer) - len(marker) + 1)
        return position

    def _transition(self, state: ScanState, consumed: int) -> None:
        self._buffer = self._buffer[consumed:]
        self._search_from = 0
        self._close_from = 0
        self.state = state

    def _scan_text(self) -> bool:
        tool_at = self._buffer.find(OPEN_MARKER)
        think_at = self._buffer.find(THINK_OPEN)
        candidates = [p for p in (tool_at, think_at) if p >= 0]

        if not candidates:
            keep = _partial_marker_suffix(self._buffer, [OPEN_MARKER, THINK_OPEN])
            cut = len(self._buffer) - keep
            if cut > 0:
                self._visible.append(self._buffer[:cut])
                self._buffer = self._buffer[cut:]
            return False

        start = min(candidates)
        self._visible.append(self._buffer[:start])
        if start == think_at:
            self._transition(ScanState.IN_THINK, start + len(THINK_OPEN))
        else:
            self._transition(ScanState.IN_OPEN_TAG, start)
        return True

    def _scan_think(self) -> bool:
        end = self._find(THINK_CLOSE)
        if end >= 0:
            self._transition(ScanState.SCANNING, end + len(THINK_CLOSE))
            return True
        if self._find_tool_close() < 0:
            return False
        # Only closed think spans are hidden; an open <think> before a
        # completed call is plain text
        self._visible.append(THINK_OPEN)
        self._transition(ScanState.SCANNING, 0)
        return True

    def _find_tool_close(self) -> int:
        position = self._buffer.find(CLOSE_MARKER, self._close_from)
        if position < 0:
            self._close_from = max(0, len(self._buffer) - len(CLOSE_MARKER) + 1)
        return position

    def _scan_open_tag(self) -> bool:
        end = self._find(">")
        if end < 0:
            return False
        open_tag = self._buffer[: end + 1]
        matched = _OPEN_TAG_PATTERN.match(open_tag)
        if matched is None:
            # Not a usable tool call; treat the marker as text and keep going
            self._visible.append(OPEN_MARKER)
            self._transition(ScanState.SCANNING, len(OPEN_MARKER))
            return True
        self._open_tag = open_tag
        self._tool_name = matched.group(1)
        self._transition(ScanState.IN_TAG, end + 1)
        return True

    def _scan_body(self) -> Optional[ToolCodeMatch]:
        end = self._find(CLOSE_MARKER)
        if end < 0:
            return None
        match = ToolCodeMatch(
            text_before="".join(self._visible).strip(),
            name=self._tool_name,
            arguments=clean_tool_arguments(_THINK_SPAN_PATTERN.sub("", self._buffer[:end])),
        )
        self._visible = []
        self._open_tag = ""
        self._tool_name = ""
        self._transition(ScanState.SCANNING, end + len(CLOSE_MARKER))
        return match
