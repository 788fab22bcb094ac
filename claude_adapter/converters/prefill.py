"""
Assistant Prefill Detection

Anthropic clients may seed the start of the assistant turn ("{", "```",
an opening <tool_code> tag). OpenAI-style backends reject a trailing
assistant message, so such messages are dropped from the mapped request.
"""

from dataclasses import dataclass
from typing import Tuple

from ..config import Settings

DEFAULT_PREFILL_TOKENS = ("{", "[", "```", '{"', "[{")
DEFAULT_OPEN_TAGS = ("<tool_code",)


@dataclass(frozen=True)
class PrefillPolicy:
    """
    Predicate deciding whether assistant text is a prefill.

    Note: the length threshold also drops short legitimate replies such as
    "{}"; this matches long-standing client behavior.
    """
    tokens: Tuple[str, ...] = DEFAULT_PREFILL_TOKENS
    max_length: int = 2
    open_tags: Tuple[str, ...] = DEFAULT_OPEN_TAGS

    @classmethod
    def from_settings(cls, settings: Settings) -> "PrefillPolicy":
        return cls(
            tokens=tuple(settings.PREFILL_TOKENS),
            max_length=settings.PREFILL_MAX_LENGTH,
            open_tags=tuple(settings.PREFILL_OPEN_TAGS),
        )

    def is_prefill(self, content: str) -> bool:
        trimmed = content.strip()
        if trimmed in self.tokens or len(trimmed) <= self.max_length:
            return True
        return any(self._is_unterminated_tag(trimmed, tag) for tag in self.open_tags)

    @staticmethod
    def _is_unterminated_tag(text: str, tag: str) -> bool:
        # "<tool_code", "<tool_code>" and '<tool_code name="x">' are prefills,
        # a fully closed call is not.
        if not text.startswith(tag):
            return False
        closing = "</" + tag[1:] + ">"
        return closing not in text
