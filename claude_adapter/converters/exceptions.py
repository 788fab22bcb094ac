"""
Conversion Exceptions

Errors raised while mapping payloads between Anthropic Messages and
OpenAI Chat Completions.
"""

from typing import Any, Dict, Optional

from ..schemas import Protocol


class ConversionError(Exception):
    """A payload could not be mapped to the other protocol."""

    def __init__(
        self,
        message: str,
        source_protocol: Optional[str] = None,
        target_protocol: Optional[str] = None,
        field: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.source_protocol = source_protocol
        self.target_protocol = target_protocol
        self.field = field
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": "conversion_error",
            "message": self.message,
            "source_protocol": self.source_protocol,
            "target_protocol": self.target_protocol,
            "field": self.field,
            "details": self.details,
        }


class ValidationError(ConversionError):
    """
    An Anthropic request is structurally unusable.

    `field` is a path such as "messages[2].content".
    """

    def __init__(
        self,
        field: str,
        message: str,
        value: Any = None,
        expected: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=f"{field}: {message}",
            source_protocol=Protocol.ANTHROPIC_MESSAGES.value,
            target_protocol=Protocol.OPENAI_CHAT.value,
            field=field,
            details=details,
        )
        self.value = value
        self.expected = expected

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        result.update(
            error="validation_error",
            value=None if self.value is None else repr(self.value),
            expected=self.expected,
        )
        return result


class StreamConversionError(ConversionError):
    """A backend stream chunk is neither a mapping nor an SDK model, or is malformed."""

    def __init__(
        self,
        message: str,
        event_type: Optional[str] = None,
        event_index: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            source_protocol=Protocol.OPENAI_CHAT.value,
            target_protocol=Protocol.ANTHROPIC_MESSAGES.value,
            details=details,
        )
        self.event_type = event_type
        self.event_index = event_index

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        result.update(
            error="stream_conversion_error",
            event_type=self.event_type,
            event_index=self.event_index,
        )
        return result
