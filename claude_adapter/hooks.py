"""
Usage and Error Recording Hooks

Summary records emitted after each request. Recording is fire-and-forget:
a failing hook is logged and never changes the request's outcome.
"""

import json
import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Protocol

import httpx
import openai

logger = logging.getLogger(__name__)

# Client-side problems (auth, billing, unknown model, rate limit) are not backend faults
SKIP_ERROR_STATUSES = frozenset({401, 402, 404, 429})


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class UsageRecord:
    """Token usage of one completed request."""
    provider: str
    model_name: str
    input_tokens: int
    output_tokens: int
    streaming: bool
    model: Optional[str] = None
    cached_input_tokens: Optional[int] = None
    timestamp: str = field(default_factory=_now_iso)


@dataclass
class ErrorRecord:
    """A backend failure, with whatever details the exception carries."""
    request_id: str
    provider: str
    model_name: str
    streaming: bool
    error: Dict[str, Any]
    timestamp: str = field(default_factory=_now_iso)


def extract_error_details(exc: BaseException) -> Dict[str, Any]:
    """Collect message, status, code, type and response body from an exception."""
    details: Dict[str, Any] = {"message": str(exc)}

    if isinstance(exc, openai.APIStatusError):
        details["status"] = exc.status_code
    if isinstance(exc, openai.APIError):
        if exc.code is not None:
            details["code"] = exc.code
        if exc.type is not None:
            details["type"] = exc.type
        if exc.body is not None:
            details["response"] = exc.body
    elif isinstance(exc, httpx.HTTPStatusError):
        details["status"] = exc.response.status_code
        details["response"] = exc.response.text

    return details


class RecordingHooks(Protocol):
    """Receiver of usage and error records."""

    def record_usage(self, record: UsageRecord) -> None: ...

    def record_error(self, record: ErrorRecord) -> None: ...


class LoggingRecordingHooks:
    """Writes records to the log as JSON."""

    def record_usage(self, record: UsageRecord) -> None:
        logger.info("usage=%s", json.dumps(asdict(record), ensure_ascii=False))

    def record_error(self, record: ErrorRecord) -> None:
        logger.info("error=%s", json.dumps(asdict(record), ensure_ascii=False, default=str))


def fire_usage(hooks: Optional[RecordingHooks], record: UsageRecord) -> None:
    if hooks is None:
        return
    try:
        hooks.record_usage(record)
    except Exception:
        logger.warning("Usage recording failed", exc_info=True)


def fire_error(
    hooks: Optional[RecordingHooks],
    exc: BaseException,
    *,
    request_id: str,
    provider: str,
    model_name: str,
    streaming: bool,
) -> None:
    if hooks is None:
        return
    details = extract_error_details(exc)
    if details.get("status") in SKIP_ERROR_STATUSES:
        return
    record = ErrorRecord(
        request_id=request_id,
        provider=provider,
        model_name=model_name,
        streaming=streaming,
        error=details,
    )
    try:
        hooks.record_error(record)
    except Exception:
        logger.warning("Error recording failed", exc_info=True)
