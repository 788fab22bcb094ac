"""
Messages Service

Transport-agnostic handling of one Anthropic Messages request against an
OpenAI Chat backend: validate, map the request, call the backend, and map
the result back as a message or a stream of events.
"""

import logging
import random
from typing import Any, AsyncIterator, Dict, Optional, Protocol

import openai

from .config import Settings, get_settings
from .converters import (
    AnthropicMessagesDecoder,
    ConversionError,
    OpenAIChatEncoder,
    PrefillPolicy,
    ToolIdReconciler,
    format_validation_errors,
    openai_chat_to_anthropic_messages_response,
    payload_to_dict,
    validate_messages_request,
)
from .errors import InvalidRequestError, UpstreamError
from .hooks import LoggingRecordingHooks, RecordingHooks, UsageRecord, fire_error, fire_usage
from .ir import StreamEvent
from .schemas import CallingMode
from .stream import (
    NativeStreamReEmitter,
    StreamReEmitter,
    ToolIdRegistry,
    XmlStreamReEmitter,
    get_tool_id_registry,
)

logger = logging.getLogger(__name__)

MODEL_TIERS = ("opus", "sonnet", "haiku")


class ChatBackend(Protocol):
    """An OpenAI Chat Completions backend."""

    async def create(self, request: Dict[str, Any]) -> Any:
        """Return one completion (dict or SDK model)."""
        ...

    async def stream(self, request: Dict[str, Any]) -> AsyncIterator[Any]:
        """Return an async iterator of completion chunks (dicts or SDK models)."""
        ...


class OpenAIChatBackend:
    """ChatBackend over an `openai.AsyncOpenAI` client."""

    def __init__(self, client: openai.AsyncOpenAI):
        self.client = client

    async def create(self, request: Dict[str, Any]) -> Any:
        return await self.client.chat.completions.create(**{**request, "stream": False})

    async def stream(self, request: Dict[str, Any]) -> AsyncIterator[Any]:
        return await self.client.chat.completions.create(**{**request, "stream": True})


def resolve_target_model(requested: str, settings: Settings) -> str:
    """Map a requested model onto the configured backend model for its tier."""
    lowered = requested.lower()
    for tier in MODEL_TIERS:
        if tier in lowered:
            mapped = getattr(settings, f"MODEL_{tier.upper()}")
            if mapped:
                return mapped
    return requested


class MessagesService:
    """
    Handles Anthropic Messages requests against one backend.

    Each call gets a fresh ToolIdReconciler; the optional ToolIdRegistry is
    the only state shared between streams.
    """

    def __init__(
        self,
        backend: ChatBackend,
        *,
        mode: CallingMode = CallingMode.NATIVE,
        settings: Optional[Settings] = None,
        hooks: Optional[RecordingHooks] = None,
        id_registry: Optional[ToolIdRegistry] = None,
        rng: Optional[random.Random] = None,
    ):
        self.backend = backend
        self.mode = CallingMode(mode)
        self.settings = settings or get_settings()
        self.hooks = hooks
        self.id_registry = id_registry
        self._rng = rng or random.SystemRandom()
        self.encoder = OpenAIChatEncoder(
            prefill_policy=PrefillPolicy.from_settings(self.settings),
            max_tokens_rewrite_from=self.settings.MAX_TOKENS_REWRITE_FROM,
            max_tokens_rewrite_to=self.settings.MAX_TOKENS_REWRITE_TO,
        )

    @classmethod
    def from_settings(
        cls,
        backend: ChatBackend,
        settings: Optional[Settings] = None,
        id_registry: Optional[ToolIdRegistry] = None,
    ) -> "MessagesService":
        """Build a service from settings; streams share the process-wide tool id registry by default."""
        settings = settings or get_settings()
        return cls(
            backend,
            mode=CallingMode(settings.TOOL_CALLING_MODE),
            settings=settings,
            hooks=LoggingRecordingHooks() if settings.RECORD_USAGE else None,
            id_registry=id_registry if id_registry is not None else get_tool_id_registry(),
        )

    @property
    def provider(self) -> str:
        return self.settings.BACKEND_BASE_URL

    def build_backend_request(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Validate an Anthropic request and map it to an OpenAI Chat request."""
        result = validate_messages_request(payload)
        if not result.valid:
            raise InvalidRequestError(
                format_validation_errors(result.errors),
                details={"errors": result.errors},
            )

        target_model = resolve_target_model(payload["model"], self.settings)
        logger.info(
            "Forwarding request: model=%s target=%s mode=%s stream=%s",
            payload["model"],
            target_model,
            self.mode.value,
            bool(payload.get("stream")),
        )
        ir = AnthropicMessagesDecoder().decode_request(payload)
        return self.encoder.encode_request(
            ir,
            ToolIdReconciler(self._rng),
            target_model=target_model,
            mode=self.mode,
        )

    async def create_message(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Handle a non-streaming request and return the Anthropic message."""
        request = self.build_backend_request(payload)
        request["stream"] = False

        try:
            response = await self.backend.create(request)
        except Exception as exc:
            logger.error("Backend request failed: %s", exc)
            self._record_error(exc, payload["model"])
            raise

        try:
            response = payload_to_dict(response)
            message = openai_chat_to_anthropic_messages_response(
                response,
                payload["model"],
                mode=self.mode,
                rng=self._rng,
            )
        except ConversionError as exc:
            logger.error("Backend response could not be converted: %s", exc)
            self._record_error(exc, payload["model"])
            raise UpstreamError(
                f"Unusable backend response: {exc.message}",
                details=exc.to_dict(),
            ) from exc

        usage = message["usage"]
        fire_usage(
            self.hooks,
            UsageRecord(
                provider=self.provider,
                model_name=payload["model"],
                model=response.get("model"),
                input_tokens=usage["input_tokens"],
                output_tokens=usage["output_tokens"],
                cached_input_tokens=usage.get("cache_read_input_tokens"),
                streaming=False,
            ),
        )
        return message

    def _record_error(self, exc: Exception, model_name: str) -> None:
        fire_error(
            self.hooks,
            exc,
            request_id="",
            provider=self.provider,
            model_name=model_name,
            streaming=False,
        )

    def create_re_emitter(self, model: str) -> StreamReEmitter:
        """Pick the re-emitter for the configured calling convention."""
        re_emitter_cls = XmlStreamReEmitter if self.mode == CallingMode.XML else NativeStreamReEmitter
        return re_emitter_cls(
            model,
            rng=self._rng,
            id_registry=self.id_registry,
            hooks=self.hooks,
            provider=self.provider,
        )

    async def stream_message(self, payload: Dict[str, Any]) -> AsyncIterator[StreamEvent]:
        """
        Handle a streaming request.

        Validation and mapping errors raise before the first event; backend
        failures, including failing to open the stream, become one error event.
        """
        request = self.build_backend_request(payload)
        request["stream"] = True
        re_emitter = self.create_re_emitter(payload["model"])

        async def backend_chunks() -> AsyncIterator[Any]:
            chunks = await self.backend.stream(request)
            async for chunk in chunks:
                yield chunk

        async for event in re_emitter.stream(backend_chunks()):
            yield event
