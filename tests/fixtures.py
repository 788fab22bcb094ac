"""
Test Fixtures

Sample payloads for testing protocol conversions.
"""

# =============================================================================
# Anthropic Messages Fixtures
# =============================================================================

ANTHROPIC_SIMPLE_REQUEST = {
    "model": "claude-sonnet-4-5",
    "max_tokens": 1024,
    "messages": [{"role": "user", "content": "Hello, how are you?"}],
}

ANTHROPIC_WITH_SYSTEM_REQUEST = {
    "model": "claude-sonnet-4-5",
    "max_tokens": 1024,
    "system": [
        {"type": "text", "text": "You are a helpful assistant."},
        {"type": "text", "text": "Answer briefly."},
    ],
    "messages": [{"role": "user", "content": "What is 2+2?"}],
    "temperature": 0.7,
    "top_p": 0.9,
    "stop_sequences": ["END"],
    "metadata": {"user_id": "user-123"},
}

WEATHER_TOOL = {
    "name": "get_weather",
    "description": "Get current weather for a location",
    "input_schema": {
        "type": "object",
        "properties": {"location": {"type": "string"}},
        "required": ["location"],
    },
}

ANTHROPIC_WITH_TOOLS_REQUEST = {
    "model": "claude-sonnet-4-5",
    "max_tokens": 1024,
    "system": "You are a weather bot.",
    "messages": [{"role": "user", "content": "What's the weather in Paris?"}],
    "tools": [WEATHER_TOOL],
    "tool_choice": {"type": "any"},
    "temperature": 0.9,
}

ANTHROPIC_TOOL_RESULT_REQUEST = {
    "model": "claude-sonnet-4-5",
    "max_tokens": 1024,
    "tools": [WEATHER_TOOL],
    "messages": [
        {"role": "user", "content": "What's the weather in Paris?"},
        {
            "role": "assistant",
            "content": [
                {"type": "text", "text": "Let me check."},
                {
                    "type": "tool_use",
                    "id": "toolu_01A09q90qw90lq917835lq9",
                    "name": "get_weather",
                    "input": {"location": "Paris"},
                },
            ],
        },
        {
            "role": "user",
            "content": [
                {
                    "type": "tool_result",
                    "tool_use_id": "toolu_01A09q90qw90lq917835lq9",
                    "content": [
                        {"type": "text", "text": "18C"},
                        {"type": "text", "text": "sunny"},
                    ],
                },
                {"type": "text", "text": "And tomorrow?"},
            ],
        },
    ],
}

ANTHROPIC_DUPLICATE_TOOL_IDS_REQUEST = {
    "model": "claude-sonnet-4-5",
    "max_tokens": 1024,
    "messages": [
        {"role": "user", "content": "Look it up twice."},
        {
            "role": "assistant",
            "content": [{"type": "tool_use", "id": "abc", "name": "lookup", "input": {"q": "1"}}],
        },
        {
            "role": "user",
            "content": [{"type": "tool_result", "tool_use_id": "abc", "content": "first"}],
        },
        {
            "role": "assistant",
            "content": [{"type": "tool_use", "id": "abc", "name": "lookup", "input": {"q": "2"}}],
        },
        {
            "role": "user",
            "content": [{"type": "tool_result", "tool_use_id": "abc", "content": "second"}],
        },
    ],
}

# =============================================================================
# OpenAI Chat Completions Fixtures
# =============================================================================

OPENAI_CHAT_SIMPLE_RESPONSE = {
    "id": "chatcmpl-123",
    "object": "chat.completion",
    "created": 1677652288,
    "model": "gpt-4o",
    "choices": [
        {
            "index": 0,
            "message": {"role": "assistant", "content": "I'm doing well, thank you!"},
            "finish_reason": "stop",
        }
    ],
    "usage": {"prompt_tokens": 10, "completion_tokens": 15, "total_tokens": 25},
}

OPENAI_CHAT_TOOL_CALL_RESPONSE = {
    "id": "chatcmpl-456",
    "object": "chat.completion",
    "created": 1677652288,
    "model": "gpt-4o",
    "choices": [
        {
            "index": 0,
            "message": {
                "role": "assistant",
                "content": "Checking both cities.",
                "tool_calls": [
                    {
                        "id": "call_paris",
                        "type": "function",
                        "function": {"name": "get_weather", "arguments": '{"location": "Paris"}'},
                    },
                    {
                        "id": "call_tokyo",
                        "type": "function",
                        "function": {"name": "get_weather", "arguments": "{location: Tokyo"},
                    },
                ],
            },
            "finish_reason": "tool_calls",
        }
    ],
    "usage": {
        "prompt_tokens": 80,
        "completion_tokens": 30,
        "total_tokens": 110,
        "prompt_tokens_details": {"cached_tokens": 64},
    },
}

OPENAI_CHAT_XML_RESPONSE = {
    "id": "chatcmpl-789",
    "object": "chat.completion",
    "created": 1677652288,
    "model": "local-llm",
    "choices": [
        {
            "index": 0,
            "message": {
                "role": "assistant",
                "content": (
                    "<think>the user wants weather</think>I'll check.\n"
                    '<tool_code name="get_weather">\n{"location": "Paris"}\n</tool_code>'
                ),
            },
            "finish_reason": "stop",
        }
    ],
    "usage": {"prompt_tokens": 50, "completion_tokens": 20, "total_tokens": 70},
}


def text_chunk(content, chunk_id="chatcmpl-stream", finish_reason=None):
    return {
        "id": chunk_id,
        "object": "chat.completion.chunk",
        "model": "gpt-4o",
        "choices": [{"index": 0, "delta": {"content": content}, "finish_reason": finish_reason}],
    }


def tool_call_chunk(index, arguments, tool_id=None, name=None, chunk_id="chatcmpl-stream"):
    call = {"index": index, "function": {"arguments": arguments}}
    if tool_id is not None:
        call["id"] = tool_id
        call["type"] = "function"
    if name is not None:
        call["function"]["name"] = name
    return {
        "id": chunk_id,
        "object": "chat.completion.chunk",
        "model": "gpt-4o",
        "choices": [{"index": 0, "delta": {"tool_calls": [call]}, "finish_reason": None}],
    }


def finish_chunk(finish_reason, chunk_id="chatcmpl-stream"):
    return {
        "id": chunk_id,
        "object": "chat.completion.chunk",
        "model": "gpt-4o",
        "choices": [{"index": 0, "delta": {}, "finish_reason": finish_reason}],
    }


def usage_chunk(prompt_tokens, completion_tokens, cached_tokens=None, chunk_id="chatcmpl-stream"):
    usage = {
        "prompt_tokens": prompt_tokens,
        "completion_tokens": completion_tokens,
        "total_tokens": prompt_tokens + completion_tokens,
    }
    if cached_tokens is not None:
        usage["prompt_tokens_details"] = {"cached_tokens": cached_tokens}
    return {
        "id": chunk_id,
        "object": "chat.completion.chunk",
        "model": "gpt-4o",
        "choices": [],
        "usage": usage,
    }


async def async_chunks(chunks):
    """Replay chunks as an async stream."""
    for chunk in chunks:
        yield chunk


async def failing_chunks(chunks, exc):
    """Replay chunks, then raise `exc` as a dropped connection would."""
    for chunk in chunks:
        yield chunk
    raise exc


async def collect(events):
    return [event async for event in events]


def event_names(events):
    return [event.event.value for event in events]


class RecordingHooksStub:
    """Keeps usage and error records in memory."""

    def __init__(self, fail=False):
        self.usage = []
        self.errors = []
        self.fail = fail

    def record_usage(self, record):
        if self.fail:
            raise RuntimeError("usage sink down")
        self.usage.append(record)

    def record_error(self, record):
        if self.fail:
            raise RuntimeError("error sink down")
        self.errors.append(record)
