"""
Anthropic Request Validation

Validates inbound Anthropic Messages request bodies before conversion.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, StrictBool, field_validator
from pydantic import ValidationError as PydanticValidationError


class MessageModel(BaseModel):
    """A single conversation message."""

    model_config = ConfigDict(extra="allow")

    role: Literal["user", "assistant"]
    content: Union[str, List[Dict[str, Any]]]

    @field_validator("content", mode="before")
    @classmethod
    def check_content(cls, value: Any) -> Any:
        if value is None:
            raise ValueError("content is required")
        if isinstance(value, str):
            return value
        if not isinstance(value, list):
            raise ValueError("content must be a string or array")
        for index, block in enumerate(value):
            if not isinstance(block, dict):
                raise ValueError(f"content[{index}] must be an object")
            if not isinstance(block.get("type"), str):
                raise ValueError(f"content[{index}].type is required")
        return value


class MessagesRequestModel(BaseModel):
    """The parts of an Anthropic Messages request the adapter relies on."""

    model_config = ConfigDict(extra="allow")

    model: str = Field(min_length=1)
    max_tokens: int = Field(gt=0)
    messages: List[MessageModel] = Field(min_length=1)
    temperature: Optional[float] = Field(default=None, ge=0, le=1)
    top_p: Optional[float] = Field(default=None, ge=0, le=1)
    stream: Optional[StrictBool] = None


@dataclass
class ValidationResult:
    """Outcome of request validation."""
    valid: bool
    errors: List[Dict[str, str]] = field(default_factory=list)


def _format_loc(loc: Tuple[Any, ...]) -> str:
    path = ""
    for part in loc:
        if isinstance(part, int):
            path += f"[{part}]"
        elif path:
            path += f".{part}"
        else:
            path = str(part)
    return path or "body"


def _clean_message(message: str) -> str:
    prefix = "Value error, "
    if message.startswith(prefix):
        return message[len(prefix):]
    return message


def validate_messages_request(payload: Any) -> ValidationResult:
    """
    Validate an Anthropic Messages request body.

    Returns:
        ValidationResult with one {"field", "message"} entry per problem
    """
    if not isinstance(payload, dict):
        return ValidationResult(
            valid=False,
            errors=[{"field": "body", "message": "Request body must be an object"}],
        )

    try:
        MessagesRequestModel.model_validate(payload)
    except PydanticValidationError as exc:
        errors = [
            {"field": _format_loc(err["loc"]), "message": _clean_message(err["msg"])}
            for err in exc.errors()
        ]
        return ValidationResult(valid=False, errors=errors)

    return ValidationResult(valid=True)


def format_validation_errors(errors: List[Dict[str, str]]) -> str:
    """Join validation errors as "field: message; field: message"."""
    return "; ".join(f"{err['field']}: {err['message']}" for err in errors)
