"""
Tool Conversion Utilities

Tool declaration / tool choice encoding and tool-use identifier generation.
"""

import random
import string
from typing import Any, Dict, List, Optional, Union

from ..ir import IRToolChoice, IRToolDeclaration, ToolChoiceType

ID_ALPHABET = string.ascii_letters + string.digits
TOOL_USE_ID_PREFIX = "toolu_"
TOOL_USE_ID_LENGTH = 24


def random_id(rng: random.Random, length: int) -> str:
    """Draw `length` alphanumeric characters from `rng`."""
    return "".join(rng.choice(ID_ALPHABET) for _ in range(length))


def generate_tool_use_id(rng: Optional[random.Random] = None) -> str:
    """Generate an Anthropic-style tool use id, e.g. toolu_01AbC..."""
    return TOOL_USE_ID_PREFIX + random_id(rng or random.SystemRandom(), TOOL_USE_ID_LENGTH)


def encode_tools(tools: List[IRToolDeclaration]) -> List[Dict[str, Any]]:
    """Encode tool declarations as OpenAI function tools."""
    result = []
    for tool in tools:
        function: Dict[str, Any] = {"name": tool.name}
        if tool.description is not None:
            function["description"] = tool.description
        function["parameters"] = tool.parameters
        result.append({"type": "function", "function": function})
    return result


def encode_tool_choice(choice: IRToolChoice) -> Union[str, Dict[str, Any]]:
    """Encode tool choice in OpenAI format."""
    if choice.type == ToolChoiceType.ANY:
        return "required"
    if choice.type == ToolChoiceType.NONE:
        return "none"
    if choice.type == ToolChoiceType.SPECIFIC and choice.name:
        return {"type": "function", "function": {"name": choice.name}}
    return "auto"
