"""
XML Tool Instructions

Renders tool definitions into a system-prompt block that teaches a backend
without native function calling to emit <tool_code> markup.
"""

import json
from typing import Iterable

from ..ir import IRToolDeclaration

INSTRUCTIONS_HEADING = "# TOOL CALLING FORMAT"

_XML_ESCAPES = (
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&apos;"),
)

_INSTRUCTIONS_TEMPLATE = """
# TOOL CALLING FORMAT

You are required to use tools to fetch information or perform actions.
To invoke a tool, you MUST use the following EXACT XML format.
ANY deviation from this format will cause the tool call to fail.

<tool_code name="TOOL_NAME">
{{"argument_name": "value"}}
</tool_code>

## CRITICAL EXECUTION RULES:
1. **NO Markdown**: Do NOT wrap the XML in ```xml or ``` code blocks. Output the raw XML tags directly.
2. **Valid JSON**: The content between the tags MUST be valid, parseable JSON.
   - Use double quotes for keys and string values.
   - No trailing commas.
   - No comments using // or /*.
3. **Exact Name Match**: The `name` attribute MUST match a tool name from the "Available Tools" list exactly (case-sensitive).
4. **No Nested Content**: The JSON parameters must be the direct child of `tool_code`. Do not nest another `tool` or `function` tag inside.
5. **Thinking**: If you need to think or explain your reasoning, do so in text BEFORE the `<tool_code>` block. Do NOT put thoughts inside the tool code.
6. **Multiple Tools**: You may call multiple tools in sequence by outputting multiple `<tool_code>` blocks.

## EXAMPLE (Correct):
Thinking: I need to read the file.
<tool_code name="Read">
{{"file_path": "src/utils.ts"}}
</tool_code>

## EXAMPLES (Incorrect - DO NOT USE):
Wrapped in code blocks:
```xml
<tool_code name="Read">...</tool_code>
```

Nested tags:
<tool_code><tool name="Read">...</tool></tool_code>

Invalid JSON (keys not quoted):
<tool_code name="Read">
{{file_path: "src/utils.ts"}}
</tool_code>

## Available Tools:

{tool_definitions}
"""


def escape_xml(text: str) -> str:
    for char, entity in _XML_ESCAPES:
        text = text.replace(char, entity)
    return text


def _render_tool(tool: IRToolDeclaration) -> str:
    schema_json = json.dumps(tool.parameters, indent=2)
    return f"- **{tool.name}**: {escape_xml(tool.description or '')}\n  Parameters: {schema_json}"


def generate_xml_tool_instructions(tools: Iterable[IRToolDeclaration]) -> str:
    """
    Render the tool-calling instruction block.

    Args:
        tools: Tool declarations to list

    Returns:
        Instruction text, or "" when there are no tools
    """
    tools = list(tools or [])
    if not tools:
        return ""
    tool_definitions = "\n\n".join(_render_tool(tool) for tool in tools)
    return _INSTRUCTIONS_TEMPLATE.format(tool_definitions=tool_definitions)


def has_xml_tool_instructions(system_prompt: str) -> bool:
    """Check whether a system prompt already carries the instruction block."""
    return INSTRUCTIONS_HEADING in system_prompt and "<tool_code" in system_prompt
