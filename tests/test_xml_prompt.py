"""
Unit Tests for XML Tool Instructions
"""

import json

from claude_adapter.converters.xml_prompt import (
    INSTRUCTIONS_HEADING,
    escape_xml,
    generate_xml_tool_instructions,
    has_xml_tool_instructions,
)
from claude_adapter.ir import IRToolDeclaration


def _tool(name="get_weather", description="Get weather", parameters=None):
    return IRToolDeclaration(
        name=name,
        description=description,
        parameters=parameters or {"type": "object", "properties": {"city": {"type": "string"}}},
    )


class TestGenerateInstructions:
    """Tests for generate_xml_tool_instructions."""

    def test_no_tools(self):
        assert generate_xml_tool_instructions([]) == ""
        assert generate_xml_tool_instructions(None) == ""

    def test_lists_every_tool_with_schema(self):
        tools = [_tool(), _tool(name="search", description="Search the web")]
        text = generate_xml_tool_instructions(tools)

        assert INSTRUCTIONS_HEADING in text
        assert "- **get_weather**: Get weather" in text
        assert "- **search**: Search the web" in text
        assert json.dumps(tools[0].parameters, indent=2) in text
        assert text.index("get_weather") < text.index("**search**")

    def test_template_braces_are_literal(self):
        text = generate_xml_tool_instructions([_tool()])
        assert '{"argument_name": "value"}' in text
        assert '{"file_path": "src/utils.ts"}' in text

    def test_description_is_escaped(self):
        text = generate_xml_tool_instructions([_tool(description='Compare a < b & "c"')])
        assert "Compare a &lt; b &amp; &quot;c&quot;" in text

    def test_missing_description(self):
        text = generate_xml_tool_instructions([_tool(description=None)])
        assert "- **get_weather**: \n  Parameters:" in text


class TestInstructionDetection:
    """Tests for has_xml_tool_instructions."""

    def test_generated_block_is_detected(self):
        assert has_xml_tool_instructions(generate_xml_tool_instructions([_tool()]))

    def test_heading_alone_is_not_enough(self):
        assert not has_xml_tool_instructions(INSTRUCTIONS_HEADING)

    def test_plain_prompt(self):
        assert not has_xml_tool_instructions("You are a helpful assistant.")


def test_escape_xml():
    assert escape_xml("<a href='x'>&</a>") == "&lt;a href=&apos;x&apos;&gt;&amp;&lt;/a&gt;"
