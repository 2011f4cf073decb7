"""Unit tests for completion response normalization."""

from types import SimpleNamespace

import pytest

from toolbridge.errors import MalformedToolArguments
from toolbridge.llm import (
    TextItem,
    ToolUseItem,
    normalize_content_blocks,
    normalize_message,
    parse_tool_arguments,
)


class TestNormalizeContentBlocks:
    """Tests for the content-item list shape."""

    def test_text_and_tool_use_keep_order(self):
        blocks = [
            SimpleNamespace(type="text", text="Let me look that up."),
            SimpleNamespace(
                type="tool_use",
                id="toolu_01",
                name="get-alerts",
                input={"state": "CA"},
            ),
            SimpleNamespace(type="text", text="One moment."),
        ]

        assert normalize_content_blocks(blocks) == [
            TextItem(text="Let me look that up."),
            ToolUseItem(name="get-alerts", arguments={"state": "CA"}, call_id="toolu_01"),
            TextItem(text="One moment."),
        ]

    def test_unknown_block_types_are_dropped(self):
        blocks = [
            {"type": "thinking", "thinking": "hmm"},
            {"type": "text", "text": "Answer"},
        ]

        assert normalize_content_blocks(blocks) == [TextItem(text="Answer")]

    def test_empty(self):
        assert normalize_content_blocks([]) == []


class TestNormalizeMessage:
    """Tests for the message-plus-tool_calls shape."""

    def test_text_comes_before_tool_calls(self):
        message = {
            "content": "Checking two things.",
            "tool_calls": [
                {
                    "id": "call_1",
                    "function": {"name": "get-forecast", "arguments": '{"latitude": 1, "longitude": 2}'},
                },
                {"function": {"name": "random-qing-hua", "arguments": {}}},
            ],
        }

        assert normalize_message(message) == [
            TextItem(text="Checking two things."),
            ToolUseItem(
                name="get-forecast",
                arguments='{"latitude": 1, "longitude": 2}',
                call_id="call_1",
            ),
            ToolUseItem(name="random-qing-hua", arguments={}),
        ]

    def test_empty_content_is_skipped(self):
        message = SimpleNamespace(
            content="",
            tool_calls=[
                SimpleNamespace(
                    id=None,
                    function=SimpleNamespace(name="get-alerts", arguments={"state": "NY"}),
                )
            ],
        )

        assert normalize_message(message) == [
            ToolUseItem(name="get-alerts", arguments={"state": "NY"})
        ]

    def test_text_only(self):
        assert normalize_message({"content": "Hello", "tool_calls": None}) == [
            TextItem(text="Hello")
        ]


class TestParseToolArguments:
    """Tests for tool argument decoding."""

    def test_mapping_is_copied(self):
        raw = {"state": "CA"}

        parsed = parse_tool_arguments(raw)

        assert parsed == {"state": "CA"}
        assert parsed is not raw

    def test_json_string(self):
        assert parse_tool_arguments('{"latitude": 38.58, "longitude": -121.49}') == {
            "latitude": 38.58,
            "longitude": -121.49,
        }

    @pytest.mark.parametrize("raw", [None, "", "   "])
    def test_missing_arguments_are_empty(self, raw):
        assert parse_tool_arguments(raw) == {}

    def test_invalid_json(self):
        with pytest.raises(MalformedToolArguments, match="not valid JSON"):
            parse_tool_arguments("{latitude: 38}")

    def test_non_object_json(self):
        with pytest.raises(MalformedToolArguments, match="must be a JSON object"):
            parse_tool_arguments("[1, 2]")

    def test_unsupported_type(self):
        with pytest.raises(MalformedToolArguments, match="Unsupported"):
            parse_tool_arguments(42)  # type: ignore[arg-type]
