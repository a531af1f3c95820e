"""Tests for format detection and normalization into UniformEvent."""

from __future__ import annotations

from session_stream.shared.models.usage import Cost, Usage
from session_stream.shared.services.transcript_stream import detect_format, normalize_record


class TestDetectFormat:
    def test_top_level_role_is_flat(self):
        assert detect_format({"role": "user", "content": "hi"}).format_name == "flat"

    def test_message_role_is_nested(self):
        record = {"type": "message", "message": {"role": "user", "content": "hi"}}
        assert detect_format(record).format_name == "nested"

    def test_message_role_wins_over_top_level_role(self):
        record = {"role": "user", "message": {"role": "assistant"}}
        assert detect_format(record).format_name == "nested"

    def test_message_without_role_and_top_level_role_is_flat(self):
        assert detect_format({"role": "system", "message": {"text": "x"}}).format_name == "flat"

    def test_unrecognizable_defaults_to_nested(self):
        assert detect_format({}).format_name == "nested"
        assert detect_format({"role": 3}).format_name == "nested"


class TestNestedNormalize:
    def test_fields(self):
        event = normalize_record({
            "type": "message",
            "timestamp": 1708770601000,
            "message": {
                "role": "assistant",
                "content": [{"type": "text", "text": "hi"}],
                "usage": {"output": 5, "totalTokens": 100, "cost": {"total": 0.1}},
            },
        })
        assert event.role == "assistant"
        assert event.content == [{"type": "text", "text": "hi"}]
        assert event.usage == Usage(output=5, total_tokens=100, cost=Cost(total=0.1))
        assert event.timestamp == 1708770601000

    def test_ts_preferred_over_timestamp(self):
        event = normalize_record({
            "ts": "2024-02-24T10:30:00Z",
            "timestamp": 1708770601000,
            "message": {"role": "user"},
        })
        assert event.timestamp == "2024-02-24T10:30:00Z"

    def test_empty_ts_falls_back_to_timestamp(self):
        event = normalize_record({"ts": "", "timestamp": "2024-02-24T10:30:00Z", "message": {"role": "user"}})
        assert event.timestamp == "2024-02-24T10:30:00Z"

    def test_boolean_timestamp_ignored(self):
        event = normalize_record({"timestamp": True, "message": {"role": "user"}})
        assert event.timestamp is None

    def test_missing_message_gives_empty_role(self):
        event = normalize_record({"type": "session", "version": 3})
        assert event.role == ""
        assert event.usage is None

    def test_non_mapping_usage_ignored(self):
        event = normalize_record({"message": {"role": "assistant", "usage": "lots"}})
        assert event.usage is None


class TestFlatNormalize:
    def test_usage_total_mirrors_input_tokens(self):
        event = normalize_record({
            "role": "assistant",
            "content": "x",
            "in_tokens": 100,
            "out_tokens": 20,
            "cost_usd": 0.0123,
        })
        assert event.usage == Usage(input=100, output=20, total_tokens=100, cost=Cost(total=0.0123))

    def test_zero_cost_has_no_cost(self):
        event = normalize_record({"role": "assistant", "in_tokens": 1, "cost_usd": 0})
        assert event.usage is not None
        assert event.usage.cost is None

    def test_unusable_cost_dropped(self):
        for cost in (10**400, float("nan"), float("inf")):
            event = normalize_record({"role": "assistant", "in_tokens": 1, "cost_usd": cost})
            assert event.usage == Usage(input=1, total_tokens=1)

    def test_no_tokens_no_usage(self):
        event = normalize_record({"role": "assistant", "cost_usd": 1.5})
        assert event.usage is None

    def test_only_output_tokens(self):
        event = normalize_record({"role": "assistant", "out_tokens": 7})
        assert event.usage == Usage(output=7)

    def test_ts_string_only(self):
        assert normalize_record({"role": "user", "ts": "2024-02-24T10:30:00Z"}).timestamp == "2024-02-24T10:30:00Z"
        assert normalize_record({"role": "user", "ts": 12}).timestamp is None

    def test_tool_fields(self):
        event = normalize_record({
            "role": "tool_call",
            "tool_name": "shell",
            "tool_input": {"command": "ls"},
        })
        assert event.tool_name == "shell"
        assert event.tool_input == {"command": "ls"}
        assert event.is_error is False

    def test_tool_input_must_be_mapping_and_is_error_strict(self):
        event = normalize_record({
            "role": "tool_result",
            "tool_input": ["ls"],
            "is_error": "yes",
        })
        assert event.tool_input is None
        assert event.is_error is False
