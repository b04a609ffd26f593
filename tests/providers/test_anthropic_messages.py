"""
Tests for the Anthropic messages API adapter.

Uses plain dict payloads shaped like the API's JSON. No API keys required.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import pytest

from mini_prompt.exceptions import (
    NoCompletionsError,
    ToolArgumentsError,
    UnexpectedFinishReasonError,
    UnexpectedResponseError,
)
from mini_prompt.models import Anthropic
from mini_prompt.providers import anthropic_messages
from mini_prompt.types import (
    CallBase,
    FinishReason,
    Text,
    ToolCall,
    ToolInfo,
    ToolResult,
    Turn,
)

HAIKU = Anthropic.CLAUDE_HAIKU_3_5


def message(
    content: Optional[List[Dict[str, Any]]] = None,
    stop_reason: Optional[str] = "end_turn",
    **overrides: Any,
) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "id": "msg_01",
        "type": "message",
        "role": "assistant",
        "model": "claude-3-5-haiku-20241022",
        "content": [{"type": "text", "text": "Hello!"}] if content is None else content,
        "stop_reason": stop_reason,
    }
    payload.update(overrides)
    return payload


def text_block(text: str) -> Dict[str, Any]:
    return {"type": "text", "text": text}


class TestBuildRequest:
    """Tests for build_request()."""

    def test_system_and_instructions(self) -> None:
        request = anthropic_messages.build_request(
            HAIKU,
            CallBase(system="You are terse.", instructions="Say hi."),
            [Turn.user("hello")],
        )
        assert request["system"] == "You are terse."
        # Instructions and the first user turn share one user message.
        assert request["messages"] == [
            {"role": "user", "content": [text_block("Say hi."), text_block("hello")]}
        ]

    def test_no_system_field_when_empty(self) -> None:
        request = anthropic_messages.build_request(HAIKU, CallBase(instructions="x"), [])
        assert "system" not in request
        assert request["max_tokens"] == 8192
        assert request["model"] == "claude-3-5-haiku-latest"

    def test_leading_system_turn_hoisted(self) -> None:
        request = anthropic_messages.build_request(
            HAIKU,
            CallBase(system="Persona."),
            [Turn.system("Extra rules."), Turn.user("hi")],
        )
        assert request["system"] == "Persona.\n\nExtra rules."
        assert request["messages"] == [{"role": "user", "content": [text_block("hi")]}]

    def test_tools_and_temperature(self) -> None:
        info = ToolInfo(name="flubb", description="Performs the flubb action.")
        request = anthropic_messages.build_request(
            HAIKU, CallBase(tools=[info], temperature=0.0), []
        )
        assert request["temperature"] == 0.0
        assert request["tool_choice"] == {"type": "auto"}
        assert request["tools"] == [
            {
                "name": "flubb",
                "description": "Performs the flubb action.",
                "input_schema": {"type": "object", "properties": {}},
            }
        ]

    def test_tool_exchange_blocks(self) -> None:
        turns = [
            Turn.user("Go ahead and flubb for me"),
            Turn.assistant(
                "Sure.",
                [ToolCall("toolu_1", "flubb", ""), ToolCall("toolu_2", "flubb", '{"n": 2}')],
            ),
            Turn.tool_results([ToolResult("toolu_1", "ok"), ToolResult("toolu_2", "ok too")]),
        ]
        request = anthropic_messages.build_request(HAIKU, CallBase(), turns)
        assert request["messages"] == [
            {"role": "user", "content": [text_block("Go ahead and flubb for me")]},
            {
                "role": "assistant",
                "content": [
                    text_block("Sure."),
                    {"type": "tool_use", "id": "toolu_1", "name": "flubb", "input": {}},
                    {"type": "tool_use", "id": "toolu_2", "name": "flubb", "input": {"n": 2}},
                ],
            },
            {
                "role": "user",
                "content": [
                    {"type": "tool_result", "tool_use_id": "toolu_1", "content": "ok"},
                    {"type": "tool_result", "tool_use_id": "toolu_2", "content": "ok too"},
                ],
            },
        ]

    def test_tool_results_merge_with_following_user_text(self) -> None:
        turns = [
            Turn.assistant(tool_calls=[ToolCall("toolu_1", "flubb", "{}")]),
            Turn.tool_results([ToolResult("toolu_1", "ok")]),
            Turn.user("thanks"),
        ]
        messages = anthropic_messages.build_request(HAIKU, CallBase(), turns)["messages"]
        assert [m["role"] for m in messages] == ["assistant", "user"]
        assert messages[1]["content"][1] == text_block("thanks")

    def test_undecodable_arguments(self) -> None:
        turns = [Turn.assistant(tool_calls=[ToolCall("toolu_1", "flubb", "{not json")])]
        with pytest.raises(ToolArgumentsError):
            anthropic_messages.build_request(HAIKU, CallBase(), turns)

    def test_coalesce_does_not_mutate_input(self) -> None:
        first = {"role": "user", "content": [text_block("a")]}
        second = {"role": "user", "content": [text_block("b")]}
        merged = anthropic_messages.coalesce([first, second])
        assert merged == [{"role": "user", "content": [text_block("a"), text_block("b")]}]
        assert first["content"] == [text_block("a")]


class TestParseResponse:
    """Tests for parse_response()."""

    def test_text_response(self) -> None:
        resp = anthropic_messages.parse_response(message(), HAIKU)
        assert resp.id == "msg_01"
        assert resp.model == "claude-3-5-haiku-20241022"
        assert resp.finish_reason == FinishReason.STOP
        assert resp.content == Turn.assistant("Hello!")

    def test_tool_use_response(self) -> None:
        payload = message(
            content=[
                text_block("Let me flubb."),
                {"type": "tool_use", "id": "toolu_1", "name": "flubb", "input": {"n": 1}},
            ],
            stop_reason="tool_use",
        )
        resp = anthropic_messages.parse_response(payload, HAIKU)
        assert resp.finish_reason == FinishReason.TOOL_CALLS
        assert resp.content.first_text == "Let me flubb."
        assert resp.content.tool_calls == [ToolCall("toolu_1", "flubb", '{"n": 1}')]

    def test_text_after_tool_use_is_reordered(self) -> None:
        payload = message(
            content=[
                {"type": "tool_use", "id": "toolu_1", "name": "flubb", "input": {}},
                text_block("trailing"),
            ],
            stop_reason="tool_use",
        )
        resp = anthropic_messages.parse_response(payload, HAIKU)
        assert resp.content.content == (Text("trailing"), ToolCall("toolu_1", "flubb", "{}"))

    def test_unknown_blocks_skipped(self) -> None:
        payload = message(content=[{"type": "thinking", "thinking": "hmm"}, text_block("hi")])
        resp = anthropic_messages.parse_response(payload, HAIKU)
        assert resp.content == Turn.assistant("hi")

    def test_wrong_type(self) -> None:
        with pytest.raises(UnexpectedResponseError, match="object"):
            anthropic_messages.parse_response(message(type="error"), HAIKU)

    def test_wrong_role(self) -> None:
        with pytest.raises(UnexpectedResponseError, match="role"):
            anthropic_messages.parse_response(message(role="user"), HAIKU)

    def test_empty_content(self) -> None:
        with pytest.raises(NoCompletionsError):
            anthropic_messages.parse_response(message(content=[]), HAIKU)

    @pytest.mark.parametrize("reason", ["max_tokens", "refusal", "pause_turn", None])
    def test_unexpected_stop_reason(self, reason: Optional[str]) -> None:
        with pytest.raises(UnexpectedFinishReasonError):
            anthropic_messages.parse_response(message(stop_reason=reason), HAIKU)

    def test_malformed_block(self) -> None:
        payload = message(content=[{"type": "tool_use", "id": "toolu_1"}], stop_reason="tool_use")
        with pytest.raises(UnexpectedResponseError, match="malformed"):
            anthropic_messages.parse_response(payload, HAIKU)
