"""
Tests for the OpenAI-compatible chat completions adapter.

Uses plain dict payloads shaped like the API's JSON. No API keys required.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import pytest

from mini_prompt.exceptions import (
    NoCompletionsError,
    UnexpectedFinishReasonError,
    UnexpectedResponseError,
)
from mini_prompt.models import OpenAI, Openrouter
from mini_prompt.providers import openai_chat
from mini_prompt.types import (
    CallBase,
    FinishReason,
    Role,
    Text,
    ToolCall,
    ToolInfo,
    ToolResult,
    Turn,
)

FLUBB = ToolInfo(name="flubb", description="Performs the flubb action.")


def completion(
    content: Optional[str] = "Hello!",
    finish_reason: Optional[str] = "stop",
    tool_calls: Optional[List[Dict[str, Any]]] = None,
    **overrides: Any,
) -> Dict[str, Any]:
    message: Dict[str, Any] = {"role": "assistant", "content": content}
    if tool_calls is not None:
        message["tool_calls"] = tool_calls
    payload: Dict[str, Any] = {
        "id": "chatcmpl-123",
        "object": "chat.completion",
        "model": "gpt-4o-mini-2024-07-18",
        "choices": [{"index": 0, "message": message, "finish_reason": finish_reason}],
    }
    payload.update(overrides)
    return payload


def wire_call(call_id: str, name: str, arguments: str) -> Dict[str, Any]:
    return {"id": call_id, "type": "function", "function": {"name": name, "arguments": arguments}}


class TestSystemPrompt:
    """Tests for persona and instruction handling."""

    def test_combine(self) -> None:
        assert openai_chat.combine_system_prompt("persona", "task") == "persona\n\ntask"
        assert openai_chat.combine_system_prompt("persona", "") == "persona"
        assert openai_chat.combine_system_prompt("", "task") == "task"
        assert openai_chat.combine_system_prompt("", "") is None

    def test_system_message_first(self) -> None:
        request = openai_chat.build_request(
            OpenAI.GPT_4O_MINI,
            CallBase(system="You are terse.", instructions="Say hi."),
            [Turn.user("hello")],
        )
        assert request["messages"] == [
            {"role": "system", "content": "You are terse.\n\nSay hi."},
            {"role": "user", "content": "hello"},
        ]

    def test_no_system_message_when_empty(self) -> None:
        request = openai_chat.build_request(OpenAI.GPT_4O_MINI, CallBase(), [Turn.user("hi")])
        assert request["messages"] == [{"role": "user", "content": "hi"}]

    def test_model_without_system_role(self) -> None:
        request = openai_chat.build_request(Openrouter.PHI_4, CallBase(instructions="Say hi."), [])
        assert request["messages"] == [{"role": "user", "content": "Say hi."}]


class TestBuildRequest:
    """Tests for build_request()."""

    def test_basic_fields(self) -> None:
        request = openai_chat.build_request(OpenAI.GPT_4O, CallBase(instructions="x"), [])
        assert request["model"] == "gpt-4o"
        assert request["max_tokens"] == 8192
        assert "temperature" not in request
        assert "tools" not in request

    def test_temperature(self) -> None:
        request = openai_chat.build_request(OpenAI.GPT_4O, CallBase(temperature=0.2), [])
        assert request["temperature"] == 0.2

    def test_tools(self) -> None:
        request = openai_chat.build_request(OpenAI.GPT_4O, CallBase(tools=[FLUBB]), [])
        assert request["tool_choice"] == "auto"
        assert request["tools"] == [
            {
                "type": "function",
                "function": {
                    "name": "flubb",
                    "description": "Performs the flubb action.",
                    "parameters": {"type": "object", "properties": {}},
                },
            }
        ]

    def test_tool_exchange_flattening(self) -> None:
        turns = [
            Turn.user("Go ahead and flubb for me"),
            Turn.assistant(
                "Sure.",
                [ToolCall("call_1", "flubb", "{}"), ToolCall("call_2", "flubb", '{"n": 2}')],
            ),
            Turn.tool_results([ToolResult("call_1", "ok"), ToolResult("call_2", "ok too")]),
        ]
        request = openai_chat.build_request(OpenAI.GPT_4O, CallBase(), turns)
        assert request["messages"] == [
            {"role": "user", "content": "Go ahead and flubb for me"},
            {
                "role": "assistant",
                "content": "Sure.",
                "tool_calls": [
                    wire_call("call_1", "flubb", "{}"),
                    wire_call("call_2", "flubb", '{"n": 2}'),
                ],
            },
            {"role": "tool", "tool_call_id": "call_1", "content": "ok"},
            {"role": "tool", "tool_call_id": "call_2", "content": "ok too"},
        ]

    def test_calls_without_text_share_one_message(self) -> None:
        turn = Turn.assistant(tool_calls=[ToolCall("a", "x", ""), ToolCall("b", "y", "")])
        wire = openai_chat.turn_to_wire(turn)
        assert len(wire) == 1
        assert wire[0]["content"] is None
        assert [tc["id"] for tc in wire[0]["tool_calls"]] == ["a", "b"]

    def test_multiple_texts_stay_separate(self) -> None:
        turn = Turn(role=Role.USER, content=(Text("one"), Text("two")))
        assert openai_chat.turn_to_wire(turn) == [
            {"role": "user", "content": "one"},
            {"role": "user", "content": "two"},
        ]


class TestParseResponse:
    """Tests for parse_response()."""

    def test_text_response(self) -> None:
        resp = openai_chat.parse_response(completion(), OpenAI.GPT_4O_MINI)
        assert resp.id == "chatcmpl-123"
        assert resp.model == "gpt-4o-mini-2024-07-18"
        assert resp.finish_reason == FinishReason.STOP
        assert resp.content == Turn.assistant("Hello!")

    def test_tool_calls_response(self) -> None:
        payload = completion(
            content=None,
            finish_reason="tool_calls",
            tool_calls=[wire_call("call_1", "flubb", "{}")],
        )
        resp = openai_chat.parse_response(payload, OpenAI.GPT_4O_MINI)
        assert resp.finish_reason == FinishReason.TOOL_CALLS
        assert resp.content.tool_calls == [ToolCall("call_1", "flubb", "{}")]
        assert resp.content.first_text is None

    def test_text_precedes_tool_calls(self) -> None:
        payload = completion(
            content="Let me check.",
            finish_reason="tool_calls",
            tool_calls=[wire_call("call_1", "flubb", "{}")],
        )
        resp = openai_chat.parse_response(payload, OpenAI.GPT_4O_MINI)
        assert isinstance(resp.content.content[0], Text)
        assert isinstance(resp.content.content[1], ToolCall)

    def test_model_falls_back_to_requested(self) -> None:
        resp = openai_chat.parse_response(completion(model=""), OpenAI.GPT_4O_MINI)
        assert resp.model == "gpt-4o-mini"

    def test_wrong_object(self) -> None:
        with pytest.raises(UnexpectedResponseError, match="object"):
            openai_chat.parse_response(completion(object="list"), OpenAI.GPT_4O_MINI)

    def test_no_choices(self) -> None:
        with pytest.raises(NoCompletionsError):
            openai_chat.parse_response(completion(choices=[]), OpenAI.GPT_4O_MINI)

    @pytest.mark.parametrize("reason", ["length", "content_filter"])
    def test_unexpected_finish_reason(self, reason: str) -> None:
        with pytest.raises(UnexpectedFinishReasonError):
            openai_chat.parse_response(completion(finish_reason=reason), OpenAI.GPT_4O_MINI)

    def test_unknown_finish_reason(self) -> None:
        with pytest.raises(UnexpectedFinishReasonError):
            openai_chat.parse_response(completion(finish_reason="weird"), OpenAI.GPT_4O_MINI)

    def test_wrong_role(self) -> None:
        payload = completion()
        payload["choices"][0]["message"]["role"] = "user"
        with pytest.raises(UnexpectedResponseError, match="role"):
            openai_chat.parse_response(payload, OpenAI.GPT_4O_MINI)

    def test_malformed_tool_call(self) -> None:
        payload = completion(
            content=None, finish_reason="tool_calls", tool_calls=[{"id": "call_1"}]
        )
        with pytest.raises(UnexpectedResponseError, match="malformed"):
            openai_chat.parse_response(payload, OpenAI.GPT_4O_MINI)
