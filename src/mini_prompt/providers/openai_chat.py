"""
Wire adapter for OpenAI-compatible chat completions APIs.

Used for OpenAI itself and for Openrouter. Functions here are pure: they turn
conversation values into request bodies and response bodies back into
conversation values, leaving the network round-trip to the caller.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from ..exceptions import (
    NoCompletionsError,
    TurnValidationError,
    UnexpectedFinishReasonError,
    UnexpectedResponseError,
)
from ..models import ModelInfo
from ..types import (
    CallBase,
    CallResp,
    FinishReason,
    Message,
    Role,
    Text,
    ToolCall,
    ToolInfo,
    ToolResult,
    Turn,
)

logger = logging.getLogger(__name__)

RESPONSE_OBJECT = "chat.completion"


def combine_system_prompt(system: str, instructions: str) -> Optional[str]:
    """Merge persona and instructions into one stanza, or None when both are empty."""
    if system and instructions:
        return system + "\n\n" + instructions
    return system or instructions or None


def tool_to_wire(info: ToolInfo) -> Dict[str, Any]:
    return {
        "type": "function",
        "function": {
            "name": info.name,
            "description": info.description,
            "parameters": info.parameters,
        },
    }


def _message_to_wire(role: Role, message: Message) -> Dict[str, Any]:
    if role in (Role.USER, Role.SYSTEM):
        assert isinstance(message, Text)
        return {"role": role.value, "content": message.text}
    if role == Role.ASSISTANT:
        if isinstance(message, Text):
            return {"role": "assistant", "content": message.text}
        assert isinstance(message, ToolCall)
        # Merged into the preceding assistant message by turn_to_wire().
        return {
            "role": "assistant",
            "content": None,
            "tool_calls": [
                {
                    "id": message.id,
                    "type": "function",
                    "function": {"name": message.name, "arguments": message.arguments},
                }
            ],
        }
    assert isinstance(message, ToolResult)
    return {"role": "tool", "tool_call_id": message.id, "content": message.result}


def turn_to_wire(turn: Turn) -> List[Dict[str, Any]]:
    """
    Flatten a turn into chat messages.

    Every message becomes one wire message, except that tool calls are folded
    into the preceding assistant message: the API expects all tool calls of a
    response in a single message.
    """
    wire: List[Dict[str, Any]] = []
    for message in turn.content:
        current = _message_to_wire(turn.role, message)
        if (
            wire
            and wire[-1]["role"] == "assistant"
            and current["role"] == "assistant"
            and current["content"] is None
        ):
            wire[-1].setdefault("tool_calls", []).extend(current["tool_calls"])
            continue
        wire.append(current)
    return wire


def build_request(model: ModelInfo, params: CallBase, turns: Sequence[Turn]) -> Dict[str, Any]:
    """Build a chat completions request body."""
    messages: List[Dict[str, Any]] = []
    system_prompt = combine_system_prompt(params.system, params.instructions)
    if system_prompt is not None:
        messages.append(model.make_prompt(system_prompt))
    for turn in turns:
        messages.extend(turn_to_wire(turn))

    request: Dict[str, Any] = {
        "model": model.id,
        "messages": messages,
        "max_tokens": params.max_tokens,
    }
    if params.temperature is not None:
        request["temperature"] = params.temperature
    if params.tools:
        request["tools"] = [tool_to_wire(info) for info in params.tools]
        request["tool_choice"] = "auto"
    return request


def _tool_call_from_wire(data: Mapping[str, Any]) -> ToolCall:
    function = data["function"]
    return ToolCall(
        id=data["id"],
        name=function["name"],
        arguments=function.get("arguments") or "",
    )


def parse_response(payload: Mapping[str, Any], model: ModelInfo) -> CallResp:
    """
    Validate a chat completions response body and convert it to a CallResp.

    Raises:
        UnexpectedResponseError: The envelope holds an unexpected value.
        NoCompletionsError: The response has no choices.
        UnexpectedFinishReasonError: The model stopped for any reason other
            than stop or tool calls.
    """
    obj = payload.get("object")
    if obj is not None and obj != RESPONSE_OBJECT:
        raise UnexpectedResponseError(f"unexpected value for 'object': {obj}")

    choices = payload.get("choices") or []
    if not choices:
        raise NoCompletionsError()

    choice = choices[0]
    finish_reason = FinishReason.parse(choice.get("finish_reason"))
    if finish_reason not in (FinishReason.STOP, FinishReason.TOOL_CALLS):
        raise UnexpectedFinishReasonError(finish_reason)

    message = choice.get("message") or {}
    role = message.get("role")
    if role is not None and role != Role.ASSISTANT.value:
        raise UnexpectedResponseError(f"unexpected value for 'role': {role}")

    content: List[Message] = []
    if message.get("content") is not None:
        content.append(Text(message["content"]))
    try:
        content.extend(_tool_call_from_wire(tc) for tc in message.get("tool_calls") or [])
        turn = Turn(role=Role.ASSISTANT, content=tuple(content))
    except (KeyError, TypeError, TurnValidationError) as exc:
        raise UnexpectedResponseError(f"malformed completion message: {exc}") from exc

    logger.debug(
        "Parsed completion %s: finish_reason=%s, %d message(s)",
        payload.get("id"),
        finish_reason.value,
        len(turn.content),
    )
    return CallResp(
        id=payload.get("id") or "",
        model=payload.get("model") or model.id,
        finish_reason=finish_reason,
        content=turn,
    )


__all__ = [
    "combine_system_prompt",
    "tool_to_wire",
    "turn_to_wire",
    "build_request",
    "parse_response",
]
