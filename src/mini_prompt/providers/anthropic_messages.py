"""
Wire adapter for Anthropic's messages API.

The messages API has no system role: the persona goes into a top-level
``system`` field and every other message alternates between user and
assistant, with tool results sent back as user content blocks.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from ..exceptions import (
    NoCompletionsError,
    ToolArgumentsError,
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
    Turn,
)

logger = logging.getLogger(__name__)

RESPONSE_TYPE = "message"


def tool_to_wire(info: ToolInfo) -> Dict[str, Any]:
    return {
        "name": info.name,
        "description": info.description,
        "input_schema": info.parameters,
    }


def _decode_arguments(call: ToolCall) -> Any:
    if not call.arguments.strip():
        return {}
    try:
        return json.loads(call.arguments)
    except json.JSONDecodeError as exc:
        raise ToolArgumentsError(call.name, call.arguments, exc) from exc


def _message_to_block(role: Role, message: Message) -> Dict[str, Any]:
    if isinstance(message, Text):
        wire_role = "assistant" if role == Role.ASSISTANT else "user"
        return {"role": wire_role, "content": [{"type": "text", "text": message.text}]}
    if isinstance(message, ToolCall):
        return {
            "role": "assistant",
            "content": [
                {
                    "type": "tool_use",
                    "id": message.id,
                    "name": message.name,
                    "input": _decode_arguments(message),
                }
            ],
        }
    return {
        "role": "user",
        "content": [
            {"type": "tool_result", "tool_use_id": message.id, "content": message.result}
        ],
    }


def coalesce(messages: Sequence[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Merge consecutive messages of the same role into multi-block messages."""
    merged: List[Dict[str, Any]] = []
    for message in messages:
        if merged and merged[-1]["role"] == message["role"]:
            merged[-1]["content"].extend(message["content"])
        else:
            merged.append({"role": message["role"], "content": list(message["content"])})
    return merged


def turn_to_wire(turn: Turn) -> List[Dict[str, Any]]:
    """Flatten a turn into messages API messages, one block per message."""
    return coalesce([_message_to_block(turn.role, message) for message in turn.content])


def build_request(model: ModelInfo, params: CallBase, turns: Sequence[Turn]) -> Dict[str, Any]:
    """Build a messages API request body."""
    turns = list(turns)
    system_parts = [params.system] if params.system else []
    if turns and turns[0].role == Role.SYSTEM:
        system_parts.extend(text for text in turns[0].texts if text)
        turns = turns[1:]
    system: Optional[str] = "\n\n".join(system_parts) or None

    messages: List[Dict[str, Any]] = []
    if params.instructions:
        messages.append(
            {"role": "user", "content": [{"type": "text", "text": params.instructions}]}
        )
    for turn in turns:
        messages.extend(turn_to_wire(turn))

    request: Dict[str, Any] = {
        "model": model.id,
        "max_tokens": params.max_tokens,
        "messages": coalesce(messages),
    }
    if system is not None:
        request["system"] = system
    if params.temperature is not None:
        request["temperature"] = params.temperature
    if params.tools:
        request["tools"] = [tool_to_wire(info) for info in params.tools]
        request["tool_choice"] = {"type": "auto"}
    return request


def _blocks_to_messages(blocks: Sequence[Mapping[str, Any]]) -> List[Message]:
    texts: List[Message] = []
    calls: List[Message] = []
    for block in blocks:
        kind = block.get("type")
        if kind == "text":
            texts.append(Text(block["text"]))
        elif kind == "tool_use":
            calls.append(
                ToolCall(
                    id=block["id"],
                    name=block["name"],
                    arguments=json.dumps(block.get("input") or {}),
                )
            )
        else:
            logger.debug("Skipping content block of type %r", kind)
    # Assistant turns keep their text ahead of their tool calls.
    return texts + calls


def parse_response(payload: Mapping[str, Any], model: ModelInfo) -> CallResp:
    """
    Validate a messages API response body and convert it to a CallResp.

    Raises:
        UnexpectedResponseError: The envelope holds an unexpected value.
        NoCompletionsError: The response has no content blocks.
        UnexpectedFinishReasonError: The model stopped for any reason other
            than end_turn or tool_use.
    """
    kind = payload.get("type", payload.get("object"))
    if kind is not None and kind != RESPONSE_TYPE:
        raise UnexpectedResponseError(f"unexpected value for 'object': {kind}")
    role = payload.get("role")
    if role is not None and role != Role.ASSISTANT.value:
        raise UnexpectedResponseError(f"unexpected value for 'role': {role}")

    blocks = payload.get("content") or []
    if not blocks:
        raise NoCompletionsError()

    finish_reason = FinishReason.parse(payload.get("stop_reason"))
    if finish_reason not in (FinishReason.STOP, FinishReason.TOOL_CALLS):
        raise UnexpectedFinishReasonError(finish_reason)

    try:
        turn = Turn(role=Role.ASSISTANT, content=tuple(_blocks_to_messages(blocks)))
    except (KeyError, TypeError, TurnValidationError) as exc:
        raise UnexpectedResponseError(f"malformed content block: {exc}") from exc

    return CallResp(
        id=payload.get("id") or "",
        model=payload.get("model") or model.id,
        finish_reason=finish_reason,
        content=turn,
    )


__all__ = ["tool_to_wire", "turn_to_wire", "coalesce", "build_request", "parse_response"]
