"""
Core conversation types for provider-agnostic model calls.

These primitives are shared by the wire adapters, the callers, the tool
session, and tests. Every value here is immutable: a conversation grows by
appending new turns, never by editing old ones.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from .exceptions import ToolDefinitionError, TurnValidationError, UnexpectedFinishReasonError

JsonSchema = Dict[str, Any]

TOOL_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9_-]{1,64}$")
DEFAULT_MAX_TOKENS = 8192


class Role(str, Enum):
    """The source of the content in a turn."""

    USER = "user"
    SYSTEM = "system"
    ASSISTANT = "assistant"
    TOOL = "tool"


class FinishReason(str, Enum):
    """
    Canonical reason a model stopped generating tokens.

    Providers use their own vocabulary; adapters normalize into these values.
    """

    STOP = "stop"
    TOOL_CALLS = "tool_calls"
    LENGTH = "length"
    CONTENT_FILTER = "content_filter"

    @classmethod
    def parse(cls, term: Optional[str]) -> "FinishReason":
        """Map a canonical or Anthropic-style term onto a FinishReason."""
        if term in _FINISH_ALIASES:
            return _FINISH_ALIASES[term]
        try:
            return cls(term)
        except ValueError:
            raise UnexpectedFinishReasonError(term) from None

    def to_anthropic(self) -> str:
        """Return the Anthropic messages API term for this reason."""
        return _ANTHROPIC_TERMS[self]


_ANTHROPIC_TERMS = {
    FinishReason.STOP: "end_turn",
    FinishReason.TOOL_CALLS: "tool_use",
    FinishReason.LENGTH: "max_tokens",
    FinishReason.CONTENT_FILTER: "refusal",
}
_FINISH_ALIASES = {term: reason for reason, term in _ANTHROPIC_TERMS.items()}


@dataclass(frozen=True)
class Text:
    """Text tokens fed into or read from the model."""

    text: str

    type = "text"

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "text": self.text}


@dataclass(frozen=True)
class ToolCall:
    """
    A request from the model to run a tool.

    Attributes:
        id: Identifier the model assigned to this call.
        name: Name of the tool the model wants to run.
        arguments: Usually-JSON text describing the arguments.
    """

    id: str
    name: str
    arguments: str

    type = "tool_call"

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "id": self.id, "name": self.name, "arguments": self.arguments}


@dataclass(frozen=True)
class ToolResult:
    """The result of a tool call, answering the ToolCall with the same id."""

    id: str
    result: str

    type = "tool_result"

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "id": self.id, "result": self.result}


Message = Union[Text, ToolCall, ToolResult]


def message_from_dict(data: Dict[str, Any]) -> Message:
    """Rebuild a message from the tagged form produced by ``to_dict()``."""
    kind = data.get("type")
    if kind == Text.type:
        return Text(text=data["text"])
    if kind == ToolCall.type:
        return ToolCall(id=data["id"], name=data["name"], arguments=data["arguments"])
    if kind == ToolResult.type:
        return ToolResult(id=data["id"], result=data["result"])
    raise ValueError(f"unknown message type: {kind!r}")


@dataclass(frozen=True)
class Turn:
    """
    One role-tagged, ordered group of messages.

    User and system turns hold only text. Assistant turns hold text followed
    by tool calls with distinct ids. Tool turns hold only tool results.
    """

    role: Role
    content: Tuple[Message, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "role", Role(self.role))
        object.__setattr__(self, "content", tuple(self.content))
        self._validate()

    def _validate(self) -> None:
        if self.role in (Role.USER, Role.SYSTEM):
            for message in self.content:
                if not isinstance(message, Text):
                    raise TurnValidationError(
                        f"{self.role.value} turns may only contain text, got {message.type}"
                    )
        elif self.role == Role.ASSISTANT:
            seen_call = False
            ids = set()
            for message in self.content:
                if isinstance(message, ToolCall):
                    if message.id in ids:
                        raise TurnValidationError(f"duplicate tool call id in turn: {message.id}")
                    ids.add(message.id)
                    seen_call = True
                elif isinstance(message, Text):
                    if seen_call:
                        raise TurnValidationError("assistant text must precede tool calls")
                else:
                    raise TurnValidationError("assistant turns may not contain tool results")
        else:
            for message in self.content:
                if not isinstance(message, ToolResult):
                    raise TurnValidationError(
                        f"tool turns may only contain tool results, got {message.type}"
                    )

    @classmethod
    def text_turn(cls, role: Role, text: str) -> "Turn":
        """Build a turn holding a single text message."""
        return cls(role=role, content=(Text(text),))

    @classmethod
    def user(cls, text: str) -> "Turn":
        return cls.text_turn(Role.USER, text)

    @classmethod
    def system(cls, text: str) -> "Turn":
        return cls.text_turn(Role.SYSTEM, text)

    @classmethod
    def assistant(cls, text: str = "", tool_calls: Iterable[ToolCall] = ()) -> "Turn":
        content: List[Message] = [Text(text)] if text else []
        content.extend(tool_calls)
        return cls(role=Role.ASSISTANT, content=tuple(content))

    @classmethod
    def tool_results(cls, results: Iterable[ToolResult]) -> "Turn":
        return cls(role=Role.TOOL, content=tuple(results))

    @property
    def texts(self) -> List[str]:
        return [m.text for m in self.content if isinstance(m, Text)]

    @property
    def tool_calls(self) -> List[ToolCall]:
        return [m for m in self.content if isinstance(m, ToolCall)]

    @property
    def results(self) -> List[ToolResult]:
        return [m for m in self.content if isinstance(m, ToolResult)]

    @property
    def first_text(self) -> Optional[str]:
        """Text of the first message, if that message is text."""
        if self.content and isinstance(self.content[0], Text):
            return self.content[0].text
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Return a plain-JSON-safe representation for logging or debugging."""
        return {"role": self.role.value, "content": [m.to_dict() for m in self.content]}


def validate_transcript(turns: Sequence[Turn]) -> None:
    """
    Check that every tool turn answers the preceding assistant turn.

    Each tool turn must follow an assistant turn and hold exactly one result
    per tool call of that turn, in the same order.

    Raises:
        TurnValidationError: If the transcript breaks this rule.
    """
    previous: Optional[Turn] = None
    for index, turn in enumerate(turns):
        if turn.role == Role.TOOL:
            if previous is None or previous.role != Role.ASSISTANT:
                raise TurnValidationError(f"tool turn {index} does not follow an assistant turn")
            expected = [call.id for call in previous.tool_calls]
            got = [result.id for result in turn.results]
            if expected != got:
                raise TurnValidationError(
                    f"tool turn {index} answers {got}, expected {expected}"
                )
        previous = turn


def _default_parameters() -> JsonSchema:
    return {"type": "object", "properties": {}}


@dataclass(frozen=True)
class ToolInfo:
    """
    Describes a tool made available to a model.

    Attributes:
        name: a-z, A-Z, 0-9, underscores and dashes, at most 64 characters.
        description: What the tool does, shown to the model.
        parameters: JSON Schema object for the arguments. A tool without
            arguments uses ``{"type": "object", "properties": {}}``.
    """

    name: str
    description: str
    parameters: JsonSchema = field(default_factory=_default_parameters)

    def __post_init__(self) -> None:
        if not TOOL_NAME_PATTERN.match(self.name):
            raise ToolDefinitionError(
                self.name,
                "tool names must be 1-64 characters of a-z, A-Z, 0-9, '_' or '-'",
                suggestion=f"Try '{_suggest_tool_name(self.name)}'",
            )
        if self.parameters is None:
            object.__setattr__(self, "parameters", _default_parameters())


def _suggest_tool_name(name: str) -> str:
    cleaned = re.sub(r"[^a-zA-Z0-9_-]", "_", name)[:64]
    return cleaned or "my_tool"


@dataclass(frozen=True)
class CallBase:
    """
    The basic parameters for a (possibly multi-turn) model call.

    Attributes:
        system: Short persona text, e.g. "You are an expert software developer".
        instructions: Task-specific instructions.
        tools: Tools the model may call.
        temperature: Sampling temperature; provider default when None.
        max_tokens: Maximum output tokens.
    """

    system: str = ""
    instructions: str = ""
    tools: Tuple[ToolInfo, ...] = ()
    temperature: Optional[float] = None
    max_tokens: int = DEFAULT_MAX_TOKENS

    def __post_init__(self) -> None:
        object.__setattr__(self, "tools", tuple(self.tools))


@dataclass(frozen=True)
class CallResp:
    """
    The response from a model for generating a single turn.

    Attributes:
        id: Provider-specific identifier for this call.
        model: Identifier of the model that answered.
        finish_reason: Why the model stopped generating.
        content: The generated assistant turn.
    """

    id: str
    model: str
    finish_reason: FinishReason
    content: Turn

    @property
    def text(self) -> Optional[str]:
        """First text message of the response, if any."""
        texts = self.content.texts
        return texts[0] if texts else None


__all__ = [
    "Role",
    "FinishReason",
    "Text",
    "ToolCall",
    "ToolResult",
    "Message",
    "message_from_dict",
    "Turn",
    "validate_transcript",
    "ToolInfo",
    "CallBase",
    "CallResp",
    "JsonSchema",
    "DEFAULT_MAX_TOKENS",
]
