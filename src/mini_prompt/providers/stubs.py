"""
Offline caller for tests and dry runs.

This caller doesn't contact any provider. It replays a script of responses
and records every call it receives.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass
from typing import Callable, Iterable, List, Sequence, Tuple, Union

from ..models import ModelInfo, ProviderKind
from ..types import CallBase, CallResp, FinishReason, Role, Text, ToolCall, Turn
from .base import ModelCaller

Responder = Callable[[CallBase, Sequence[Turn]], CallResp]
ScriptEntry = Union[CallResp, BaseException, Responder]

LOCAL_MODEL = ModelInfo(id="scripted", provider=ProviderKind.OPENAI)

_ids = itertools.count(1)


@dataclass(frozen=True)
class RecordedCall:
    """Arguments a ScriptedCaller received for one call."""

    params: CallBase
    turns: Tuple[Turn, ...]


class ScriptedCaller(ModelCaller):
    """
    Caller that replays queued responses.

    Each entry is a CallResp to return, an exception to raise, or a callable
    computing the response from ``(params, turns)``. Once the script runs out
    the last entry is repeated.
    """

    name = "scripted"

    def __init__(self, responses: Iterable[ScriptEntry], model: ModelInfo = LOCAL_MODEL):
        self.responses: List[ScriptEntry] = list(responses)
        if not self.responses:
            raise ValueError("ScriptedCaller requires at least one response.")
        self.model = model
        self.calls: List[RecordedCall] = []

    async def call(self, params: CallBase, turns: Sequence[Turn] = ()) -> CallResp:
        entry = self.responses[min(len(self.calls), len(self.responses) - 1)]
        self.calls.append(RecordedCall(params=params, turns=tuple(turns)))
        if isinstance(entry, BaseException):
            raise entry
        if isinstance(entry, CallResp):
            return entry
        return entry(params, turns)


def text_response(text: str, *, model: str = LOCAL_MODEL.id) -> CallResp:
    """Build a response that stops with a single text message."""
    return CallResp(
        id=f"scripted-{next(_ids)}",
        model=model,
        finish_reason=FinishReason.STOP,
        content=Turn(role=Role.ASSISTANT, content=(Text(text),)),
    )


def tool_call_response(
    *calls: Tuple[str, str], text: str = "", model: str = LOCAL_MODEL.id
) -> CallResp:
    """
    Build a response requesting tool calls.

    Args:
        calls: ``(name, arguments)`` pairs; ids are generated.
        text: Optional text emitted ahead of the calls.
    """
    tool_calls = [
        ToolCall(id=f"call_{next(_ids)}", name=name, arguments=arguments)
        for name, arguments in calls
    ]
    return CallResp(
        id=f"scripted-{next(_ids)}",
        model=model,
        finish_reason=FinishReason.TOOL_CALLS,
        content=Turn.assistant(text, tool_calls),
    )


__all__ = ["ScriptedCaller", "RecordedCall", "text_response", "tool_call_response", "LOCAL_MODEL"]
