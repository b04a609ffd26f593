"""
Tool-calling session: a caller that runs requested tools until the model stops.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Dict, List, Optional, Sequence, Tuple

from ..exceptions import (
    NoCompletionsError,
    ToolDefinitionError,
    ToolFailedError,
    ToolIterationsExceededError,
    UnexpectedFinishReasonError,
)
from ..models import ModelInfo
from ..providers.base import ModelCaller
from ..types import CallBase, CallResp, FinishReason, ToolCall, ToolResult, Turn
from .base import Tool

logger = logging.getLogger(__name__)

MAX_TOOL_ITERATIONS = 12


class ToolsSession(ModelCaller):
    """
    A model caller with access to tools.

    Each ``call`` alternates between the backend and the registered tools:
    when the model asks for tool calls, the handlers run one at a time in the
    order requested, their results are appended as a tool turn, and the model
    is called again. The loop ends when the model stops, and is abandoned
    after MAX_TOOL_ITERATIONS model calls.

    Tools passed in ``params.tools`` are ignored in favor of the tools given
    when creating the session.

    Example:
        >>> session = ToolsSession(
        ...     AnthropicCaller(),
        ...     [Tool.from_handler("flubb", "Performs the flubb action.", flubb)],
        ... )
        >>> answer = await session.simple_call("Go ahead and flubb for me")
    """

    name = "tools_session"

    def __init__(self, backend: ModelCaller, tools: Sequence[Tool]):
        self.backend = backend
        self.tools = list(tools)
        self._tools_by_name: Dict[str, Tool] = {}
        for tool in self.tools:
            if tool.name in self._tools_by_name:
                raise ToolDefinitionError(
                    tool.name,
                    "duplicate tool name",
                    suggestion="Each tool in a session must have a unique name",
                )
            self._tools_by_name[tool.name] = tool
        self._transcript: List[Turn] = []

    @property
    def model(self) -> ModelInfo:  # type: ignore[override]
        return self.backend.model

    @property
    def transcript(self) -> Tuple[Turn, ...]:
        """Turns of the latest call: the caller's turns plus everything appended."""
        return tuple(self._transcript)

    def tool_call(self, name: str, arguments: str) -> str:
        """
        Run the named tool's handler.

        Raises:
            ToolFailedError: No tool has that name, or the handler failed.
        """
        tool = self._tools_by_name.get(name)
        if tool is None:
            raise ToolFailedError(name, f"no such tool: {name}")
        try:
            result = tool.run(arguments)
        except Exception as exc:
            raise ToolFailedError(name, str(exc) or type(exc).__name__) from exc
        if not isinstance(result, str):
            raise ToolFailedError(
                name, f"handler returned {type(result).__name__}, expected str"
            )
        return result

    def _dispatch(self, calls: Sequence[ToolCall]) -> Turn:
        results = []
        for call in calls:
            logger.debug("Dispatching tool %s (call %s)", call.name, call.id)
            results.append(ToolResult(id=call.id, result=self.tool_call(call.name, call.arguments)))
        return Turn.tool_results(results)

    async def call(self, params: CallBase, turns: Sequence[Turn] = ()) -> CallResp:
        params = dataclasses.replace(params, tools=tuple(tool.info for tool in self.tools))
        transcript: List[Turn] = list(turns)
        self._transcript = transcript

        last_resp: Optional[CallResp] = None
        for iteration in range(1, MAX_TOOL_ITERATIONS + 1):
            try:
                resp = await self.backend.call(params, list(transcript))
            except NoCompletionsError:
                if last_resp is None:
                    raise
                logger.warning(
                    "No completions on iteration %d; returning the previous response", iteration
                )
                return last_resp

            if resp.finish_reason == FinishReason.STOP:
                return resp
            if resp.finish_reason != FinishReason.TOOL_CALLS:
                raise UnexpectedFinishReasonError(resp.finish_reason)

            transcript.append(resp.content)
            transcript.append(self._dispatch(resp.content.tool_calls))
            last_resp = resp

        raise ToolIterationsExceededError(MAX_TOOL_ITERATIONS)


__all__ = ["ToolsSession", "MAX_TOOL_ITERATIONS"]
