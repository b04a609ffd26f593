"""
Caller abstraction for provider-agnostic model calls.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Mapping, Sequence, Union

from ..exceptions import OtherCallError
from ..models import MODELS_BY_ID, ModelInfo, ProviderKind
from ..types import CallBase, CallResp, Turn


class ModelCaller(ABC):
    """
    Interface every caller must satisfy.

    A caller is bound to one model and performs exactly one request/response
    cycle per ``call``. Failures surface immediately as CallError subclasses;
    nothing is retried.
    """

    name: str
    model: ModelInfo

    @abstractmethod
    async def call(self, params: CallBase, turns: Sequence[Turn] = ()) -> CallResp:
        """
        Perform a model call and return the generated turn.

        Args:
            params: Persona, instructions, tools and sampling settings.
            turns: Conversation so far, oldest first.

        Raises:
            NoCompletionsError: The provider returned no completions.
            RequestFailedError: The provider answered with a non-2xx status.
            APIError: The transport or response decoding failed.
            OtherCallError: Anything else, e.g. an unexpected envelope value.
        """
        ...

    async def simple_call(self, prompt: str) -> str:
        """Prompt the model and return the text of its response."""
        resp = await self.call(CallBase(instructions=prompt), [])
        text = resp.content.first_text
        if text is None:
            raise OtherCallError("unexpected: no message content")
        return text


def resolve_model(model: Union[ModelInfo, str], provider: ProviderKind) -> ModelInfo:
    """Accept a ModelInfo or a wire id, preferring known registry entries."""
    if isinstance(model, ModelInfo):
        return model
    known = MODELS_BY_ID.get(model)
    if known is not None and known.provider == provider:
        return known
    return ModelInfo(id=model, provider=provider)


def response_payload(response: Any) -> Mapping[str, Any]:
    """Turn an SDK response object into the plain dict the adapters read."""
    if isinstance(response, Mapping):
        return response
    dumped: Dict[str, Any] = response.model_dump()
    return dumped


__all__ = ["ModelCaller", "resolve_model", "response_payload"]
