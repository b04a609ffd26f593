"""
Registry of wire adapters keyed by provider family.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Sequence

from ..models import ModelInfo, ProviderKind
from ..types import CallBase, CallResp, Turn
from . import anthropic_messages, openai_chat

RequestBuilder = Callable[[ModelInfo, CallBase, Sequence[Turn]], Dict[str, Any]]
ResponseParser = Callable[[Mapping[str, Any], ModelInfo], CallResp]


@dataclass(frozen=True)
class WireAdapter:
    """The request builder and response parser for one protocol family."""

    name: str
    build_request: RequestBuilder
    parse_response: ResponseParser


OPENAI_CHAT = WireAdapter(
    name="openai_chat",
    build_request=openai_chat.build_request,
    parse_response=openai_chat.parse_response,
)

ANTHROPIC_MESSAGES = WireAdapter(
    name="anthropic_messages",
    build_request=anthropic_messages.build_request,
    parse_response=anthropic_messages.parse_response,
)

ADAPTERS: Dict[ProviderKind, WireAdapter] = {
    ProviderKind.OPENAI: OPENAI_CHAT,
    ProviderKind.OPENROUTER: OPENAI_CHAT,
    ProviderKind.ANTHROPIC: ANTHROPIC_MESSAGES,
}


def get_adapter(kind: ProviderKind) -> WireAdapter:
    """Return the wire adapter serving the given provider family."""
    return ADAPTERS[ProviderKind(kind)]


__all__ = ["WireAdapter", "OPENAI_CHAT", "ANTHROPIC_MESSAGES", "ADAPTERS", "get_adapter"]
