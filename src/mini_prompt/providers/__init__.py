"""Callers and wire adapters for the supported LLM providers."""

from .adapters import ADAPTERS, WireAdapter, get_adapter
from .anthropic_provider import AnthropicCaller
from .base import ModelCaller
from .openai_provider import OpenAICaller, OpenrouterCaller
from .stubs import ScriptedCaller

__all__ = [
    "ModelCaller",
    "OpenAICaller",
    "OpenrouterCaller",
    "AnthropicCaller",
    "ScriptedCaller",
    "WireAdapter",
    "ADAPTERS",
    "get_adapter",
]
