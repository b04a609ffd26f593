"""
Model descriptors and the registry of known models.

A model is a plain value: the wire identifier, the provider family that
serves it, and whether it understands the system role. Use the typed
constants for IDE autocomplete, or build a ModelInfo for any other model.

Example:
    >>> from mini_prompt.models import Openrouter, ModelInfo, ProviderKind
    >>> model = Openrouter.GEMMA_27B_3
    >>> custom = ModelInfo(id="gpt-4.1-mini", provider=ProviderKind.OPENAI)
"""

from __future__ import annotations

import difflib
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List


class ProviderKind(str, Enum):
    """Provider family; decides which wire adapter a call goes through."""

    OPENAI = "openai"
    OPENROUTER = "openrouter"
    ANTHROPIC = "anthropic"


@dataclass(frozen=True)
class ModelInfo:
    """
    Descriptor for one LLM.

    Attributes:
        id: Wire identifier (e.g. "google/gemma-3-27b-it", "claude-3-5-haiku-latest")
        provider: Provider family serving the model
        no_system_prompt: True when the model does not understand the system
            role, so system text is sent as a user message instead
    """

    id: str
    provider: ProviderKind
    no_system_prompt: bool = False

    def make_prompt(self, prompt: str) -> Dict[str, Any]:
        """Format a system prompt into the chat message this model expects."""
        role = "user" if self.no_system_prompt else "system"
        return {"role": role, "content": prompt}


# =============================================================================
# Openrouter Models
# =============================================================================


class Openrouter:
    """Models reachable through Openrouter's chat completions API."""

    GEMMA_27B_3 = ModelInfo(id="google/gemma-3-27b-it", provider=ProviderKind.OPENROUTER)
    QWEN_235B_3 = ModelInfo(id="qwen/qwen3-235b-a22b", provider=ProviderKind.OPENROUTER)
    PHI_4 = ModelInfo(
        id="microsoft/phi-4",
        provider=ProviderKind.OPENROUTER,
        no_system_prompt=True,
    )
    GEMINI_2_FLASH = ModelInfo(
        id="google/gemini-2.0-flash-001", provider=ProviderKind.OPENROUTER
    )
    GEMINI_2_5_FLASH = ModelInfo(
        id="google/gemini-2.5-flash-preview-05-20", provider=ProviderKind.OPENROUTER
    )
    DEVSTRAL_SMALL = ModelInfo(id="mistralai/devstral-small", provider=ProviderKind.OPENROUTER)
    GPT_4O_MINI = ModelInfo(id="openai/gpt-4o-mini", provider=ProviderKind.OPENROUTER)
    DEEPSEEK_V3_0324 = ModelInfo(
        id="deepseek/deepseek-chat-v3-0324", provider=ProviderKind.OPENROUTER
    )
    CLAUDE_SONNET_4 = ModelInfo(id="anthropic/claude-sonnet-4", provider=ProviderKind.OPENROUTER)


# =============================================================================
# OpenAI Models
# =============================================================================


class OpenAI:
    """Models served by OpenAI's chat completions API."""

    GPT_4O = ModelInfo(id="gpt-4o", provider=ProviderKind.OPENAI)
    GPT_4O_MINI = ModelInfo(id="gpt-4o-mini", provider=ProviderKind.OPENAI)
    GPT_4_1 = ModelInfo(id="gpt-4.1", provider=ProviderKind.OPENAI)
    GPT_4_1_MINI = ModelInfo(id="gpt-4.1-mini", provider=ProviderKind.OPENAI)


# =============================================================================
# Anthropic Models
# =============================================================================


class Anthropic:
    """Models served by Anthropic's messages API."""

    CLAUDE_SONNET_4 = ModelInfo(id="claude-sonnet-4-20250514", provider=ProviderKind.ANTHROPIC)
    CLAUDE_HAIKU_3_5 = ModelInfo(id="claude-3-5-haiku-latest", provider=ProviderKind.ANTHROPIC)


def _collect(namespace: type) -> List[ModelInfo]:
    return [value for value in vars(namespace).values() if isinstance(value, ModelInfo)]


ALL_MODELS: List[ModelInfo] = _collect(Openrouter) + _collect(OpenAI) + _collect(Anthropic)

MODELS_BY_ID: Dict[str, ModelInfo] = {model.id: model for model in ALL_MODELS}


def get_model(model_id: str) -> ModelInfo:
    """
    Look up a known model by its wire identifier.

    Raises:
        KeyError: If the model is unknown; the message names close matches.
    """
    try:
        return MODELS_BY_ID[model_id]
    except KeyError:
        suggestions = difflib.get_close_matches(model_id, MODELS_BY_ID.keys(), n=3, cutoff=0.6)
        hint = f" Did you mean: {', '.join(suggestions)}?" if suggestions else ""
        raise KeyError(f"Unknown model '{model_id}'.{hint}") from None


__all__ = [
    "ProviderKind",
    "ModelInfo",
    "Openrouter",
    "OpenAI",
    "Anthropic",
    "ALL_MODELS",
    "MODELS_BY_ID",
    "get_model",
]
