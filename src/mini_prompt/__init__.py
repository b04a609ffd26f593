"""Public exports for the mini_prompt package."""

from .exceptions import (
    APIError,
    CallError,
    MiniPromptError,
    NoCompletionsError,
    OtherCallError,
    ProviderConfigurationError,
    RequestFailedError,
    ToolArgumentsError,
    ToolDefinitionError,
    ToolFailedError,
    ToolIterationsExceededError,
    TurnValidationError,
    UnexpectedFinishReasonError,
    UnexpectedResponseError,
)
from .models import ALL_MODELS, MODELS_BY_ID, ModelInfo, ProviderKind, get_model
from .parse import (
    MarkdownOptions,
    MulticlassOptions,
    TagOptions,
    iter_tagged,
    markdown_codeblock,
    multiclass,
    tagged,
)
from .providers.anthropic_provider import AnthropicCaller
from .providers.base import ModelCaller
from .providers.openai_provider import OpenAICaller, OpenrouterCaller
from .providers.stubs import ScriptedCaller
from .tools import MAX_TOOL_ITERATIONS, Tool, ToolsSession, tool
from .types import (
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
    validate_transcript,
)

__version__ = "0.3.0"

__all__ = [
    # Conversation model
    "Role",
    "FinishReason",
    "Message",
    "Text",
    "ToolCall",
    "ToolResult",
    "Turn",
    "validate_transcript",
    "ToolInfo",
    "CallBase",
    "CallResp",
    # Models
    "ModelInfo",
    "ProviderKind",
    "ALL_MODELS",
    "MODELS_BY_ID",
    "get_model",
    # Callers
    "ModelCaller",
    "OpenAICaller",
    "OpenrouterCaller",
    "AnthropicCaller",
    "ScriptedCaller",
    # Tools
    "Tool",
    "ToolsSession",
    "MAX_TOOL_ITERATIONS",
    "tool",
    # Extraction
    "MarkdownOptions",
    "markdown_codeblock",
    "MulticlassOptions",
    "multiclass",
    "tagged",
    "iter_tagged",
    "TagOptions",
    # Exceptions
    "MiniPromptError",
    "CallError",
    "NoCompletionsError",
    "RequestFailedError",
    "APIError",
    "ToolFailedError",
    "OtherCallError",
    "UnexpectedResponseError",
    "UnexpectedFinishReasonError",
    "ToolIterationsExceededError",
    "ToolArgumentsError",
    "ProviderConfigurationError",
    "ToolDefinitionError",
    "TurnValidationError",
]
