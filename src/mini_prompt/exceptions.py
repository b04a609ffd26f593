"""
Error taxonomy for model calls and tool sessions.

Call errors carry the context needed to decide what to do next:
- NoCompletionsError: the provider returned no completions
- RequestFailedError: the provider answered with a non-2xx status
- APIError: the transport or response decoding failed
- ToolFailedError: a requested tool is missing or its handler failed
- OtherCallError: anything else, such as a malformed response envelope
"""

from __future__ import annotations

from typing import Optional, Sequence


class MiniPromptError(Exception):
    """Base exception for all mini_prompt errors."""

    pass


class CallError(MiniPromptError):
    """Base class for errors raised while performing a model call."""

    pass


class NoCompletionsError(CallError):
    """
    Raised when a response lacks any completions.

    This is anomalous for a single call, but a tool session treats it as the
    end of the conversation when an earlier response is available.
    """

    def __init__(self, message: str = "response contained no completions"):
        super().__init__(message)


class RequestFailedError(CallError):
    """Raised when the provider returns a non-2xx HTTP status."""

    def __init__(self, status: int, body: str):
        self.status = status
        self.body = body
        super().__init__(f"request failed with status {status}: {body}")


class APIError(CallError):
    """Raised when a network or basic deserialization error occurs."""

    def __init__(self, error: BaseException):
        self.error = error
        super().__init__(f"{type(error).__name__}: {error}")


class ToolFailedError(CallError):
    """Raised when a tool call cannot be completed."""

    def __init__(self, name: str, err: str):
        self.name = name
        self.err = err

        message = f"\n{'='*60}\n"
        message += f"❌ Tool Call Failed: '{name}'\n"
        message += f"{'='*60}\n\n"
        message += f"Error: {err}\n"
        message += f"\n{'='*60}\n"

        super().__init__(message)


class OtherCallError(CallError):
    """Catch-all for call failures that do not fit another category."""

    pass


class UnexpectedResponseError(OtherCallError):
    """Raised when a response envelope holds an unexpected value."""

    pass


class UnexpectedFinishReasonError(UnexpectedResponseError):
    """Raised when a model stops for a reason other than stop or tool calls."""

    def __init__(self, finish_reason: object):
        self.finish_reason = finish_reason
        super().__init__(f"unexpected finish reason: {finish_reason!r}")


class ToolIterationsExceededError(OtherCallError):
    """Raised when a tool session does not finish within its iteration cap."""

    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(f"exceeded max tool iterations: {limit}")


class ToolArgumentsError(OtherCallError):
    """Raised when tool call arguments cannot be decoded into a JSON value."""

    def __init__(self, name: str, arguments: str, error: Exception):
        self.name = name
        self.arguments = arguments
        self.error = error
        super().__init__(f"tool call '{name}' has undecodable arguments {arguments!r}: {error}")


class ProviderConfigurationError(MiniPromptError):
    """Raised when provider configuration is incorrect."""

    def __init__(self, provider_name: str, missing_config: str, env_vars: Sequence[str] = ()):
        self.provider_name = provider_name
        self.missing_config = missing_config
        self.env_vars = tuple(env_vars)

        message = f"\n{'='*60}\n"
        message += f"❌ Provider Configuration Error: '{provider_name}'\n"
        message += f"{'='*60}\n\n"
        message += f"Missing: {missing_config}\n"
        if self.env_vars:
            message += f"\n💡 How to fix:\n"
            message += f"  1. Set one of the environment variables:\n"
            for env_var in self.env_vars:
                message += f"     export {env_var}='your-api-key'\n"
            message += f"  2. Or pass it directly:\n"
            message += f"     {provider_name}Caller(model, api_key='your-api-key')\n"
        message += f"\n{'='*60}\n"

        super().__init__(message)


class ToolDefinitionError(MiniPromptError):
    """Raised when a tool is declared with an invalid name or duplicated."""

    def __init__(self, tool_name: str, issue: str, suggestion: Optional[str] = None):
        self.tool_name = tool_name
        self.issue = issue
        self.suggestion = suggestion or ""

        message = f"\n{'='*60}\n"
        message += f"❌ Tool Definition Error: '{tool_name}'\n"
        message += f"{'='*60}\n\n"
        message += f"Issue: {issue}\n"
        if suggestion:
            message += f"\n💡 Suggestion: {suggestion}\n"
        message += f"\n{'='*60}\n"

        super().__init__(message)


class TurnValidationError(MiniPromptError, ValueError):
    """Raised when a turn or transcript breaks the conversation invariants."""

    pass


__all__ = [
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
