"""
Tools a model can call: a declaration paired with a local handler.
"""

from __future__ import annotations

from typing import Callable, Optional

from ..types import JsonSchema, ToolInfo

ToolHandler = Callable[[str], str]


class Tool:
    """
    A ToolInfo declaration plus the handler that runs it.

    The handler receives the model's argument string (usually JSON) and
    returns the result string sent back to the model. Handlers are owned by
    the caller; any state they share is the caller's to synchronize.

    Attributes:
        info: Declaration advertised to the model.
        handler: Callable run for each call of this tool.

    Example:
        >>> flubb = Tool.from_handler(
        ...     "flubb",
        ...     "Performs the flubb action.",
        ...     lambda args: '{"status": "success"}',
        ... )
    """

    def __init__(self, info: ToolInfo, handler: ToolHandler):
        if not callable(handler):
            raise TypeError(f"handler for tool '{info.name}' must be callable")
        self.info = info
        self.handler = handler

    @classmethod
    def from_handler(
        cls,
        name: str,
        description: str,
        handler: ToolHandler,
        parameters: Optional[JsonSchema] = None,
    ) -> "Tool":
        """Build a tool from a handler taking the raw argument string."""
        info = (
            ToolInfo(name=name, description=description, parameters=parameters)
            if parameters is not None
            else ToolInfo(name=name, description=description)
        )
        return cls(info, handler)

    @property
    def name(self) -> str:
        return self.info.name

    @property
    def description(self) -> str:
        return self.info.description

    def run(self, arguments: str) -> str:
        """Invoke the handler with the model's argument string."""
        return self.handler(arguments)

    def __repr__(self) -> str:
        return f"Tool(name={self.name!r})"


__all__ = ["Tool", "ToolHandler"]
