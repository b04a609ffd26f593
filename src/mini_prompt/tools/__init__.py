"""
Tools package exports.
"""

from .base import Tool, ToolHandler
from .decorators import ParamMetadata, infer_parameters, tool
from .session import MAX_TOOL_ITERATIONS, ToolsSession

__all__ = [
    "Tool",
    "ToolHandler",
    "ToolsSession",
    "MAX_TOOL_ITERATIONS",
    "tool",
    "infer_parameters",
    "ParamMetadata",
]
