"""
Decorator turning a typed Python function into a Tool.
"""

from __future__ import annotations

import inspect
import json
from typing import Any, Callable, Dict, Optional, Union, get_args, get_origin, get_type_hints

from ..types import JsonSchema
from .base import Tool

ParamMetadata = Dict[str, Any]

_JSON_TYPES = {
    str: "string",
    int: "integer",
    float: "number",
    bool: "boolean",
    list: "array",
    dict: "object",
}


def _unwrap_type(type_hint: Any) -> Any:
    """Unwrap Optional[T] to T."""
    origin = get_origin(type_hint)
    if origin is Union:
        non_none_args = [a for a in get_args(type_hint) if a is not type(None)]
        if len(non_none_args) == 1:
            return _unwrap_type(non_none_args[0])
    return get_origin(type_hint) or type_hint


def infer_parameters(
    func: Callable[..., Any], param_metadata: Optional[Dict[str, ParamMetadata]] = None
) -> JsonSchema:
    """
    Build a JSON Schema object from a function's signature and type hints.

    Args:
        func: The function to inspect.
        param_metadata: Optional per-parameter overrides (description, enum).
    """
    type_hints = get_type_hints(func)
    param_metadata = param_metadata or {}
    properties: Dict[str, Any] = {}
    required = []

    for name, param in inspect.signature(func).parameters.items():
        if name in ("self", "cls"):
            continue
        param_type = _unwrap_type(type_hints.get(name, str))
        meta = param_metadata.get(name, {})
        schema: Dict[str, Any] = {
            "type": _JSON_TYPES.get(param_type, "string"),
            "description": meta.get("description", f"Parameter {name}"),
        }
        if meta.get("enum"):
            schema["enum"] = meta["enum"]
        properties[name] = schema
        if param.default is inspect.Parameter.empty:
            required.append(name)

    parameters: JsonSchema = {"type": "object", "properties": properties}
    if required:
        parameters["required"] = required
    return parameters


def _json_handler(func: Callable[..., Any]) -> Callable[[str], str]:
    def handler(arguments: str) -> str:
        kwargs = json.loads(arguments) if arguments.strip() else {}
        if not isinstance(kwargs, dict):
            raise ValueError(f"expected a JSON object of arguments, got {type(kwargs).__name__}")
        result = func(**kwargs)
        return result if isinstance(result, str) else json.dumps(result)

    return handler


def tool(
    *,
    name: Optional[str] = None,
    description: Optional[str] = None,
    param_metadata: Optional[Dict[str, ParamMetadata]] = None,
    parameters: Optional[JsonSchema] = None,
    raw: bool = False,
) -> Callable[[Callable[..., Any]], Tool]:
    """
    Decorator to convert a function into a Tool.

    By default the parameters schema is inferred from the signature, the
    model's JSON arguments are decoded into keyword arguments, and a non-string
    return value is JSON-encoded. With ``raw=True`` the function receives the
    argument string untouched and must return a string.

    Args:
        name: Optional custom name (defaults to function name).
        description: Optional description (defaults to docstring).
        param_metadata: Dict mapping parameter names to metadata (description, enum).
        parameters: Explicit JSON Schema, skipping inference.
        raw: Pass the argument string straight to the function.

    Example:
        >>> @tool(description="Add two integers")
        ... def add(a: int, b: int) -> int:
        ...     return a + b
        >>> add.name
        'add'
    """

    def decorator(func: Callable[..., Any]) -> Tool:
        tool_name = name or func.__name__
        tool_description = description or inspect.getdoc(func) or f"Tool {tool_name}"

        if raw:
            return Tool.from_handler(tool_name, tool_description, func, parameters)

        schema = parameters if parameters is not None else infer_parameters(func, param_metadata)
        return Tool.from_handler(tool_name, tool_description, _json_handler(func), schema)

    return decorator


__all__ = ["tool", "infer_parameters", "ParamMetadata"]
