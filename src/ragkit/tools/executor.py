"""Tool execution helpers."""

from __future__ import annotations

import inspect
import json
from typing import Any, Mapping

from ragkit.errors import ToolArgumentParseError

from . import Tool


def parse_arguments(name: str, arguments: str | Mapping[str, Any] | None) -> dict[str, Any]:
    """
    Normalise a tool-call argument payload into a dict.

    ``arguments`` may be the JSON string provided by OpenAI or an already
    parsed mapping. Blank strings mean "no arguments".
    """

    if arguments is None:
        return {}
    if isinstance(arguments, Mapping):
        return dict(arguments)

    if not arguments.strip():
        return {}
    try:
        parsed = json.loads(arguments)
    except json.JSONDecodeError as exc:
        raise ToolArgumentParseError(name, str(exc)) from exc
    if not isinstance(parsed, dict):
        raise ToolArgumentParseError(name, f"expected a JSON object, got {type(parsed).__name__}")
    return parsed


async def execute_tool(tool: Tool, arguments: str | Mapping[str, Any] | None) -> str:
    """
    Run ``tool`` with ``arguments`` and return its textual result.

    The handler may be sync or async; awaitable results are awaited before
    returning. Handler exceptions propagate unchanged.
    """

    parsed_args = parse_arguments(tool.name, arguments)
    result = tool.handler(tool.name, parsed_args)
    if inspect.isawaitable(result):
        result = await result
    return result if isinstance(result, str) else str(result)
