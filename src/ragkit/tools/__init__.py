"""
Tool definitions and the per-call tool registry.

Tools are supplied fresh on every :meth:`ConversationOrchestrator.invoke`
call; nothing here is global. A registry can be filled directly or with the
decorator form::

    tools = ToolRegistry()

    @tools.tool(ToolSpec(name="add", description="Add two ints", parameters={...}))
    async def add(name, args):
        return str(args["a"] + args["b"])

Handlers receive ``(name, parsed_arguments)`` and return a string, either
directly or through an awaitable.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Iterable, Iterator, List, Union

from ragkit.errors import ToolArgumentParseError

__all__ = [
    "Tool",
    "ToolHandler",
    "ToolRegistry",
    "ToolSpec",
    "ToolArgumentParseError",
]

ToolHandler = Callable[[str, Dict[str, Any]], Union[str, Awaitable[str]]]


@dataclass(slots=True)
class ToolSpec:
    """Static description of a tool exposed to the LLM."""

    name: str
    description: str
    parameters: Dict[str, Any]

    def to_openai(self) -> Dict[str, Any]:
        """Return this spec formatted for OpenAI function calling."""

        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }


@dataclass(slots=True)
class Tool:
    """A spec bound to the handler that executes it."""

    spec: ToolSpec
    handler: ToolHandler

    @property
    def name(self) -> str:
        return self.spec.name


class ToolRegistry:
    """Caller-owned mapping from tool name to :class:`Tool`."""

    def __init__(self, tools: Iterable[Tool] = ()) -> None:
        self._tools: dict[str, Tool] = {}
        for tool in tools:
            self.add(tool)

    @classmethod
    def coerce(cls, tools: "ToolRegistry | Iterable[Tool] | None") -> "ToolRegistry":
        if tools is None:
            return cls()
        if isinstance(tools, ToolRegistry):
            return tools
        return cls(tools)

    def add(self, tool: Tool) -> Tool:
        if tool.name in self._tools:
            raise ValueError(f"Tool with name '{tool.name}' already registered")
        self._tools[tool.name] = tool
        return tool

    def tool(self, spec: ToolSpec):
        """Decorator that registers the decorated function as the handler for ``spec``."""

        def decorator(handler: ToolHandler) -> ToolHandler:
            self.add(Tool(spec=spec, handler=handler))
            return handler

        return decorator

    def get(self, name: str) -> Tool | None:
        return self._tools.get(name)

    def specs(self) -> List[ToolSpec]:
        return [tool.spec for tool in self._tools.values()]

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __iter__(self) -> Iterator[Tool]:
        return iter(self._tools.values())

    def __len__(self) -> int:
        return len(self._tools)
