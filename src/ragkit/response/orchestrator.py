"""
Conversation orchestrator.

Drives one round of chat completion, executes the tool calls the model asks
for and folds their results back into the conversation as new messages.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, AsyncIterator, Iterable, List, Mapping, Sequence

from openai import AsyncOpenAI, OpenAIError

from ragkit.clients import oai
from ragkit.config import ConfigService, default_service
from ragkit.errors import RemoteServiceError, UnknownToolError
from ragkit.messages import Message, MessageRole, TextContent, ToolCall, to_openai_messages
from ragkit.tools import Tool, ToolRegistry
from ragkit.tools.executor import execute_tool

logger = logging.getLogger(__name__)

HistoryItem = Message | Mapping[str, Any]


class UnknownToolPolicy(str, Enum):
    """What to do when the model calls a tool that was not supplied."""

    SKIP = "skip"
    WARN = "warn"
    RAISE = "raise"


@dataclass(slots=True)
class SkippedToolCall:
    call: ToolCall
    reason: str


@dataclass(slots=True)
class InvocationResult:
    """Messages appended by one :meth:`ConversationOrchestrator.resolve` round."""

    messages: List[Message] = field(default_factory=list)
    skipped: List[SkippedToolCall] = field(default_factory=list)

    @property
    def reply(self) -> Message:
        """The final assistant message."""
        return self.messages[-1]


class ConversationOrchestrator:
    """
    Runs chat completions against OpenAI and resolves tool calls.

    Two modes are offered and they never mix: :meth:`stream` hands back the
    raw token stream and does no tool handling, :meth:`invoke` makes one
    non-streaming request and executes any tool calls it gets back.
    """

    def __init__(
        self,
        config: ConfigService | None = None,
        client: AsyncOpenAI | None = None,
        *,
        unknown_tools: UnknownToolPolicy | str = UnknownToolPolicy.WARN,
    ) -> None:
        self.unknown_tools = UnknownToolPolicy(unknown_tools)
        self.client = client if client is not None else oai.build_client(config or default_service())

    # ==============================================
    # Streaming
    # ==============================================
    async def stream(
        self,
        model: str,
        messages: Sequence[HistoryItem],
        temperature: float | None = None,
    ):
        """Open a streaming completion and return the SDK stream handle."""

        kwargs: dict[str, Any] = {
            "model": model,
            "messages": to_openai_messages(messages),
            "stream": True,
        }
        if temperature is not None:
            kwargs["temperature"] = temperature
        return await self._create(kwargs)

    async def stream_text(
        self,
        model: str,
        messages: Sequence[HistoryItem],
        temperature: float | None = None,
    ) -> AsyncIterator[str]:
        """Yield the text deltas of a streaming completion."""

        stream = await self.stream(model, messages, temperature=temperature)
        try:
            async for chunk in stream:
                if not chunk.choices:
                    continue
                delta = chunk.choices[0].delta.content
                if delta:
                    yield delta
        except OpenAIError as exc:
            raise RemoteServiceError(f"Chat completion stream failed: {exc}") from exc

    # ==============================================
    # Tool-resolving invocation
    # ==============================================
    async def invoke(
        self,
        model: str,
        messages: Sequence[HistoryItem],
        tools: ToolRegistry | Iterable[Tool] | None = None,
        temperature: float | None = None,
        force_tool: bool = False,
    ) -> List[Message]:
        """
        Run one completion, execute requested tools and return the new messages.

        The result holds an (assistant tool-call, tool result) pair per
        executed call, in the order the model emitted them, followed by the
        final assistant reply. ``messages`` is left untouched.
        """

        result = await self.resolve(
            model,
            messages,
            tools=tools,
            temperature=temperature,
            force_tool=force_tool,
        )
        return result.messages

    async def resolve(
        self,
        model: str,
        messages: Sequence[HistoryItem],
        tools: ToolRegistry | Iterable[Tool] | None = None,
        temperature: float | None = None,
        force_tool: bool = False,
    ) -> InvocationResult:
        """Same as :meth:`invoke` but also reports tool calls that were skipped."""

        registry = ToolRegistry.coerce(tools)
        kwargs: dict[str, Any] = {
            "model": model,
            "messages": to_openai_messages(messages),
        }
        if temperature is not None:
            kwargs["temperature"] = temperature
        if len(registry):
            kwargs["tools"] = [spec.to_openai() for spec in registry.specs()]
            kwargs["parallel_tool_calls"] = True
            kwargs["tool_choice"] = "required" if force_tool else "auto"

        resp = await self._create(kwargs)
        message = resp.choices[0].message
        calls = [ToolCall.from_openai(call) for call in (getattr(message, "tool_calls", None) or [])]

        result = InvocationResult()
        # Handlers run one at a time in emission order, even for parallel calls.
        for call in calls:
            tool = registry.get(call.name)
            if tool is None:
                result.skipped.append(self._skip(call))
                continue

            logger.info("Executing tool call id=%s name=%s arguments=%s", call.id, call.name, call.arguments)
            output = await execute_tool(tool, call.arguments)

            result.messages.append(
                Message(role=MessageRole.ASSISTANT, content=(TextContent(""),), tool_calls=(call,))
            )
            result.messages.append(
                Message(role=MessageRole.TOOL, content=(TextContent(output),), tool_call_id=call.id)
            )

        result.messages.append(Message.text(MessageRole.ASSISTANT, message.content or ""))
        return result

    def _skip(self, call: ToolCall) -> SkippedToolCall:
        if self.unknown_tools is UnknownToolPolicy.RAISE:
            raise UnknownToolError(call.name)
        if self.unknown_tools is UnknownToolPolicy.WARN:
            logger.warning("Model requested unknown tool '%s' (call id=%s); skipping", call.name, call.id)
        return SkippedToolCall(call=call, reason=f"Unknown tool '{call.name}'")

    async def _create(self, kwargs: dict[str, Any]):
        try:
            return await self.client.chat.completions.create(**kwargs)
        except OpenAIError as exc:
            raise RemoteServiceError(f"Chat completion failed: {exc}") from exc


__all__ = [
    "ConversationOrchestrator",
    "InvocationResult",
    "SkippedToolCall",
    "UnknownToolPolicy",
]
