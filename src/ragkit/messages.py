"""
Conversation message types.

Messages are immutable once built. The orchestrator only ever appends new
messages; it never edits history handed to it by the caller.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Union

__all__ = [
    "MessageRole",
    "ContentType",
    "TextContent",
    "FileContent",
    "ImageContent",
    "Content",
    "ToolCall",
    "Message",
    "to_openai_messages",
]


class MessageRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"
    TOOL = "tool"


class ContentType(str, Enum):
    TEXT = "text"
    FILE = "file"
    IMAGE_URL = "image_url"


@dataclass(frozen=True, slots=True)
class TextContent:
    text: str

    type = ContentType.TEXT

    def to_openai(self) -> Dict[str, Any]:
        return {"type": self.type.value, "text": self.text}


@dataclass(frozen=True, slots=True)
class FileContent:
    """Reference to an uploaded file plus optional descriptive metadata."""

    file_id: str
    filename: str | None = None
    size: str | None = None
    ext: str | None = None

    type = ContentType.FILE

    def to_openai(self) -> Dict[str, Any]:
        # Descriptive metadata stays local; the API only takes the id.
        return {"type": self.type.value, "file": {"file_id": self.file_id}}


@dataclass(frozen=True, slots=True)
class ImageContent:
    url: str

    type = ContentType.IMAGE_URL

    def to_openai(self) -> Dict[str, Any]:
        return {"type": self.type.value, "image_url": {"url": self.url}}


Content = Union[TextContent, FileContent, ImageContent]


def _field(obj: Any, name: str, default: Any = None) -> Any:
    if isinstance(obj, Mapping):
        return obj.get(name, default)
    return getattr(obj, name, default)


@dataclass(frozen=True, slots=True)
class ToolCall:
    """A single function call requested by the model."""

    id: str
    name: str
    arguments: str

    @classmethod
    def from_openai(cls, call: Any) -> "ToolCall":
        """Build from an SDK ``ChatCompletionMessageToolCall`` or its dict form."""

        function = _field(call, "function")
        return cls(
            id=_field(call, "id"),
            name=_field(function, "name"),
            arguments=_field(function, "arguments") or "",
        )

    def to_openai(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": "function",
            "function": {"name": self.name, "arguments": self.arguments},
        }


@dataclass(frozen=True, slots=True)
class Message:
    """One conversation turn."""

    role: MessageRole
    content: tuple[Content, ...]
    tool_call_id: str | None = None
    tool_calls: tuple[ToolCall, ...] | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.role, MessageRole):
            object.__setattr__(self, "role", MessageRole(self.role))
        if not isinstance(self.content, tuple):
            object.__setattr__(self, "content", tuple(self.content))
        if self.tool_calls is not None and not isinstance(self.tool_calls, tuple):
            object.__setattr__(self, "tool_calls", tuple(self.tool_calls))
        if self.tool_call_id is not None and self.role is not MessageRole.TOOL:
            raise ValueError("tool_call_id is only valid on tool messages")
        if self.tool_calls and self.role is not MessageRole.ASSISTANT:
            raise ValueError("tool_calls are only valid on assistant messages")

    @classmethod
    def text(cls, role: MessageRole | str, text: str, **kwargs: Any) -> "Message":
        return cls(role=role, content=(TextContent(text),), **kwargs)

    @property
    def text_content(self) -> str:
        """Concatenated text of every text block."""

        return "".join(block.text for block in self.content if isinstance(block, TextContent))

    def to_openai(self) -> Dict[str, Any]:
        """Return this message formatted for the chat completions API."""

        payload: Dict[str, Any] = {
            "role": self.role.value,
            "content": [block.to_openai() for block in self.content],
        }
        if self.tool_call_id is not None:
            payload["tool_call_id"] = self.tool_call_id
        if self.tool_calls:
            payload["tool_calls"] = [call.to_openai() for call in self.tool_calls]
        return payload


def to_openai_messages(messages: Iterable[Message | Mapping[str, Any]]) -> List[Dict[str, Any]]:
    """Serialize a history, passing already-serialized dicts through as copies."""

    return [m.to_openai() if isinstance(m, Message) else dict(m) for m in messages]
