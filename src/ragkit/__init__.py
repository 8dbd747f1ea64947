"""
ragkit
======

Two building blocks for retrieval-augmented, tool-using chat applications:

- :class:`ConversationOrchestrator` runs a chat completion and resolves the
  tool calls the model asks for.
- :class:`VectorIndex` stores embeddings in Redis and answers filtered KNN
  queries.
"""

from ragkit.config import ConfigService
from ragkit.errors import (
    ConfigurationError,
    DimensionMismatchError,
    RagkitError,
    RemoteServiceError,
    ToolArgumentParseError,
    UnknownToolError,
)
from ragkit.messages import (
    ContentType,
    FileContent,
    ImageContent,
    Message,
    MessageRole,
    TextContent,
    ToolCall,
)
from ragkit.response import ConversationOrchestrator, InvocationResult, UnknownToolPolicy
from ragkit.tools import Tool, ToolRegistry, ToolSpec
from ragkit.vector import QueryDocument, QueryResult, VectorIndex, codec

__all__ = [
    "ConfigService",
    "ConfigurationError",
    "ContentType",
    "ConversationOrchestrator",
    "DimensionMismatchError",
    "FileContent",
    "ImageContent",
    "InvocationResult",
    "Message",
    "MessageRole",
    "QueryDocument",
    "QueryResult",
    "RagkitError",
    "RemoteServiceError",
    "TextContent",
    "Tool",
    "ToolArgumentParseError",
    "ToolCall",
    "ToolRegistry",
    "ToolSpec",
    "UnknownToolError",
    "UnknownToolPolicy",
    "VectorIndex",
    "codec",
]
