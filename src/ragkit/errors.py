"""Error taxonomy shared by the orchestrator and the vector index."""

from __future__ import annotations

__all__ = [
    "RagkitError",
    "ConfigurationError",
    "DimensionMismatchError",
    "ToolArgumentParseError",
    "UnknownToolError",
    "RemoteServiceError",
]


class RagkitError(RuntimeError):
    """Base class for every error raised by this package."""

    pass


class ConfigurationError(RagkitError):
    """Raised when a required setting (API key, vector dimension) is missing."""

    pass


class DimensionMismatchError(RagkitError, ValueError):
    """Raised when a vector does not have the index's configured dimension."""

    def __init__(self, expected: int, received: int | None, detail: str | None = None) -> None:
        self.expected = expected
        self.received = received
        message = f"Invalid vector length: expected {expected}, received {received}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class ToolArgumentParseError(RagkitError):
    """Raised when a tool call carries an argument payload that is not a JSON object."""

    def __init__(self, tool_name: str, message: str) -> None:
        self.tool_name = tool_name
        super().__init__(f"Invalid JSON arguments for tool '{tool_name}': {message}")


class UnknownToolError(RagkitError):
    """Raised when the model calls a tool that was not supplied and the policy is ``raise``."""

    def __init__(self, tool_name: str) -> None:
        self.tool_name = tool_name
        super().__init__(f"Unknown tool '{tool_name}'")


class RemoteServiceError(RagkitError):
    """Raised when the inference or search service fails a request."""

    pass
