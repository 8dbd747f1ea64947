"""Entry-point helpers for generating replies."""

from __future__ import annotations

from ragkit.response.orchestrator import (
    ConversationOrchestrator,
    InvocationResult,
    SkippedToolCall,
    UnknownToolPolicy,
)

__all__ = ["ConversationOrchestrator", "InvocationResult", "SkippedToolCall", "UnknownToolPolicy"]
