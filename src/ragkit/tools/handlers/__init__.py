"""
Ready-made tool handlers.

Each module exposes a factory that returns a :class:`ragkit.tools.Tool`, so
callers can drop it into the registry they pass to ``invoke``.
"""

from __future__ import annotations

from .rag import retrieval_tool

__all__ = ["retrieval_tool"]
