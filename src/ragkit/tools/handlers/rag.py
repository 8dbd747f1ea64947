"""Tool for retrieving contextual records from a :class:`VectorIndex`."""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Mapping, Sequence

from ragkit.vector import VectorIndex

from .. import Tool, ToolSpec

Embedder = Callable[[str], Awaitable[Sequence[float]]]

DEFAULT_NAME = "retrieve_context"
NO_RESULTS = "No related context was found."


def _render(documents, content_field: str) -> str:
    lines: list[str] = []
    for idx, doc in enumerate(documents, start=1):
        snippet = doc.fields.get(content_field) or "(no content)"
        lines.append(f"{idx}. {snippet} (id: {doc.id}, distance: {doc.score:.4f})")
    return "\n".join(lines)


def retrieval_tool(
    index: VectorIndex,
    embed: Embedder,
    *,
    name: str = DEFAULT_NAME,
    description: str = (
        "Search stored documents for context relevant to the conversation. Use this tool "
        "when answering needs facts that may be stored in the knowledge base."
    ),
    k: int = 3,
    max_k: int = 10,
    content_field: str = "content",
    filter: Mapping[str, str] | None = None,
) -> Tool:
    """
    Build a tool that embeds the model's query and searches ``index``.

    ``filter`` is applied to every search; the model cannot widen it.
    """

    max_k = max(1, max_k)
    default_k = max(1, min(k, max_k))

    spec = ToolSpec(
        name=name,
        description=description,
        parameters={
            "type": "object",
            "properties": {
                "query": {
                    "type": "string",
                    "description": "Natural language search query.",
                },
                "k": {
                    "type": "integer",
                    "description": f"Desired number of results (capped at {max_k}).",
                    "minimum": 1,
                    "maximum": max_k,
                    "default": default_k,
                },
            },
            "required": ["query"],
        },
    )

    async def handler(tool_name: str, args: dict[str, Any]) -> str:
        query = args.get("query")
        if not query or not isinstance(query, str):
            raise ValueError(f"Tool '{tool_name}': 'query' must be supplied as a string")

        requested_k = args.get("k", default_k)
        if not isinstance(requested_k, int):
            raise ValueError(f"Tool '{tool_name}': 'k' must be an integer")
        limit = max(1, min(max_k, requested_k))

        vector = await embed(query)
        result = await index.query(vector, k=limit, filter=filter)
        if not result.documents:
            return NO_RESULTS
        return _render(result.documents, content_field)

    return Tool(spec=spec, handler=handler)
