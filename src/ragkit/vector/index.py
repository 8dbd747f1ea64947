"""Async vector index backed by RediSearch (Redis Stack)."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Sequence

import redis.asyncio as aioredis
from redis.commands.search.field import TagField, VectorField
from redis.commands.search.index_definition import IndexDefinition, IndexType
from redis.commands.search.query import Query
from redis.exceptions import RedisError, ResponseError

from ragkit.config import ConfigService, default_service
from ragkit.errors import ConfigurationError, RemoteServiceError

from . import codec

logger = logging.getLogger(__name__)

VECTOR_FIELD = "vector"
SCORE_FIELD = "score"
QUERY_PARAM = "vec"
DIALECT = 2
DEFAULT_K = 5

_ATTRIBUTE_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
# Punctuation and whitespace that RediSearch treats as syntax inside a tag clause.
_TAG_SPECIAL_RE = re.compile(r"([,.<>{}\[\]\\\"':;!@#$%^&*()\-+=~|/?`\s])")


@dataclass(slots=True)
class QueryDocument:
    """One KNN hit. ``score`` is the cosine distance (lower is nearer)."""

    id: str
    key: str
    score: float
    fields: Dict[str, str] = field(default_factory=dict)


@dataclass(slots=True)
class QueryResult:
    total: int
    documents: List[QueryDocument] = field(default_factory=list)


def escape_tag_value(value: str) -> str:
    """Backslash-escape RediSearch tag metacharacters in ``value``."""

    return _TAG_SPECIAL_RE.sub(r"\\\1", str(value))


def build_filter_expression(filter: Mapping[str, str] | None) -> str:
    """
    Return the pre-filter for a KNN query.

    ``*`` matches everything; otherwise each entry becomes an exact tag match
    and clauses are space-joined (implicit AND).
    """

    if not filter:
        return "*"

    clauses: list[str] = []
    for attr, value in filter.items():
        if not _ATTRIBUTE_RE.match(str(attr)):
            raise ValueError(f"Invalid filter attribute name: {attr!r}")
        clauses.append(f"@{attr}:{{{escape_tag_value(value)}}}")
    return " ".join(clauses)


def build_knn_query(filter: Mapping[str, str] | None, k: int) -> Query:
    """Build the dialect-2 KNN query ordered by ascending distance."""

    expr = build_filter_expression(filter)
    return (
        Query(f"{expr}=>[KNN {k} @{VECTOR_FIELD} ${QUERY_PARAM} AS {SCORE_FIELD}]")
        .sort_by(SCORE_FIELD)
        .paging(0, k)
        .dialect(DIALECT)
    )


def _as_str(value: Any) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


def _is_already_exists(exc: Exception) -> bool:
    return isinstance(exc, ResponseError) and "already exists" in str(exc).lower()


class VectorIndex:
    """
    A named RediSearch index over HASH records stored under ``prefix``.

    Build instances with :meth:`create`, which connects and makes sure the
    index exists before returning. Each instance owns one connection.
    """

    def __init__(
        self,
        client: aioredis.Redis,
        index_name: str,
        prefix: str,
        vector_dim: int,
        tags: Sequence[str] = (),
        *,
        owns_client: bool = False,
    ) -> None:
        self._client = client
        self.index_name = index_name
        self.prefix = prefix
        self.vector_dim = vector_dim
        self.tags = tuple(tags)
        self._owns_client = owns_client

    @classmethod
    async def create(
        cls,
        index_name: str,
        prefix: str,
        vector_dim: int | None = None,
        tags: Sequence[str] | None = None,
        *,
        config: ConfigService | None = None,
        client: aioredis.Redis | None = None,
        tolerate_create_errors: bool = False,
    ) -> "VectorIndex":
        """
        Connect to Redis and create the index if it does not exist yet.

        :param vector_dim: Overrides the configured ``redis.vector_dim``.
        :param tags: Metadata attributes to declare as filterable TAG fields.
        :param client: Pre-built async client; the caller keeps ownership.
        :param tolerate_create_errors: Swallow every index creation failure
            (with a warning) instead of only "already exists".
        :raises ConfigurationError: when no vector dimension is available.
        :raises RemoteServiceError: when Redis is unreachable or rejects the index.
        """

        cfg = config or default_service()
        dim = vector_dim if vector_dim is not None else cfg.redis.VECTOR_DIM
        if not dim or int(dim) <= 0:
            raise ConfigurationError(
                "Vector dimension is required. Pass vector_dim or set VECTOR_DIM / redis.vector_dim."
            )

        owns_client = client is None
        if client is None:
            client = aioredis.from_url(cfg.redis.URL)

        try:
            await client.ping()
        except (RedisError, OSError) as exc:
            if owns_client:
                await client.aclose()
            raise RemoteServiceError(f"Could not connect to Redis: {exc}") from exc

        index = cls(client, index_name, prefix, int(dim), tags or (), owns_client=owns_client)
        try:
            await index._create_index(tolerate_errors=tolerate_create_errors)
        except RemoteServiceError:
            await index.close()
            raise
        return index

    async def _create_index(self, *, tolerate_errors: bool) -> None:
        schema = [
            VectorField(
                VECTOR_FIELD,
                "HNSW",
                {"TYPE": "FLOAT32", "DIM": self.vector_dim, "DISTANCE_METRIC": "COSINE"},
            ),
            *(TagField(tag) for tag in self.tags),
        ]
        definition = IndexDefinition(prefix=[self.prefix], index_type=IndexType.HASH)

        try:
            await self._client.ft(self.index_name).create_index(schema, definition=definition)
            logger.info("Created vector index %s (dim=%d, prefix=%s)", self.index_name, self.vector_dim, self.prefix)
        except (RedisError, OSError) as exc:
            if _is_already_exists(exc):
                logger.debug("Vector index %s already exists", self.index_name)
                return
            if tolerate_errors:
                logger.warning("Ignoring vector index creation failure for %s: %s", self.index_name, exc)
                return
            raise RemoteServiceError(f"Failed to create index '{self.index_name}': {exc}") from exc

    async def insert(self, id: str, vector: Sequence[float], metadata: Mapping[str, str] | None = None) -> None:
        """
        Store ``vector`` under ``prefix + id`` with ``metadata`` as flat string fields.

        :raises DimensionMismatchError: when ``vector`` has the wrong length.
        """

        codec.check_dimension(vector, self.vector_dim)
        mapping: Dict[str, Any] = {VECTOR_FIELD: codec.encode(vector)}
        for key, value in (metadata or {}).items():
            mapping[key] = _as_str(value)

        try:
            await self._client.hset(f"{self.prefix}{id}", mapping=mapping)
        except (RedisError, OSError) as exc:
            raise RemoteServiceError(f"Failed to insert '{id}' into '{self.index_name}': {exc}") from exc

    async def query(
        self,
        vector: Sequence[float],
        k: int = DEFAULT_K,
        filter: Mapping[str, str] | None = None,
    ) -> QueryResult:
        """
        Return up to ``k`` records nearest to ``vector`` that match ``filter``.

        :raises DimensionMismatchError: when ``vector`` has the wrong length.
        """

        if k < 1:
            raise ValueError(f"k must be a positive integer, got {k}")
        codec.check_dimension(vector, self.vector_dim)

        query = build_knn_query(filter, k)
        try:
            res = await self._client.ft(self.index_name).search(
                query, query_params={QUERY_PARAM: codec.encode(vector)}
            )
        except (RedisError, OSError) as exc:
            raise RemoteServiceError(f"Vector search on '{self.index_name}' failed: {exc}") from exc

        documents = [self._to_document(doc) for doc in res.docs[:k]]
        return QueryResult(total=int(res.total), documents=documents)

    def _to_document(self, doc: Any) -> QueryDocument:
        key = _as_str(doc.id)
        doc_id = key[len(self.prefix):] if key.startswith(self.prefix) else key
        fields = {
            name: _as_str(value)
            for name, value in vars(doc).items()
            if name not in ("id", "payload", VECTOR_FIELD, SCORE_FIELD)
        }
        return QueryDocument(id=doc_id, key=key, score=float(getattr(doc, SCORE_FIELD, 0.0)), fields=fields)

    async def close(self) -> None:
        """Close the connection if this index opened it."""

        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "VectorIndex":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()


__all__ = [
    "VectorIndex",
    "QueryDocument",
    "QueryResult",
    "build_filter_expression",
    "build_knn_query",
    "escape_tag_value",
]
