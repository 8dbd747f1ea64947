"""Vector storage: the float32 codec and the RediSearch-backed index."""

from . import codec
from .index import QueryDocument, QueryResult, VectorIndex

__all__ = ["codec", "VectorIndex", "QueryDocument", "QueryResult"]
