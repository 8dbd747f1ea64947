import os, sys
import re
import types
from pathlib import Path

import numpy as np
import pytest
from redis.exceptions import ResponseError

# Add src/ to sys.path so tests run without an editable install
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

# Environment defaults read by ConfigService during the unit tests
os.environ.setdefault("OPENAI_API_KEY", "test-openai")
os.environ.setdefault("VECTOR_DIM", "4")


# ----------------------------------------------------------------------
# OpenAI fakes
# ----------------------------------------------------------------------

class DummyFunction:
    def __init__(self, name: str, arguments: str):
        self.name = name
        self.arguments = arguments


class DummyCall:
    def __init__(self, name: str, arguments: str, call_id: str):
        self.id = call_id
        self.type = "function"
        self.function = DummyFunction(name, arguments)


class DummyMessage:
    def __init__(self, content, tool_calls=None):
        self.content = content
        self.tool_calls = tool_calls


class DummyChoice:
    def __init__(self, message):
        self.message = message
        self.finish_reason = "tool_calls" if message.tool_calls else "stop"


class DummyResponse:
    def __init__(self, message):
        self.choices = [DummyChoice(message)]


class FakeCompletions:
    """Records every ``create`` call and replays queued responses."""

    def __init__(self, responses=()):
        self.responses = list(responses)
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        return self.responses.pop(0)


class FakeOpenAI:
    def __init__(self, responses=()):
        self.chat = types.SimpleNamespace(completions=FakeCompletions(responses))

    @property
    def calls(self):
        return self.chat.completions.calls


@pytest.fixture
def fake_openai():
    def build(*responses):
        return FakeOpenAI(responses)

    return build


# ----------------------------------------------------------------------
# Redis fakes
# ----------------------------------------------------------------------

_CLAUSE_RE = re.compile(r"@(\w+):\{((?:\\.|[^}\\])*)\}")
_KNN_RE = re.compile(r"=>\[KNN (\d+) @vector \$(\w+) AS score\]")


def _cosine_distance(a: np.ndarray, b: np.ndarray) -> float:
    denom = float(np.linalg.norm(a) * np.linalg.norm(b))
    if denom == 0:
        return 1.0
    return 1.0 - float(np.dot(a, b)) / denom


class FakeSearch:
    def __init__(self, redis, name):
        self.redis = redis
        self.name = name

    async def create_index(self, fields, definition=None, **kwargs):
        self.redis.create_calls.append((self.name, fields, definition))
        if self.redis.create_error is not None:
            raise self.redis.create_error
        if self.name in self.redis.indexes:
            raise ResponseError("Index already exists")
        self.redis.indexes[self.name] = fields
        return "OK"

    async def search(self, query, query_params=None):
        self.redis.search_calls.append((self.name, query, query_params))
        text = query.query_string()
        expr, _, _ = text.partition("=>")
        knn = _KNN_RE.search(text)
        k = int(knn.group(1))
        target = np.frombuffer(query_params[knn.group(2)], dtype="<f4")

        wanted = {
            attr: re.sub(r"\\(.)", r"\1", raw) for attr, raw in _CLAUSE_RE.findall(expr)
        }
        hits = []
        for key, mapping in self.redis.hashes.items():
            if any(mapping.get(attr) != value for attr, value in wanted.items()):
                continue
            vec = np.frombuffer(mapping["vector"], dtype="<f4")
            hits.append((_cosine_distance(target, vec), key, mapping))
        hits.sort(key=lambda hit: hit[0])
        hits = hits[:k]

        docs = []
        for distance, key, mapping in hits:
            fields = {name: value for name, value in mapping.items() if name != "vector"}
            fields["vector"] = mapping["vector"].decode("utf-8", "ignore")
            docs.append(types.SimpleNamespace(id=key, payload=None, score=str(distance), **fields))
        return types.SimpleNamespace(total=len(docs), docs=docs)


class FakeRedis:
    """Just enough of ``redis.asyncio.Redis`` + RediSearch for the index tests."""

    def __init__(self):
        self.hashes = {}
        self.indexes = {}
        self.create_calls = []
        self.search_calls = []
        self.create_error = None
        self.ping_error = None
        self.closed = False

    async def ping(self):
        if self.ping_error is not None:
            raise self.ping_error
        return True

    def ft(self, index_name="idx"):
        return FakeSearch(self, index_name)

    async def hset(self, name, key=None, value=None, mapping=None, items=None):
        self.hashes.setdefault(name, {}).update(mapping or {})
        return len(mapping or {})

    async def aclose(self):
        self.closed = True


@pytest.fixture
def fake_redis():
    return FakeRedis()
