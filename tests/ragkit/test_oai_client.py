import asyncio
import types

import numpy as np
import pytest

from ragkit.clients import oai
from ragkit.config import ConfigService
from ragkit.errors import ConfigurationError


class FakeEmbeddings:
    def __init__(self, vector):
        self.vector = vector
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        return types.SimpleNamespace(data=[types.SimpleNamespace(embedding=self.vector)])


def test_build_client_requires_api_key():
    with pytest.raises(ConfigurationError):
        oai.build_client(ConfigService({"openai": {"api_key": ""}}, raw={}))


def test_build_client_accepts_section_objects():
    client = oai.build_client(ConfigService({"openai": {"api_key": "sk-section"}}, raw={}).openai)

    assert client.api_key == "sk-section"


def test_embed_text_returns_float32_vector():
    embeddings = FakeEmbeddings([0.5, 0.25, 0.0, 1.0])
    client = types.SimpleNamespace(embeddings=embeddings)

    vec = asyncio.run(oai.embed_text(client, "hello", model="emb-test", dim=4))

    assert vec.dtype == np.float32
    np.testing.assert_allclose(vec, [0.5, 0.25, 0.0, 1.0])
    assert embeddings.calls == [{"model": "emb-test", "input": "hello"}]


def test_embed_text_checks_size():
    client = types.SimpleNamespace(embeddings=FakeEmbeddings([0.5, 0.25]))

    with pytest.raises(ValueError, match="Unexpected embedding size"):
        asyncio.run(oai.embed_text(client, "hello", model="emb-test", dim=4))


def test_embed_text_short_circuits_empty_input():
    client = types.SimpleNamespace(embeddings=FakeEmbeddings([1.0]))

    vec = asyncio.run(oai.embed_text(client, "", dim=3))

    assert vec.tolist() == [0.0, 0.0, 0.0]
    assert client.embeddings.calls == []


def test_embed_text_empty_input_uses_configured_dimension():
    client = types.SimpleNamespace(embeddings=FakeEmbeddings([1.0]))
    config = ConfigService({"redis": {"vector_dim": 5}}, raw={})

    vec = asyncio.run(oai.embed_text(client, "", config=config))

    assert vec.shape == (5,)
    assert not vec.any()
    assert client.embeddings.calls == []


def test_embed_text_empty_input_without_any_dimension():
    client = types.SimpleNamespace(embeddings=FakeEmbeddings([1.0]))
    config = ConfigService({"redis": {"vector_dim": None}}, raw={})

    with pytest.raises(ConfigurationError):
        asyncio.run(oai.embed_text(client, "", config=config))


def test_embed_text_model_comes_from_config_service():
    embeddings = FakeEmbeddings([0.5, 0.25])
    client = types.SimpleNamespace(embeddings=embeddings)
    config = ConfigService({"openai": {"emb_model_id": "emb-override"}}, raw={})

    asyncio.run(oai.embed_text(client, "hello", config=config))

    assert embeddings.calls == [{"model": "emb-override", "input": "hello"}]
