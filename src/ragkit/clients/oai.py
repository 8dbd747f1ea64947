"""Helpers for interacting with OpenAI API"""
from __future__ import annotations

import numpy as np
from openai import AsyncOpenAI, OpenAIError

from ragkit.config import ConfigService, default_service
from ragkit.config.oai import OAI
from ragkit.errors import ConfigurationError, RemoteServiceError

import logging
logger = logging.getLogger(__name__)


def build_client(settings: OAI | ConfigService) -> AsyncOpenAI:
    """
    Return an async OpenAI client for ``settings``.

    :raises ConfigurationError: when no API key is configured.
    """
    if isinstance(settings, ConfigService):
        settings.validate()
        settings = settings.openai
    if not settings.API_KEY:
        raise ConfigurationError(
            "OpenAI API key is required. Set OPENAI_API_KEY or provide openai.api_key in the configuration."
        )

    return AsyncOpenAI(
        api_key=settings.API_KEY,
        organization=settings.ORGANIZATION,
        base_url=settings.BASE_URL,
    )


# ==============================================
# Embedding utilities
# ==============================================
async def embed_text(
    client: AsyncOpenAI,
    text: str,
    *,
    model: str | None = None,
    dim: int | None = None,
    config: ConfigService | None = None,
) -> np.ndarray:
    """
    Return a float32 numpy vector for the given text using OpenAI embeddings.

    Model defaults to ``openai.emb_model_id`` of ``config``. Empty input
    short-circuits to a zero vector of ``dim``, falling back to the
    configured ``redis.vector_dim`` (no request made).
    """
    cfg = config or default_service()
    if not text:
        size = dim if dim is not None else cfg.redis.VECTOR_DIM
        if not size:
            raise ConfigurationError(
                "Vector dimension is required. Pass dim or set VECTOR_DIM / redis.vector_dim."
            )
        return np.zeros(size, dtype=np.float32)

    use_model = model or cfg.openai.EMB_MODEL_ID
    try:
        resp = await client.embeddings.create(model=use_model, input=text)
    except OpenAIError as exc:
        raise RemoteServiceError(f"Embedding request failed: {exc}") from exc

    vec = np.asarray(resp.data[0].embedding, dtype=np.float32)
    if dim is not None and vec.size != dim:
        raise ValueError(f"Unexpected embedding size {vec.size} != {dim} for model {use_model}")

    return vec
