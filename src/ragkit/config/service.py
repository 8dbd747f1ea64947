"""
Explicit configuration object.

Values resolve in this order, highest first:

1. explicit per-call arguments (handled by the callers, e.g. ``vector_dim``)
2. overrides passed to :class:`ConfigService`
3. ``config.toml``
4. environment variables (``.env`` is loaded on import)
5. built-in defaults
"""

from __future__ import annotations

from typing import Any, Dict, Mapping

from ragkit.errors import ConfigurationError

from .loader import ROOT_KEY, load_raw_config
from .oai import OAI
from .redis import Redis

SECTIONS = ("openai", "redis")


def merge_sections(base: Mapping[str, Any] | None, overrides: Mapping[str, Any] | None) -> Dict[str, Any]:
    """Merge ``overrides`` on top of ``base`` one section at a time."""

    merged: Dict[str, Any] = {}
    for name in SECTIONS:
        merged[name] = {
            **dict((base or {}).get(name) or {}),
            **dict((overrides or {}).get(name) or {}),
        }
    return merged


class ConfigService:
    """Holds the merged configuration and hands out typed section objects."""

    def __init__(self, overrides: Mapping[str, Any] | None = None, *, raw: Mapping[str, Any] | None = None) -> None:
        raw_config = load_raw_config() if raw is None else raw
        self._base = dict(raw_config.get(ROOT_KEY, {}) or {})
        self._overrides = merge_sections(None, overrides)
        self._build()

    def _build(self) -> None:
        self._config = {ROOT_KEY: merge_sections(self._base, self._overrides)}
        self._openai = OAI(self._config)
        self._redis = Redis(self._config)

    def get_config(self) -> Dict[str, Any]:
        """Return the merged raw configuration (without environment fallbacks)."""

        return self._config

    @property
    def openai(self) -> OAI:
        return self._openai

    @property
    def redis(self) -> Redis:
        return self._redis

    def update_config(self, overrides: Mapping[str, Any]) -> None:
        """Merge ``overrides`` on top of the overrides already held."""

        self._overrides = merge_sections(self._overrides, overrides)
        self._build()

    def validate(self) -> None:
        """Raise :class:`ConfigurationError` when required settings are missing."""

        if not self._openai.API_KEY:
            raise ConfigurationError(
                "OpenAI API key is required. Set OPENAI_API_KEY or provide "
                "openai.api_key in the configuration."
            )
