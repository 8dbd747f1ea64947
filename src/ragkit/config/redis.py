import os

from .loader import section

DEFAULT_VECTOR_DIM = "1536"  # text-embedding-3-small


def _optional_int(raw) -> int | None:
    if raw is None or str(raw).strip() == "":
        return None
    return int(raw)


class Redis:
    def __init__(self, config: dict | None = None) -> None:
        redis_cfg = section(config, "redis")
        self.URL: str = str(redis_cfg.get("url", os.getenv("REDIS_URL", "redis://localhost:6379")))
        self.VECTOR_DIM: int | None = _optional_int(
            redis_cfg.get("vector_dim", os.getenv("VECTOR_DIM", DEFAULT_VECTOR_DIM))
        )
