import os

from .loader import section


class OAI:
    def __init__(self, config: dict | None = None) -> None:
        oai_cfg = section(config, "openai")
        self.API_KEY: str | None = oai_cfg.get("api_key", os.getenv("OPENAI_API_KEY"))
        self.ORGANIZATION: str | None = oai_cfg.get("organization", os.getenv("OPENAI_ORG_ID"))
        self.BASE_URL: str | None = oai_cfg.get("base_url", os.getenv("OPENAI_BASE_URL"))
        self.EMB_MODEL_ID: str = str(oai_cfg.get("emb_model_id", os.getenv("EMB_MODEL_ID", "text-embedding-3-small")))
