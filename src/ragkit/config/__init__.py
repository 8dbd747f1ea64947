"""Package configuration"""

import logging
from dotenv import load_dotenv

from .loader import load_raw_config
from .oai import OAI
from .redis import Redis
from .service import ConfigService

load_dotenv()

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] [%(name)s]: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_pkg_logger = logging.getLogger("ragkit")
if not _pkg_logger.handlers:
    _handler = logging.StreamHandler()
    _handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    _pkg_logger.addHandler(_handler)
    _pkg_logger.setLevel(logging.INFO)
logging.getLogger("httpx").setLevel(logging.WARNING)

_RAW_CONFIG = load_raw_config()

oai = OAI(_RAW_CONFIG)
redis = Redis(_RAW_CONFIG)


def default_service() -> ConfigService:
    """Return a :class:`ConfigService` built from ``config.toml`` and the environment."""

    return ConfigService(raw=_RAW_CONFIG)


__all__ = ["oai", "redis", "ConfigService", "default_service", "load_raw_config", "LOG_FORMAT", "DATE_FORMAT"]
