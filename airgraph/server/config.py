"""
Service settings, read from the environment.

A `.env` file in the working directory (or the path in AIRGRAPH_ENV_FILE) is
loaded first so local overrides do not need a manual `export`.
"""
from __future__ import annotations

import logging
import os
from typing import List, Mapping, Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def _get_bool(env: Mapping[str, str], key: str, default: bool) -> bool:
    raw = env.get(key)
    if raw is None or raw.strip() == "":
        return default
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    logger.warning("Ignoring %s=%r (expected a boolean), using %s", key, raw, default)
    return default


def _get_int(env: Mapping[str, str], key: str, default: int) -> int:
    raw = env.get(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r (expected an integer), using %s", key, raw, default)
        return default


class Settings:
    def __init__(
        self,
        host: str = "0.0.0.0",
        port: int = 3001,
        reload: bool = False,
        log_level: str = "INFO",
        cors_origins: Optional[List[str]] = None,
        seed_demo: bool = False,
    ) -> None:
        self.host = host
        self.port = port
        self.reload = reload
        self.log_level = log_level.upper()
        self.cors_origins = cors_origins if cors_origins is not None else ["*"]
        self.seed_demo = seed_demo

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        if env is None:
            load_dotenv(os.environ.get("AIRGRAPH_ENV_FILE", ".env"))
            env = os.environ

        origins = env.get("AIRGRAPH_CORS_ORIGINS", "*")
        return cls(
            host=env.get("AIRGRAPH_HOST", "0.0.0.0"),
            port=_get_int(env, "AIRGRAPH_PORT", 3001),
            reload=_get_bool(env, "AIRGRAPH_RELOAD", False),
            log_level=env.get("AIRGRAPH_LOG_LEVEL", "INFO"),
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
            seed_demo=_get_bool(env, "AIRGRAPH_SEED_DEMO", False),
        )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
