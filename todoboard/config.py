# Todo board — configuration
# Defaults, overridden by config.yaml, then by environment, then by CLI args.

import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml

from .store import DEFAULT_DB

CONFIG_PATH = Path(__file__).parent.parent / "config.yaml"

LOG_FORMAT = "%(asctime)s [todoboard] %(levelname)s: %(message)s"

# env var -> (field, type)
ENV_OVERRIDES = {
    "TODOBOARD_DB": ("db_path", str),
    "TODOBOARD_HOST": ("host", str),
    "PORT": ("port", int),
    "TODOBOARD_CORS_ORIGIN": ("cors_origin", str),
    "TODOBOARD_LOG_LEVEL": ("log_level", str),
}

logger = logging.getLogger(__name__)


@dataclass
class Config:
    """Runtime configuration for the todo board server."""

    # Storage
    db_path: str = str(DEFAULT_DB)

    # HTTP surface
    host: str = "127.0.0.1"
    port: int = 3000
    cors_origin: str = "http://localhost:5173"

    # Notification channel
    queue_size: int = 256          # per-client backlog before events are dropped
    keepalive_seconds: float = 15.0

    log_level: str = "INFO"

    def apply_env(self, environ=None):
        """Override fields from environment variables."""
        environ = os.environ if environ is None else environ
        for var, (name, cast) in ENV_OVERRIDES.items():
            value = environ.get(var)
            if not value:
                continue
            try:
                setattr(self, name, cast(value))
            except ValueError:
                logger.warning(f"Ignoring {var}={value!r}: expected {cast.__name__}")
        self.db_path = str(Path(self.db_path).expanduser())

    @classmethod
    def load(cls, path: Optional[str] = None, environ=None) -> "Config":
        """Load config from YAML file, falling back to defaults."""
        cfg_path = Path(path) if path else CONFIG_PATH
        if cfg_path.exists():
            try:
                with open(cfg_path, "r") as f:
                    data = yaml.safe_load(f) or {}
                cfg = cls(**{k: v for k, v in data.items() if hasattr(cls, k)})
            except (OSError, yaml.YAMLError, TypeError, AttributeError) as e:
                logger.warning(f"Cannot read {cfg_path}, using defaults: {e}")
                cfg = cls()
        else:
            cfg = cls()
        cfg.apply_env(environ)
        return cfg


def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )
