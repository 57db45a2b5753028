import json
import re
from pathlib import Path
from typing import Optional, Tuple

from core.log import get_logger

logger = get_logger("config")

CONFIG_KEY = "vectorStoreId"
VECTOR_STORE_ID_PATTERN = re.compile(r"^vs_[A-Za-z0-9_-]+$")


def is_valid_vector_store_id(value: Optional[str]) -> bool:
    return bool(value) and VECTOR_STORE_ID_PATTERN.match(value) is not None


class ConfigStore:
    """
    Holds the one persisted value: the vector store id.

    The environment override (VECTOR_STORE_ID) always wins; otherwise the
    JSON file is re-read on every call.
    """

    def __init__(self, path: str | Path, env_override: Optional[str] = None):
        self.path = Path(path)
        self.env_override = env_override or None

    def get_vector_store_id(self) -> Optional[str]:
        return self.lookup()[0]

    def lookup(self) -> Tuple[Optional[str], str]:
        """Return (vector_store_id, source) where source is env, file or none."""
        if self.env_override:
            return self.env_override, "env"
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                cfg = json.load(f)
        except (OSError, ValueError):
            return None, "none"
        value = cfg.get(CONFIG_KEY) if isinstance(cfg, dict) else None
        if not value or not isinstance(value, str):
            return None, "none"
        return value, "file"

    def set_vector_store_id(self, vector_store_id: str) -> bool:
        """Persist the id; returns False (and logs) when the write fails."""
        try:
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump({CONFIG_KEY: vector_store_id}, f, indent=2)
        except OSError as e:
            logger.error("Failed to write %s: %s", self.path, e)
            return False
        return True
