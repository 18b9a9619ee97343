import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_SECRET_KEY = "dev-secret-unsafe"


class Settings:
    """Process settings read from the environment."""

    def __init__(self) -> None:
        self.data_dir = Path(os.environ.get("LUMOS_DATA_DIR", "./data"))
        self.db_path = str(self.data_dir / "lumos.db")
        self.secret_key = os.environ.get("LUMOS_SECRET_KEY", DEFAULT_SECRET_KEY)
        self.base_url = os.environ.get("LUMOS_BASE_URL", "http://localhost:3000")
        self.rules_path = Path(os.environ.get("LUMOS_RULES_PATH", "rules.yaml"))


def validate_settings(settings: Settings) -> None:
    """Fail fast on settings that can never work; warn on unsafe defaults."""
    if not settings.secret_key:
        raise ValueError("LUMOS_SECRET_KEY must not be empty")
    if not settings.base_url.startswith(("http://", "https://")):
        raise ValueError(f"LUMOS_BASE_URL must be an http(s) URL, got {settings.base_url!r}")
    if settings.secret_key == DEFAULT_SECRET_KEY:
        logger.warning("LUMOS_SECRET_KEY is not set; using the insecure development key")
