from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List

logger = logging.getLogger(__name__)

SUPPORTED_PLATFORMS = ("android", "ios")


class Settings:
    """Centralized configuration for the record write pipeline."""

    def __init__(self) -> None:
        base_dir = Path(__file__).resolve().parent
        repo_root = base_dir.parent
        data_root_default = repo_root / "data"

        platform = (os.environ.get("CONNECTKIT_PLATFORM") or "android").strip().lower()
        if platform not in SUPPORTED_PLATFORMS:
            logger.warning("Unknown CONNECTKIT_PLATFORM '%s', using android", platform)
            platform = "android"
        self.platform: str = platform

        self.data_root: Path = Path(
            os.environ.get("CONNECTKIT_DATA_ROOT") or data_root_default
        ).expanduser()
        self.db_path: Path = Path(
            os.environ.get("CONNECTKIT_DB_PATH") or (self.data_root / "connectkit.db")
        ).expanduser()
        # Data origin stamped on persisted rows. Upserts only match rows from the same origin.
        self.origin: str = os.environ.get("CONNECTKIT_ORIGIN") or "dev.connectkit.app"
        self.sink_timeout: float = float(os.environ.get("CONNECTKIT_SINK_TIMEOUT") or "30")
        # Off by default: the platform is the final validator for sleep stages.
        self.validate_sleep_stages: bool = (
            os.environ.get("CONNECTKIT_VALIDATE_SLEEP_STAGES") or ""
        ).strip() in {"1", "true", "True"}
        self.log_level: str = (os.environ.get("CONNECTKIT_LOG_LEVEL") or "INFO").upper()
        self.host: str = os.environ.get("CONNECTKIT_HOST") or "127.0.0.1"
        self.port: int = int(os.environ.get("CONNECTKIT_PORT") or "8000")

        cors = os.environ.get("CONNECTKIT_CORS_ORIGINS", "*")
        if cors.strip() == "*":
            self.cors_origins: List[str] = ["*"]
        else:
            self.cors_origins = [
                origin.strip() for origin in cors.split(",") if origin.strip()
            ]


settings = Settings()
