"""Configuration management for Radio Calendar."""

import logging
import os
import sys
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

class Config:
    """Application configuration."""

    # Base paths
    BASE_DIR = Path(__file__).resolve().parent.parent.parent
    LOG_DIR = Path(os.getenv("LOG_DIR", str(BASE_DIR / "logs")))

    # Station service
    STATION_API_URL = os.getenv("STATION_API_URL", "http://localhost/api")
    STATION_API_TOKEN = os.getenv("STATION_API_TOKEN", "")
    HTTP_TIMEOUT = float(os.getenv("HTTP_TIMEOUT", "10"))

    # Used until the station reports its own timezone
    STATION_TIMEZONE = os.getenv("STATION_TIMEZONE", "UTC")

    # Calendar behaviour
    REFRESH_INTERVAL = int(os.getenv("REFRESH_INTERVAL", "30"))  # seconds
    SNAP_MINUTES = int(os.getenv("SNAP_MINUTES", "15"))
    DEFAULT_BLOCK_MINUTES = int(os.getenv("DEFAULT_BLOCK_MINUTES", "60"))

    # Auto-scheduler: playlists whose name contains one of these get reserved slots
    RESERVED_KEYWORDS = os.getenv("RESERVED_KEYWORDS", "")  # e.g. "morning;news"

    # Logging
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    LOG_FILE = LOG_DIR / "radio_calendar.log"

    @classmethod
    def ensure_directories(cls):
        """Create necessary directories if they don't exist."""
        cls.LOG_DIR.mkdir(parents=True, exist_ok=True)

    @classmethod
    def reserved_keywords(cls, raw: str = None) -> list:
        """Split a ';' or ',' separated keyword string into lowercase keywords."""
        if raw is None:
            raw = cls.RESERVED_KEYWORDS
        keywords = []
        for part in raw.replace(",", ";").split(";"):
            part = part.strip().lower()
            if part and part not in keywords:
                keywords.append(part)
        return keywords

config = Config()

def setup_logging(log_file: Path = None):
    """Setup logging configuration."""
    config.ensure_directories()

    logging.basicConfig(
        level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler(log_file or config.LOG_FILE),
            logging.StreamHandler(sys.stdout)
        ]
    )
