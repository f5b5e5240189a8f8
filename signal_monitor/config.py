"""
Configuration for the Social Signal Monitor

All settings in one place for easy tuning. Defaults can be overridden with
environment variables (a .env file at the project root is loaded first).
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .errors import ConfigurationError

_project_root = Path(__file__).parent.parent
_env_path = _project_root / ".env"
if _env_path.exists():
    load_dotenv(_env_path)


def _get_env_float(key: str, default: float) -> float:
    """Get float value from environment variable with fallback."""
    value = os.getenv(key)
    if value is None or value == "":
        return default
    try:
        return float(value)
    except ValueError:
        raise ConfigurationError(f"{key} must be a number, got {value!r}")


def _get_env_int(key: str, default: int) -> int:
    """Get integer value from environment variable with fallback."""
    value = os.getenv(key)
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise ConfigurationError(f"{key} must be an integer, got {value!r}")


@dataclass
class Config:
    """All configuration settings."""

    # -------------------------------------------------------------------------
    # Scheduling
    # -------------------------------------------------------------------------
    cycle_interval_ms: int = 60_000

    # -------------------------------------------------------------------------
    # Decision Rule
    # -------------------------------------------------------------------------
    # Weight 1.0 triggers at this score; each +1.0 of weight lowers it by 0.1
    base_threshold: float = 0.8

    # -------------------------------------------------------------------------
    # Dedup Cache
    # -------------------------------------------------------------------------
    dedup_max_size: int = 1000
    dedup_trim_to: int = 500

    # -------------------------------------------------------------------------
    # Fetch limits per watchlist entry
    # -------------------------------------------------------------------------
    keyword_search_limit: int = 5
    influencer_tweet_limit: int = 3

    # -------------------------------------------------------------------------
    # X / Twitter API
    # -------------------------------------------------------------------------
    twitter_api_url: str = "https://api.twitter.com/2"
    twitter_max_results: int = 100
    request_timeout_sec: float = 10.0

    # Rate limiting backoff (seconds)
    rate_limit_backoff_sec: float = 2.0
    max_retries: int = 3

    # -------------------------------------------------------------------------
    # Sentiment scoring
    # -------------------------------------------------------------------------
    openai_model: str = "gpt-4o-mini"

    # -------------------------------------------------------------------------
    # Logging
    # -------------------------------------------------------------------------
    log_level: str = "INFO"
    log_file: str = "logs/monitor.log"

    # -------------------------------------------------------------------------
    # Database Paths
    # -------------------------------------------------------------------------
    data_dir: Path = field(default_factory=lambda: _project_root / "data")

    def __post_init__(self):
        if self.cycle_interval_ms <= 0:
            raise ConfigurationError("cycle_interval_ms must be positive")
        if self.dedup_trim_to <= 0 or self.dedup_max_size <= 0:
            raise ConfigurationError("dedup sizes must be positive")
        if self.dedup_trim_to > self.dedup_max_size:
            raise ConfigurationError(
                f"dedup_trim_to ({self.dedup_trim_to}) cannot exceed "
                f"dedup_max_size ({self.dedup_max_size})"
            )
        self.data_dir = Path(self.data_dir)

    @property
    def cycle_interval_sec(self) -> float:
        return self.cycle_interval_ms / 1000

    @property
    def db_path(self) -> Path:
        return self.data_dir / "signals.db"

    # -------------------------------------------------------------------------
    # Secrets (from environment)
    # -------------------------------------------------------------------------
    @property
    def twitter_bearer_token(self) -> Optional[str]:
        return os.environ.get("TWITTER_BEARER_TOKEN")

    @property
    def openai_api_key(self) -> Optional[str]:
        return os.environ.get("OPENAI_API_KEY")

    @property
    def telegram_bot_token(self) -> Optional[str]:
        return os.environ.get("TELEGRAM_BOT_TOKEN")

    @property
    def telegram_chat_id(self) -> Optional[str]:
        return os.environ.get("TELEGRAM_CHAT_ID")

    @classmethod
    def from_env(cls) -> "Config":
        """Build a Config with environment overrides applied."""
        defaults = cls()
        return cls(
            cycle_interval_ms=_get_env_int("SOCIAL_MONITOR_INTERVAL_MS", defaults.cycle_interval_ms),
            base_threshold=_get_env_float("SIGNAL_BASE_THRESHOLD", defaults.base_threshold),
            dedup_max_size=_get_env_int("DEDUP_MAX_SIZE", defaults.dedup_max_size),
            dedup_trim_to=_get_env_int("DEDUP_TRIM_TO", defaults.dedup_trim_to),
            keyword_search_limit=_get_env_int("KEYWORD_SEARCH_LIMIT", defaults.keyword_search_limit),
            influencer_tweet_limit=_get_env_int("INFLUENCER_TWEET_LIMIT", defaults.influencer_tweet_limit),
            openai_model=os.getenv("OPENAI_MODEL", defaults.openai_model),
            log_level=os.getenv("LOG_LEVEL", defaults.log_level),
            data_dir=Path(os.getenv("SIGNAL_MONITOR_DATA_DIR", str(defaults.data_dir))),
        )


# Global config instance
config = Config.from_env()
