from typing import Optional

from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Relay settings loaded from environment variables."""
    
    # Telegram Bot
    telegram_bot_token: str
    
    # YouTube Data API v3
    youtube_api_key: str = ""
    youtube_api_url: str = "https://www.googleapis.com/youtube/v3"
    youtube_watch_url: str = "https://www.youtube.com/watch?v="
    request_timeout: float = 30.0
    
    # Mapping file (source channel id -> destination chat id)
    channel_map_path: str = "channelMap.json"
    
    # Polling
    check_interval_seconds: int = 2 * 60 * 60
    poll_window_hours: int = 24
    recent_window_hours: int = 2
    recent_max_results: int = 5
    
    # Backoff after quota errors
    backoff_reset_seconds: int = 2 * 60 * 60
    backoff_max_seconds: int = 24 * 60 * 60
    
    # Optional Redis heartbeat
    redis_url: Optional[str] = None
    
    # Logging
    log_level: str = "INFO"
    log_dir: str = "logs"
    
    class Config:
        env_file = ".env"
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    return Settings()
