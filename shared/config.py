"""Shared configuration for the pipeline, scheduler and API."""
from typing import Optional
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # MongoDB Configuration
    mongo_url: str = "mongodb://localhost:27017"
    mongo_db_name: str = "ai_news"

    # Redis Configuration
    redis_url: str = "redis://localhost:6379"
    redis_news_channel: str = "ai_news_changes"
    redis_logs_channel: str = "pipeline_logs_changes"

    # API Configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_debug: bool = False

    # Feed fetching
    user_agent: str = "StPauls-AI-Learning/1.0 (+https://www.stpauls.br)"
    fetch_timeout: float = 10.0
    source_delay_seconds: float = 2.0
    title_max_length: int = 255

    # Automation schedule
    fetch_interval_hours: int = 3
    summary_delay_minutes: int = 15
    initial_summary_delay_seconds: float = 5.0
    max_articles_per_batch: int = 10

    # Retention
    cleanup_days: int = 30
    failed_article_retention_days: int = 7
    cleanup_interval_hours: int = 24

    # Health
    error_window_hours: int = 24
    health_error_threshold: int = 5
    future_date_tolerance_hours: int = 24

    # External summarizer (process-ai-summaries)
    summarizer_url: Optional[str] = None
    summarizer_api_key: Optional[str] = None
    summarizer_timeout: float = 120.0

    # Scheduler
    scheduler_poll_interval: float = 60.0

    # WebSocket Configuration
    ws_heartbeat_interval: int = 30

    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()
