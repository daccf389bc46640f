"""Configuration settings for Agent Config Hub."""

from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Server Configuration
    server_host: str = "0.0.0.0"
    server_port: int = 8001

    # MySQL Configuration
    mysql_host: str = "localhost"
    mysql_port: int = 3306
    mysql_database: str = "agent_config_hub"
    mysql_user: str = "root"
    mysql_password: str = ""

    # Full SQLAlchemy URL, overrides the MySQL fields when set
    database_url: Optional[str] = None

    # API Configuration
    api_prefix: str = "/api"
    debug: bool = False
    log_level: str = "INFO"

    # Auto-Claude installation used by sync when no target path is given
    autoclaude_backend_path: Optional[str] = None
    default_model_profile: str = "balanced"

    # Component cache
    cache_ttl_seconds: float = 30.0

    # Latency budgets (warnings only)
    import_latency_budget_ms: float = 10000.0
    sync_latency_budget_ms: float = 5000.0

    # File writer tuning
    sync_max_concurrency: int = 10
    sync_min_concurrency: int = 3
    sync_concurrency_reduction: int = 3
    sync_memory_threshold_mb: float = 300.0
    sync_batch_pause_threshold: int = 20
    sync_batch_pause_ms: float = 10.0

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"


settings = Settings()
