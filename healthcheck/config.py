from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Central configuration loaded from environment / .env file."""

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    # Check definitions (YAML)
    checks_file: str = "checks.yaml"

    # System identity reported by /__health and /__about
    system_code: str = "health-check"
    system_name: str = "Health Check"
    system_description: str = "Aggregated health checks"

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # CLI `watch` refresh rate, in seconds
    watch_interval: float = 1.0

    # Logging
    log_level: str = "INFO"


settings = Settings()
