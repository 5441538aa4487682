"""Task tracker configuration via pydantic-settings."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class TaskSettings(BaseSettings):
    environment: str = "development"
    database_url: str = "sqlite+aiosqlite:///data/tasks.db"
    echo_sql: bool = False
    app_title: str = "Task Manager"
    api_prefix: str = "/api"
    log_level: str = "INFO"
    cors_origins: str = "*"

    model_config = {"env_prefix": "TASKS_", "env_file": ".env", "extra": "ignore"}

    @property
    def cors_origins_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def is_production(self) -> bool:
        return self.environment.strip().lower() in {"prod", "production"}


settings = TaskSettings()
