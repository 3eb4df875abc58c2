"""Shared configuration base classes only."""

from pydantic import Field
from pydantic_settings import BaseSettings


class BaseServiceConfig(BaseSettings):
    """Base configuration class for services to extend."""

    port: int = Field(8000, env="PORT")
    log_level: str = Field("INFO", env="LOG_LEVEL")
    environment: str = Field(
        "development",
        env="ENVIRONMENT",
        description="Deployment environment; 'production' marks orders as live",
    )

    model_config = {"env_file": ".env", "case_sensitive": False, "extra": "ignore"}

    @property
    def is_production(self) -> bool:
        return self.environment.strip().lower() == "production"
