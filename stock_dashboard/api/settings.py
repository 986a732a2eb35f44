"""
Settings for serving the stock dashboard API and configuring its logs.
"""

from typing import Final

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_LOG_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class APISettings(BaseSettings):
    """Where the dashboard API listens and how the application logs."""

    api_host: str = Field(default="0.0.0.0", description="Address the dashboard binds to")
    api_port: int = Field(default=8000, ge=1, le=65535, description="Dashboard port")
    log_level: str = Field(
        default="INFO", description="Level shared by application loggers and uvicorn"
    )
    log_format: str = Field(default=DEFAULT_LOG_FORMAT, description="logging format")
    log_file: str = Field(default="stock_dashboard.log", description="Log file path")
    log_to_file: bool = Field(default=True, description="Also write logs to log_file")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        return value.strip().upper() or "INFO"


api_settings = APISettings()
