"""Application configuration management."""

from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


load_dotenv()


class Settings(BaseSettings):
    """Configuration values loaded from environment variables."""

    bot_token: str = Field(alias="BOT_TOKEN")
    api_end_point: str = Field(alias="API_END_POINT")
    admin_chat_id: Optional[int] = Field(default=None, alias="ADMIN_CHAT_ID")
    request_timeout: float = Field(default=10.0, alias="REQUEST_TIMEOUT")
    submit_attempts: int = Field(default=1, ge=1, alias="SUBMIT_ATTEMPTS")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    model_config = {
        "populate_by_name": True,
        "extra": "ignore",
    }

    @field_validator("api_end_point")
    @classmethod
    def ensure_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/") + "/"


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""

    return Settings()
