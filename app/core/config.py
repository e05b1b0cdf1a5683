from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from typing import List, Optional
import secrets

class Settings(BaseSettings):
    # ----------------------------------
    # App General Info
    # ----------------------------------
    PROJECT_NAME: str = "Magi Chat"
    VERSION: str = "1.0.0"
    API_V1_STR: str = "/api/v1"
    ENVIRONMENT: str = Field(
        default="development",
        description="Current environment: development, testing, staging, or production"
    )
    LOG_LEVEL: str = Field(default="INFO", description="Root log level for the service")
    CORS_ALLOW_ORIGINS: List[str] = Field(default=["*"])

    # ----------------------------------
    # Relational Database (conversations, messages, personas)
    # ----------------------------------
    DATABASE_URL: str = Field(default="sqlite:///./magi_chat.db")

    # ----------------------------------
    # Identity (JWTs issued by the external auth provider)
    # ----------------------------------
    JWT_SECRET_KEY: str = Field(
        default_factory=lambda: secrets.token_urlsafe(48),
        description="Shared secret used by the identity provider to sign access tokens.",
    )
    JWT_ALGORITHM: str = Field(default="HS256")
    JWT_AUDIENCE: Optional[str] = Field(
        default=None,
        description="Expected `aud` claim. Leave unset to skip audience verification.",
    )

    # ----------------------------------
    # Completion provider (OpenRouter-compatible)
    # ----------------------------------
    OPENROUTER_API_KEY: Optional[str] = Field(default=None, description="Provider key; checked on every chat request")
    OPENROUTER_BASE_URL: str = Field(default="https://openrouter.ai/api/v1")
    APP_URL: str = Field(default="", description="Sent to the provider as HTTP-Referer")
    PROVIDER_TIMEOUT_SECONDS: float = Field(
        default=60.0,
        description="Timeout (seconds) for provider HTTP requests.",
    )

    # ----------------------------------
    # Models
    # ----------------------------------
    DEFAULT_CHAT_MODEL: str = Field(
        default="openai/gpt-3.5-turbo",
        description="Used when a chat request does not name a model.",
    )
    TITLE_MODEL: Optional[str] = Field(
        default=None,
        description="Model for auto-titling. Falls back to the model used for the exchange.",
    )
    TITLE_MAX_TOKENS: int = Field(default=20)
    TITLE_TEMPERATURE: float = Field(default=0.7)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )

settings = Settings()
