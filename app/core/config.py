"""Application configuration."""

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings.

    Environment variables will be loaded and validated using Pydantic.
    """

    app_name: str = "Address Resolver"
    version: str = "0.1.0"
    api_prefix: str = ""

    # Server Settings
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # CORS Settings
    cors_origins: list[str] = ["*"]  # Default to allow all in development
    cors_allow_credentials: bool = False

    # Logging Settings
    LOG_LEVEL: str = "INFO"
    JSON_LOGS: bool = True

    # LLM Settings
    LLM_PROVIDER: str = "openai"  # openai or cloudflare
    LLM_MODEL_NAME: str | None = None  # Provider default when unset
    LLM_TEMPERATURE: float = Field(default=0.1, ge=0, le=1)
    LLM_MAX_TOKENS: int | None = None
    LLM_TIMEOUT: int = Field(default=30, gt=0)
    LLM_BASE_URL: str | None = None

    # API Keys
    OPENROUTER_API_KEY: str | None = None
    CLOUDFLARE_ACCOUNT_ID: str | None = None
    CLOUDFLARE_API_TOKEN: str | None = None

    # Correction prompt
    ADDRESS_REGION: str = "Nigeria"

    # Geocoding Settings
    NOMINATIM_DOMAIN: str = "nominatim.openstreetmap.org"
    NOMINATIM_SCHEME: str = "https"
    NOMINATIM_USER_AGENT: str = "address-resolver"
    NOMINATIM_RATE_LIMIT: float = Field(default=1.1, ge=0)  # 1 request per second
    NOMINATIM_RESULT_LIMIT: int | None = Field(default=None, gt=0)
    GEOCODING_TIMEOUT: int = Field(default=10, gt=0)

    # Stats Settings
    STATS_HISTORY_SIZE: int = Field(default=100, gt=0)
    STATS_RECENT_COUNT: int = Field(default=10, gt=0)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="allow",  # Allow extra fields in environment
    )

    @model_validator(mode="after")
    def validate_origins(self) -> "Settings":
        """Validate CORS origins."""
        if self.cors_origins == ["*"]:
            self.cors_origins = [
                "http://localhost",
                "http://localhost:8000",
                "http://localhost:3000",
            ]
        return self

    @model_validator(mode="after")
    def validate_llm_provider(self) -> "Settings":
        """Normalise and validate the LLM provider name."""
        self.LLM_PROVIDER = self.LLM_PROVIDER.lower()
        if self.LLM_PROVIDER not in ("openai", "cloudflare"):
            raise ValueError(
                f"Unsupported LLM provider: {self.LLM_PROVIDER}. "
                "Supported providers: openai, cloudflare"
            )
        return self


# Create settings instance
settings = Settings()
