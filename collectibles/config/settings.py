"""Application settings using Pydantic Settings."""

from functools import lru_cache

from pydantic import PostgresDsn, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Validation constants
BCRYPT_ROUNDS_MIN = 10  # Security minimum
BCRYPT_ROUNDS_MAX = 16  # Performance limit
SESSION_TTL_MIN = 5  # Minutes
SESSION_TTL_MAX = 60 * 24 * 30  # 30 days
MAX_ITEM_IMAGES_LIMIT = 4  # Hard ceiling enforced by the item schema

DEFAULT_HERO_PARAGRAPH = (
    "Your ultimate collection management system for a galaxy far, far away. "
    "Organize, catalog, and treasure your Star Wars collectibles."
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "collectibles-catalog"
    debug: bool = False
    log_level: str = "INFO"

    # Database
    database_url: PostgresDsn
    database_pool_size: int = 5
    database_max_overflow: int = 10
    database_pool_timeout: int = 30
    database_echo: bool = False

    # Authentication
    bcrypt_rounds: int = 12
    session_ttl_minutes: int = 60 * 24 * 7
    password_min_length: int = 6

    # CORS settings
    # Empty = no CORS; use specific origins like ["https://example.com"]
    cors_origins: list[str] = []

    # Request size limits (image uploads go through the API)
    max_request_size: int = 25 * 1024 * 1024

    expose_timing_header: bool = True

    # Image service (Cloudflare Images); token and hash are server-side secrets
    cloudflare_account_id: str | None = None
    cloudflare_api_token: SecretStr | None = None
    cloudflare_account_hash: SecretStr | None = None
    cloudflare_api_base_url: str = "https://api.cloudflare.com/client/v4"
    image_delivery_base_url: str = "https://imagedelivery.net"
    image_service_timeout: float = 30.0
    max_item_images: int = 4
    max_category_images: int = 1

    # Home valuation report
    home_report_category: str = "Vintage Star Wars - The Original Trilogy"
    home_report_subcategory: str | None = "The Original Trilogy - collection"

    # Hero defaults, used until a row is saved
    hero_heading_line1: str = "Star Wars"
    hero_heading_line2: str = "Memorabilia"
    hero_paragraph: str = DEFAULT_HERO_PARAGRAPH

    @field_validator("bcrypt_rounds")
    @classmethod
    def validate_bcrypt_rounds(cls, v: int) -> int:
        """Validate bcrypt rounds is within reasonable bounds."""
        if v < BCRYPT_ROUNDS_MIN:
            msg = (
                f"bcrypt_rounds must be at least {BCRYPT_ROUNDS_MIN} (security minimum)"
            )
            raise ValueError(msg)
        if v > BCRYPT_ROUNDS_MAX:
            msg = (
                f"bcrypt_rounds must be at most {BCRYPT_ROUNDS_MAX} (performance limit)"
            )
            raise ValueError(msg)
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a valid Python logging level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_v = v.upper()
        if upper_v not in valid_levels:
            msg = f"Invalid log level: {v}. Must be one of {valid_levels}"
            raise ValueError(msg)
        return upper_v

    @field_validator("session_ttl_minutes")
    @classmethod
    def validate_session_ttl(cls, v: int) -> int:
        """Validate session lifetime is within reasonable bounds."""
        if not SESSION_TTL_MIN <= v <= SESSION_TTL_MAX:
            msg = (
                f"session_ttl_minutes must be between {SESSION_TTL_MIN} "
                f"and {SESSION_TTL_MAX}"
            )
            raise ValueError(msg)
        return v

    @field_validator("max_item_images")
    @classmethod
    def validate_max_item_images(cls, v: int) -> int:
        """Items carry between one and four images."""
        if not 1 <= v <= MAX_ITEM_IMAGES_LIMIT:
            msg = f"max_item_images must be between 1 and {MAX_ITEM_IMAGES_LIMIT}"
            raise ValueError(msg)
        return v

    @property
    def async_database_url(self) -> str:
        """Get async database URL for psycopg3."""
        url = str(self.database_url)
        if url.startswith("postgresql://"):
            return url.replace("postgresql://", "postgresql+psycopg://", 1)
        if url.startswith("postgres://"):
            return url.replace("postgres://", "postgresql+psycopg://", 1)
        return url

    @property
    def missing_image_credentials(self) -> list[str]:
        """Names of image service settings that are not configured."""
        missing = []
        if not self.cloudflare_account_id:
            missing.append("CLOUDFLARE_ACCOUNT_ID")
        if self.cloudflare_api_token is None:
            missing.append("CLOUDFLARE_API_TOKEN")
        if self.cloudflare_account_hash is None:
            missing.append("CLOUDFLARE_ACCOUNT_HASH")
        return missing


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
