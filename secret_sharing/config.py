from pydantic import ConfigDict, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # Database
    database_url: str = "sqlite:///./shared_secrets.db"

    # Decay limits
    max_encrypted_value_length: int = 13_000  # ~10,000 characters of plaintext
    max_expiry_days: int = 30

    # Listing
    default_page_limit: int = 25
    max_page_limit: int = 100

    # Rate Limiting
    rate_limit_creates: str = "10/minute"
    rate_limit_retrieves: str = "30/minute"
    rate_limit_manage: str = "60/minute"
    trust_forwarded_for: bool = True

    # Logging
    log_level: str = "info"
    log_format: str = "console"  # "console" | "json"

    # CORS
    cors_origins: list[str] | str = ["http://localhost:5173", "http://127.0.0.1:5173"]

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        """Parse CORS origins from comma-separated string or list."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v


settings = Settings()
