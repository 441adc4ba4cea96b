"""Application configuration loaded from environment variables."""

from pydantic_settings import BaseSettings
from pydantic import Field
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    """Centralised settings — no hardcoded values anywhere else."""

    # Database
    database_url: str = Field(..., env="DATABASE_URL")

    # Google AI (translation)
    google_api_key: str = Field(..., env="GOOGLE_API_KEY")
    translation_model: str = Field("gemini-2.5-flash", env="TRANSLATION_MODEL")
    translation_timeout_seconds: int = Field(30, env="TRANSLATION_TIMEOUT_SECONDS")
    translation_ttl_seconds: int = Field(86_400, env="TRANSLATION_TTL_SECONDS")

    # Identity provider (Cognito user pool)
    cognito_user_pool_id: str = Field(..., env="COGNITO_USER_POOL_ID")
    cognito_region: str = Field(..., env="COGNITO_REGION")
    cognito_client_id: Optional[str] = Field(None, env="COGNITO_CLIENT_ID")
    jwks_cache_ttl_seconds: int = Field(3600, env="JWKS_CACHE_TTL_SECONDS")
    jwks_min_refetch_seconds: int = Field(60, env="JWKS_MIN_REFETCH_SECONDS")
    token_cookie_name: str = Field("token", env="TOKEN_COOKIE_NAME")

    # Ownership
    # When enabled, the token's identity claim must also match the stored author.
    # Cognito only puts `email` in id tokens; callers presenting access tokens
    # need OWNERSHIP_CLAIM set to a claim those carry (e.g. `username`).
    strict_ownership: bool = Field(False, env="STRICT_OWNERSHIP")
    ownership_claim: str = Field("email", env="OWNERSHIP_CLAIM")

    # Security
    allowed_origins: str = Field("*", env="ALLOWED_ORIGINS")

    # App
    app_env: str = Field("development", env="APP_ENV")
    log_level: str = Field("INFO", env="LOG_LEVEL")

    # Derived
    @property
    def allowed_origins_list(self) -> list[str]:
        """Return ALLOWED_ORIGINS as a list."""
        return [o.strip() for o in self.allowed_origins.split(",")]

    @property
    def token_issuer(self) -> str:
        """Issuer URL of the user pool, also the base of its JWKS endpoint."""
        return (
            f"https://cognito-idp.{self.cognito_region}.amazonaws.com/"
            f"{self.cognito_user_pool_id}"
        )

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached Settings instance."""
    return Settings()


settings = get_settings()
