"""Settings, read from the environment (and .env when present).

    PHOTOREVIEW_ENV   local | test | staging | prod (default local)
    DATABASE_URL      SQLAlchemy URL, e.g. postgresql+psycopg://.../photoreview
    JWT_SECRET        HS256 secret shared with the token issuer; required in
                      staging and prod, local/test fall back to DEV_JWT_SECRET
    JWT_ISSUER        expected iss claim, trailing slash ignored (optional)
    JWT_AUDIENCE      comma-separated accepted aud values (optional)
"""

from enum import Enum
from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEV_JWT_SECRET = "photoreview-dev-secret-do-not-use-in-production"


class Environment(str, Enum):
    LOCAL = "local"
    TEST = "test"
    STAGING = "staging"
    PROD = "prod"


DEPLOYED_ENVIRONMENTS = frozenset({Environment.STAGING, Environment.PROD})


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    photoreview_env: Environment = Field(default=Environment.LOCAL, alias="PHOTOREVIEW_ENV")
    database_url: str = Field(alias="DATABASE_URL")

    jwt_secret: str | None = Field(default=None, alias="JWT_SECRET")
    jwt_issuer: str | None = Field(default=None, alias="JWT_ISSUER")
    jwt_audience: str | None = Field(default=None, alias="JWT_AUDIENCE")

    @model_validator(mode="after")
    def _require_secret_when_deployed(self) -> "Settings":
        if self.photoreview_env in DEPLOYED_ENVIRONMENTS and not self.jwt_secret:
            raise ValueError(
                f"JWT_SECRET is required for PHOTOREVIEW_ENV={self.photoreview_env.value}"
            )
        return self

    @property
    def effective_jwt_secret(self) -> str:
        """JWT_SECRET, or the development secret in local/test."""
        return self.jwt_secret or DEV_JWT_SECRET

    @property
    def audience_list(self) -> list[str]:
        return [aud.strip() for aud in (self.jwt_audience or "").split(",") if aud.strip()]

    @property
    def normalized_issuer(self) -> str | None:
        return self.jwt_issuer.rstrip("/") if self.jwt_issuer else None


@lru_cache
def get_settings() -> Settings:
    """Load settings once per process.

    Raises:
        ValidationError: DATABASE_URL missing, or JWT_SECRET missing in staging/prod.
    """
    return Settings()


def clear_settings_cache() -> None:
    get_settings.cache_clear()
