from functools import lru_cache
from typing import Annotated, List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    revalidate_secret: Optional[str] = Field(default=None, validation_alias="SANITY_REVALIDATE_SECRET")
    revalidate_path: str = "/"
    revalidate_tag: str = "resume"
    upstream_urls: Annotated[List[str], NoDecode] = Field(
        default_factory=list, validation_alias="REVALIDATE_UPSTREAM_URLS"
    )
    upstream_timeout: float = Field(default=10.0, validation_alias="REVALIDATE_UPSTREAM_TIMEOUT")
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("revalidate_secret", mode="before")
    @classmethod
    def empty_secret_is_unset(cls, value):
        # An empty secret must never authorize anything
        return value or None

    @field_validator("upstream_urls", mode="before")
    @classmethod
    def split_urls(cls, value):
        if isinstance(value, str):
            return [url.strip() for url in value.split(",") if url.strip()]
        return value

    @field_validator("log_level")
    @classmethod
    def upper_log_level(cls, value: str) -> str:
        return value.upper()

    @property
    def secret_configured(self) -> bool:
        return bool(self.revalidate_secret)


@lru_cache
def get_settings() -> Settings:
    return Settings()


def reset_settings() -> None:
    get_settings.cache_clear()
