from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class RenderSettings(BaseSettings):
    """Defaults for the JSON renderer."""

    typed_values: bool = False
    include_missing: bool = False
    strict: bool = False

    model_config = SettingsConfigDict(env_prefix="XMLCONTENT_RENDER_", env_file=None)


class CacheSettings(BaseSettings):
    """Content definition cache sizing."""

    max_size: int = 100
    ttl_seconds: int = 300

    model_config = SettingsConfigDict(env_prefix="XMLCONTENT_CACHE_", env_file=None)


class Settings(BaseSettings):
    """Application configuration."""

    content_root: Path = Path.cwd()
    schema_root: Path | None = None
    max_document_bytes: int = 5 * 1024 * 1024
    render: RenderSettings = Field(default_factory=RenderSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)

    model_config = SettingsConfigDict(env_prefix="XMLCONTENT_", env_file=None)

    @property
    def resolved_content_root(self) -> Path:
        return self.content_root.expanduser().resolve()

    @property
    def resolved_schema_root(self) -> Path:
        if self.schema_root is None:
            return self.resolved_content_root
        return self.schema_root.expanduser().resolve()


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    settings = Settings()
    if settings.max_document_bytes <= 0:
        raise ValueError("XMLCONTENT_MAX_DOCUMENT_BYTES must be positive")
    return settings
