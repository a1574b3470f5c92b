"""
Tabledash Configuration Module.

Handles all application settings and environment configuration.
Uses pydantic-settings for validation and type safety.

Dashboard layout sections are kept as raw JSON strings here and parsed by
the config resolver, so a malformed blob never aborts startup.
"""

from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class SupabaseSettings(BaseSettings):
    """Supabase project configuration."""

    model_config = SettingsConfigDict(env_prefix="SUPABASE_", extra="ignore", populate_by_name=True)

    url: str = Field(
        default="",
        description="Supabase project URL",
        validation_alias=AliasChoices("SUPABASE_URL", "VITE_SUPABASE_URL"),
    )
    publishable_default_key: str = Field(
        default="",
        description="Anonymous/publishable key. Never accepted for admin operations.",
        validation_alias=AliasChoices("SUPABASE_PUBLISHABLE_DEFAULT_KEY"),
    )
    vite_publishable_default_key: str = Field(
        default="",
        description="Publishable key as exposed to the browser build; refused like the other one.",
        validation_alias=AliasChoices("VITE_SUPABASE_PUBLISHABLE_DEFAULT_KEY"),
    )
    verify_table: str = Field(
        default="navigation",
        description="Table queried to check that a secret key is accepted by the database",
    )

    @property
    def publishable_key(self) -> str:
        """Key used by the public client, preferring the server-side name."""
        return self.publishable_default_key.strip() or self.vite_publishable_default_key.strip()

    @property
    def anonymous_keys(self) -> set[str]:
        keys = {self.publishable_default_key.strip(), self.vite_publishable_default_key.strip()}
        keys.discard("")
        return keys


class DashboardSettings(BaseSettings):
    """Per-table browse configuration, as raw JSON strings."""

    model_config = SettingsConfigDict(env_prefix="SUPABASE_", extra="ignore", populate_by_name=True)

    table_dic: str = Field(
        default="",
        validation_alias=AliasChoices("SUPABASE_TABLE_DIC", "VITE_SUPABASE_TABLE_DIC"),
    )
    category_col: str = Field(
        default="",
        validation_alias=AliasChoices("SUPABASE_TABLE_CATEGORY_COL", "VITE_SUPABASE_TABLE_CATEGORY_COL"),
    )
    category_enable: str = Field(
        default="",
        validation_alias=AliasChoices("SUPABASE_TABLE_CATEGORY_ENABLE", "VITE_SUPABASE_TABLE_CATEGORY_ENABLE"),
    )
    show_col_thumb: str = Field(
        default="",
        validation_alias=AliasChoices("SUPABASE_TABLE_SHOW_COL_THUMB", "VITE_SUPABASE_TABLE_SHOW_COL_THUMB"),
    )
    show_views: str = Field(
        default="",
        validation_alias=AliasChoices("SUPABASE_TABLE_SHOW_VIEWS", "VITE_SUPABASE_TABLE_SHOW_VIEWS"),
    )
    default_search: str = Field(
        default="",
        validation_alias=AliasChoices("SUPABASE_TABLE_DEFAULT_SEARCH", "VITE_SUPABASE_TABLE_DEFAULT_SEARCH"),
    )
    not_show_col: str = Field(
        default="",
        description="Comma-separated columns hidden from every view",
        validation_alias=AliasChoices("SUPABASE_TABLE_NOT_SHOW_COL", "VITE_SUPABASE_TABLE_NOT_SHOW_COL"),
    )
    card_flip: str = Field(
        default="",
        validation_alias=AliasChoices("SUPABASE_TABLE_CARD_FLIP", "VITE_SUPABASE_TABLE_CARD_FLIP"),
    )
    card_flip_default_img: str = Field(
        default="",
        validation_alias=AliasChoices(
            "SUPABASE_TABLE_CARD_FLIP_DEFAULT_IMG",
            "VITE_SUPABASE_TABLE_CARD_FLIP_DEFAULT_IMG",
        ),
    )

    page_size: int = Field(
        default=8,
        ge=1,
        validation_alias=AliasChoices("SUPABASE_PAGE_SIZE", "VITE_SUPABASE_PAGE_SIZE"),
    )
    navigation_page_size: int = Field(
        default=32,
        ge=1,
        validation_alias=AliasChoices("NAVIGATION_PAGE_SIZE", "VITE_NAVIGATION_PAGE_SIZE"),
    )
    navigation_table: str = Field(
        default="navigation",
        validation_alias=AliasChoices("NAVIGATION_TABLE", "VITE_NAVIGATION_TABLE"),
    )

    cache_ttl_seconds: float = Field(
        default=60.0,
        ge=0,
        description="Lifetime of cached browse pages",
        validation_alias=AliasChoices("DASHBOARD_CACHE_TTL_SECONDS"),
    )
    cache_max_entries: int = Field(
        default=1024,
        ge=1,
        description="Upper bound on cached browse pages",
        validation_alias=AliasChoices("DASHBOARD_CACHE_MAX_ENTRIES"),
    )


class VodSettings(BaseSettings):
    """External video-search API the /api/vod proxy forwards to."""

    model_config = SettingsConfigDict(env_prefix="VOD_", extra="ignore", populate_by_name=True)

    api_base_url: str = Field(
        default="",
        validation_alias=AliasChoices(
            "VOD_API_BASE_URL",
            "FILMTELEVISION_API_BASE_URL",
            "VITE_FILMTELEVISION_API_BASE_URL",
        ),
    )
    api_path: str = Field(
        default="",
        validation_alias=AliasChoices(
            "VOD_API_PATH",
            "FILMTELEVISION_API_PATH",
            "VITE_FILMTELEVISION_API_PATH",
        ),
    )
    timeout_seconds: float = Field(default=10.0, description="HTTP timeout when calling the upstream API")

    @property
    def is_configured(self) -> bool:
        return bool(self.api_base_url.strip() and self.api_path.strip())


class SiteSettings(BaseSettings):
    """Home page copy."""

    model_config = SettingsConfigDict(extra="ignore", populate_by_name=True)

    system_name: str = Field(
        default="Tabledash",
        validation_alias=AliasChoices("SYSTEM_NAME", "VITE_SYSTEM_NAME"),
    )
    home_intro: str = Field(
        default="",
        validation_alias=AliasChoices("HOME_INTRO", "VITE_HOME_INTRO"),
    )
    home_footer: str = Field(
        default="",
        validation_alias=AliasChoices("HOME_FOOTER", "VITE_HOME_FOOTER"),
    )


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Application
    app_env: Literal["development", "staging", "production"] = "development"
    app_debug: bool = False
    app_log_level: str = "INFO"

    cache_duration: int = Field(
        default=3600,
        ge=0,
        description="CDN cache lifetime (seconds) for the public query endpoint",
        validation_alias=AliasChoices("CACHE_DURATION", "VITE_CACHE_DURATION"),
    )

    # Nested settings
    supabase: SupabaseSettings = Field(default_factory=SupabaseSettings)
    dashboard: DashboardSettings = Field(default_factory=DashboardSettings)
    vod: VodSettings = Field(default_factory=VodSettings)
    site: SiteSettings = Field(default_factory=SiteSettings)

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.app_env == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
