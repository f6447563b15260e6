# backend/rentals/config.py
from __future__ import annotations

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # ---- App ----
    app_env: str = "local"  # local|dev|prod
    app_version: str = "2026-10-17.v1"
    database_url: str = "sqlite:///./rentals.db"

    # ---- Logging ----
    log_level: str = "INFO"
    sql_log_level: str = "WARNING"
    httpx_log_level: str = "WARNING"

    # Comma separated in the env ("https://a.app,https://b.app") or "*"
    cors_allow_origins: str = "*"

    # ---- Supabase ----
    supabase_url: str | None = None
    supabase_service_role_key: str | None = None
    supabase_jwt_secret: str | None = None
    supabase_jwt_audience: str = "authenticated"

    # ---- Storage buckets ----
    properties_restricted_bucket: str = "properties-restricted-docs"
    properties_public_bucket: str = "properties-public-docs"
    leads_restricted_bucket: str = "leads-restricted-docs"
    signed_url_ttl_seconds: int = 315_360_000  # ten years; URLs are stored on the row
    http_timeout: float = 20.0

    # ---- Google Places ----
    google_maps_api_key: str | None = None
    google_places_base_url: str = "https://maps.googleapis.com/maps/api/place"

    # ---- Auth ----
    auth_mode: str = "dev"  # dev|jwt
    dev_header_user_email: str = "X-User-Email"
    dev_header_user_role: str = "X-User-Role"
    dev_header_property_id: str = "X-Property-Id"

    @field_validator("supabase_url")
    @classmethod
    def _strip_trailing_slash(cls, v: str | None) -> str | None:
        return v.strip().rstrip("/") if v else v

    @field_validator("app_env", "auth_mode")
    @classmethod
    def _lower(cls, v: str) -> str:
        return (v or "").strip().lower()

    @model_validator(mode="after")
    def _prod_guards(self) -> "Settings":
        if self.is_prod:
            if self.auth_mode == "dev":
                raise ValueError("AUTH_MODE=dev trusts caller headers and cannot run in prod")
            if "*" in self.cors_origins:
                raise ValueError("CORS_ALLOW_ORIGINS must list explicit origins in prod")
        return self

    @property
    def is_prod(self) -> bool:
        return self.app_env in ("prod", "production")

    @property
    def cors_origins(self) -> list[str]:
        raw = (self.cors_allow_origins or "").strip()
        if not raw or raw == "*":
            return ["*"]
        return [o.strip() for o in raw.split(",") if o.strip()]

    @property
    def supabase_configured(self) -> bool:
        return bool(self.supabase_url and (self.supabase_service_role_key or "").strip())


settings = Settings()
