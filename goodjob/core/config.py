"""
Configuration module - loads all env vars using pydantic-settings.
This is the SINGLE SOURCE OF TRUTH for all config values.
"""

from functools import lru_cache
from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # MongoDB
    mongodb_uri: str = "mongodb://localhost:27017"
    mongodb_db: str = "goodjob"

    # JWT Auth (tokens issued after OAuth login)
    jwt_secret_key: str = "change-this-secret"
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 60 * 24 * 30

    # OAuth providers
    facebook_graph_url: str = "https://graph.facebook.com/v3.2/me"
    google_tokeninfo_url: str = "https://oauth2.googleapis.com/tokeninfo"
    google_client_id: str = ""
    oauth_timeout_seconds: float = 10.0

    # SMTP
    smtp_host: str = "localhost"
    smtp_port: int = 587
    smtp_username: str = ""
    smtp_password: str = ""
    smtp_use_tls: bool = False
    smtp_start_tls: bool = True
    from_email: str = "noreply@goodjob.life"
    from_name: str = "職場透明化運動"

    # Links used in emails
    frontend_domain: str = "https://www.goodjob.life"
    survey_form_url: str = (
        "https://docs.google.com/forms/d/e/"
        "1FAIpQLScie8Ii815plQoAtrtNjk_XPrxV_x3hBYRbMEshS-nLd4PL8A/viewform"
        "?usp=pp_url&entry.1421543239="
    )

    # App
    cors_origins: List[str] = ["*"]
    log_level: str = "INFO"
    debug: bool = False

    # Pydantic v2 config
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8"
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
