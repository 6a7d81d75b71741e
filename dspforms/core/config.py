"""Application settings loaded from environment variables."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "DSP Forms"
    app_version: str = "0.1.0"
    api_prefix: str = "/api"
    database_url: str = "sqlite:///./dspforms.db"
    database_echo: bool = False
    # Identity provider (GoTrue-compatible auth server)
    auth_url: str = ""
    auth_api_key: str = ""
    auth_timeout: float = 10.0
    session_cookie_name: str = "dspforms_session"
    session_cookie_secure: bool = False
    session_cookie_max_age: int = 60 * 60 * 24 * 7
    service_name: str = "dspforms"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()

__all__ = ["settings", "Settings"]
