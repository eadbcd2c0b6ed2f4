from functools import lru_cache
from pathlib import Path

from fastapi import Request
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str = "sqlite:///./data/ats.db"
    redis_url: str = "redis://localhost:6379/0"
    secret_key: str = "dev-secret-key-change-in-production"
    frontend_url: str = "http://localhost:3000"
    port: int = 3000
    log_level: str = "INFO"

    # Uploaded CVs
    upload_dir: Path = Path("./uploads")

    # Credentials
    token_expire_minutes: int = 60
    reset_token_expire_minutes: int = 60
    # When enabled, a credential is only accepted while it is the one held
    # in the session cache for its user (sign-out revokes immediately).
    session_revocation: bool = False

    # Admission control: fixed window per client address
    rate_limit_requests: int = 100
    rate_limit_window_seconds: int = 15 * 60

    default_page_size: int = 9

    # Maintenance sweep (expired reset tokens, orphaned uploads); 0 disables
    cleanup_interval_hours: int = 24
    orphan_grace_minutes: int = 60

    class Config:
        env_file = ".env"


@lru_cache
def get_settings() -> Settings:
    return Settings()


def get_app_settings(request: Request) -> Settings:
    """Settings the running application was built with."""
    return request.app.state.settings
