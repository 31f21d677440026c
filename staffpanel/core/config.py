from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    app_name: str = Field("Staff Panel", alias="APP_NAME")
    database_url: str = Field(..., alias="DATABASE_URL")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    cors_origins: List[str] = Field(default_factory=lambda: ["*"], alias="CORS_ORIGINS")

    # Session cookie: opaque token signed with session_secret, row stored server-side
    session_secret: str = Field(..., alias="SESSION_SECRET")
    session_algorithm: str = Field("HS256", alias="SESSION_ALGORITHM")
    session_cookie_name: str = Field("staffpanel_session", alias="SESSION_COOKIE_NAME")
    session_max_age_days: int = Field(7, alias="SESSION_MAX_AGE_DAYS")
    session_cookie_secure: bool = Field(False, alias="SESSION_COOKIE_SECURE")

    upload_dir: str = Field("uploads", alias="UPLOAD_DIR")
    max_upload_bytes: int = Field(10 * 1024 * 1024, alias="MAX_UPLOAD_BYTES")
    client_dist_dir: Optional[str] = Field(None, alias="CLIENT_DIST_DIR")

    # Calendar date used as the attendance key (YYYY-MM-DD in this zone)
    attendance_timezone: str = Field("UTC", alias="ATTENDANCE_TIMEZONE")

    smtp_host: Optional[str] = Field(None, alias="SMTP_HOST")
    smtp_port: int = Field(587, alias="SMTP_PORT")
    smtp_user: Optional[str] = Field(None, alias="SMTP_USER")
    smtp_password: Optional[str] = Field(None, alias="SMTP_PASSWORD")
    smtp_use_tls: bool = Field(True, alias="SMTP_USE_TLS")
    email_from: Optional[str] = Field(None, alias="EMAIL_FROM")

    admin_username: Optional[str] = Field(None, alias="ADMIN_USERNAME")
    admin_password: Optional[str] = Field(None, alias="ADMIN_PASSWORD")
    admin_email: str = Field("admin@example.com", alias="ADMIN_EMAIL")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


settings = Settings()
