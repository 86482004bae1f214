from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict
from pydantic import field_validator
from typing import Annotated, Optional
import os
import json


def _parse_str_list(v):
    # Accepts a JSON array or a comma separated string
    if v is None:
        return v
    if isinstance(v, (int, float)):
        return [str(v)]
    if isinstance(v, str):
        raw = v.strip()
        if not raw:
            return []
        if raw.startswith("["):
            try:
                parsed = json.loads(raw)
                if isinstance(parsed, list):
                    return [str(item).strip() for item in parsed if str(item).strip()]
            except json.JSONDecodeError:
                pass
        return [item.strip() for item in raw.split(",") if item.strip()]
    return v


class Settings(BaseSettings):
    """Application settings"""

    # API
    API_TITLE: str = "SVGShare API"
    API_VERSION: str = "1.0.0"
    API_DESCRIPTION: str = "Upload, manage and share SVG files"
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "sqlite:///./svgshare.db"
    AUTO_CREATE_TABLES: bool = True

    # Session cookie (JWT signed)
    JWT_SECRET: str
    JWT_ALGORITHM: str = "HS256"
    SESSION_COOKIE_NAME: str = "session"
    # 7 days
    SESSION_EXPIRE_MINUTES: int = 10080
    SESSION_COOKIE_SECURE: bool = True

    # GitHub OAuth
    GITHUB_CLIENT_ID: str = ""
    GITHUB_CLIENT_SECRET: str = ""
    GITHUB_REDIRECT_URI: Optional[str] = None
    GITHUB_AUTHORIZE_URL: str = "https://github.com/login/oauth/authorize"
    GITHUB_TOKEN_URL: str = "https://github.com/login/oauth/access_token"
    GITHUB_USER_API_URL: str = "https://api.github.com/user"
    OAUTH_TIMEOUT_SECONDS: float = 10.0

    # Accounts
    # - ADMIN_GITHUB_IDS / ADMIN_USERNAMES: logins created as active admins
    # - AUTO_APPROVE_USERS: new users start active instead of pending
    ADMIN_GITHUB_IDS: Annotated[list[str], NoDecode] = []
    ADMIN_USERNAMES: Annotated[list[str], NoDecode] = []
    AUTO_APPROVE_USERS: bool = False
    DEFAULT_STORAGE_LIMIT: int = 100 * 1024 * 1024

    # Uploads
    MAX_UPLOAD_BYTES: int = 2 * 1024 * 1024

    # Object storage (Aliyun OSS); falls back to LOCAL_STORAGE_ROOT when unset
    OSS_ACCESS_KEY_ID: str = ""
    OSS_ACCESS_KEY_SECRET: str = ""
    OSS_BUCKET_NAME: str = ""
    OSS_ENDPOINT: str = ""
    FORCE_LOCAL_STORAGE: bool = False
    LOCAL_STORAGE_ROOT: str = "storage"

    # CORS
    # CORS_ORIGINS may be a JSON array or a comma separated list
    CORS_ORIGINS: Annotated[list[str], NoDecode] = [
        "http://localhost:8000",
        "http://127.0.0.1:8000",
    ]
    CORS_ALLOW_ORIGIN_REGEX: Optional[str] = r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$"

    @field_validator("CORS_ORIGINS", "ADMIN_GITHUB_IDS", "ADMIN_USERNAMES", mode="before")
    @classmethod
    def _parse_lists(cls, v):
        return _parse_str_list(v)

    @field_validator("CORS_ALLOW_ORIGIN_REGEX", "GITHUB_REDIRECT_URI", mode="before")
    @classmethod
    def _blank_to_none(cls, v):
        if v is None:
            return None
        if isinstance(v, str):
            raw = v.strip()
            return raw or None
        return v

    @staticmethod
    def _default_env_file() -> str:
        env_file = os.getenv("ENV_FILE")
        if env_file:
            return env_file
        for candidate in (".env.local", ".env"):
            if os.path.exists(candidate):
                return candidate
        return ".env"

    model_config = SettingsConfigDict(env_file=_default_env_file.__func__(), extra="ignore")


settings = Settings()
