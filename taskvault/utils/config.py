"""
Configuration management with schema validation.

Values come from, in increasing precedence:
- an optional YAML settings file (TASKVAULT_SETTINGS_FILE)
- environment variables (a .env file is loaded first via python-dotenv)

TOKEN_SECRET and STORE_PATH have no defaults; everything else does.
"""

import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from .exceptions import ConfigError

# Token TTL: fixed 7 days unless overridden
DEFAULT_TOKEN_TTL_SECONDS = 7 * 24 * 60 * 60

# Environment variable -> (section, key)
ENV_KEYS: Dict[str, tuple] = {
    "TOKEN_SECRET": ("auth", "token_secret"),
    "TOKEN_TTL_SECONDS": ("auth", "token_ttl_seconds"),
    "BCRYPT_ROUNDS": ("auth", "bcrypt_rounds"),
    "STORE_PATH": ("store", "path"),
    "WEB_HOST": ("web", "host"),
    "WEB_PORT": ("web", "port"),
    "CORS_ORIGINS": ("web", "cors_origins"),
    "LOG_LEVEL": ("logging", "level"),
    "LOG_FORMAT": ("logging", "format"),
    "LOG_FILE": ("logging", "file_path"),
    "AUTH_RATE_LIMIT_ENABLED": ("rate_limit", "enabled"),
    "AUTH_RATE_LIMIT_MAX": ("rate_limit", "max_requests"),
    "AUTH_RATE_LIMIT_WINDOW_SECONDS": ("rate_limit", "window_seconds"),
}


class AuthSettings(BaseModel):
    token_secret: str = Field(min_length=1)
    token_ttl_seconds: int = Field(default=DEFAULT_TOKEN_TTL_SECONDS, gt=0)
    bcrypt_rounds: int = Field(default=12, ge=4, le=31)


class StoreSettings(BaseModel):
    path: str = Field(min_length=1)


class WebSettings(BaseModel):
    host: Optional[str] = None
    port: Optional[int] = None
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])


class LoggingSettings(BaseModel):
    level: str = "INFO"
    format: str = "json"
    file_path: Optional[str] = None
    max_bytes: int = 10485760
    backup_count: int = 5


class RateLimitSettings(BaseModel):
    """Limits applied to register/login per client address."""
    enabled: bool = True
    max_requests: int = Field(default=20, gt=0)
    window_seconds: int = Field(default=15 * 60, gt=0)


class Settings(BaseModel):
    """Main configuration model"""
    auth: AuthSettings
    store: StoreSettings
    web: WebSettings = Field(default_factory=WebSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    rate_limit: RateLimitSettings = Field(default_factory=RateLimitSettings)


def _load_yaml(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Failed to load settings file {path}: {e}")
    if not isinstance(raw, dict):
        raise ConfigError(f"Settings file {path} must contain a mapping")
    return raw


def _apply_env(data: Dict[str, Any], environ: Dict[str, str]) -> Dict[str, Any]:
    for env_name, (section, key) in ENV_KEYS.items():
        value = environ.get(env_name)
        if value is None or value.strip() == "":
            continue
        value = value.strip()
        if key == "cors_origins":
            value = [o.strip() for o in value.split(",") if o.strip()]
        section_data = data.get(section) or {}
        section_data[key] = value
        data[section] = section_data
    return data


def load_settings(environ: Optional[Dict[str, str]] = None) -> Settings:
    """
    Build Settings from the settings file and environment.

    Raises:
        ConfigError: when a required value is missing or a value is invalid
    """
    if environ is None:
        load_dotenv()
        environ = dict(os.environ)

    data: Dict[str, Any] = {}
    settings_file = environ.get("TASKVAULT_SETTINGS_FILE")
    if settings_file:
        data = _load_yaml(Path(settings_file))

    data = _apply_env(data, environ)

    missing = []
    if not (data.get("auth") or {}).get("token_secret"):
        missing.append("TOKEN_SECRET")
    if not (data.get("store") or {}).get("path"):
        missing.append("STORE_PATH")
    if missing:
        raise ConfigError(f"Missing required configuration: {', '.join(missing)}")

    try:
        return Settings(**data)
    except PydanticValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}")
