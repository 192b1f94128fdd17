"""
Application settings management using Pydantic v2
"""
from typing import Optional, Any, Dict
from functools import lru_cache
import logging

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Shortcode cache settings"""

    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=False,
        populate_by_name=True,
        extra='ignore'
    )

    # Environment settings
    environment: str = Field(default="development", alias="SHORTCODE_CACHE_ENV")
    enabled: bool = Field(default=True, alias="SHORTCODE_CACHE_ENABLED")

    # Logging settings
    log_level: str = Field(default="INFO", alias="SHORTCODE_CACHE_LOG_LEVEL")
    log_file: str = Field(default="", alias="SHORTCODE_CACHE_LOG_FILE")
    log_format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        alias="SHORTCODE_CACHE_LOG_FORMAT"
    )

    # Storage settings
    redis_url: Optional[str] = Field(default=None, alias="SHORTCODE_CACHE_REDIS_URL")
    key_prefix: str = Field(default="wpsc", alias="SHORTCODE_CACHE_KEY_PREFIX", min_length=1)
    namespace: str = Field(default="shortcodes", alias="SHORTCODE_CACHE_NAMESPACE", min_length=1)
    local_max_size: int = Field(default=1000, alias="SHORTCODE_CACHE_LOCAL_MAX_SIZE", ge=10, le=100000)

    # Duration applied to unregistered shortcodes when a user is logged in
    default_user_duration: int = Field(default=3600, alias="SHORTCODE_CACHE_DEFAULT_USER_DURATION", ge=0)

    # Monitoring settings
    metrics_enabled: bool = Field(default=True, alias="SHORTCODE_CACHE_METRICS_ENABLED")

    @field_validator('environment')
    @classmethod
    def validate_environment(cls, v: str) -> str:
        allowed_envs = ['development', 'test', 'staging', 'production']
        if v not in allowed_envs:
            raise ValueError(f"Environment must be one of: {', '.join(allowed_envs)}")
        return v

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        allowed_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in allowed_levels:
            raise ValueError(f"Log level must be one of: {', '.join(allowed_levels)}")
        return v.upper()

    def is_production(self) -> bool:
        """Check if running in production environment"""
        return self.environment == 'production'

    def get_log_config(self) -> Dict[str, Any]:
        """Get logging configuration"""
        handlers: Dict[str, Any] = {
            'console': {
                'class': 'logging.StreamHandler',
                'formatter': 'json' if self.is_production() else 'default',
                'level': self.log_level,
            }
        }

        # Add file handler only if log file is specified
        if self.log_file:
            handlers['file'] = {
                'class': 'logging.handlers.RotatingFileHandler',
                'filename': self.log_file,
                'maxBytes': 10485760,  # 10MB
                'backupCount': 5,
                'formatter': 'json' if self.is_production() else 'default',
                'level': self.log_level,
            }

        return {
            'version': 1,
            'disable_existing_loggers': False,
            'formatters': {
                'default': {
                    'format': self.log_format,
                },
                'json': {
                    '()': 'pythonjsonlogger.json.JsonFormatter',
                    'fmt': '%(asctime)s %(name)s %(levelname)s %(message)s %(request_id)s',
                }
            },
            'handlers': handlers,
            'root': {
                'level': self.log_level,
                'handlers': list(handlers.keys())
            }
        }


@lru_cache()
def get_settings() -> Settings:
    """Get settings singleton"""
    return Settings()
