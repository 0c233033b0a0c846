"""
Configuration Module
====================

Loads library defaults from environment variables (prefix ``MIMEKIT_``) and
an optional ``.env`` file: line lengths, RFC 2231 chunking, default charset
and log level.
"""

import logging

from dotenv import load_dotenv
from pydantic import field_validator
from pydantic_settings import BaseSettings

load_dotenv()


class Settings(BaseSettings):
    """
    Library settings, populated from the environment by Pydantic BaseSettings.

    Attributes:
        LINE_LENGTH: maximum line length for folding and soft line breaks
        PARAM_CHUNK_LENGTH: fragment size used when a parameter needs RFC 2231 continuations
        PARAM_PLAIN_LIMIT: plain ASCII parameter values this long or longer are split
        HEADER_WORD_LENGTH: encoded-word length used by encode_header_line
        RFC2231_DEFAULT_CHARSET: charset assumed when a ``*0*`` fragment has an empty charset marker
        TABLES_DIR: optional directory holding charsets.yaml / mimetypes.yaml overrides
        LOG_LEVEL: level name for the ``mimekit`` logger
        LOG_PROPAGATE: hand records to the application's handlers; when off, mimekit logs to stdout itself
    """
    LINE_LENGTH: int = 76
    PARAM_CHUNK_LENGTH: int = 50
    PARAM_PLAIN_LIMIT: int = 75
    HEADER_WORD_LENGTH: int = 52
    RFC2231_DEFAULT_CHARSET: str = "utf-8"
    TABLES_DIR: str = ""
    LOG_LEVEL: str = "WARNING"
    LOG_PROPAGATE: bool = True

    @field_validator("LINE_LENGTH", "PARAM_CHUNK_LENGTH", "PARAM_PLAIN_LIMIT", "HEADER_WORD_LENGTH")
    @classmethod
    def validate_length(cls, v: int) -> int:
        """Lengths drive loop strides, so zero or negative values are refused."""
        if v <= 0:
            raise ValueError("Length settings must be positive integers")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = (v or "").strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v!r}")
        return level

    class Config:
        env_file = ".env"
        env_prefix = "MIMEKIT_"
        case_sensitive = False
        extra = "ignore"


# Module-level singleton so the environment is read once
_settings_instance = None


def get_settings() -> Settings:
    """
    Return the settings singleton, creating it on first use.
    """
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance


def reset_settings() -> None:
    """Drop the cached settings so the next get_settings() re-reads the environment."""
    global _settings_instance
    _settings_instance = None
