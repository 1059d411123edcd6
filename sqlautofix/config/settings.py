"""
Configuration management for the application.
Loads settings from environment variables and the project .env file.
"""

from pathlib import Path
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv
from loguru import logger

from sqlautofix.sql.correction.types import AutoAcceptPolicy

# Find project root (where .env lives)
# This file is at sqlautofix/config/settings.py, so project root is 3 levels up
_project_root = Path(__file__).resolve().parent.parent.parent

PROJECT_ROOT = _project_root

# Load environment variables from project root
_env_file = _project_root / ".env"
if _env_file.exists():
    load_dotenv(dotenv_path=_env_file, override=True)
    logger.debug(f"Loaded .env from: {_env_file}")
else:
    logger.debug(f".env file not found at: {_env_file}, using process environment")


class Settings(BaseSettings):
    """Application settings from environment variables."""

    # Auto-correction
    autofix_enabled: bool = Field(default=True)  # Bypass the engine entirely when False
    autofix_auto_accept: AutoAcceptPolicy = Field(default=AutoAcceptPolicy.HIGH)  # always | high | never

    # Formatter hand-off
    sql_dialect: str = Field(default="postgres")  # sqlglot dialect used by format_sql
    format_indent: int = Field(default=2)

    # Logging
    log_level: str = Field(default="INFO")  # Console log level
    log_file: str = Field(default="")  # Optional rotating log file (empty = console only)

    model_config = SettingsConfigDict(
        env_file=str(_project_root / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )


# Create global settings instance
settings = Settings()
