# lab_inventory/settings.py
"""
Lab Inventory Settings - PostgreSQL (asyncpg) with SQLite fallback for local runs.
"""
from __future__ import annotations
from pathlib import Path
from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, AliasChoices

class Settings(BaseSettings):
    # =========================================================================
    # File Storage (logs)
    # =========================================================================
    LAB_DATA_ROOT: Path = Field(
        default=(Path(__file__).resolve().parents[2] / "lab-data"),
        validation_alias=AliasChoices("LAB_DATA_ROOT", "lab_data_root"),
    )
    LOG_TO_FILE: bool = Field(default=True, validation_alias="LOG_TO_FILE")

    # =========================================================================
    # Database
    # =========================================================================
    # Full URL wins over the DB_* parts (e.g. sqlite:///./lab.db for local runs)
    DATABASE_URL: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("DATABASE_URL", "LAB_DATABASE_URL"),
    )
    DB_HOST: str = Field(default="localhost", validation_alias="DB_HOST")
    DB_PORT: int = Field(default=5432, validation_alias="DB_PORT")
    DB_NAME: str = Field(default="lab_inventory", validation_alias="DB_NAME")
    DB_USER: str = Field(default="postgres", validation_alias="DB_USER")
    DB_PASSWORD: str = Field(default="postgres", validation_alias="DB_PASSWORD")

    # Connection pool settings (ignored for SQLite)
    DB_POOL_SIZE: int = Field(default=5, validation_alias="DB_POOL_SIZE")
    DB_MAX_OVERFLOW: int = Field(default=10, validation_alias="DB_MAX_OVERFLOW")
    DB_ECHO: bool = Field(default=False, validation_alias="DB_ECHO")

    # =========================================================================
    # Imports
    # =========================================================================
    IMPORT_MAX_BYTES: int = Field(
        default=10 * 1024 * 1024,
        description="Uploads above this size are rejected before decoding",
    )

    # =========================================================================
    # HTTP
    # =========================================================================
    CORS_ORIGINS: List[str] = Field(
        default=[
            "http://localhost:5173",
            "http://127.0.0.1:5173",
            "http://127.0.0.1:8000",
        ],
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="",
        case_sensitive=False,
        extra="ignore",
    )

settings = Settings()
