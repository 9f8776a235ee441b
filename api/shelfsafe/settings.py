# shelfsafe/settings.py
"""
ShelfSafe settings - document store selection, logging and client defaults.
"""
from __future__ import annotations
from pathlib import Path
from typing import List, Literal
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, AliasChoices

class Settings(BaseSettings):
    # =========================================================================
    # Local data (logs, JSON collection exports)
    # =========================================================================
    DATA_ROOT: Path = Field(
        default=(Path(__file__).resolve().parents[2] / "shelfsafe-data"),
        validation_alias=AliasChoices("DATA_ROOT", "SHELFSAFE_DATA_ROOT"),
    )

    # =========================================================================
    # Document store
    # =========================================================================
    STORE_BACKEND: Literal["mongo", "postgres", "files"] = Field(
        default="mongo",
        description="Which document store backs the read endpoints",
    )

    # MongoDB
    MONGODB_URI: str = Field(
        default="mongodb://localhost:27017",
        validation_alias=AliasChoices("MONGODB_URI", "MONGO_URI"),
    )
    MONGODB_DB: str = Field(default="shelfsafe", validation_alias="MONGODB_DB")
    MONGODB_TIMEOUT_MS: int = Field(default=5000, validation_alias="MONGODB_TIMEOUT_MS")

    # PostgreSQL (documents stored as JSON rows)
    DB_HOST: str = Field(default="localhost", validation_alias="DB_HOST")
    DB_PORT: int = Field(default=5432, validation_alias="DB_PORT")
    DB_NAME: str = Field(default="shelfsafe", validation_alias="DB_NAME")
    DB_USER: str = Field(default="postgres", validation_alias="DB_USER")
    DB_PASSWORD: str = Field(default="postgres", validation_alias="DB_PASSWORD")

    # Connection pool settings
    DB_POOL_SIZE: int = Field(default=5, validation_alias="DB_POOL_SIZE")
    DB_MAX_OVERFLOW: int = Field(default=10, validation_alias="DB_MAX_OVERFLOW")
    DB_ECHO: bool = Field(default=False, validation_alias="DB_ECHO")

    # =========================================================================
    # HTTP
    # =========================================================================
    CORS_ORIGINS: List[str] = Field(
        default=[
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ],
    )
    LOG_LEVEL: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    # Aggregation client / CLI
    API_BASE_URL: str = Field(
        default="http://localhost:5000",
        validation_alias=AliasChoices("API_BASE_URL", "SHELFSAFE_API_URL"),
    )
    HTTP_TIMEOUT: float = Field(default=10.0, validation_alias="HTTP_TIMEOUT")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="",
        case_sensitive=False,
        extra="ignore",
    )

settings = Settings()
