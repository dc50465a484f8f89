"""Configuration management for tar-delta."""

from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CHUNK_SIZE = 64 * 1024


class Compression(str, Enum):
    """Compression applied to archives on disk."""

    NONE = "none"
    GZIP = "gzip"


class DeltaConfig(BaseSettings):
    """Settings for diff/apply runs."""

    compression: Compression = Field(
        default=Compression.NONE,
        description="Compression of the input archives",
    )
    chunk_size: int = Field(
        default=DEFAULT_CHUNK_SIZE,
        description="Buffer size used when hashing and copying entry payloads",
    )
    log_level: str = Field(default="INFO", description="Minimum log level")
    log_file: Optional[Path] = Field(default=None, description="Optional log file")

    # Dump indexes and manifests at DEBUG level
    diagnostics: bool = Field(default=False, description="Log intermediate indexes")

    model_config = SettingsConfigDict(
        env_prefix="TARDELTA_",
        extra="ignore",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    @field_validator("chunk_size")
    @classmethod
    def ensure_positive_chunk(cls, v: int) -> int:
        """Reject empty or negative buffers."""
        if v <= 0:
            raise ValueError("chunk_size must be positive")
        return v

    @field_validator("log_level")
    @classmethod
    def normalize_level(cls, v: str) -> str:
        return v.upper()
