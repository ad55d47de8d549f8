"""
Lifedash Configuration

Environment-based configuration with fail-fast validation.
"""
from typing import Literal
from pydantic_settings import BaseSettings
from pydantic import field_validator


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Document store backend
    document_backend: Literal["sql", "memory"] = "sql"

    # Database (used by the sql backend)
    database_url: str = "sqlite+aiosqlite:///./lifedash.db"

    # Blob storage for avatar images
    blob_dir: str = "./blobs"
    blob_base_url: str = "/blobs"

    # Base URL of the web client, used to build shareable links
    public_base_url: str = "http://localhost:3000"

    # Resource allocation
    default_weekly_capacity: float = 20
    utilization_cap: float = 2.0

    # Label used when a member has no usable name at all
    anonymous_label: str = "anonymous user"

    # Debug mode (verbose low-level logging)
    debug: bool = False

    # Follow-through mode (structured step-by-step execution tracing)
    follow_through: bool = False

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    @field_validator("blob_base_url", "public_base_url", mode="before")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """URLs are joined with '/' so keep them slash-free at the end."""
        if isinstance(v, str):
            return v.rstrip("/")
        return v

    @field_validator("default_weekly_capacity")
    @classmethod
    def validate_capacity(cls, v: float) -> float:
        """A default capacity of zero would hide every allocation."""
        if v <= 0:
            raise ValueError("DEFAULT_WEEKLY_CAPACITY must be greater than 0")
        return v

    def share_url(self, shared_project_id: str) -> str:
        """Build the shareable link for a shared project."""
        return f"{self.public_base_url}/shared/{shared_project_id}"


# Global settings instance
settings = Settings()
