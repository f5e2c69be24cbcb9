"""
Retrieval configuration settings.

Dependencies: pydantic, pydantic_settings
System role: Search engine defaults and bounds
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class RetrievalSettings(BaseSettings):
    """Hybrid retrieval engine configuration."""

    model_config = SettingsConfigDict(
        env_prefix="RETRIEVAL_",
        case_sensitive=False,
        extra="ignore",
    )

    default_limit: int = Field(default=10, description="Results returned when no limit is given")
    max_limit: int = Field(default=100, description="Largest accepted result limit")
    candidate_multiplier: int = Field(
        default=5,
        description="Vector candidates scanned per requested result",
    )
    default_mode: str = Field(
        default="hybrid",
        description="Search mode used when none is requested (vector, lexical, keyword, hybrid)",
    )
