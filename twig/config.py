"""
Configuration management for Twig.

This module provides centralized configuration for all system components:
- Repository layout and naming
- Merge conflict markers
- Logging settings
"""

import os
from typing import Literal, cast

from dotenv import load_dotenv
from pydantic import BaseModel, Field

# Load environment variables from .env file
load_dotenv()


class RepositoryConfig(BaseModel):
    """Configuration for repository layout and identifiers."""

    repo_dir: str = Field(
        default=".twig", description="Name of the repository directory inside the work tree"
    )
    default_branch: str = Field(
        default="master", description="Branch created by init and checked out afterwards"
    )
    initial_message: str = Field(
        default="initial commit", description="Message of the root commit created by init"
    )
    min_prefix_length: int = Field(
        default=8,
        ge=4,
        le=40,
        description="Shortest commit id prefix accepted for abbreviated lookups",
    )


class MergeConfig(BaseModel):
    """Configuration for merge conflict output."""

    conflict_start: str = Field(
        default="<<<<<<< HEAD", description="Marker opening the current branch's side"
    )
    conflict_separator: str = Field(
        default="=======", description="Marker between the two sides of a conflict"
    )
    conflict_end: str = Field(
        default=">>>>>>>", description="Marker closing the given branch's side"
    )


class LogConfig(BaseModel):
    """Configuration for logging system."""

    level: Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="WARNING", description="Logging level"
    )
    format: str = Field(
        default="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
        "<level>{level: <8}</level> | "
        "<cyan>{extra[component]}</cyan> - "
        "<level>{message}</level>",
        description="Log message format",
    )
    rotation: str = Field(default="10 MB", description="Log file rotation size")
    retention: str = Field(default="1 month", description="Log file retention period")
    log_dir: str = Field(
        default="logs", description="Directory for log files, relative to the repository directory"
    )
    enable_file_logging: bool = Field(
        default=False, description="Whether to enable file logging"
    )
    enable_console_logging: bool = Field(
        default=True, description="Whether to enable console logging"
    )


class Config(BaseModel):
    """Main configuration object for Twig."""

    repository: RepositoryConfig = Field(default_factory=RepositoryConfig)
    merge: MergeConfig = Field(default_factory=MergeConfig)
    logging: LogConfig = Field(default_factory=LogConfig)

    @classmethod
    def from_env(cls) -> "Config":
        """Create configuration from environment variables."""
        return cls(
            repository=RepositoryConfig(
                repo_dir=os.getenv("TWIG_REPO_DIR", ".twig"),
                default_branch=os.getenv("TWIG_DEFAULT_BRANCH", "master"),
                min_prefix_length=int(os.getenv("TWIG_MIN_PREFIX_LENGTH", "8")),
            ),
            logging=LogConfig(
                level=cast(
                    Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
                    os.getenv("TWIG_LOG_LEVEL", "WARNING"),
                ),
                enable_file_logging=os.getenv("TWIG_LOG_FILE", "").lower()
                in ("1", "true", "yes"),
            ),
        )


# Global configuration instance
# This can be imported throughout the codebase
config = Config.from_env()
