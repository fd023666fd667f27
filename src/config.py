"""
Application Configuration Module.

Manages application settings and environment variables using Pydantic for validation.
Provides centralized configuration management with type safety and validation.

Features:
- Environment variable loading and validation
- Secure credential management
- Forge client tuning (timeouts, concurrency, sample sizes)
- Fallback values for the deployment estimators
"""

from typing import List, Optional

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from logger import LogManager


class Settings(BaseSettings):
    """
    Application configuration settings with validation.

    Manages and validates all application settings including:
    - Application identification
    - GitHub authentication and API access
    - Sampling sizes for fetched resources
    - Logging settings

    Attributes:
        app_name (str): Name of the application
        dev (bool): Debug mode flag
        log_dir (Optional[str]): Directory for log files, console only when unset
        log_level (int): Logging level (default: info)
        github_token (Optional[SecretStr]): Default GitHub API token
        github_api_url (str): Base URL of the GitHub-compatible REST API
        github_api_version (str): Pinned REST API version header
        request_timeout (int): Per-request timeout in seconds
        max_concurrent_requests (int): Upper bound of in-flight requests
        commit_sample_size (int): Number of recent commits to fetch
        github_repositories (str): Comma-separated owner/repo names
    """

    # Application settings
    app_name: str = Field(default="TechHealth", description="Application name")
    dev: bool = Field(default=False, description="Debug mode")
    log_dir: Optional[str] = Field(default=None, description="Logging directory")
    log_level: int = Field(default=20, description="Logging level, default info")

    # GitHub configuration
    github_token: Optional[SecretStr] = Field(default=None, description="GitHub token")
    github_api_url: str = Field(
        default="https://api.github.com", description="GitHub REST API base URL"
    )
    github_api_version: str = Field(
        default="2022-11-28", description="X-GitHub-Api-Version header value"
    )
    request_timeout: int = Field(
        default=15, ge=1, description="Request timeout in seconds"
    )
    max_concurrent_requests: int = Field(
        default=8, ge=1, description="Maximum concurrent forge requests"
    )

    # Sampling configuration
    commit_sample_size: int = Field(default=30, description="Commits per report")
    pull_request_sample_size: int = Field(
        default=100, ge=1, le=100, description="Pull requests per report"
    )
    issue_sample_size: int = Field(
        default=100, ge=1, le=100, description="Issues per report"
    )
    release_sample_size: int = Field(
        default=50, ge=1, le=100, description="Releases per report"
    )
    workflow_run_sample_size: int = Field(
        default=100, ge=1, le=100, description="Workflow runs per report"
    )

    # Estimator fallbacks
    default_lead_time_hours: float = Field(
        default=48.0, ge=0, description="Lead time when no history is usable"
    )
    default_recovery_hours: float = Field(
        default=24.0, ge=0, description="Recovery time when no history is usable"
    )
    benchmark_default: int = Field(
        default=65, ge=0, le=100, description="Benchmark for unlisted languages"
    )

    github_repositories: str = Field(
        default="", description="Comma-separated owner/repo names to analyze"
    )

    @property
    def repository_names(self) -> List[str]:
        """
        Get list of repository names from configuration.

        Returns:
            List[str]: List of cleaned owner/repo names
        """
        return [
            name.strip() for name in self.github_repositories.split(",") if name.strip()
        ]

    @property
    def token(self) -> Optional[str]:
        """Plain-text GitHub token, or None when not configured."""
        return self.github_token.get_secret_value() if self.github_token else None

    @field_validator("commit_sample_size")
    def ensure_commit_sample(cls, v: int) -> int:
        """
        Commit message scoring needs at least 30 commits, and the forge caps a
        page at 100.

        Args:
            v (int): Requested sample size

        Returns:
            int: Validated sample size
        """
        if v < 30 or v > 100:
            raise ValueError("commit_sample_size must be between 30 and 100")
        return v

    # Configure env file loading
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra fields in .env file
    )


# Create global settings instance
settings = Settings()

# Initialize logging configuration
logger = LogManager(
    app_name=settings.app_name.lower(),
    log_dir=settings.log_dir,
    development=settings.dev,
    level=settings.log_level,
).logger
