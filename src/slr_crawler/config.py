"""Configuration management for the SLR crawler."""

from enum import Enum
from typing import TYPE_CHECKING, Optional

from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError
from .core.constants import (
    DEFAULT_BRANCH,
    DEFAULT_COMMITTER_EMAIL,
    DEFAULT_COMMITTER_NAME,
    DEFAULT_REMOTE_NAME,
)

if TYPE_CHECKING:
    from .git.models import Credentials


class IntegrationStrategy(str, Enum):
    """How a search branch is folded into the results branch."""
    MERGE = "merge"
    PATCH = "patch"


class GitSettings(BaseSettings):
    """Git repository and remote settings."""
    
    # Credentials (names kept compatible with existing crawl setups)
    username: Optional[str] = Field(default=None, alias="GIT_EMAIL")
    password: Optional[SecretStr] = Field(default=None, alias="GIT_PW")
    
    remote_name: str = Field(default=DEFAULT_REMOTE_NAME, alias="SLR_GIT_REMOTE")
    default_branch: str = Field(default=DEFAULT_BRANCH, alias="SLR_DEFAULT_BRANCH")
    
    # Identity used for automated commits
    committer_name: str = Field(default=DEFAULT_COMMITTER_NAME, alias="SLR_COMMITTER_NAME")
    committer_email: str = Field(default=DEFAULT_COMMITTER_EMAIL, alias="SLR_COMMITTER_EMAIL")
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
        populate_by_name=True,
    )
    
    @field_validator('remote_name', 'default_branch')
    @classmethod
    def validate_not_blank(cls, v):
        """Remote and branch names must not be blank."""
        if not v or not v.strip():
            raise ConfigurationError("Remote and branch names must not be empty")
        return v.strip()
    
    @model_validator(mode='after')
    def validate_credentials(self):
        """Username and password are configured together or not at all."""
        if (self.username is None) != (self.password is None):
            raise ConfigurationError(
                "Both GIT_EMAIL and GIT_PW must be set to authenticate against the remote"
            )
        return self
    
    def credentials(self) -> Optional["Credentials"]:
        """Credentials for remote operations, if configured."""
        from .git.models import Credentials

        if self.username is None or self.password is None:
            return None
        return Credentials(username=self.username, password=self.password)


class CrawlSettings(BaseSettings):
    """Crawl orchestration settings."""
    
    results_branch: str = Field(default=DEFAULT_BRANCH, alias="SLR_RESULTS_BRANCH")
    integration_strategy: IntegrationStrategy = Field(
        default=IntegrationStrategy.MERGE, alias="SLR_INTEGRATION_STRATEGY"
    )
    push_results: bool = Field(default=True, alias="SLR_PUSH_RESULTS")
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
        populate_by_name=True,
    )


class AppConfig(BaseSettings):
    """Application configuration settings."""
    
    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_format: str = Field(default="console", alias="LOG_FORMAT")
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
        populate_by_name=True,
    )
    
    @field_validator('log_format')
    @classmethod
    def validate_log_format(cls, v):
        """Only JSON and console rendering are supported."""
        if v not in ("json", "console"):
            raise ConfigurationError(f"Unsupported log format: {v}")
        return v


class Config:
    """Main configuration class.
    
    Loaded once by the entry point and handed to the components that need it.
    """
    
    def __init__(self, git: GitSettings, crawl: CrawlSettings, app: AppConfig) -> None:
        self.git = git
        self.crawl = crawl
        self.app = app
    
    @classmethod
    def load(cls) -> "Config":
        """Load configuration from environment and .env file."""
        return cls(git=GitSettings(), crawl=CrawlSettings(), app=AppConfig())
