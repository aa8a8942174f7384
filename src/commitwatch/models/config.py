"""Configuration models."""

import json
import re
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from babel import Locale, UnknownLocaleError
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from pydantic.alias_generators import to_camel
from pydantic_settings import BaseSettings, SettingsConfigDict

from commitwatch.errors import ConfigError


class FailurePolicy(str, Enum):
    """What a run does when one repository fails."""

    ABORT = "abort"
    REPORT_PARTIAL = "report_partial"


class LogFormat(str, Enum):
    """Record format requested from ``git log``."""

    LEGACY = "legacy"
    DELIMITED = "delimited"


class _CamelModel(BaseModel):
    """Accepts both camelCase (configuration.json) and snake_case keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RepositoryConfig(_CamelModel):
    """A repository to audit."""

    name: str = Field(..., description="Display name, also the working copy directory")
    url: str = Field(..., description="Path relative to the base URL, or a full URL/local path")
    branch: str = Field("main", description="Branch to audit")

    @field_validator("name")
    @classmethod
    def _name_is_directory_safe(cls, value: str) -> str:
        if not value or value in (".", "..") or "/" in value or "\\" in value:
            raise ValueError(f"Repository name must be a plain directory name: {value!r}")
        return value


class SendConfig(_CamelModel):
    """Which classifications end up in the report."""

    accepted: bool = Field(False, description="Include commits matching a pattern")
    not_accepted: bool = Field(True, description="Include commits matching no pattern")


class GitRemoteConfig(_CamelModel):
    """Credentials and base location used to build clone URLs."""

    protocol: str = Field("https", description="URL scheme used for cloning")
    user: Optional[str] = Field(None, description="Git user")
    password: Optional[str] = Field(None, alias="pass", description="Git password or token")
    base_url: Optional[str] = Field(None, description="Host and optional path prefix, e.g. git.example.com")


class MailerConfig(_CamelModel):
    """SMTP delivery settings."""

    host: str = Field(..., description="SMTP host")
    port: int = Field(587, description="SMTP port")
    user: Optional[str] = Field(None, description="SMTP login user")
    password: Optional[str] = Field(None, alias="pass", description="SMTP login password")
    sender: str = Field(..., alias="from", description="From address")
    to: List[str] = Field(..., description="Recipient addresses")
    subject: str = Field("Commit audit report", description="Email subject")
    message_ok: str = Field(
        "No commits to report.", description="Body sent when the report has no content"
    )
    starttls: bool = Field(True, description="Upgrade the connection with STARTTLS")
    ssl: bool = Field(False, description="Connect with implicit TLS (SMTPS)")
    verify_tls: bool = Field(True, description="Verify the server certificate")
    timeout: float = Field(30.0, description="Socket timeout in seconds")

    @field_validator("to", mode="before")
    @classmethod
    def _split_recipients(cls, value: Union[str, List[str]]) -> List[str]:
        if isinstance(value, str):
            return [addr.strip() for addr in value.split(",") if addr.strip()]
        return value


class ScheduleConfig(_CamelModel):
    """Recurring run settings."""

    interval_minutes: int = Field(1440, ge=1, description="Minutes between runs")


class AuditConfig(_CamelModel):
    """Complete configuration for an audit run."""

    repositories: List[RepositoryConfig] = Field(default_factory=list)
    limit_days_before: int = Field(7, ge=0, description="Size of the trailing window in days")
    patterns: List[str] = Field(default_factory=list, description="Acceptance regular expressions")
    send: SendConfig = Field(default_factory=SendConfig)
    locale_date: str = Field("en_US", description="Locale used to format commit dates")
    git: GitRemoteConfig = Field(default_factory=GitRemoteConfig)
    mailer: Optional[MailerConfig] = None
    schedule: ScheduleConfig = Field(default_factory=ScheduleConfig)
    on_failure: FailurePolicy = Field(FailurePolicy.ABORT, description="Behaviour when a repository fails")
    log_format: LogFormat = Field(LogFormat.DELIMITED, description="git log record format")

    @model_validator(mode="before")
    @classmethod
    def _lift_git_keys(cls, data: Any) -> Any:
        # configuration.json keeps the remote settings at the top level
        if not isinstance(data, dict):
            return data
        legacy = {key: data[key] for key in ("protocol", "user", "pass", "baseUrl") if key in data}
        if not legacy:
            return data
        data = {key: value for key, value in data.items() if key not in legacy}
        data["git"] = {**legacy, **data.get("git", {})}
        return data

    @field_validator("patterns")
    @classmethod
    def _patterns_compile(cls, value: List[str]) -> List[str]:
        for pattern in value:
            try:
                re.compile(pattern)
            except re.error as e:
                raise ValueError(f"Invalid pattern {pattern!r}: {e}") from e
        return value

    @field_validator("locale_date")
    @classmethod
    def _locale_exists(cls, value: str) -> str:
        try:
            Locale.parse(value.replace("-", "_"))
        except (UnknownLocaleError, ValueError) as e:
            raise ValueError(f"Unknown locale: {value!r}") from e
        return value

    @field_validator("repositories")
    @classmethod
    def _unique_names(cls, value: List[RepositoryConfig]) -> List[RepositoryConfig]:
        names = [repo.name for repo in value]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ValueError(f"Duplicate repository names: {', '.join(duplicates)}")
        return value


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="COMMITWATCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    config_path: Path = Path("config/configuration.json")
    workspace_dir: Path = Path("./workspace")

    # Secrets kept out of the configuration file
    git_password: Optional[str] = None
    mail_password: Optional[str] = None

    # Logging
    log_level: str = "INFO"


def load_config(path: Optional[Path] = None, settings: Optional[Settings] = None) -> AuditConfig:
    """Load and validate the audit configuration.

    Args:
        path: JSON configuration file. Defaults to ``settings.config_path``.
        settings: Environment settings. Loaded from the environment if None.

    Returns:
        Validated AuditConfig with secret overrides applied

    Raises:
        ConfigError: If the file is missing, is not JSON, or fails validation
    """
    settings = settings or Settings()
    path = Path(path or settings.config_path)

    try:
        data: Dict[str, Any] = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ConfigError(f"Configuration file not found: {path}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"Configuration file is not valid JSON: {path}: {e}") from e

    try:
        config = AuditConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {path}:\n{e}") from e

    if settings.git_password:
        config = config.model_copy(
            update={"git": config.git.model_copy(update={"password": settings.git_password})}
        )
    if settings.mail_password and config.mailer is not None:
        config = config.model_copy(
            update={"mailer": config.mailer.model_copy(update={"password": settings.mail_password})}
        )
    return config
