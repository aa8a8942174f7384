"""Data models for commit audits."""

from commitwatch.models.commit import Commit, Repository
from commitwatch.models.config import (
    AuditConfig,
    FailurePolicy,
    GitRemoteConfig,
    LogFormat,
    MailerConfig,
    RepositoryConfig,
    ScheduleConfig,
    SendConfig,
    Settings,
    load_config,
)

__all__ = [
    "Commit",
    "Repository",
    "AuditConfig",
    "FailurePolicy",
    "GitRemoteConfig",
    "LogFormat",
    "MailerConfig",
    "RepositoryConfig",
    "ScheduleConfig",
    "SendConfig",
    "Settings",
    "load_config",
]
