"""Data models for audited commits and repositories."""

from datetime import datetime
from typing import Tuple

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class Commit(BaseModel):
    """A single commit as reported by ``git log``."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    subject: str = Field(..., description="First line of the commit message")
    committer: str = Field(
        ...,
        validation_alias=AliasChoices("committer", "commiter"),
        description="Committer name",
    )
    date: datetime = Field(..., description="Commit date (timezone aware)")
    email: str = Field(..., description="Committer email")


class Repository(BaseModel):
    """A repository together with the classification of its recent commits.

    Instances are immutable. Classification is attached by producing a new
    value, so a previous run's commits are never carried over.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Repository display name")
    url: str = Field(..., description="Remote location relative to the base URL, or a full URL/path")
    branch: str = Field(..., description="Audited branch")
    accepted_commits: Tuple[Commit, ...] = Field(
        default_factory=tuple, description="Commits matching at least one pattern"
    )
    rejected_commits: Tuple[Commit, ...] = Field(
        default_factory=tuple, description="Commits matching no pattern"
    )

    @property
    def has_commits(self) -> bool:
        return bool(self.accepted_commits or self.rejected_commits)
