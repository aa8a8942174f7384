"""Attaching a classification to its repository."""

from typing import Union

from commitwatch.audit.classifier import Classification
from commitwatch.models import Repository, RepositoryConfig


def aggregate(repository: Union[RepositoryConfig, Repository], classification: Classification) -> Repository:
    """Return a Repository holding exactly the given classification.

    Any classification already present on ``repository`` is replaced, so
    aggregating the same input twice yields equal values.
    """
    return Repository(
        name=repository.name,
        url=repository.url,
        branch=repository.branch,
        accepted_commits=tuple(classification.accepted),
        rejected_commits=tuple(classification.rejected),
    )
