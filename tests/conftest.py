"""Shared fixtures: throwaway git repositories with controlled commit dates."""

import tempfile
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Tuple

import git
import pytest
import structlog
from git import Actor

CommitSpec = Tuple[str, datetime]


def _git_date(when: datetime) -> str:
    return f"{int(when.timestamp())} +0000"


def create_repo(path: Path, commits: List[CommitSpec], branch: str = "main") -> Path:
    """Initialise a repository at ``path`` with one commit per (subject, date)."""
    repo = git.Repo.init(path)
    repo.config_writer().set_value("user", "name", "Test User").release()
    repo.config_writer().set_value("user", "email", "test@example.com").release()

    actor = Actor("Test User", "test@example.com")
    for index, (subject, when) in enumerate(commits):
        (path / "CHANGES.txt").write_text(f"{index}: {subject}\n")
        repo.index.add(["CHANGES.txt"])
        repo.index.commit(
            subject,
            author=actor,
            committer=actor,
            author_date=_git_date(when),
            commit_date=_git_date(when),
        )

    if commits:
        repo.git.branch("-M", branch)
    repo.close()
    return path


@pytest.fixture
def repo_factory() -> Callable[..., Path]:
    """Create repositories inside a temporary directory removed after the test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        counter = {"n": 0}

        def factory(commits: List[CommitSpec], name: str = "", branch: str = "main") -> Path:
            counter["n"] += 1
            path = root / (name or f"origin{counter['n']}")
            path.mkdir()
            return create_repo(path, commits, branch=branch)

        yield factory


@pytest.fixture(autouse=True)
def _reset_structlog():
    """Undo CLI logging configuration so later tests don't log to a closed stream."""
    yield
    structlog.reset_defaults()
