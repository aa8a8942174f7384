"""Sequential audit of every configured repository."""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import List, Optional

import structlog

from commitwatch.audit.aggregator import aggregate
from commitwatch.audit.classifier import PatternClassifier
from commitwatch.audit.window import filter_window
from commitwatch.errors import CommitWatchError
from commitwatch.extraction import LOG_FORMATS, GitSource, Workspace, parse_history
from commitwatch.models import AuditConfig, FailurePolicy, Repository, RepositoryConfig

logger = structlog.get_logger(__name__)


@dataclass
class RepositoryResult:
    """Outcome of auditing one repository: a Repository or the error that stopped it."""

    config: RepositoryConfig
    repository: Optional[Repository] = None
    error: Optional[CommitWatchError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class BatchResult:
    """Results of one run, in configured repository order."""

    results: List[RepositoryResult] = field(default_factory=list)
    aborted: bool = False

    @property
    def succeeded(self) -> List[Repository]:
        return [r.repository for r in self.results if r.ok and r.repository is not None]

    @property
    def failures(self) -> List[RepositoryResult]:
        return [r for r in self.results if not r.ok]


class AuditRunner:
    """Runs clone, fetch, parse, window, classify and aggregate per repository.

    Repositories are processed one at a time. With ``FailurePolicy.ABORT`` the
    first failure stops the batch and marks it aborted; with
    ``FailurePolicy.REPORT_PARTIAL`` the remaining repositories still run.
    """

    def __init__(
        self,
        config: AuditConfig,
        source: Optional[GitSource] = None,
        workspace: Optional[Workspace] = None,
        now: Optional[datetime] = None,
    ) -> None:
        """Initialize the runner.

        Args:
            config: Audit configuration
            source: Git source. Built from ``config.git`` if None.
            workspace: Working copy location. Defaults to ``./workspace``.
            now: Reference instant for the window. Current time if None.
        """
        self.config = config
        self.source = source or GitSource(config.git)
        self.workspace = workspace or Workspace(Path("./workspace"))
        self.now = now
        self.classifier = PatternClassifier(config.patterns)

    def run(self, policy: Optional[FailurePolicy] = None) -> BatchResult:
        """Audit every configured repository.

        Args:
            policy: Overrides ``config.on_failure``

        Returns:
            BatchResult with one entry per processed repository
        """
        policy = policy or self.config.on_failure
        batch = BatchResult()
        self.workspace.reset()

        for repo_config in self.config.repositories:
            try:
                path = self.source.materialize(repo_config, self.workspace.path_for(repo_config.name))
                repository = self.audit_local(repo_config, path)
            except CommitWatchError as e:
                logger.error("repository_failed", repository=repo_config.name, error=str(e))
                batch.results.append(RepositoryResult(config=repo_config, error=e))
                if policy == FailurePolicy.ABORT:
                    batch.aborted = True
                    logger.error("run_aborted", repository=repo_config.name)
                    break
                continue

            batch.results.append(RepositoryResult(config=repo_config, repository=repository))

        logger.info(
            "run_finished",
            succeeded=len(batch.succeeded),
            failed=len(batch.failures),
            aborted=batch.aborted,
        )
        return batch

    def audit_local(self, repo_config: RepositoryConfig, path: Path) -> Repository:
        """Audit an existing working copy.

        Raises:
            FetchError: If ``git log`` fails
            ParseError: If the history is malformed
            DateParseError: If a commit date cannot be parsed
        """
        raw = self.source.fetch_history(repo_config, path, LOG_FORMATS[self.config.log_format])
        commits = parse_history(raw, self.config.log_format, repo_config.name)
        recent = filter_window(commits, self.config.limit_days_before, self.now)
        classification = self.classifier.classify(recent)

        logger.info(
            "repository_audited",
            repository=repo_config.name,
            commits=len(commits),
            in_window=len(recent),
            accepted=len(classification.accepted),
            rejected=len(classification.rejected),
        )
        return aggregate(repo_config, classification)
