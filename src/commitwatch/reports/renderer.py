"""Plain-text report of classified commits."""

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Sequence

from babel.dates import format_date, format_datetime

from commitwatch.audit.runner import RepositoryResult
from commitwatch.models import Commit, Repository, SendConfig

SECTION_RULE = "::::::::::::::::::::::::::::"


@dataclass(frozen=True)
class Report:
    """Rendered report text and whether any section was written."""

    text: str
    has_content: bool

    def write(self, path: Path) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.text, encoding="utf-8")
        return path


class ReportRenderer:
    """Renders one section per repository with commits to report.

    A repository gets a section when accepted commits are enabled and it has
    some, or when not-accepted commits are enabled and it has some. Accepted
    commits are listed first with their date, then not-accepted commits with
    date and time.
    """

    def __init__(self, send: SendConfig, locale: str = "en_US") -> None:
        self.send = send
        self.locale = locale.replace("-", "_")

    def has_section(self, repository: Repository) -> bool:
        return (self.send.accepted and len(repository.accepted_commits) > 0) or (
            self.send.not_accepted and len(repository.rejected_commits) > 0
        )

    def render(
        self,
        repositories: Iterable[Repository],
        failures: Sequence[RepositoryResult] = (),
    ) -> Report:
        """Render the report.

        Args:
            repositories: Aggregated repositories, in report order
            failures: Repositories that could not be audited, listed last

        Returns:
            Report whose ``has_content`` is True iff a section was emitted
        """
        lines: List[str] = []
        has_content = False

        for repository in repositories:
            if not self.has_section(repository):
                continue
            has_content = True
            lines.append(f"Repository: {repository.name}")
            lines.append(SECTION_RULE)
            lines.append("")

            if self.send.accepted:
                for commit in repository.accepted_commits:
                    lines.extend(self._commit_lines(commit, with_time=False))
            if self.send.not_accepted:
                for commit in repository.rejected_commits:
                    lines.extend(self._commit_lines(commit, with_time=True))

            lines.extend(["", "", "", ""])

        if failures:
            has_content = True
            lines.append("Failed repositories")
            lines.append(SECTION_RULE)
            lines.append("")
            for failure in failures:
                lines.append(f"{failure.config.name}: {failure.error}")
            lines.append("")

        text = "\n".join(lines) + "\n" if lines else ""
        return Report(text=text, has_content=has_content)

    def format_commit_date(self, commit: Commit, with_time: bool) -> str:
        if with_time:
            return format_datetime(commit.date, format="short", locale=self.locale)
        return format_date(commit.date, format="short", locale=self.locale)

    def _commit_lines(self, commit: Commit, with_time: bool) -> List[str]:
        return [
            f"Subject: {commit.subject}",
            f"Commiter: {commit.committer}",
            f"Date: {self.format_commit_date(commit, with_time)}",
            "--",
        ]
