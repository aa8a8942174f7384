"""Command-line interface for commitwatch."""

import time
from pathlib import Path
from typing import List, Optional, Tuple

import structlog
import typer
from rich.console import Console
from rich.table import Table

from commitwatch.audit import AuditRunner
from commitwatch.delivery import Mailer, open_smtp
from commitwatch.errors import CommitWatchError, ConfigError
from commitwatch.extraction import GitSource, Workspace
from commitwatch.logging_config import configure_logging
from commitwatch.models import AuditConfig, RepositoryConfig, SendConfig, Settings, load_config
from commitwatch.reports import Report, ReportRenderer

app = typer.Typer(
    name="commitwatch",
    help="Audit recent commits across git repositories and email a compliance report",
    add_completion=False,
)
console = Console()
logger = structlog.get_logger(__name__)


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(None, "--log-level", "-l", help="Override COMMITWATCH_LOG_LEVEL"),
) -> None:
    """Commit message compliance audits."""
    configure_logging(log_level or Settings().log_level)


def _load(config_path: Optional[Path]) -> Tuple[Settings, AuditConfig]:
    settings = Settings()
    return settings, load_config(config_path, settings)


def _audit_once(config: AuditConfig, settings: Settings, dry_run: bool, output: Optional[Path]) -> Optional[Report]:
    """Run one audit and deliver its report.

    Returns:
        The report, or None when the run was aborted
    """
    workspace = Workspace(settings.workspace_dir)
    runner = AuditRunner(config, source=GitSource(config.git), workspace=workspace)
    batch = runner.run()

    if batch.aborted:
        failed = batch.failures[-1]
        console.print(f"[bold red]Run aborted:[/bold red] {failed.config.name}: {failed.error}")
        return None

    renderer = ReportRenderer(config.send, config.locale_date)
    report = renderer.render(batch.succeeded, batch.failures)
    report_path = report.write(output or workspace.report_path)

    for failure in batch.failures:
        console.print(f"[bold yellow]Skipped:[/bold yellow] {failure.config.name}: {failure.error}")

    if dry_run:
        if report.has_content:
            console.print(report.text, markup=False, highlight=False)
        else:
            console.print("[bold green]✓[/bold green] Nothing to report")
        console.print(f"[dim]Report written to {report_path}[/dim]")
        return report

    if config.mailer is None:
        raise ConfigError("No mailer configured; use --dry-run or add a 'mailer' section")

    with open_smtp(config.mailer) as client:
        message_id = Mailer(config.mailer, client).send_report(report)
    console.print(f"[bold green]✓[/bold green] Report sent ({message_id})")
    return report


@app.command()
def run(
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Configuration JSON file"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print the report instead of emailing it"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Where to write the report file"),
) -> None:
    """Audit all configured repositories once and send the report."""
    try:
        settings, config = _load(config_path)
        console.print(
            f"[bold green]Auditing {len(config.repositories)} repositories[/bold green] "
            f"(last {config.limit_days_before} days)"
        )
        report = _audit_once(config, settings, dry_run, output)
    except CommitWatchError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    if report is None:
        raise typer.Exit(1)


@app.command()
def check(
    repo_path: Path = typer.Argument(..., help="Path to a local working copy"),
    branch: str = typer.Option("HEAD", "--branch", "-b", help="Branch to audit"),
    days: int = typer.Option(7, "--days", "-d", min=0, help="Size of the trailing window"),
    patterns: Optional[List[str]] = typer.Option(None, "--pattern", "-p", help="Acceptance pattern (repeatable)"),
) -> None:
    """Classify recent commits of a local repository without cloning or emailing."""
    try:
        repo_config = RepositoryConfig(name=repo_path.resolve().name, url=str(repo_path), branch=branch)
        config = AuditConfig(
            repositories=[repo_config],
            limit_days_before=days,
            patterns=patterns or [],
            send=SendConfig(accepted=True, not_accepted=True),
        )
        repository = AuditRunner(config).audit_local(repo_config, repo_path)
    except (CommitWatchError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Status", width=8)
    table.add_column("Date", style="blue")
    table.add_column("Committer", style="green")
    table.add_column("Subject", style="white")

    rows = [("ok", c) for c in repository.accepted_commits] + [("reject", c) for c in repository.rejected_commits]
    for status, commit in sorted(rows, key=lambda row: row[1].date, reverse=True):
        style = "green" if status == "ok" else "red"
        table.add_row(
            f"[{style}]{status}[/{style}]",
            commit.date.strftime("%Y-%m-%d %H:%M"),
            commit.committer[:20],
            commit.subject[:60],
        )

    console.print(table)
    console.print(
        f"\n[bold green]{len(repository.accepted_commits)} accepted[/bold green], "
        f"[bold red]{len(repository.rejected_commits)} not accepted[/bold red] "
        f"in the last {days} days"
    )


@app.command()
def schedule(
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Configuration JSON file"),
    interval_minutes: Optional[int] = typer.Option(
        None, "--interval-minutes", "-i", min=1, help="Override schedule.intervalMinutes"
    ),
    max_runs: Optional[int] = typer.Option(None, "--max-runs", min=1, help="Stop after this many runs"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print reports instead of emailing them"),
) -> None:
    """Run the audit repeatedly at a fixed interval."""
    try:
        settings, config = _load(config_path)
    except CommitWatchError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    interval = interval_minutes or config.schedule.interval_minutes
    console.print(f"[bold green]Scheduler started[/bold green] (every {interval} minutes)")

    runs = 0
    while True:
        runs += 1
        logger.info("scheduled_run_started", run=runs)
        try:
            _audit_once(config, settings, dry_run, None)
        except CommitWatchError as e:
            logger.error("scheduled_run_failed", run=runs, error=str(e))
            console.print(f"[bold red]Error:[/bold red] {e}")

        if max_runs is not None and runs >= max_runs:
            break
        time.sleep(interval * 60)


@app.command("verify-mail")
def verify_mail(
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Configuration JSON file"),
) -> None:
    """Check that the SMTP server accepts the configured credentials."""
    try:
        _, config = _load(config_path)
        if config.mailer is None:
            raise ConfigError("No mailer configured")
        with open_smtp(config.mailer) as client:
            Mailer(config.mailer, client).verify()
    except CommitWatchError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    console.print("[bold green]✓[/bold green] E-mail configuration: Success.")


@app.command("show-config")
def show_config(
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Configuration JSON file"),
) -> None:
    """Print the effective configuration with secrets masked."""
    try:
        _, config = _load(config_path)
    except CommitWatchError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    data = config.model_dump(mode="json")
    if data["git"].get("password"):
        data["git"]["password"] = "***"
    if data.get("mailer") and data["mailer"].get("password"):
        data["mailer"]["password"] = "***"
    console.print_json(data=data)


if __name__ == "__main__":
    app()
