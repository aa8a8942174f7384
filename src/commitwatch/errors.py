"""Exception hierarchy for commitwatch."""

from typing import Optional


class CommitWatchError(Exception):
    """Base class for all commitwatch errors."""


class ConfigError(CommitWatchError):
    """Configuration file is missing or invalid."""


class FetchError(CommitWatchError):
    """The git client exited with a non-zero status."""

    def __init__(self, repository: str, exit_code: Optional[int], detail: str = "") -> None:
        self.repository = repository
        self.exit_code = exit_code
        self.detail = detail
        message = f"git exited with status {exit_code} ({repository})"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class CloneError(FetchError):
    """Materializing the working copy failed."""


class ParseError(CommitWatchError):
    """Raw commit history could not be parsed into records."""

    def __init__(self, repository: str, raw: str, reason: str = "") -> None:
        self.repository = repository
        self.raw = raw
        self.reason = reason
        message = f"Malformed commit history ({repository})"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class DateParseError(ParseError):
    """A commit date is not a valid RFC 2822 timestamp."""

    def __init__(self, repository: str, value: str) -> None:
        self.value = value
        super().__init__(repository, value, f"unparseable date {value!r}")


class DeliveryError(CommitWatchError):
    """The report email could not be delivered."""
