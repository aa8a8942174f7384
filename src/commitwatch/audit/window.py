"""Trailing time window over commit dates."""

from datetime import datetime, timedelta, timezone
from typing import Iterable, List, Optional

from commitwatch.models import Commit


def window_cutoff(days: int, now: Optional[datetime] = None) -> datetime:
    """Start of the window ``[now - days, now]``."""
    now = now or datetime.now(timezone.utc)
    return now - timedelta(days=days)


def filter_window(commits: Iterable[Commit], days: int, now: Optional[datetime] = None) -> List[Commit]:
    """Keep commits dated at or after ``now - days``.

    The lower bound is inclusive and the input order is preserved. Dates are
    compared as recorded by git; no timezone normalization is applied.

    Args:
        commits: Parsed commits
        days: Window size in days
        now: Reference instant (timezone aware). Defaults to the current UTC time.

    Returns:
        Commits inside the window
    """
    cutoff = window_cutoff(days, now)
    return [commit for commit in commits if commit.date >= cutoff]
