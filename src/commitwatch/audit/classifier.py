"""Pattern-based classification of commit subjects."""

import re
from dataclasses import dataclass, field
from typing import Iterable, List, Pattern, Sequence, Union

from commitwatch.models import Commit


@dataclass
class Classification:
    """Commits split into those matching a pattern and those matching none."""

    accepted: List[Commit] = field(default_factory=list)
    rejected: List[Commit] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.accepted) + len(self.rejected)


class PatternClassifier:
    """Accepts a commit when any pattern is found in its subject.

    Patterns are searched, not anchored: ``fix`` matches ``hotfix: x``, use
    ``^fix`` to require a prefix.
    """

    def __init__(self, patterns: Sequence[Union[str, Pattern[str]]]) -> None:
        self.patterns: List[Pattern[str]] = [
            p if isinstance(p, re.Pattern) else re.compile(p) for p in patterns
        ]

    def is_accepted(self, commit: Commit) -> bool:
        return any(pattern.search(commit.subject) for pattern in self.patterns)

    def classify(self, commits: Iterable[Commit]) -> Classification:
        """Partition commits, preserving their relative order in both outputs."""
        result = Classification()
        for commit in commits:
            if self.is_accepted(commit):
                result.accepted.append(commit)
            else:
                result.rejected.append(commit)
        return result
