"""commitwatch - recurring commit-message compliance audits for git repositories."""

__version__ = "0.1.0"
