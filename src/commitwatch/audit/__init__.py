"""Windowing, classification and aggregation of commit history."""

from commitwatch.audit.aggregator import aggregate
from commitwatch.audit.classifier import Classification, PatternClassifier
from commitwatch.audit.runner import AuditRunner, BatchResult, RepositoryResult
from commitwatch.audit.window import filter_window, window_cutoff

__all__ = [
    "AuditRunner",
    "BatchResult",
    "Classification",
    "PatternClassifier",
    "RepositoryResult",
    "aggregate",
    "filter_window",
    "window_cutoff",
]
