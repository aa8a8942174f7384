"""Git history retrieval and parsing."""

from commitwatch.extraction.git_source import GitSource
from commitwatch.extraction.parser import LOG_FORMATS, parse_date, parse_history
from commitwatch.extraction.workspace import Workspace

__all__ = ["GitSource", "LOG_FORMATS", "Workspace", "parse_date", "parse_history"]
