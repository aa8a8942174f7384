"""Parsing of raw ``git log`` output into Commit records.

Two record formats are supported:

* ``legacy`` - one JSON-like object per line followed by a comma. The stream
  has no enclosing brackets, so the trailing comma is stripped and the text
  is wrapped in ``[...]`` before being parsed as a single JSON document.
  Subjects come from ``%f`` (sanitized) because unescaped quotes would break
  the document.
* ``delimited`` - fields separated by the ASCII unit separator and records
  terminated by the ASCII record separator. Safe for arbitrary subjects.
"""

import json
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Dict, List

from pydantic import ValidationError

from commitwatch.errors import DateParseError, ParseError
from commitwatch.models import Commit, LogFormat

FIELD_SEPARATOR = "\x1f"
RECORD_SEPARATOR = "\x1e"

LEGACY_LOG_FORMAT = '{"subject": "%f", "commiter": "%cN", "date": "%cD", "email": "%cE"},'
DELIMITED_LOG_FORMAT = "%s%x1f%cN%x1f%cD%x1f%cE%x1e"

LOG_FORMATS = {
    LogFormat.LEGACY: LEGACY_LOG_FORMAT,
    LogFormat.DELIMITED: DELIMITED_LOG_FORMAT,
}


def parse_date(value: str, repository: str = "") -> datetime:
    """Parse an RFC 2822 date as printed by ``%cD``.

    Dates without zone information are taken as UTC.

    Raises:
        DateParseError: If the value is not a valid RFC 2822 date
    """
    try:
        parsed = parsedate_to_datetime(value)
    except (TypeError, ValueError, IndexError) as e:
        raise DateParseError(repository, value) from e
    if parsed is None:
        raise DateParseError(repository, value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_history(raw: str, log_format: LogFormat = LogFormat.DELIMITED, repository: str = "") -> List[Commit]:
    """Parse raw ``git log`` output into commits, preserving order.

    Args:
        raw: Output of ``git log`` with the matching ``--pretty`` format
        log_format: Record format the output was produced with
        repository: Repository name used in error reports

    Returns:
        List of Commit objects (empty when the stream is empty)

    Raises:
        ParseError: If the stream is malformed
        DateParseError: If a commit date cannot be parsed
    """
    if not raw or not raw.strip():
        return []

    if log_format == LogFormat.LEGACY:
        records = _split_legacy(raw, repository)
    else:
        records = _split_delimited(raw, repository)

    return [_build_commit(record, raw, repository) for record in records]


def _split_legacy(raw: str, repository: str) -> List[Dict[str, Any]]:
    body = raw.rstrip()
    if body.endswith(","):
        body = body[:-1]

    try:
        records = json.loads(f"[{body}]")
    except json.JSONDecodeError as e:
        raise ParseError(repository, raw, str(e)) from e

    for record in records:
        if not isinstance(record, dict):
            raise ParseError(repository, raw, f"expected an object, got {type(record).__name__}")
    return records


def _split_delimited(raw: str, repository: str) -> List[Dict[str, Any]]:
    chunks = raw.split(RECORD_SEPARATOR)
    # Nothing but whitespace may follow the last separator
    if chunks[-1].strip():
        raise ParseError(repository, raw, "unterminated record")

    records = []
    for chunk in chunks[:-1]:
        fields = chunk.lstrip("\r\n").split(FIELD_SEPARATOR)
        if len(fields) != 4:
            raise ParseError(repository, raw, f"expected 4 fields, got {len(fields)}")
        subject, committer, date, email = fields
        records.append({"subject": subject, "committer": committer, "date": date, "email": email})
    return records


def _build_commit(record: Dict[str, Any], raw: str, repository: str) -> Commit:
    date = record.get("date")
    if not isinstance(date, str):
        raise ParseError(repository, raw, "commit record without a date")

    try:
        return Commit.model_validate({**record, "date": parse_date(date, repository)})
    except ValidationError as e:
        raise ParseError(repository, raw, str(e)) from e
