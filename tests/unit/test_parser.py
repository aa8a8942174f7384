"""Unit tests for git log record parsing."""

from datetime import datetime, timezone

import pytest

from commitwatch.errors import DateParseError, ParseError
from commitwatch.extraction import parse_date, parse_history
from commitwatch.models import LogFormat

US = "\x1f"
RS = "\x1e"


def test_empty_stream_yields_no_commits():
    """Test that an empty stream is not a parse error."""
    assert parse_history("", LogFormat.LEGACY) == []
    assert parse_history("", LogFormat.DELIMITED) == []


def test_legacy_single_record():
    """Test the legacy format with its trailing comma and misspelled key."""
    raw = '{"subject":"fix: bug","commiter":"Al","date":"Mon, 01 Jan 2024 00:00:00 GMT","email":"a@x.com"},'

    commits = parse_history(raw, LogFormat.LEGACY, "svc")

    assert len(commits) == 1
    commit = commits[0]
    assert commit.subject == "fix: bug"
    assert commit.committer == "Al"
    assert commit.email == "a@x.com"
    assert commit.date == datetime(2024, 1, 1, tzinfo=timezone.utc)


def test_legacy_multiple_records_keep_order():
    """Test that records come back in stream order."""
    raw = (
        '{"subject": "second", "commiter": "B", "date": "Tue, 02 Jan 2024 10:00:00 +0100", "email": "b@x.com"},\n'
        '{"subject": "first", "commiter": "A", "date": "Mon, 01 Jan 2024 09:00:00 +0100", "email": "a@x.com"},'
    )

    commits = parse_history(raw, LogFormat.LEGACY)

    assert [c.subject for c in commits] == ["second", "first"]
    assert commits[0].date.utcoffset().total_seconds() == 3600


def test_legacy_unbalanced_braces_raise_parse_error():
    """Test that a malformed legacy stream is rejected."""
    raw = '{"subject": "oops", "commiter": "A", "date": "Mon, 01 Jan 2024 00:00:00 GMT", "email": "a@x.com",'

    with pytest.raises(ParseError) as exc_info:
        parse_history(raw, LogFormat.LEGACY, "svc")

    assert exc_info.value.repository == "svc"
    assert exc_info.value.raw == raw


def test_legacy_unescaped_quote_in_subject_breaks_parsing():
    """Test the known fragility of the legacy format."""
    raw = '{"subject": "say "hi"", "commiter": "A", "date": "Mon, 01 Jan 2024 00:00:00 GMT", "email": "a@x.com"},'

    with pytest.raises(ParseError):
        parse_history(raw, LogFormat.LEGACY)


def test_legacy_missing_key_raises_parse_error():
    """Test that a record without a committer is rejected."""
    raw = '{"subject": "x", "date": "Mon, 01 Jan 2024 00:00:00 GMT", "email": "a@x.com"},'

    with pytest.raises(ParseError):
        parse_history(raw, LogFormat.LEGACY)


def test_legacy_non_object_record_raises_parse_error():
    """Test that a bare value in the stream is rejected."""
    with pytest.raises(ParseError):
        parse_history('"just a string",', LogFormat.LEGACY)


def test_delimited_subject_with_special_characters():
    """Test that the delimited format survives quotes, commas and braces."""
    subject = 'feat: handle {"a": [1, 2]}, "quoted", done'
    raw = f"{subject}{US}Al{US}Mon, 01 Jan 2024 00:00:00 +0000{US}a@x.com{RS}"

    commits = parse_history(raw, LogFormat.DELIMITED)

    assert len(commits) == 1
    assert commits[0].subject == subject


def test_delimited_records_separated_by_newlines():
    """Test git's newline between formatted records."""
    raw = (
        f"one{US}A{US}Tue, 02 Jan 2024 00:00:00 +0000{US}a@x.com{RS}\n"
        f"two{US}B{US}Mon, 01 Jan 2024 00:00:00 +0000{US}b@x.com{RS}"
    )

    commits = parse_history(raw, LogFormat.DELIMITED)

    assert [c.subject for c in commits] == ["one", "two"]
    assert [c.committer for c in commits] == ["A", "B"]


def test_delimited_wrong_field_count_raises_parse_error():
    """Test that a record with missing fields is rejected."""
    raw = f"one{US}A{US}Mon, 01 Jan 2024 00:00:00 +0000{RS}"

    with pytest.raises(ParseError, match="expected 4 fields"):
        parse_history(raw, LogFormat.DELIMITED)


def test_delimited_unterminated_record_raises_parse_error():
    """Test that trailing data after the last separator is rejected."""
    raw = f"one{US}A{US}Mon, 01 Jan 2024 00:00:00 +0000{US}a@x.com"

    with pytest.raises(ParseError, match="unterminated"):
        parse_history(raw, LogFormat.DELIMITED)


def test_unparseable_date_raises_date_parse_error():
    """Test that a bad date aborts parsing instead of skipping the commit."""
    raw = f"one{US}A{US}not a date{US}a@x.com{RS}"

    with pytest.raises(DateParseError) as exc_info:
        parse_history(raw, LogFormat.DELIMITED, "svc")

    assert exc_info.value.value == "not a date"
    assert exc_info.value.repository == "svc"
    assert isinstance(exc_info.value, ParseError)


def test_parse_date_without_zone_is_utc():
    """Test that a -0000 date is treated as UTC."""
    parsed = parse_date("Mon, 01 Jan 2024 12:30:00 -0000")

    assert parsed.tzinfo is not None
    assert parsed == datetime(2024, 1, 1, 12, 30, tzinfo=timezone.utc)
