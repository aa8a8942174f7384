"""Unit tests for email delivery."""

import smtplib
from unittest.mock import MagicMock, patch

import pytest

from commitwatch.delivery import Mailer, open_smtp
from commitwatch.errors import DeliveryError
from commitwatch.models import MailerConfig
from commitwatch.reports import Report


@pytest.fixture
def mailer_config():
    return MailerConfig(
        host="smtp.example.com",
        port=587,
        user="bot",
        password="secret",
        sender="audit@example.com",
        to="lead@example.com, ops@example.com",
        subject="Weekly commit audit",
        message_ok="All commits follow the convention.",
    )


@pytest.fixture
def mock_client():
    client = MagicMock()
    client.noop.return_value = (250, b"OK")
    return client


def test_recipients_split_from_string(mailer_config):
    assert mailer_config.to == ["lead@example.com", "ops@example.com"]


def test_report_with_content_is_attached(mailer_config, mock_client):
    """Test that a non-empty report travels as report.log."""
    report = Report(text="Repository: svc\n", has_content=True)

    message = Mailer(mailer_config, mock_client).build_message(report)

    attachments = list(message.iter_attachments())
    assert len(attachments) == 1
    assert attachments[0].get_filename() == "report.log"
    assert attachments[0].get_content() == "Repository: svc\n"
    assert message["Subject"] == "Weekly commit audit"
    assert message["To"] == "lead@example.com, ops@example.com"
    assert message["From"] == "audit@example.com"


def test_empty_report_sends_message_ok(mailer_config, mock_client):
    """Test the all-clear message when nothing was found."""
    message = Mailer(mailer_config, mock_client).build_message(Report(text="", has_content=False))

    assert list(message.iter_attachments()) == []
    assert message.get_content().strip() == "All commits follow the convention."


def test_send_report(mailer_config, mock_client):
    mailer = Mailer(mailer_config, mock_client)

    message_id = mailer.send_report(Report(text="x", has_content=True))

    mock_client.send_message.assert_called_once()
    sent = mock_client.send_message.call_args[0][0]
    assert sent["Message-ID"] == message_id


def test_send_report_failure(mailer_config, mock_client):
    mock_client.send_message.side_effect = smtplib.SMTPRecipientsRefused({})

    with pytest.raises(DeliveryError):
        Mailer(mailer_config, mock_client).send_report(Report(text="", has_content=False))


def test_verify(mailer_config, mock_client):
    Mailer(mailer_config, mock_client).verify()

    mock_client.noop.assert_called_once()


def test_verify_unexpected_reply(mailer_config, mock_client):
    mock_client.noop.return_value = (421, b"Service not available")

    with pytest.raises(DeliveryError, match="421"):
        Mailer(mailer_config, mock_client).verify()


def test_open_smtp_starttls_and_login(mailer_config):
    """Test the connection lifecycle managed by the caller."""
    with patch("commitwatch.delivery.mailer.smtplib.SMTP") as smtp_cls:
        client = smtp_cls.return_value

        with open_smtp(mailer_config) as opened:
            assert opened is client

        smtp_cls.assert_called_once_with("smtp.example.com", 587, timeout=30.0)
        client.starttls.assert_called_once()
        client.login.assert_called_once_with("bot", "secret")
        client.quit.assert_called_once()


def test_open_smtp_ssl_skips_starttls(mailer_config):
    config = mailer_config.model_copy(update={"ssl": True, "port": 465, "user": None})

    with patch("commitwatch.delivery.mailer.smtplib.SMTP_SSL") as smtp_cls:
        with open_smtp(config) as client:
            pass

        client.starttls.assert_not_called()
        client.login.assert_not_called()
        client.quit.assert_called_once()


def test_open_smtp_connection_refused(mailer_config):
    with patch("commitwatch.delivery.mailer.smtplib.SMTP", side_effect=ConnectionRefusedError()):
        with pytest.raises(DeliveryError, match="Cannot connect"):
            with open_smtp(mailer_config):
                pass


def test_open_smtp_login_failure_closes_connection(mailer_config):
    with patch("commitwatch.delivery.mailer.smtplib.SMTP") as smtp_cls:
        client = smtp_cls.return_value
        client.login.side_effect = smtplib.SMTPAuthenticationError(535, b"bad credentials")

        with pytest.raises(DeliveryError, match="setup failed"):
            with open_smtp(mailer_config):
                pass

        client.quit.assert_called_once()
